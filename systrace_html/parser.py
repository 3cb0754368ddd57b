"""Systrace output parser: locates the trace in atrace output and wraps it in HTML."""

import codecs
import logging
import zlib

logger = logging.getLogger(__name__)

TRACE_START = b"TRACE:\n"
HEADER_WINDOW = 100
INFLATE_CHUNK_SIZE = 4096
VIEWER_PLACEHOLDER = "{{SYSTRACE_TRACE_VIEWER_HTML}}"

TRACE_BEGIN = (
    "<!-- BEGIN TRACE -->\n"
    '  <script class="trace-data" type="application/text">\n  '
)
TRACE_END = "  </script>\n<!-- END TRACE -->\n"


class TraceParseError(Exception):
    """Base class for errors raised while extracting a trace."""


class MalformedCaptureError(TraceParseError):
    """Raised when the trace start marker is missing from the capture header."""

    def __init__(self, header: str):
        super().__init__(f"Unable to find trace start marker 'TRACE:':\n{header}")
        self.header = header


class CorruptPayloadError(TraceParseError):
    """Raised when a compressed payload cannot be inflated."""


def normalize_line_endings(data: bytes) -> bytes:
    """Return a copy of *data* with every CRLF pair replaced by LF.

    Single left-to-right pass; the result is shorter by exactly the number
    of pairs replaced.
    """
    return bytes(data).replace(b"\r\n", b"\n")


def locate_trace_data(header: str) -> int:
    """Return the offset just past the trace start marker, or -1."""
    marker = TRACE_START.decode("latin-1")
    index = header.find(marker)
    if index < 0:
        return -1
    return index + len(marker)


def inflate(data: bytes) -> str:
    """Inflate a zlib stream in fixed-size chunks and decode it as UTF-8.

    Raises:
        CorruptPayloadError: If the stream is not valid zlib data.
    """
    decompressor = zlib.decompressobj()
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts = []
    pending = data
    try:
        while pending:
            chunk = decompressor.decompress(pending, INFLATE_CHUNK_SIZE)
            pending = decompressor.unconsumed_tail
            parts.append(decoder.decode(chunk))
            if decompressor.eof:
                break
        # drain anything still buffered inside the decompressor
        parts.append(decoder.decode(decompressor.flush()))
    except zlib.error as e:
        raise CorruptPayloadError(f"Unable to inflate trace data: {e}") from e
    parts.append(decoder.decode(b"", final=True))

    if not decompressor.eof:
        logger.warning("Compressed trace ended before end of stream, output may be truncated")
    elif decompressor.unused_data:
        logger.debug("Ignoring %d bytes after end of compressed trace", len(decompressor.unused_data))
    return "".join(parts)


class SystraceOutputParser:
    """Parses the output of the atrace command and generates the systrace HTML.

    Usage::

        parser = SystraceOutputParser(True, viewer_html, prefix, suffix)
        parser.parse(raw_bytes)
        html = parser.get_systrace_html()
    """

    def __init__(
        self,
        compressed: bool,
        systrace_html: str,
        html_prefix: str,
        html_suffix: str,
    ):
        self._uncompress = compressed
        self._systrace_html = systrace_html
        self._html_prefix = html_prefix
        self._html_suffix = html_suffix

        self._atrace_output = b""
        self._systrace_index = -1

    @property
    def compressed(self) -> bool:
        return self._uncompress

    @property
    def payload_start(self) -> int:
        return self._systrace_index

    def parse(self, atrace_output: bytes) -> None:
        """Normalize *atrace_output* and locate the start of the trace data.

        Raises:
            MalformedCaptureError: If the marker is not within the first
                100 bytes.
        """
        self._systrace_index = -1
        self._atrace_output = normalize_line_endings(atrace_output)

        window = self._atrace_output[:HEADER_WINDOW]
        index = locate_trace_data(window.decode("latin-1"))
        if index < 0:
            raise MalformedCaptureError(window.decode("utf-8", errors="replace"))

        self._systrace_index = index
        logger.debug(
            "Trace data starts at offset %d of %d bytes",
            index, len(self._atrace_output),
        )

    def get_trace_text(self) -> str:
        """Return the trace payload as text, or "" if nothing was parsed."""
        if self._systrace_index < 0:
            return ""

        payload = self._atrace_output[self._systrace_index:]
        if self._uncompress:
            return inflate(payload)
        return payload.decode("utf-8", errors="replace")

    def get_systrace_html(self) -> str:
        """Compose the viewer document around the trace.

        Returns "" if parse() has not succeeded.

        Raises:
            CorruptPayloadError: If the payload is declared compressed but
                fails to inflate.
        """
        if self._systrace_index < 0:
            return ""

        trace = self.get_trace_text()
        html = [
            self._html_prefix.replace(VIEWER_PLACEHOLDER, self._systrace_html),
            TRACE_BEGIN,
            trace,
            TRACE_END,
            self._html_suffix,
        ]
        return "".join(html)
