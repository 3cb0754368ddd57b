"""Shared pytest fixtures for the systrace-html test suite."""

import zlib

import pytest

TRACE_TEXT = (
    "# tracer: nop\n"
    "#\n"
    "  surfaceflinger-312   [000] ...1  1041.122335: tracing_mark_write: B|312|onMessageReceived\n"
    "  surfaceflinger-312   [000] ...1  1041.122410: tracing_mark_write: E\n"
)


@pytest.fixture()
def trace_text() -> str:
    return TRACE_TEXT


@pytest.fixture()
def plain_capture() -> bytes:
    """atrace output with an uncompressed trace."""
    return b"capturing trace... done\nTRACE:\n" + TRACE_TEXT.encode("utf-8")


@pytest.fixture()
def compressed_capture() -> bytes:
    """atrace output with a zlib-compressed trace."""
    return b"capturing trace... done\nTRACE:\n" + zlib.compress(TRACE_TEXT.encode("utf-8"))


@pytest.fixture()
def assets_dir(tmp_path):
    """An assets folder laid out like the SDK's systrace folder."""
    root = tmp_path / "systrace"
    nested = root / "catapult" / "systrace" / "systrace"
    nested.mkdir(parents=True)
    (root / "prefix.html").write_text("<html>{{SYSTRACE_TRACE_VIEWER_HTML}}<body>\n", encoding="utf-8")
    (root / "suffix.html").write_text("</body></html>\n", encoding="utf-8")
    (nested / "systrace_trace_viewer.html").write_text("<script>viewer()</script>", encoding="utf-8")
    return root
