"""systrace-html: turn captured atrace output into a systrace HTML document."""

import argparse
import logging
import sys

from systrace_html.assets import HtmlTemplate, default_assets_dir
from systrace_html.config import load_config, load_yaml_config
from systrace_html.parser import TraceParseError
from systrace_html.preferences import PreferenceStore, default_preferences_path
from systrace_html.viewer import create_viewer_app, run_viewer

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BAD_CAPTURE = 1
EXIT_UNREADABLE = 2


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="systrace-html",
        description="Convert atrace output captured from a device into a systrace HTML document.",
    )
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("capture", help="File holding atrace output, or - for stdin")
    common.add_argument(
        "--compressed", action=argparse.BooleanOptionalAction, default=None,
        help="Whether the trace data is zlib-compressed (default: yes)",
    )
    common.add_argument("--assets", default=None, help="Folder holding the systrace HTML assets")
    common.add_argument("--sdk", default=None, help="SDK folder; assets are taken from platform-tools/systrace")
    common.add_argument("--preferences", default=None, help="Preferences file (default: ~/.android/systrace-html.yaml)")

    sub = parser.add_subparsers(dest="command", required=True)

    convert = sub.add_parser("convert", parents=[common], help="Write the HTML document")
    convert.add_argument("-o", "--output", default=None, help="Output file (default: stdout)")
    convert.add_argument("--raw", action="store_true", help="Write the trace text without the HTML wrapper")

    serve = sub.add_parser("serve", parents=[common], help="Serve the HTML document over HTTP")
    serve.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: 8080)")

    return parser


def resolve_assets_dir(config, prefs: PreferenceStore) -> str | None:
    """Pick the assets folder: explicit folder, then SDK path, then last used SDK."""
    if config.assets_dir:
        return config.assets_dir
    if config.sdk_path:
        prefs.set_last_sdk_path(config.sdk_path)
        return default_assets_dir(config.sdk_path)
    last_sdk = prefs.get_last_sdk_path()
    if last_sdk:
        logger.info("Using last SDK path %s", last_sdk)
        return default_assets_dir(last_sdk)
    return None


def read_capture(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def render(args, config, prefs: PreferenceStore) -> str:
    """Parse the capture named in *args* and return the document text."""
    assets_dir = resolve_assets_dir(config, prefs)
    if assets_dir is None:
        logger.warning("No assets folder or SDK path given, output will lack the viewer")
        template = HtmlTemplate()
    else:
        template = HtmlTemplate.load(assets_dir)

    parser = template.build_parser(config.compressed)
    parser.parse(read_capture(args.capture))
    if getattr(args, "raw", False):
        return parser.get_trace_text()
    return parser.get_systrace_html()


def run(args) -> int:
    config = load_config(args, load_yaml_config(args.config))
    logging.getLogger().setLevel(config.log_level)

    prefs = PreferenceStore(config.preferences_file or default_preferences_path())
    prefs.load()

    try:
        document = render(args, config, prefs)
    except OSError as e:
        logger.error("Unable to read capture %s: %s", args.capture, e)
        return EXIT_UNREADABLE
    except TraceParseError as e:
        logger.error("Invalid trace capture %s: %s", args.capture, e)
        return EXIT_BAD_CAPTURE

    if args.command == "serve":
        app = create_viewer_app(document)
        logger.info("Serving systrace on http://%s:%d/", config.viewer_host, config.viewer_port)
        run_viewer(app, config.viewer_host, config.viewer_port)
        return EXIT_OK

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(document)
        logger.info("Wrote %d characters to %s", len(document), args.output)
    else:
        sys.stdout.write(document)
    return EXIT_OK


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args = build_cli_parser().parse_args(argv)
    return run(args)
