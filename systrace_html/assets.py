"""HTML template assets used to assemble the systrace viewer document."""

import logging
import os
from dataclasses import dataclass

from systrace_html.parser import SystraceOutputParser

logger = logging.getLogger(__name__)

SYSTRACE_VIEWER_HTML = "systrace_trace_viewer.html"
HTML_PREFIX = "prefix.html"
HTML_SUFFIX = "suffix.html"

# primary subdirs in which to look for html assets, walked in order
ASSET_SUBDIR_PATH = ("catapult", "systrace", "systrace")


def default_assets_dir(sdk_path: str) -> str:
    """Return the systrace assets folder inside an SDK installation."""
    return os.path.join(sdk_path, "platform-tools", "systrace")


def find_asset(assets_dir: str, filename: str) -> str | None:
    """Return the path of *filename* in *assets_dir* or along ASSET_SUBDIR_PATH.

    The walk stops at the first path segment that is not a directory.
    """
    target = os.path.join(assets_dir, filename)
    if os.path.isfile(target):
        return target

    search_dir = assets_dir
    for subdir in ASSET_SUBDIR_PATH:
        search_dir = os.path.join(search_dir, subdir)
        if not os.path.isdir(search_dir):
            break
        target = os.path.join(search_dir, filename)
        if os.path.isfile(target):
            return target
    return None


def read_asset(assets_dir: str, filename: str) -> str:
    """Read an asset as UTF-8 text. Missing or unreadable assets yield ""."""
    path = find_asset(assets_dir, filename)
    if path is None:
        logger.debug("Asset %s not found under %s", filename, assets_dir)
        return ""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Failed to read asset %s: %s", path, e)
        return ""


def get_systrace_html(assets_dir: str) -> str:
    return read_asset(assets_dir, SYSTRACE_VIEWER_HTML)


def get_html_prefix(assets_dir: str) -> str:
    return read_asset(assets_dir, HTML_PREFIX)


def get_html_suffix(assets_dir: str) -> str:
    return read_asset(assets_dir, HTML_SUFFIX)


@dataclass(frozen=True)
class HtmlTemplate:
    prefix: str = ""
    viewer: str = ""
    suffix: str = ""

    @classmethod
    def load(cls, assets_dir: str) -> "HtmlTemplate":
        template = cls(
            prefix=get_html_prefix(assets_dir),
            viewer=get_systrace_html(assets_dir),
            suffix=get_html_suffix(assets_dir),
        )
        missing = [
            name for name, text in (
                (HTML_PREFIX, template.prefix),
                (SYSTRACE_VIEWER_HTML, template.viewer),
                (HTML_SUFFIX, template.suffix),
            )
            if not text
        ]
        if missing:
            logger.warning("Missing or empty assets in %s: %s", assets_dir, ", ".join(missing))
        return template

    def build_parser(self, compressed: bool) -> SystraceOutputParser:
        return SystraceOutputParser(compressed, self.viewer, self.prefix, self.suffix)
