"""Persistent user preferences stored as a YAML file."""

import logging
import os
import threading

import yaml

logger = logging.getLogger(__name__)

ADT_USED = "adtUsed"
LAST_SDK_PATH = "lastSdkPath"
PREFERENCES_FILENAME = "systrace-html.yaml"


class PreferencesError(Exception):
    """Raised when the store refuses to overwrite a file it could not read."""


def android_folder() -> str:
    """Return the per-user .android folder ($ANDROID_SDK_HOME overrides home)."""
    base = os.environ.get("ANDROID_SDK_HOME") or os.path.expanduser("~")
    return os.path.join(base, ".android")


def default_preferences_path() -> str:
    return os.path.join(android_folder(), PREFERENCES_FILENAME)


class PreferenceStore:
    """Key/value preferences with an explicit load/save lifecycle.

    All reads and writes go through one lock so a store can be shared
    between threads.
    """

    def __init__(self, path: str):
        self._path = path
        self._data: dict = {}
        self._lock = threading.Lock()
        # set when the file on disk exists but could not be read; never overwrite it
        self._unreadable = False

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> None:
        """Read the store from disk.

        A missing file leaves the store empty. An invalid file also leaves it
        empty and blocks later saves so the file is not clobbered.
        """
        with self._lock:
            self._data = {}
            self._unreadable = False
            if not os.path.exists(self._path):
                return
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (yaml.YAMLError, OSError) as e:
                logger.warning("Error loading preferences %s: %s", self._path, e)
                self._unreadable = True
                return
            if not isinstance(data, dict):
                logger.warning("Ignoring preferences %s: not a mapping", self._path)
                self._unreadable = True
                return
            self._data = data
            logger.debug("Loaded %d preference(s) from %s", len(data), self._path)

    def save(self) -> None:
        """Atomic write: write to tmp file then replace.

        Raises:
            PreferencesError: If load() found a file it could not read.
            OSError: If the file cannot be written.
        """
        with self._lock:
            self._save_locked()

    def _save_locked(self) -> None:
        if self._unreadable:
            raise PreferencesError(f"Not overwriting unreadable preferences file {self._path}")
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
        tmp_path = self._path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._data, f, default_flow_style=False)
        os.replace(tmp_path, self._path)

    def _set_and_save(self, key: str, value) -> None:
        with self._lock:
            self._data[key] = value
            try:
                self._save_locked()
            except (OSError, PreferencesError) as e:
                logger.warning("Failed saving preferences %s: %s", self._path, e)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def get(self, key: str, default=None):
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value) -> None:
        with self._lock:
            self._data[key] = value

    def is_adt_used(self) -> bool:
        """False until set_adt_used(True) has been recorded."""
        with self._lock:
            return bool(self._data.get(ADT_USED, False))

    def set_adt_used(self, used: bool) -> None:
        self._set_and_save(ADT_USED, bool(used))

    def get_last_sdk_path(self) -> str:
        """Last SDK path used. Informational only, it may no longer exist."""
        with self._lock:
            return self._data.get(LAST_SDK_PATH) or ""

    def set_last_sdk_path(self, sdk_path: str | None) -> None:
        self._set_and_save(LAST_SDK_PATH, sdk_path or "")
