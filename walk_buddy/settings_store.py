# walk_buddy/settings_store.py

import json
import os
import tempfile
import threading
from typing import Callable, Dict

from walk_buddy import config

CONTACT_KEY = "emergency_contact"


class SettingsStore:
    """Small JSON key-value file holding the emergency contact."""

    def __init__(self, path: str = config.SETTINGS_PATH, logger: Callable[[str], None] = print):
        self._path = path
        self._log = logger
        self._lock = threading.Lock()
        self._values: Dict[str, str] = self._load()

    @property
    def path(self) -> str:
        return self._path

    def _load(self) -> Dict[str, str]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            self._log(f"[SETTINGS] Ignoring unreadable {self._path}: {e}")
            return {}

        if not isinstance(data, dict):
            self._log(f"[SETTINGS] Ignoring malformed {self._path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self) -> None:
        directory = os.path.dirname(self._path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".settings-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._values, f, indent=2)
            os.replace(tmp, self._path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_contact(self) -> str:
        with self._lock:
            return self._values.get(CONTACT_KEY, config.DEFAULT_CONTACT)

    def set_contact(self, contact: str) -> bool:
        contact = (contact or "").strip()
        if not contact:
            return False

        with self._lock:
            previous = self._values.get(CONTACT_KEY)
            self._values[CONTACT_KEY] = contact
            try:
                self._save()
            except OSError as e:
                if previous is None:
                    self._values.pop(CONTACT_KEY, None)
                else:
                    self._values[CONTACT_KEY] = previous
                self._log(f"[SETTINGS] Could not save {self._path}: {e}")
                return False

        self._log(f"[SETTINGS] Emergency contact set to {contact}")
        return True
