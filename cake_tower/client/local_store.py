# client/local_store.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from cake_tower.shared.constants import LOCAL_HIGHSCORE_KEY, LOCAL_NAME_KEY
from cake_tower.shared.errors import PersistenceReadError

logger = logging.getLogger(__name__)


class LocalStore:
    """String key/value store kept in one JSON file.

    Reads never raise: a missing or broken file behaves like an empty store.
    Writes rewrite the whole file and report failure instead of raising.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            raise PersistenceReadError(f"{self.path} does not exist")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise PersistenceReadError(f"{self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceReadError(f"{self.path}: root is not an object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _load(self) -> Dict[str, str]:
        try:
            return self._read_all()
        except PersistenceReadError as e:
            if self.path.exists():
                logger.warning("Local store unreadable, treating as empty: %s", e)
            return {}

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._load().get(key, default)

    def set(self, key: str, value: str) -> bool:
        data = self._load()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.warning("Could not write local store %s: %s", self.path, e)
            return False
        return True

    # ---------------- typed helpers ----------------
    def get_json(self, key: str, default: Any = None) -> Any:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Malformed JSON under %s, ignoring", key)
            return default

    def set_json(self, key: str, value: Any) -> bool:
        return self.set(key, json.dumps(value))

    def get_int(self, key: str, default: int = 0) -> int:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            return default

    def high_score(self) -> int:
        return max(0, self.get_int(LOCAL_HIGHSCORE_KEY, 0))

    def save_high_score(self, value: int) -> bool:
        return self.set(LOCAL_HIGHSCORE_KEY, str(int(value)))

    def player_name(self) -> str:
        return self.get(LOCAL_NAME_KEY, "") or ""

    def save_player_name(self, name: str) -> bool:
        return self.set(LOCAL_NAME_KEY, name)
