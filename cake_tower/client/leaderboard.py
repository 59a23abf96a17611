# client/leaderboard.py
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from cake_tower.client.local_store import LocalStore
from cake_tower.client.network import TcpClient
from cake_tower.client.session import validate_name
from cake_tower.shared.constants import LOCAL_LEADERBOARD_KEY
from cake_tower.shared.errors import RemoteUnavailableError
from cake_tower.shared.game_config import CFG
from cake_tower.shared.netcodec import rank_entries

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    score: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "score": self.score, "timestamp": self.timestamp}


def entries_from_raw(raw: Any, limit: int = CFG.leaderboard_limit) -> List[LeaderboardEntry]:
    return [LeaderboardEntry(e["name"], e["score"], e["timestamp"]) for e in rank_entries(raw, limit)]


@dataclass(frozen=True)
class SubmitResult:
    ok: bool
    backend: str
    message: str
    pending: bool = False   # sent, awaiting the server's OK


# ---------------- Backends ----------------
class LocalBackend:
    name = "local"

    def __init__(self, store: LocalStore, limit: int = CFG.leaderboard_limit):
        self.store = store
        self.limit = limit

    def load(self) -> List[LeaderboardEntry]:
        return entries_from_raw(self.store.get_json(LOCAL_LEADERBOARD_KEY, []), self.limit)

    def submit(self, entry: LeaderboardEntry) -> Optional[List[LeaderboardEntry]]:
        """Append, rank, persist. Returns the new list, or None if the write failed."""
        raw = self.store.get_json(LOCAL_LEADERBOARD_KEY, [])
        if not isinstance(raw, list):
            raw = []
        raw.append(entry.to_dict())
        entries = entries_from_raw(raw, self.limit)
        if not self.store.set_json(LOCAL_LEADERBOARD_KEY, [e.to_dict() for e in entries]):
            return None
        return entries


class RemoteBackend:
    """Leaderboard server reached through a TcpClient-like transport."""

    name = "remote"

    def __init__(self, host: str, port: int, client: Optional[TcpClient] = None, limit: int = CFG.leaderboard_limit):
        self.host = host
        self.port = port
        self.client = client if client is not None else TcpClient()
        self.limit = limit
        # submitted but not yet acknowledged, oldest first
        self.pending: List[LeaderboardEntry] = []

    def connect(self):
        if not self.client.connect(self.host, self.port):
            raise RemoteUnavailableError(f"cannot reach {self.host}:{self.port}")
        if not self.client.send({"type": "SUBSCRIBE"}):
            raise RemoteUnavailableError("subscribe failed")

    def submit(self, entry: LeaderboardEntry):
        msg = {"type": "SUBMIT_SCORE"}
        msg.update(entry.to_dict())
        if not self.client.send(msg):
            raise RemoteUnavailableError("submit failed")
        self.pending.append(entry)

    def poll(self) -> Optional[List[LeaderboardEntry]]:
        """Latest pushed leaderboard, or None if nothing new arrived."""
        latest = None
        for m in self.client.poll():
            t = m.get("type")
            if t == "LEADERBOARD":
                latest = entries_from_raw(m.get("entries"), self.limit)
            elif t == "ERROR":
                raise RemoteUnavailableError(m.get("message", "Error"))
            elif t == "OK" and self.pending:
                done = self.pending.pop(0)
                logger.info("Server stored score %d for %s", done.score, done.name)
            else:
                logger.debug("Leaderboard server: %s", m)
        return latest

    def close(self):
        self.client.close()


# ---------------- Store ----------------
class LeaderboardStore:
    """
    Ranked scores with a remote backend when available and a local one always.

    The backend is picked once here. Any remote failure switches to local for
    the rest of the process; there is no reconnect.
    """

    def __init__(self, local: LocalBackend, remote: Optional[RemoteBackend] = None,
                 clock: Callable[[], int] = now_ms):
        self.local = local
        self.remote: Optional[RemoteBackend] = None
        self.clock = clock
        self.entries: List[LeaderboardEntry] = []
        self.notice: Optional[str] = None

        if remote is not None:
            try:
                remote.connect()
                self.remote = remote
                logger.info("Using remote leaderboard at %s:%s", remote.host, remote.port)
            except RemoteUnavailableError as e:
                logger.warning("Remote leaderboard unavailable, using local: %s", e)
                remote.close()
        if self.remote is None:
            self.entries = self.local.load()

    @property
    def backend(self) -> str:
        return self.remote.name if self.remote else self.local.name

    @property
    def using_remote(self) -> bool:
        return self.remote is not None

    def _fall_back(self, err: Exception):
        logger.warning("Remote leaderboard failed (%s); switching to local storage", err)
        unconfirmed: List[LeaderboardEntry] = []
        if self.remote:
            unconfirmed = list(self.remote.pending)
            self.remote.pending.clear()
            self.remote.close()
        self.remote = None
        self.entries = self.local.load()

        for entry in unconfirmed:
            entries = self.local.submit(entry)
            if entries is None:
                self.notice = "Failed to save leaderboard locally"
                continue
            self.entries = entries
            self.notice = "Server unreachable, saved locally to leaderboard"

    def take_notice(self) -> Optional[str]:
        """Message about a submit that finished after submit() returned, once."""
        notice, self.notice = self.notice, None
        return notice

    def load(self) -> List[LeaderboardEntry]:
        if self.remote is None:
            self.entries = self.local.load()
        return list(self.entries)

    def poll(self):
        """Apply pushed updates; call once per frame."""
        if self.remote is None:
            return
        waiting = len(self.remote.pending)
        try:
            update = self.remote.poll()
        except RemoteUnavailableError as e:
            self._fall_back(e)
            return
        if len(self.remote.pending) < waiting:
            self.notice = "Submitted to global leaderboard"
        if update is not None:
            self.entries = update

    def submit(self, name: Optional[str], score: int) -> SubmitResult:
        cleaned = validate_name(name, "Enter a name before submitting")
        entry = LeaderboardEntry(cleaned, max(0, int(score)), self.clock())

        if self.remote is not None:
            try:
                self.remote.submit(entry)
                return SubmitResult(True, self.remote.name, "Sending to global leaderboard...", pending=True)
            except RemoteUnavailableError as e:
                self._fall_back(e)

        entries = self.local.submit(entry)
        if entries is None:
            return SubmitResult(False, self.local.name, "Failed to save leaderboard locally")
        self.entries = entries
        return SubmitResult(True, self.local.name, "Saved locally to leaderboard")

    def close(self):
        if self.remote:
            self.remote.close()
