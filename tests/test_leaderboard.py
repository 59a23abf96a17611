import pytest

from cake_tower.client.leaderboard import (
    LeaderboardEntry, LeaderboardStore, LocalBackend, RemoteBackend, entries_from_raw,
)
from cake_tower.client.local_store import LocalStore
from cake_tower.shared.constants import LOCAL_LEADERBOARD_KEY
from cake_tower.shared.errors import ValidationError


class FakeClient:
    def __init__(self, connect_ok=True, send_ok=True):
        self.connect_ok = connect_ok
        self.send_ok = send_ok
        self.sent = []
        self.inbox = []
        self.closed = False

    def connect(self, host, port):
        return self.connect_ok

    def send(self, msg):
        if not self.send_ok:
            return False
        self.sent.append(msg)
        return True

    def poll(self):
        msgs, self.inbox = self.inbox, []
        return msgs

    def close(self):
        self.closed = True


def make_store(store, client=None, clock=lambda: 1234):
    remote = RemoteBackend("localhost", 9100, client=client) if client is not None else None
    return LeaderboardStore(LocalBackend(store), remote, clock=clock)


# ---------------- local ----------------
def test_local_load_tolerates_garbage(store) -> None:
    store.set(LOCAL_LEADERBOARD_KEY, "not json")
    assert make_store(store).load() == []

    store.set_json(LOCAL_LEADERBOARD_KEY, {"name": "x"})
    assert make_store(store).load() == []

    store.set_json(LOCAL_LEADERBOARD_KEY, [{"name": "a", "score": 5}, {"name": "", "score": 9}, "junk", {"name": "b", "score": 7}])
    assert [(e.name, e.score) for e in make_store(store).load()] == [("b", 7), ("a", 5)]


def test_local_submit_sorts_and_keeps_arrival_order_for_ties(store) -> None:
    lb = make_store(store)
    for name, score in [("a", 50), ("b", 80), ("c", 50), ("d", 10)]:
        result = lb.submit(name, score)
        assert result.ok and result.backend == "local"

    assert [e.name for e in lb.load()] == ["b", "a", "c", "d"]
    assert lb.entries[0] == LeaderboardEntry("b", 80, 1234)


def test_local_submit_is_bounded(store) -> None:
    store.set_json(LOCAL_LEADERBOARD_KEY, [{"name": f"p{i}", "score": 1000 - i, "timestamp": i} for i in range(100)])
    lb = make_store(store)

    lb.submit("low", 1)
    entries = lb.load()
    assert len(entries) == 100
    assert all(e.name != "low" for e in entries)

    lb.submit("high", 5000)
    entries = lb.load()
    assert len(entries) == 100
    assert entries[0].name == "high"
    assert [e.score for e in entries] == sorted((e.score for e in entries), reverse=True)


def test_submit_trims_and_validates_name(store) -> None:
    lb = make_store(store)
    with pytest.raises(ValidationError):
        lb.submit("   ", 10)
    assert lb.load() == []

    lb.submit("  Ana  ", 10)
    assert lb.load()[0].name == "Ana"


def test_local_write_failure_reports_failure(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    lb = make_store(LocalStore(blocker / "store.json"))

    result = lb.submit("Ana", 10)
    assert not result.ok
    assert lb.entries == []


# ---------------- remote ----------------
def test_unreachable_remote_uses_local(store) -> None:
    client = FakeClient(connect_ok=False)
    lb = make_store(store, client)

    assert not lb.using_remote
    assert lb.backend == "local"
    assert client.closed


def test_remote_subscribes_and_applies_pushes(store) -> None:
    client = FakeClient()
    lb = make_store(store, client)

    assert lb.using_remote
    assert client.sent == [{"type": "SUBSCRIBE"}]
    assert lb.load() == []

    client.inbox.append({"type": "LEADERBOARD", "entries": [
        {"name": "a", "score": 3, "timestamp": 1},
        {"name": "b", "score": 9, "timestamp": 2},
    ]})
    lb.poll()
    assert [e.name for e in lb.load()] == ["b", "a"]


def test_remote_submit_does_not_touch_local(store) -> None:
    client = FakeClient()
    lb = make_store(store, client)

    result = lb.submit(" Ana ", 70)
    assert result.ok and result.backend == "remote" and result.pending
    assert client.sent[-1] == {"type": "SUBMIT_SCORE", "name": "Ana", "score": 70, "timestamp": 1234}
    assert store.get(LOCAL_LEADERBOARD_KEY) is None


def test_remote_error_falls_back_for_good(store) -> None:
    store.set_json(LOCAL_LEADERBOARD_KEY, [{"name": "old", "score": 1, "timestamp": 0}])
    client = FakeClient()
    lb = make_store(store, client)

    client.inbox.append({"type": "ERROR", "message": "Disconnected"})
    lb.poll()
    assert not lb.using_remote
    assert client.closed
    assert [e.name for e in lb.load()] == ["old"]

    client.inbox.append({"type": "LEADERBOARD", "entries": []})
    lb.poll()
    assert [e.name for e in lb.load()] == ["old"]

    result = lb.submit("Ana", 5)
    assert result.backend == "local"
    assert [e.name for e in lb.load()] == ["Ana", "old"]


def test_failed_remote_submit_saves_locally_in_the_same_call(store) -> None:
    client = FakeClient()
    lb = make_store(store, client)
    client.send_ok = False

    result = lb.submit("Ana", 5)
    assert result.ok and result.backend == "local"
    assert not lb.using_remote
    assert [e.name for e in lb.load()] == ["Ana"]


def test_entries_from_raw_limits() -> None:
    raw = [{"name": str(i), "score": i, "timestamp": i} for i in range(10)]
    assert [e.score for e in entries_from_raw(raw, limit=3)] == [9, 8, 7]


def test_server_ok_confirms_pending_submit(store) -> None:
    client = FakeClient()
    lb = make_store(store, client)
    lb.submit("Ana", 70)
    assert len(lb.remote.pending) == 1
    assert lb.take_notice() is None

    client.inbox.append({"type": "OK", "message": "Score submitted"})
    lb.poll()
    assert lb.remote.pending == []
    assert lb.take_notice() == "Submitted to global leaderboard"
    assert lb.take_notice() is None

    client.inbox.append({"type": "ERROR", "message": "Server closed the connection"})
    lb.poll()
    assert not lb.using_remote
    assert lb.load() == []


def test_unconfirmed_submit_is_saved_locally_when_server_drops(store) -> None:
    client = FakeClient()
    lb = make_store(store, client)
    result = lb.submit("Ana", 70)
    assert result.pending

    client.inbox.append({"type": "ERROR", "message": "Server closed the connection"})
    lb.poll()

    assert not lb.using_remote
    assert [(e.name, e.score) for e in lb.load()] == [("Ana", 70)]
    assert "saved locally" in lb.take_notice()


def test_pending_entries_kept_when_next_send_fails(store) -> None:
    client = FakeClient()
    lb = make_store(store, client)
    lb.submit("Ana", 70)
    client.send_ok = False

    result = lb.submit("Bo", 90)
    assert result.backend == "local" and not result.pending
    assert [e.name for e in lb.load()] == ["Bo", "Ana"]
