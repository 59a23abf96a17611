import asyncio
import json

import pytest

from cake_tower.server import server


class FakeWriter:
    def __init__(self, fail=False):
        self.buffer = b""
        self.fail = fail
        self.closed = False

    def write(self, data):
        self.buffer += data

    async def drain(self):
        if self.fail:
            raise ConnectionResetError("peer gone")

    def close(self):
        self.closed = True

    async def wait_closed(self):
        return None

    def get_extra_info(self, name):
        return ("127.0.0.1", 50000)

    def messages(self):
        return [json.loads(line) for line in self.buffer.decode("utf-8").splitlines() if line]


@pytest.fixture(autouse=True)
def fresh_server(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "SCORES_FILE", tmp_path / "scores.json")
    monkeypatch.setattr(server, "scores", [])
    monkeypatch.setattr(server, "subscribers", set())


def test_submit_is_saved_and_broadcast() -> None:
    submitter, watcher = FakeWriter(), FakeWriter()

    async def go():
        await server.handle_subscribe(watcher)
        await server.handle_submit({"type": "SUBMIT_SCORE", "name": " Ana ", "score": 40, "timestamp": 7}, submitter)
        await server.handle_submit({"type": "SUBMIT_SCORE", "name": "Bo", "score": 90}, submitter)

    asyncio.run(go())

    assert [m["type"] for m in submitter.messages()] == ["OK", "OK"]
    pushes = [m for m in watcher.messages() if m["type"] == "LEADERBOARD"]
    assert len(pushes) == 3
    assert pushes[0]["entries"] == []
    assert [e["name"] for e in pushes[-1]["entries"]] == ["Bo", "Ana"]
    assert pushes[1]["entries"][0]["timestamp"] == 7
    assert isinstance(pushes[-1]["entries"][0]["timestamp"], int)

    saved = json.loads(server.SCORES_FILE.read_text(encoding="utf-8"))
    assert [e["name"] for e in saved["scores"]] == ["Bo", "Ana"]


@pytest.mark.parametrize(
    "msg",
    [
        {"name": "", "score": 3},
        {"name": "Ana", "score": -1},
        {"name": "Ana", "score": "12"},
        {"name": "Ana", "score": True},
        {"score": 3},
    ],
)
def test_invalid_submit_is_rejected(msg) -> None:
    writer = FakeWriter()
    asyncio.run(server.handle_submit(dict(msg, type="SUBMIT_SCORE"), writer))

    assert writer.messages()[0]["type"] == "ERROR"
    assert server.scores == []


def test_scores_are_bounded() -> None:
    writer = FakeWriter()

    async def go():
        for i in range(105):
            await server.handle_submit({"name": f"p{i}", "score": i}, writer)

    asyncio.run(go())
    assert len(server.scores) == 100
    assert server.scores[0]["score"] == 104
    assert server.scores[-1]["score"] == 5


def test_broken_subscriber_is_dropped() -> None:
    bad, good = FakeWriter(fail=True), FakeWriter()
    server.subscribers.update({bad, good})

    asyncio.run(server.broadcast(server.leaderboard_msg()))
    assert server.subscribers == {good}


def test_load_scores_tolerates_bad_file() -> None:
    server.SCORES_FILE.write_text("{broken", encoding="utf-8")
    server.load_scores()
    assert server.scores == []

    server.SCORES_FILE.write_text(json.dumps({"scores": [{"name": "a", "score": 1}, {"bad": 1}]}), encoding="utf-8")
    server.load_scores()
    assert [e["name"] for e in server.scores] == ["a"]


def test_client_handler_dispatch() -> None:
    writer = FakeWriter()

    async def go():
        reader = asyncio.StreamReader()
        reader.feed_data(b"not json\n")
        reader.feed_data(b'{"type": "NOPE"}\n')
        reader.feed_data(b'{"type": "SUBSCRIBE"}\n')
        reader.feed_data(b'{"type": "LIST_SCORES"}\n')
        reader.feed_eof()
        await server.client_handler(reader, writer)

    asyncio.run(go())

    msgs = writer.messages()
    assert [m["type"] for m in msgs] == ["ERROR", "ERROR", "LEADERBOARD", "LEADERBOARD"]
    assert writer.closed
    assert writer not in server.subscribers
