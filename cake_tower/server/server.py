# server/server.py
import asyncio
import json
import logging
import os
import time
from pathlib import Path

from cake_tower.shared.game_config import CFG
from cake_tower.shared.netcodec import clean_entry, dumps_line, loads_line, rank_entries

logger = logging.getLogger(__name__)

HOST = os.getenv("CAKE_TOWER_HOST", "0.0.0.0")
PORT = int(os.getenv("CAKE_TOWER_PORT", "9100"))
SCORES_FILE = Path(os.getenv("CAKE_TOWER_SCORES_FILE") or Path(__file__).resolve().parent / "scores.json")

scores = []
subscribers = set()


def load_scores():
    global scores
    if not SCORES_FILE.exists():
        scores = []
        return
    try:
        with open(SCORES_FILE, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s, starting empty: %s", SCORES_FILE, e)
        raw = {}
    scores = rank_entries(raw.get("scores") if isinstance(raw, dict) else None, CFG.leaderboard_limit)


def save_scores():
    SCORES_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(SCORES_FILE, "w", encoding="utf-8") as f:
        json.dump({"scores": scores}, f, indent=2)


async def send(writer, data: dict):
    writer.write(dumps_line(data))
    await writer.drain()


def leaderboard_msg() -> dict:
    return {"type": "LEADERBOARD", "entries": list(scores)}


async def broadcast(data: dict):
    for w in list(subscribers):
        try:
            await send(w, data)
        except (ConnectionError, OSError) as e:
            logger.info("Dropping subscriber: %s", e)
            subscribers.discard(w)


# ---------- handlers ----------
async def handle_subscribe(writer):
    subscribers.add(writer)
    await send(writer, leaderboard_msg())


async def handle_list_scores(writer):
    await send(writer, leaderboard_msg())


async def handle_submit(msg, writer):
    global scores
    ts = msg.get("timestamp")
    if isinstance(ts, bool) or not isinstance(ts, int):
        msg = dict(msg, timestamp=int(time.time() * 1000))
    entry = clean_entry(msg)
    if entry is None:
        return await send(writer, {"type": "ERROR", "message": "Name and a non-negative integer score are required"})

    scores = rank_entries(scores + [entry], CFG.leaderboard_limit)
    try:
        save_scores()
    except OSError as e:
        logger.warning("Could not save %s: %s", SCORES_FILE, e)

    await send(writer, {"type": "OK", "message": "Score submitted"})
    await broadcast(leaderboard_msg())


async def client_handler(reader, writer):
    addr = writer.get_extra_info("peername")
    logger.info("Client connected: %s", addr)
    try:
        while True:
            line = await reader.readline()
            if not line:
                break
            msg = loads_line(line)
            if msg is None:
                await send(writer, {"type": "ERROR", "message": "Bad JSON"})
                continue

            cmd = msg.get("type")
            if cmd == "SUBSCRIBE":
                await handle_subscribe(writer)
            elif cmd == "LIST_SCORES":
                await handle_list_scores(writer)
            elif cmd == "SUBMIT_SCORE":
                await handle_submit(msg, writer)
            else:
                await send(writer, {"type": "ERROR", "message": "Unknown command"})
    except (ConnectionError, OSError) as e:
        logger.info("Client %s dropped: %s", addr, e)
    finally:
        subscribers.discard(writer)
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass


async def main():
    load_scores()
    server = await asyncio.start_server(client_handler, HOST, PORT)
    logger.info("Leaderboard server running on %s:%s (%d scores)", HOST, PORT, len(scores))
    async with server:
        await server.serve_forever()


def run():
    logging.basicConfig(
        level=os.getenv("CAKE_TOWER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(main())


if __name__ == "__main__":
    run()
