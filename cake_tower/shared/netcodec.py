# shared/netcodec.py
import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def dumps_line(msg: Dict[str, Any]) -> bytes:
    """Encode dict as compact JSON + newline."""
    return (json.dumps(msg, separators=(",", ":")) + "\n").encode("utf-8")


def loads_line(line: bytes) -> Optional[Dict[str, Any]]:
    """Decode one JSON line -> dict, or None if invalid."""
    try:
        s = line.decode("utf-8").strip()
        if not s:
            return None
        obj = json.loads(s)
    except (UnicodeDecodeError, ValueError):
        logger.debug("Dropping undecodable line: %r", line[:80])
        return None
    return obj if isinstance(obj, dict) else None


def clean_entry(item: Any) -> Optional[Dict[str, Any]]:
    """Validate one {name, score, timestamp} record; None if unusable."""
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    score = item.get("score")
    ts = item.get("timestamp", 0)
    if not isinstance(name, str) or not name.strip():
        return None
    if isinstance(score, bool) or not isinstance(score, int) or score < 0:
        return None
    if isinstance(ts, bool) or not isinstance(ts, int):
        ts = 0
    return {"name": name.strip(), "score": score, "timestamp": ts}


def rank_entries(items: Any, limit: int) -> List[Dict[str, Any]]:
    """Keep valid records, sort by score desc (stable), cut to limit."""
    if not isinstance(items, list):
        return []
    entries = [e for e in (clean_entry(i) for i in items) if e is not None]
    entries.sort(key=lambda e: e["score"], reverse=True)
    return entries[:limit]
