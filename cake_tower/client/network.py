# client/network.py
import logging
import queue
import socket
import threading
from typing import Any, Dict, List, Optional

from cake_tower.shared.netcodec import dumps_line, loads_line

logger = logging.getLogger(__name__)


class TcpClient:
    """JSON-lines TCP client.

    A daemon thread reads server messages into `inbox`; the game loop drains
    it with poll(). Transport failures surface as {"type": "ERROR"} messages.
    """

    def __init__(self, timeout: float = 3.0):
        self.sock: Optional[socket.socket] = None
        self.reader_thread: Optional[threading.Thread] = None
        self.inbox: "queue.Queue[Dict[str, Any]]" = queue.Queue()
        self.connected: bool = False
        self.timeout = timeout
        self._stop = False

    def connect(self, host: str, port: int) -> bool:
        try:
            self.sock = socket.create_connection((host, port), timeout=self.timeout)
            self.sock.settimeout(None)
        except OSError as e:
            logger.warning("Connect to %s:%s failed: %s", host, port, e)
            self.inbox.put({"type": "ERROR", "message": f"Connect failed: {e}"})
            self.sock = None
            self.connected = False
            return False

        self.connected = True
        self._stop = False
        self.reader_thread = threading.Thread(target=self._read_loop, daemon=True)
        self.reader_thread.start()
        return True

    def close(self):
        self._stop = True
        self.connected = False
        if self.sock:
            try:
                # wakes the reader thread blocked in recv()
                self.sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            try:
                self.sock.close()
            except OSError:
                pass
        self.sock = None

    def _read_loop(self):
        buf = b""
        sock = self.sock
        try:
            while not self._stop and sock:
                data = sock.recv(4096)
                if not data:
                    if not self._stop:
                        self.inbox.put({"type": "ERROR", "message": "Server closed the connection"})
                    break
                buf += data

                while b"\n" in buf:
                    line, buf = buf.split(b"\n", 1)
                    msg = loads_line(line)
                    if msg is None:
                        self.inbox.put({"type": "ERROR", "message": "Bad JSON from server"})
                    else:
                        self.inbox.put(msg)

        except OSError as e:
            if not self._stop:
                self.inbox.put({"type": "ERROR", "message": f"Disconnected: {e}"})
        finally:
            self.connected = False

    def send(self, msg: Dict[str, Any]) -> bool:
        if not self.connected or not self.sock:
            self.inbox.put({"type": "ERROR", "message": "Not connected"})
            return False
        try:
            self.sock.sendall(dumps_line(msg))
        except OSError as e:
            self.inbox.put({"type": "ERROR", "message": f"Send failed: {e}"})
            self.connected = False
            return False
        return True

    def poll(self) -> List[Dict[str, Any]]:
        msgs: List[Dict[str, Any]] = []
        while True:
            try:
                msgs.append(self.inbox.get_nowait())
            except queue.Empty:
                break
        return msgs
