# client/scheduler.py
from typing import Callable, Optional


class FrameScheduler:
    """Drives a frame callback with the elapsed ms between ticks.

    The host loop calls tick(now) once per display frame. The first tick of a
    run reports dt=0; after stop() ticks are ignored until the next start().
    """

    def __init__(self, on_frame: Callable[[float], None]):
        self.on_frame = on_frame
        self.running = False
        self.last_timestamp: Optional[float] = None

    def start(self):
        self.running = True
        self.last_timestamp = None

    def stop(self):
        self.running = False
        self.last_timestamp = None

    def tick(self, now: float) -> Optional[float]:
        if not self.running:
            return None
        dt = 0.0 if self.last_timestamp is None else max(0.0, now - self.last_timestamp)
        self.last_timestamp = now
        self.on_frame(dt)
        return dt
