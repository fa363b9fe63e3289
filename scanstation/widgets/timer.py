"""
Focus timer: a 25 minute countdown driven by one-second ticks.
"""

FOCUS_SECONDS = 25 * 60


class FocusTimer:
    """
    Countdown state. The caller drives ``tick()`` once per second while
    the timer is running; ticks while paused or at zero do nothing.
    """

    def __init__(self, seconds: int = FOCUS_SECONDS):
        self.duration = seconds
        self.remaining = seconds
        self.running = False

    def start(self) -> None:
        if self.remaining > 0:
            self.running = True

    def pause(self) -> None:
        self.running = False

    def reset(self) -> None:
        self.running = False
        self.remaining = self.duration

    def tick(self) -> int:
        if not self.running or self.remaining <= 0:
            return self.remaining
        self.remaining -= 1
        if self.remaining == 0:
            self.running = False
        return self.remaining

    @property
    def display(self) -> str:
        minutes, seconds = divmod(self.remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"
