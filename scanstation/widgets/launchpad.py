"""
Launchpad hub: app registry, idea list, progress meter, daily check-in and
small calculators.
"""

from typing import Union

from pydantic import BaseModel, ValidationError, field_validator

from scanstation.widgets.focus_compass import clamp
from scanstation.widgets.store import KeyValueStore, read_json, write_json

STORAGE_KEYS = {
    "apps": "app100.apps",
    "ideas": "app100.ideas",
    "progress": "app100.progress",
    "checkin": "app100.checkin",
}

NO_CHECKIN = "--"
INFINITY = "∞"


class AppEntry(BaseModel):
    name: str
    description: str = ""
    path: str = ""

    @field_validator("name", "description", "path")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


DEFAULT_APPS = [
    AppEntry(
        name="Momentum Pad",
        description="Landing page to keep your daily momentum notes.",
        path="/apps/momentum-pad/index.html",
    ),
    AppEntry(
        name="Focus Sprint",
        description="Pomodoro-style timer with a minimal UI.",
        path="/apps/focus-sprint/index.html",
    ),
    AppEntry(
        name="Mini Finance",
        description="A quick expense tracker for the day.",
        path="/apps/mini-finance/index.html",
    ),
    AppEntry(
        name="Color Lab",
        description="Palette generator and contrast checker.",
        path="/apps/color-lab/index.html",
    ),
]


def initials(name: str) -> str:
    """First letters of the first two words, uppercased."""
    words = [word for word in name.split(" ") if word]
    return "".join(word[0].upper() for word in words[:2])


def _to_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def color_from_text(text: str) -> str:
    """
    Stable icon colour for a name.

    Uses the classic ``hash * 31 + code`` string hash over UTF-16 code
    units with 32-bit shift semantics, so a name maps to the same hue the
    browser renders.
    """
    value = 0
    encoded = text.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code = int.from_bytes(encoded[i:i + 2], "little")
        value = code + (_to_int32(_to_int32(value) << 5) - value)
    hue = abs(value) % 360
    return f"hsl({hue} 75% 48%)"


def calculate(a: float, b: float, op: str) -> Union[float, str]:
    """Apply ``+ - * /``; division by zero yields ``∞`` and unknown ops 0."""
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if op == "/":
        return INFINITY if b == 0 else a / b
    return 0


def format_number(value: Union[float, str]) -> str:
    """Render a result the way a browser prints numbers (``7`` not ``7.0``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def inches_to_centimeters(inches: float) -> str:
    return f"{inches * 2.54:.2f}"


class Launchpad:
    """Hub state spread over four storage keys."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def apps(self) -> list[AppEntry]:
        raw = read_json(self.store, STORAGE_KEYS["apps"])
        if not isinstance(raw, list):
            return list(DEFAULT_APPS)
        try:
            return [AppEntry.model_validate(item) for item in raw]
        except ValidationError:
            return list(DEFAULT_APPS)

    def add_app(self, name: str, description: str, path: str) -> AppEntry:
        app = AppEntry(name=name, description=description, path=path)
        if not app.name:
            raise ValueError("App name is required")
        apps = [app, *self.apps()]
        write_json(self.store, STORAGE_KEYS["apps"], [a.model_dump() for a in apps])
        return app

    def ideas(self) -> list[str]:
        raw = read_json(self.store, STORAGE_KEYS["ideas"], [])
        if not isinstance(raw, list):
            return []
        return [str(idea) for idea in raw]

    def add_idea(self, idea: str) -> list[str]:
        idea = idea.strip()
        if not idea:
            raise ValueError("Idea text is required")
        ideas = [idea, *self.ideas()]
        write_json(self.store, STORAGE_KEYS["ideas"], ideas)
        return ideas

    def remove_idea(self, index: int) -> list[str]:
        ideas = [idea for i, idea in enumerate(self.ideas()) if i != index]
        write_json(self.store, STORAGE_KEYS["ideas"], ideas)
        return ideas

    def progress(self) -> int:
        raw = read_json(self.store, STORAGE_KEYS["progress"], 0)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return 0
        return int(clamp(raw, 0, 100))

    def set_progress(self, value: int) -> int:
        clamped = int(clamp(value, 0, 100))
        write_json(self.store, STORAGE_KEYS["progress"], clamped)
        return clamped

    def checkin(self) -> str:
        raw = read_json(self.store, STORAGE_KEYS["checkin"], NO_CHECKIN)
        return raw if isinstance(raw, str) else NO_CHECKIN

    def set_checkin(self, text: str) -> str:
        text = text.strip()
        write_json(self.store, STORAGE_KEYS["checkin"], text)
        return text
