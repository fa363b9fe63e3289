"""
Sugar Tracker: glucose log with target ranges and a simple risk score.

Readings are compared against the target range for the meal and the
profile (standard or pregnancy targets), then lifestyle factors add risk
points. Three or more points is high risk, one or more is caution.
"""

import math
import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field

from scanstation.models.base import CamelModel
from scanstation.widgets.store import KeyValueStore, read_json, write_json

STORAGE_KEY = "app100.sugar-tracker.entries"
PROFILE_STORAGE_KEY = "app100.sugar-tracker.profile"

# mmol/L either side of the target range that still only counts as caution
CAUTION_BAND = 0.3
TREND_DAYS = 7


class MealType(StrEnum):
    FASTING = "fasting"
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


MEAL_ORDER = [MealType.FASTING, MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER]


class ThyroidSymptoms(StrEnum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class RiskLevel(StrEnum):
    IN_RANGE = "inRange"
    CAUTION = "caution"
    HIGH_RISK = "highRisk"


RISK_LABELS = {
    RiskLevel.IN_RANGE: "In range",
    RiskLevel.CAUTION: "Caution",
    RiskLevel.HIGH_RISK: "High risk",
}


class Mode(StrEnum):
    NORMAL = "normal"
    PREGNANT = "pregnant"


class Profile(CamelModel):
    """Which targets apply, plus comorbidity flags"""

    mode: Mode = Mode.NORMAL
    pregnancy_week: str = ""
    hyperthyroidism: str = Field(default="yes", description="yes or no")
    insulin_resistance: str = Field(default="yes", description="yes or no")

    @property
    def is_pregnant(self) -> bool:
        return self.mode == Mode.PREGNANT


class GlucoseEntry(CamelModel):
    """One glucose reading with its context"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    date: str = Field(description="YYYY-MM-DD")
    time: str = Field(default="00:00", description="HH:MM")
    level: float = Field(description="Glucose in mmol/L")
    meal_type: MealType
    carbs_grams: float = 0
    activity_minutes: float = 0
    thyroid_symptoms: ThyroidSymptoms = ThyroidSymptoms.NONE
    sleep_hours: float = 0
    stress_level: float = Field(default=0, description="0-10")
    heart_rate: float = Field(default=0, description="Resting heart rate, bpm")


class TargetRange(BaseModel):
    min: float
    max: float
    label: str


class TrendPoint(BaseModel):
    label: str
    count: int
    value: float


class RiskSummary(BaseModel):
    in_range: int = 0
    caution: int = 0
    high_risk: int = 0

    def add(self, risk: RiskLevel) -> None:
        if risk == RiskLevel.HIGH_RISK:
            self.high_risk += 1
        elif risk == RiskLevel.CAUTION:
            self.caution += 1
        else:
            self.in_range += 1

    def count(self, risk: RiskLevel) -> int:
        if risk == RiskLevel.HIGH_RISK:
            return self.high_risk
        if risk == RiskLevel.CAUTION:
            return self.caution
        return self.in_range


class TrackerStats(BaseModel):
    entry_count: int
    days_tracked: int
    average_level: Optional[float]
    target_basis: str
    risk: RiskLevel
    avg_carbs: Optional[float]
    avg_activity: Optional[float]
    avg_sleep: Optional[float]
    avg_stress: Optional[float]
    avg_heart_rate: Optional[float]


def _finite(value: Any) -> Optional[float]:
    """Coerce a stored value to a finite number, or None."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _form_number(value: Any) -> Optional[float]:
    """Like _finite, but a blank optional field counts as 0."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    return _finite(value)


def js_round(value: float) -> int:
    """Round half up, as browsers do."""
    return math.floor(value + 0.5)


def infer_meal_type(time_value: Any) -> MealType:
    """
    Guess the meal from the time of day.

    Before 07:00 is fasting, before 11:00 breakfast, before 16:00 lunch,
    anything later (or unparseable) dinner.
    """
    if not isinstance(time_value, str):
        return MealType.DINNER

    parts = time_value.split(":")
    hours = _finite(parts[0])
    minutes = _finite(parts[1]) if len(parts) > 1 else None
    if hours is None or minutes is None:
        return MealType.DINNER

    total_minutes = hours * 60 + minutes
    if total_minutes < 7 * 60:
        return MealType.FASTING
    if total_minutes < 11 * 60:
        return MealType.BREAKFAST
    if total_minutes < 16 * 60:
        return MealType.LUNCH
    return MealType.DINNER


def normalize_meal_type(value: Any, fallback_time: Any) -> MealType:
    if value in MEAL_ORDER:
        return MealType(value)
    return infer_meal_type(fallback_time)


def normalize_profile(raw: Any) -> Profile:
    if not isinstance(raw, dict):
        return Profile()
    week = raw.get("pregnancyWeek")
    return Profile(
        mode=Mode.PREGNANT if raw.get("mode") == "pregnant" else Mode.NORMAL,
        pregnancy_week=week if isinstance(week, str) else "",
        hyperthyroidism="no" if raw.get("hyperthyroidism") == "no" else "yes",
        insulin_resistance="no" if raw.get("insulinResistance") == "no" else "yes",
    )


def normalize_entry(raw: Any) -> Optional[GlucoseEntry]:
    """
    Rebuild an entry from stored JSON.

    Non-numeric context values become 0; entries without a date or a
    numeric level are dropped (None).
    """
    if not isinstance(raw, dict):
        return None

    level = _finite(raw.get("level"))
    date = raw.get("date") if isinstance(raw.get("date"), str) else ""
    if not date or level is None:
        return None

    time = raw.get("time") if isinstance(raw.get("time"), str) and raw.get("time") else "00:00"
    thyroid = raw.get("thyroidSymptoms")

    return GlucoseEntry(
        id=raw["id"] if isinstance(raw.get("id"), str) else str(uuid.uuid4()),
        date=date,
        time=time,
        level=level,
        meal_type=normalize_meal_type(raw.get("mealType"), time),
        carbs_grams=_finite(raw.get("carbsGrams")) or 0,
        activity_minutes=_finite(raw.get("activityMinutes")) or 0,
        thyroid_symptoms=(
            ThyroidSymptoms(thyroid)
            if thyroid in ("mild", "moderate", "severe")
            else ThyroidSymptoms.NONE
        ),
        sleep_hours=_finite(raw.get("sleepHours")) or 0,
        stress_level=_finite(raw.get("stressLevel")) or 0,
        heart_rate=_finite(raw.get("heartRate")) or 0,
    )


def target_range(meal_type: MealType, profile: Profile) -> TargetRange:
    """Target glucose range in mmol/L for a meal under the profile's standards."""
    if profile.is_pregnant:
        if meal_type == MealType.FASTING:
            return TargetRange(min=3.5, max=5.3, label="3.5-5.3 mmol/L")
        return TargetRange(min=3.5, max=7.8, label="3.5-7.8 mmol/L")

    return TargetRange(min=3.5, max=7.0, label="3.5-7.0 mmol/L")


def thyroid_risk_points(symptoms: ThyroidSymptoms) -> int:
    if symptoms == ThyroidSymptoms.SEVERE:
        return 2
    if symptoms == ThyroidSymptoms.MODERATE:
        return 1
    return 0


def risk_score(entry: GlucoseEntry, profile: Profile) -> int:
    target = target_range(entry.meal_type, profile)
    score = 0

    if entry.level < target.min - CAUTION_BAND or entry.level > target.max + CAUTION_BAND:
        score += 2
    elif entry.level < target.min or entry.level > target.max:
        score += 1

    if profile.insulin_resistance == "yes" and entry.carbs_grams > 60:
        score += 1
    if entry.activity_minutes < 10:
        score += 1
    if profile.hyperthyroidism == "yes":
        score += thyroid_risk_points(entry.thyroid_symptoms)
    if entry.sleep_hours < 6:
        score += 1
    if entry.stress_level >= 7:
        score += 1
    if entry.heart_rate > 100:
        score += 1

    return score


def classify_reading(entry: GlucoseEntry, profile: Profile) -> RiskLevel:
    score = risk_score(entry, profile)
    if score >= 3:
        return RiskLevel.HIGH_RISK
    if score >= 1:
        return RiskLevel.CAUTION
    return RiskLevel.IN_RANGE


def risk_summary(entries: list[GlucoseEntry], profile: Profile) -> RiskSummary:
    summary = RiskSummary()
    for entry in entries:
        summary.add(classify_reading(entry, profile))
    return summary


def overall_risk(summary: RiskSummary) -> RiskLevel:
    if summary.high_risk > 0:
        return RiskLevel.HIGH_RISK
    if summary.caution > 0:
        return RiskLevel.CAUTION
    return RiskLevel.IN_RANGE


def risk_breakdown(
    entries: list[GlucoseEntry], profile: Profile
) -> list[tuple[RiskLevel, int, int]]:
    """(risk, count, percent of entries) for each risk level."""
    summary = risk_summary(entries, profile)
    total = len(entries) or 1
    return [
        (risk, summary.count(risk), js_round(summary.count(risk) / total * 100))
        for risk in (RiskLevel.IN_RANGE, RiskLevel.CAUTION, RiskLevel.HIGH_RISK)
    ]


def average(values: list[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def entry_timestamp(entry: GlucoseEntry) -> datetime:
    """Reading time; unparseable dates sort first."""
    try:
        return datetime.fromisoformat(f"{entry.date}T{entry.time or '00:00'}")
    except ValueError:
        return datetime.min


def tracker_stats(entries: list[GlucoseEntry], profile: Profile) -> TrackerStats:
    return TrackerStats(
        entry_count=len(entries),
        days_tracked=len({entry.date for entry in entries}),
        average_level=average([entry.level for entry in entries]),
        target_basis="Pregnant" if profile.is_pregnant else "Standard",
        risk=overall_risk(risk_summary(entries, profile)),
        avg_carbs=average([entry.carbs_grams for entry in entries]),
        avg_activity=average([entry.activity_minutes for entry in entries]),
        avg_sleep=average([entry.sleep_hours for entry in entries]),
        avg_stress=average([entry.stress_level for entry in entries]),
        avg_heart_rate=average([entry.heart_rate for entry in entries]),
    )


def daily_trend(entries: list[GlucoseEntry], days: int = TREND_DAYS) -> list[TrendPoint]:
    """Average level per date for the most recent ``days`` dates, oldest first."""
    buckets: dict[str, list[float]] = {}
    for entry in sorted(entries, key=entry_timestamp):
        buckets.setdefault(entry.date, []).append(entry.level)

    return [
        TrendPoint(label=date, count=len(levels), value=average(levels))
        for date, levels in list(buckets.items())[-days:]
    ]


class SugarTracker:
    """Glucose log and profile persisted in a key-value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def entries(self) -> list[GlucoseEntry]:
        raw = read_json(self.store, STORAGE_KEY, [])
        if not isinstance(raw, list):
            return []
        return [entry for entry in map(normalize_entry, raw) if entry is not None]

    def entries_newest_first(self) -> list[GlucoseEntry]:
        return sorted(self.entries(), key=entry_timestamp, reverse=True)

    def _save_entries(self, entries: list[GlucoseEntry]) -> None:
        write_json(
            self.store, STORAGE_KEY, [e.model_dump(mode="json", by_alias=True) for e in entries]
        )

    def add_entry(
        self,
        date: str,
        time: str,
        level: Any,
        meal_type: str = "auto",
        carbs_grams: Any = 0,
        activity_minutes: Any = 0,
        thyroid_symptoms: str = ThyroidSymptoms.NONE,
        sleep_hours: Any = 0,
        stress_level: Any = 0,
        heart_rate: Any = 0,
    ) -> GlucoseEntry:
        """
        Append a reading. meal_type "auto" infers the meal from the time.

        Raises:
            ValueError: If date, time, level or thyroid_symptoms is missing,
                or a numeric field is not a number
        """
        parsed_level = _finite(level)
        numbers = {
            "carbs_grams": _form_number(carbs_grams),
            "activity_minutes": _form_number(activity_minutes),
            "sleep_hours": _form_number(sleep_hours),
            "stress_level": _form_number(stress_level),
            "heart_rate": _form_number(heart_rate),
        }
        if not date or not time or parsed_level is None or not thyroid_symptoms:
            raise ValueError("date, time, level and thyroid symptoms are required")
        invalid = [name for name, value in numbers.items() if value is None]
        if invalid:
            raise ValueError(f"Not a number: {', '.join(invalid)}")

        entry = GlucoseEntry(
            date=date,
            time=time,
            level=parsed_level,
            meal_type=(
                infer_meal_type(time)
                if meal_type == "auto"
                else normalize_meal_type(meal_type, time)
            ),
            thyroid_symptoms=ThyroidSymptoms(thyroid_symptoms),
            **numbers,
        )
        self._save_entries([*self.entries(), entry])
        return entry

    def clear(self) -> None:
        self._save_entries([])

    def profile(self) -> Profile:
        return normalize_profile(read_json(self.store, PROFILE_STORAGE_KEY))

    def _save_profile(self, profile: Profile) -> None:
        write_json(self.store, PROFILE_STORAGE_KEY, profile.model_dump(mode="json", by_alias=True))

    def ensure_profile(self) -> Profile:
        """Write the default profile if none is stored yet."""
        if not self.store.get_item(PROFILE_STORAGE_KEY):
            self._save_profile(Profile())
        return self.profile()

    def update_profile(
        self, pregnancy_week: str, hyperthyroidism: str, insulin_resistance: str
    ) -> Profile:
        """
        Update the comorbidity flags and pregnancy week, keeping the mode.

        Raises:
            ValueError: If a flag is missing, or the week is missing in pregnant mode
        """
        current = self.profile()
        profile = Profile(
            mode=current.mode,
            pregnancy_week=(pregnancy_week or "").strip(),
            hyperthyroidism=hyperthyroidism,
            insulin_resistance=insulin_resistance,
        )
        if not profile.hyperthyroidism or not profile.insulin_resistance:
            raise ValueError("hyperthyroidism and insulin resistance are required")
        if profile.is_pregnant and not profile.pregnancy_week:
            raise ValueError("pregnancy week is required in pregnant mode")

        self._save_profile(profile)
        return profile

    def toggle_mode(self) -> Profile:
        """Switch between normal and pregnant targets. Leaving pregnancy clears the week."""
        current = self.profile()
        next_mode = Mode.NORMAL if current.is_pregnant else Mode.PREGNANT
        profile = current.model_copy(update={"mode": next_mode})
        if next_mode == Mode.NORMAL:
            profile.pregnancy_week = ""

        self._save_profile(profile)
        return profile

    def stats(self) -> TrackerStats:
        return tracker_stats(self.entries(), self.profile())
