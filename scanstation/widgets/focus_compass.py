"""
Focus Compass: pick the next task from impact, effort and current energy.
"""

import uuid
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from scanstation.widgets.store import KeyValueStore, read_json, write_json

STORAGE_KEY = "app100.focus-compass.tasks"


class EnergyLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


ENERGY_MULTIPLIER: dict[str, float] = {
    EnergyLevel.LOW: 0.85,
    EnergyLevel.MEDIUM: 1.0,
    EnergyLevel.HIGH: 1.15,
}


def clamp(value, low, high):
    return min(max(value, low), high)


class Task(BaseModel):
    """A candidate task, rated 1-5 for impact and effort"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    impact: int = Field(description="Impact, 1 (low) to 5 (high)")
    effort: int = Field(description="Effort, 1 (low) to 5 (high)")

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        return value.strip()

    @field_validator("impact", "effort")
    @classmethod
    def _clamp_rating(cls, value: int) -> int:
        return clamp(value, 1, 5)


def score_task(task: Task, energy: str) -> float:
    """
    Score a task for the current energy level.

    (impact * 2 - effort) scaled by the energy multiplier; an unknown
    energy level counts as medium.
    """
    multiplier = ENERGY_MULTIPLIER.get(energy, 1.0)
    return (task.impact * 2 - task.effort) * multiplier


def rank_tasks(tasks: list[Task], energy: str) -> list[Task]:
    """Highest score first; ties keep their stored order."""
    return sorted(tasks, key=lambda task: score_task(task, energy), reverse=True)


def recommendation(tasks: list[Task], energy: str) -> str:
    ranked = rank_tasks(tasks, energy)
    if not ranked:
        return "Add at least one task to get a recommendation."
    top = ranked[0]
    return f"Start with “{top.title}”. It has the best score for your {energy} energy right now."


class FocusCompass:
    """Task list persisted under STORAGE_KEY, newest first."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def list_tasks(self) -> list[Task]:
        raw = read_json(self.store, STORAGE_KEY, [])
        if not isinstance(raw, list):
            return []
        tasks = []
        for item in raw:
            try:
                tasks.append(Task.model_validate(item))
            except ValidationError:
                continue
        return tasks

    def _save(self, tasks: list[Task]) -> None:
        write_json(self.store, STORAGE_KEY, [task.model_dump() for task in tasks])

    def add_task(self, title: str, impact: int, effort: int) -> Task:
        task = Task(title=title, impact=impact, effort=effort)
        self._save([task, *self.list_tasks()])
        return task

    def remove_task(self, task_id: str) -> list[Task]:
        tasks = [task for task in self.list_tasks() if task.id != task_id]
        self._save(tasks)
        return tasks

    def clear(self) -> None:
        self._save([])

    def ranked(self, energy: str = EnergyLevel.MEDIUM) -> list[Task]:
        return rank_tasks(self.list_tasks(), energy)

    def top_task(self, energy: str = EnergyLevel.MEDIUM) -> Optional[Task]:
        ranked = self.ranked(energy)
        return ranked[0] if ranked else None
