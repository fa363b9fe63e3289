"""
Tests for the Focus Compass task ranker.
"""

import json

import pytest

from scanstation.widgets.focus_compass import (
    STORAGE_KEY,
    FocusCompass,
    Task,
    rank_tasks,
    recommendation,
    score_task,
)
from scanstation.widgets.store import MemoryStore


@pytest.fixture
def compass() -> FocusCompass:
    return FocusCompass(MemoryStore())


class TestScoring:
    """Tests for task scores and ranking."""

    def test_score_with_high_energy(self):
        task = Task(title="Ship orders", impact=5, effort=1)
        assert score_task(task, "high") == pytest.approx(10.35)

    def test_score_with_low_energy(self):
        task = Task(title="Ship orders", impact=3, effort=2)
        assert score_task(task, "low") == pytest.approx(3.4)

    def test_unknown_energy_counts_as_medium(self):
        task = Task(title="x", impact=3, effort=2)
        assert score_task(task, "sleepy") == 4

    def test_ratings_are_clamped(self):
        task = Task(title="  Big  ", impact=9, effort=0)

        assert task.title == "Big"
        assert task.impact == 5
        assert task.effort == 1

    def test_rank_is_stable_for_ties(self):
        a = Task(title="a", impact=3, effort=2)
        b = Task(title="b", impact=5, effort=1)
        c = Task(title="c", impact=3, effort=2)

        assert [t.title for t in rank_tasks([a, b, c], "medium")] == ["b", "a", "c"]

    def test_recommendation(self):
        tasks = [Task(title="Call supplier", impact=4, effort=2)]

        assert recommendation(tasks, "low") == (
            "Start with “Call supplier”. It has the best score for your low energy right now."
        )
        assert recommendation([], "low") == "Add at least one task to get a recommendation."


class TestFocusCompass:
    """Tests for the persisted task list."""

    def test_add_prepends(self, compass):
        compass.add_task("first", 3, 3)
        compass.add_task("second", 3, 3)

        assert [t.title for t in compass.list_tasks()] == ["second", "first"]

    def test_remove_and_clear(self, compass):
        keep = compass.add_task("keep", 2, 2)
        drop = compass.add_task("drop", 2, 2)

        assert compass.remove_task(drop.id) == [keep]

        compass.clear()
        assert compass.list_tasks() == []

    def test_top_task(self, compass):
        compass.add_task("easy win", 4, 1)
        compass.add_task("slog", 2, 5)

        assert compass.top_task("high").title == "easy win"

    def test_top_task_empty(self, compass):
        assert compass.top_task() is None

    def test_invalid_stored_items_are_skipped(self):
        store = MemoryStore(
            {
                STORAGE_KEY: json.dumps(
                    [{"id": "1", "title": "ok", "impact": 3, "effort": 2}, {"title": None}, 7]
                )
            }
        )

        tasks = FocusCompass(store).list_tasks()

        assert [t.id for t in tasks] == ["1"]

    def test_non_list_state(self):
        store = MemoryStore({STORAGE_KEY: '{"tasks": []}'})
        assert FocusCompass(store).list_tasks() == []
