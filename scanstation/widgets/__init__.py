"""
Scan Station widgets.

Browser-side utilities (task ranker, glucose tracker, document builder,
launchpad hub, focus timer) with their state kept in an injected
key-value store.
"""

from scanstation.widgets.docbuilder import DocBuilder
from scanstation.widgets.focus_compass import FocusCompass
from scanstation.widgets.launchpad import Launchpad
from scanstation.widgets.store import JsonFileStore, KeyValueStore, MemoryStore
from scanstation.widgets.sugar_tracker import SugarTracker
from scanstation.widgets.timer import FocusTimer

__all__ = [
    "DocBuilder",
    "FocusCompass",
    "FocusTimer",
    "JsonFileStore",
    "KeyValueStore",
    "Launchpad",
    "MemoryStore",
    "SugarTracker",
]
