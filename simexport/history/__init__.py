"""
history/ - Record sources
"""

from .source import HistorySource, InMemoryHistorySource, JsonHistorySource

__all__ = [
    "HistorySource",
    "InMemoryHistorySource",
    "JsonHistorySource",
]
