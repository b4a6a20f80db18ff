"""Lesson item references used for best-effort audio URL propagation."""

from .models import LessonItem
from .store import ItemReferenceStore, SQLiteItemStore

__all__ = ["ItemReferenceStore", "LessonItem", "SQLiteItemStore"]
