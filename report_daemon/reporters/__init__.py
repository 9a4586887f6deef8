"""Outbound reporters for the report daemon."""

from .notifier import EventNotifier

__all__ = ["EventNotifier"]
