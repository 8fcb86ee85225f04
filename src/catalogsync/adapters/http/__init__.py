"""HTTP adapters for catalogsync."""

from __future__ import annotations

from .probe import HttpHeadProbe, RetryPolicy

__all__ = ["HttpHeadProbe", "RetryPolicy"]
