from __future__ import annotations

from .formatter import format_history_table

__all__ = ["format_history_table"]
