"""Presentation layer - human-readable rendering of plans and reports."""

from .human_formatter import format_order, format_plan, format_report, format_state_entry

__all__ = ["format_order", "format_plan", "format_report", "format_state_entry"]
