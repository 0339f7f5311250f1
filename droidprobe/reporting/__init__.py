"""Report and artifact output."""

from .report_writer import ReportWriter, transition_summary

__all__ = ["ReportWriter", "transition_summary"]
