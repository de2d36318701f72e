"""Terminal rendering for reconciliation reports."""

from s3checksums.monitor.renderer import ReportRenderer

__all__ = ["ReportRenderer"]
