"""workpulse - hierarchical progress tracking and KPI threshold monitoring."""

__version__ = "0.1.0"
