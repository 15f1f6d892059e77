"""YourScore - score ledger and progression engine for a habit tracker."""

__version__ = "1.0.0"
