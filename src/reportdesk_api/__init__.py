"""ReportDesk API: multi-tenant report sharing with role and permission gates."""

__version__ = "0.1.0"
