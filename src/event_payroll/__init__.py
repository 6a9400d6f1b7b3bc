"""Event payroll engine for event staffing: clock events to gross pay."""

__version__ = "0.1.0"
