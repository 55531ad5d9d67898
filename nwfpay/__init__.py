"""NWF Pay - hourly payroll runs and certified paystub documents."""

__version__ = "0.3.0"
