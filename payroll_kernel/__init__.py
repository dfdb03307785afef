"""
Payroll Kernel

Pure domain core for the farm-labor payroll engine:
- Decimal-only money values
- Immutable record types for employees, clients, tasks and activity logs
- Per-invocation lookup tables (no shared mutable state)
- Typed exceptions and structured JSON logging
"""

__version__ = "0.1.0"
