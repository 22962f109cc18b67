"""
Scheduling core

Pure functions behind availability, time-off and appointment handling:
- Interval overlap and conflict classification (overlap.py)
- Recurrence parsing and occurrence projection (recurrence.py)
- Free-slot aggregation for a day (slots.py)

Nothing in this package performs I/O; callers pass already-fetched rows.
"""
