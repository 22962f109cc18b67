class SchedulingError(ValueError):
    """Base class for invalid input reaching the scheduling core."""


class InvalidIntervalError(SchedulingError):
    """Interval whose end is not strictly after its start."""


class TimestampParseError(SchedulingError):
    """Timestamp value that cannot be read as an ISO-8601 instant."""


class InvalidRecurrenceError(SchedulingError):
    """`weekly:` tag with a day list outside 0-6 or not made of integers."""
