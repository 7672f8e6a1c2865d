"""Errors raised while validating and analyzing attendance entries."""

from typing import Optional


class AttendanceError(ValueError):
    """Base class for invalid attendance input."""

    message = "Invalid attendance data"

    def __init__(self, subject: Optional[str] = None):
        self.subject = subject
        super().__init__(self.message.format(subject=subject))


class MissingNameError(AttendanceError):
    """Entry has numeric values but no subject name."""

    message = "Subject name is required for all entries"


class NegativeValueError(AttendanceError):
    message = 'Negative values not allowed for "{subject}"'


class AttendedExceedsHeldError(AttendanceError):
    message = 'Attended classes cannot exceed held classes for "{subject}"'


class ZeroClassesHeldError(AttendanceError):
    message = 'Classes held must be greater than 0 for "{subject}"'


class NoSubjectsError(AttendanceError):
    """Nothing left to analyze once blank rows are skipped."""

    message = "Please add at least one subject before analyzing."
