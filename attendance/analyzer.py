"""Attendance analysis: validation, aggregation and the skip/attend recommendation."""

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, Mapping, Tuple

import pandas as pd

from attendance.errors import (
    AttendedExceedsHeldError,
    MissingNameError,
    NegativeValueError,
    NoSubjectsError,
    ZeroClassesHeldError,
)
from attendance.models import AnalysisResult, AttendanceStatus, RawSubjectEntry, SubjectRecord

MINIMUM_ATTENDANCE = 75  # Percentage
STATUS_SAFE = AttendanceStatus.SAFE
STATUS_DANGER = AttendanceStatus.DANGER

SKIP_LABEL = "classes that may be skipped"
ATTEND_LABEL = "classes that must be attended"

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


def round_half_up(value: float, places: int) -> float:
    """Round the exact binary value of a float, ties away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def parse_count(value: Any) -> int:
    """
    Parse a class count the way a lenient form field would.

    Takes the leading integer of a string, truncates floats, and treats
    missing or unparseable input as 0.

    Args:
        value: Raw cell or form value

    Returns:
        Parsed integer count
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if pd.isna(value) or math.isinf(value):
            return 0
        return int(value)
    if pd.isna(value):
        return 0

    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return int(match.group(1))


def _unpack_entry(entry: Any) -> Tuple[Any, Any, Any]:
    if isinstance(entry, (str, bytes)):
        raise TypeError(f"Expected a subject row, got {type(entry).__name__}: {entry!r}")
    if isinstance(entry, RawSubjectEntry):
        return entry.name, entry.held, entry.attended
    if isinstance(entry, Mapping):
        return entry.get("name"), entry.get("held"), entry.get("attended")
    name, held, attended = entry
    return name, held, attended


def validate_subjects(raw_entries: Iterable[Any]) -> List[SubjectRecord]:
    """
    Validate raw entries into subject records, in input order.

    Blank rows (no name, nothing held, nothing attended) are skipped.
    The first invalid entry aborts the whole call.

    Args:
        raw_entries: RawSubjectEntry models, mappings with name/held/attended
            keys, or (name, held, attended) sequences

    Returns:
        List of validated SubjectRecord
    """
    subjects = []

    for entry in raw_entries:
        raw_name, raw_held, raw_attended = _unpack_entry(entry)

        subject_name = "" if raw_name is None or pd.isna(raw_name) else str(raw_name).strip()
        held = parse_count(raw_held)
        attended = parse_count(raw_attended)

        # Skip empty rows
        if not subject_name and held == 0 and attended == 0:
            continue

        if not subject_name:
            raise MissingNameError()
        if held < 0 or attended < 0:
            raise NegativeValueError(subject_name)
        if attended > held:
            raise AttendedExceedsHeldError(subject_name)
        if held == 0:
            raise ZeroClassesHeldError(subject_name)

        subjects.append(SubjectRecord(
            name=subject_name.upper(),
            held=held,
            attended=attended,
            percentage=(attended / held) * 100,
        ))

    return subjects


def require_non_empty(subjects: List[SubjectRecord]) -> None:
    """Reject an analysis with no subjects left to count."""
    if not subjects:
        raise NoSubjectsError()


def aggregate(subjects: List[SubjectRecord]) -> AnalysisResult:
    """
    Compute overall statistics for a non-empty list of validated subjects.

    SAFE: floor(attended / 0.75 - held) classes may be skipped.
    DANGER: ceil(0.75 * held - attended) classes must be attended.
    Both are evaluated against the current totals and clamped at 0.
    """
    total_attended = sum(s.attended for s in subjects)
    total_held = sum(s.held for s in subjects)

    # Integer form of attended / held * 100 >= 75
    if total_attended * 100 >= MINIMUM_ATTENDANCE * total_held:
        status = STATUS_SAFE
        action_number = math.floor((total_attended / 0.75) - total_held)
        action_label = SKIP_LABEL
    else:
        status = STATUS_DANGER
        action_number = math.ceil((0.75 * total_held) - total_attended)
        action_label = ATTEND_LABEL

    return AnalysisResult(
        overall_percentage=round_half_up((total_attended / total_held) * 100, 2),
        status=status,
        total_attended=total_attended,
        total_held=total_held,
        action_number=max(0, action_number),
        action_label=action_label,
        subjects=tuple(subjects),
    )


def analyze(raw_entries: Iterable[Any]) -> AnalysisResult:
    """Validate raw entries and return the aggregate analysis."""
    subjects = validate_subjects(raw_entries)
    require_non_empty(subjects)
    return aggregate(subjects)


class AttendanceAnalyzer:
    """Stateless facade over the module-level analysis functions."""

    minimum_attendance = MINIMUM_ATTENDANCE

    def validate_subjects(self, raw_entries: Iterable[Any]) -> List[SubjectRecord]:
        return validate_subjects(raw_entries)

    def require_non_empty(self, subjects: List[SubjectRecord]) -> None:
        require_non_empty(subjects)

    def aggregate(self, subjects: List[SubjectRecord]) -> AnalysisResult:
        return aggregate(subjects)

    def analyze(self, raw_entries: Iterable[Any]) -> AnalysisResult:
        return analyze(raw_entries)
