"""Data models for the Attendance Analyzer application."""

from enum import Enum
from typing import Optional, List, Tuple, Union
from pydantic import BaseModel, ConfigDict


class AttendanceStatus(str, Enum):
    SAFE = "SAFE"
    DANGER = "DANGER"


class RawSubjectEntry(BaseModel):
    """One row as typed by the user; nothing is validated here."""
    name: Optional[str] = ""
    held: Optional[Union[int, float, str]] = None
    attended: Optional[Union[int, float, str]] = None


class SubjectRecord(BaseModel):
    """Validated subject with its own attendance percentage."""
    model_config = ConfigDict(frozen=True)

    name: str
    held: int
    attended: int
    percentage: float


class AnalysisResult(BaseModel):
    """Aggregate attendance analysis across all subjects."""
    model_config = ConfigDict(frozen=True)

    overall_percentage: float
    status: AttendanceStatus
    total_attended: int
    total_held: int
    action_number: int
    action_label: str
    subjects: Tuple[SubjectRecord, ...]


class AnalyzeRequest(BaseModel):
    """Request body for the analyze endpoints."""
    subjects: List[RawSubjectEntry]


class SubjectBreakdown(BaseModel):
    """Per-subject line of the results view."""
    name: str
    held: int
    attended: int
    percentage: float
    is_safe: bool
    label: str


class Tip(BaseModel):
    title: str
    text: str


class AnalyzeResponse(BaseModel):
    """Response from the analyze and upload endpoints."""
    success: bool
    message: str
    result: AnalysisResult
    action_message: str
    breakdown: List[SubjectBreakdown]
    tips: List[Tip]


class ErrorResponse(BaseModel):
    """Body returned when the submitted entries are rejected."""
    detail: str
    type: str
    subject: Optional[str] = None
