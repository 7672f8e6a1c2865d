"""Unit tests for parsers module."""

import pytest
import pandas as pd
from io import BytesIO

from attendance.analyzer import analyze
from attendance.errors import ZeroClassesHeldError
from attendance.models import AttendanceStatus
from attendance.parsers import (
    load_subjects_file,
    normalize_and_rename_columns,
    normalize_col_name,
)


def test_normalize_col_name():
    """Test column name normalization."""
    assert normalize_col_name("Subject Name") == "subject name"
    assert normalize_col_name("  Classes_Held ") == "classes held"
    assert normalize_col_name("Attended.") == "attended"
    assert normalize_col_name("Total   Classes") == "total classes"
    assert normalize_col_name(None) == ""


def test_normalize_and_rename_columns():
    """Header variations map onto name/held/attended."""
    df = pd.DataFrame({
        'Course': ['Math'],
        'Notes': ['ignored'],
        'Total Classes': [20],
        'Present': [18],
    })

    renamed = normalize_and_rename_columns(df)

    assert list(renamed.columns) == ['name', 'held', 'attended']
    assert renamed['name'].iloc[0] == 'Math'
    assert renamed['held'].iloc[0] == 20


def test_normalize_and_rename_columns_missing():
    df = pd.DataFrame({'Subject': ['Math'], 'Held': [20]})

    with pytest.raises(ValueError) as exc_info:
        normalize_and_rename_columns(df)

    assert "attended" in str(exc_info.value)


def test_load_csv_keeps_order_and_blank_rows():
    """Blank rows come through as blanks and are skipped by the analyzer."""
    data = (
        "Subject Name,Classes Held,Attended\n"
        "Math,20,18\n"
        ",,\n"
        "Physics,20,10\n"
    ).encode("utf-8")

    entries = load_subjects_file(data, "subjects.csv")

    assert len(entries) == 3
    assert entries[0].name == "Math"
    assert entries[0].held == "20"
    assert entries[1].name is None
    assert entries[1].held is None
    assert entries[2].name == "Physics"

    result = analyze(entries)
    assert [s.name for s in result.subjects] == ["MATH", "PHYSICS"]
    assert result.total_held == 40
    assert result.total_attended == 28


def test_load_csv_headers_only():
    entries = load_subjects_file(b"Subject,Held,Attended\n", "empty.csv")
    assert entries == []


def test_load_excel():
    """Test loading the first sheet of an Excel workbook."""
    df = pd.DataFrame({
        'Course': ['Data Structures', 'Networks'],
        'Conducted': [30, 10],
        'Classes Attended': [27, 5],
    })
    buffer = BytesIO()
    df.to_excel(buffer, index=False, engine='openpyxl')

    entries = load_subjects_file(buffer.getvalue(), "Attendance.XLSX")

    assert [e.name for e in entries] == ['Data Structures', 'Networks']

    result = analyze(entries)
    assert result.total_held == 40
    assert result.total_attended == 32
    assert result.status == AttendanceStatus.SAFE
    assert result.action_number == 2  # floor(42.67 - 40)


def test_load_unsupported_file_type():
    with pytest.raises(ValueError) as exc_info:
        load_subjects_file(b"Math 20 18", "subjects.txt")

    assert "Invalid file type" in str(exc_info.value)


def test_load_corrupt_excel():
    with pytest.raises(ValueError):
        load_subjects_file(b"not a workbook", "subjects.xlsx")


def test_placeholder_words_are_subject_names():
    """Only empty cells are missing; 'NA' and 'None' are real names."""
    entries = load_subjects_file(b"Subject,Held,Attended\nNA,20,18\nN/A,4,3\n", "subjects.csv")

    assert [e.name for e in entries] == ["NA", "N/A"]
    result = analyze(entries)
    assert [s.name for s in result.subjects] == ["NA", "N/A"]


def test_named_zero_row_from_csv_is_rejected():
    """A row named 'None' with 0,0 is intentional, not blank."""
    entries = load_subjects_file(b"Subject,Held,Attended\nMath,20,18\nNone,0,0\n", "subjects.csv")

    with pytest.raises(ZeroClassesHeldError) as exc_info:
        analyze(entries)

    assert exc_info.value.subject == "None"


def test_placeholder_words_in_excel():
    df = pd.DataFrame({
        'Subject': ['null', 'nan'],
        'Held': [10, 10],
        'Attended': [9, 8],
    })
    buffer = BytesIO()
    df.to_excel(buffer, index=False, engine='openpyxl')

    entries = load_subjects_file(buffer.getvalue(), "subjects.xlsx")

    assert [e.name for e in entries] == ['null', 'nan']


def test_legacy_xls_not_accepted():
    with pytest.raises(ValueError) as exc_info:
        load_subjects_file(b"\xd0\xcf\x11\xe0", "subjects.xls")

    assert "Invalid file type" in str(exc_info.value)
