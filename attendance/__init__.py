"""Attendance Analyzer: skip/attend guidance against a 75% attendance minimum."""
