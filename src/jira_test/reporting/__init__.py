"""Reporting: terminal output, JSON report and Jira comments."""

from __future__ import annotations

from jira_test.reporting.comments import (
    build_parent_comment_text,
    build_passed_comment,
    post_comments,
)
from jira_test.reporting.json_report import (
    DEFAULT_REPORT_PATH,
    JsonReport,
    generate_report,
    write_json_report,
)

__all__ = [
    "DEFAULT_REPORT_PATH",
    "JsonReport",
    "build_parent_comment_text",
    "build_passed_comment",
    "generate_report",
    "post_comments",
    "write_json_report",
]
