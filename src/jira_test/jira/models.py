"""Pydantic models for Jira REST API payloads.

Covers the subset of the issue resource jira-test reads. The shapes are
identical for REST API v2 (Data Center/Server) and v3 (Cloud) for these
fields. Missing or null fields normalize to empty values.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _JiraModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class IssueType(_JiraModel):
    """Issue type reference (e.g., "Story", "Sub-task")."""

    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _name_default(cls, v: Any) -> Any:
        return v if v is not None else ""


class LinkedIssueFields(_JiraModel):
    """Fields embedded in subtask and issue link references."""

    summary: str = ""
    labels: list[str] = Field(default_factory=list)
    issuetype: IssueType | None = None

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_default(cls, v: Any) -> Any:
        return v if v is not None else ""

    @field_validator("labels", mode="before")
    @classmethod
    def _labels_default(cls, v: Any) -> Any:
        return v if v is not None else []


class IssueRef(_JiraModel):
    """A subtask or linked issue reference."""

    key: str
    id: str = ""
    fields: LinkedIssueFields = Field(default_factory=LinkedIssueFields)

    @field_validator("fields", mode="before")
    @classmethod
    def _fields_default(cls, v: Any) -> Any:
        return v if v is not None else {}


class IssueLinkType(_JiraModel):
    """Issue link type, e.g. name "Test", inward "is tested by", outward "tests"."""

    name: str = ""
    inward: str = ""
    outward: str = ""

    @field_validator("name", "inward", "outward", mode="before")
    @classmethod
    def _str_default(cls, v: Any) -> Any:
        return v if v is not None else ""


class IssueLink(_JiraModel):
    """An issue link; exactly one of inward_issue/outward_issue is usually set."""

    id: str = ""
    type: IssueLinkType = Field(default_factory=IssueLinkType)
    inward_issue: IssueRef | None = Field(default=None, alias="inwardIssue")
    outward_issue: IssueRef | None = Field(default=None, alias="outwardIssue")

    @field_validator("type", mode="before")
    @classmethod
    def _type_default(cls, v: Any) -> Any:
        return v if v is not None else {}


class IssueFields(LinkedIssueFields):
    """Fields of a fully fetched issue."""

    subtasks: list[IssueRef] = Field(default_factory=list)
    issuelinks: list[IssueLink] = Field(default_factory=list)

    @field_validator("subtasks", "issuelinks", mode="before")
    @classmethod
    def _list_default(cls, v: Any) -> Any:
        return v if v is not None else []


class JiraIssue(_JiraModel):
    """A Jira issue with the fields requested by JiraClient.

    Example:
        >>> issue = JiraIssue.model_validate(
        ...     {"key": "PROJ-1", "id": "10001", "fields": {"summary": "Checkout"}}
        ... )
        >>> issue.fields.subtasks
        []
    """

    key: str
    id: str = ""
    fields: IssueFields = Field(default_factory=IssueFields)

    @field_validator("fields", mode="before")
    @classmethod
    def _fields_default(cls, v: Any) -> Any:
        return v if v is not None else {}


__all__ = [
    "IssueFields",
    "IssueLink",
    "IssueLinkType",
    "IssueRef",
    "IssueType",
    "JiraIssue",
    "LinkedIssueFields",
]
