"""Custom exceptions for jira-test.

This module defines the exception hierarchy:
- JiraTestError (base)
- ConfigError
- JiraClientError
- UnsupportedModeError
- PatternConstructionError

Expected situations (no test cases, duplicate titles, unmatched runner
results, tests that cannot be located) are modelled as data and never
raised.
"""

from __future__ import annotations


class JiraTestError(Exception):
    """Base exception for all jira-test operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.

    Example:
        >>> try:
        ...     run_tests_for("PROJ-123")
        ... except JiraTestError as e:
        ...     print(f"jira-test failed: {e}")
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize JiraTestError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigError(JiraTestError):
    """Configuration is missing or invalid.

    Raised when:
    - JIRA_BASE_URL is not set
    - Neither JIRA_EMAIL + JIRA_API_TOKEN nor JIRA_PAT is set

    Security:
        Credential values are never included in the message or details.
    """


class JiraClientError(JiraTestError):
    """A Jira REST API call failed.

    Raised when:
    - Jira responds with a non-2xx status
    - Neither the v3 nor the v2 API answers during version detection
    - The transport fails (DNS, TLS, timeout)

    Attributes:
        status_code: HTTP status code, if a response was received.
        api_errors: Error messages extracted from the Jira error body.

    Example:
        >>> try:
        ...     client.get_issue("NOPE-1")
        ... except JiraClientError as e:
        ...     print(e.status_code, e.api_errors)
        404 ['Issue does not exist or you do not have permission to see it.']
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        api_errors: list[str] | None = None,
    ) -> None:
        """Initialize JiraClientError.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code of the failed response.
            api_errors: Messages reported by the Jira API.
        """
        details: dict[str, str] = {}
        if status_code is not None:
            details["status"] = str(status_code)
        super().__init__(message, details=details)
        self.status_code = status_code
        self.api_errors = api_errors or []


class UnsupportedModeError(JiraTestError):
    """A matching mode other than "title" was requested.

    Example:
        >>> build_pattern(test_cases, mode="summary")
        Traceback (most recent call last):
        ...
        UnsupportedModeError: Unsupported match mode: summary
    """

    def __init__(self, mode: str) -> None:
        """Initialize UnsupportedModeError.

        Args:
            mode: The rejected mode.
        """
        super().__init__(f"Unsupported match mode: {mode}", details={"mode": mode})
        self.mode = mode


class PatternConstructionError(JiraTestError):
    """The generated test name pattern does not compile as a regular expression."""

    def __init__(self, pattern: str) -> None:
        """Initialize PatternConstructionError.

        Args:
            pattern: The pattern that failed to compile.
        """
        super().__init__("Generated pattern is not a valid regex", details={"pattern": pattern})
        self.pattern = pattern


__all__ = [
    "ConfigError",
    "JiraClientError",
    "JiraTestError",
    "PatternConstructionError",
    "UnsupportedModeError",
]
