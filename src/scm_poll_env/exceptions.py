"""
Custom exceptions for the SCM poll environment resolver.

This module defines custom exception classes for better error handling
and debugging across the application.
"""

from typing import Any


class PollEnvironmentError(Exception):
    """Base exception for poll environment errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code or "POLL_ENVIRONMENT_ERROR"
        self.context = context or {}


class InvalidStateError(PollEnvironmentError):
    """Exception for host state that makes polling impossible."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "INVALID_STATE", context)


class NodeOfflineError(PollEnvironmentError):
    """Exception for a node that went away while it was being queried."""

    def __init__(
        self,
        message: str,
        node_name: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, "NODE_OFFLINE", context)
        self.node_name = node_name


class ConfigurationError(PollEnvironmentError):
    """Exception for configuration related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "CONFIGURATION_ERROR", context)


class SnapshotError(PollEnvironmentError):
    """Exception for snapshots that do not describe a consistent model."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message, "SNAPSHOT_ERROR", context)
