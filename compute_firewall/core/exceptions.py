"""Exception hierarchy for compute-firewall.

Request failures are not part of this hierarchy: they surface as
``compute_firewall.infra.http.HttpError`` exactly as the transport raised
them. The classes below cover what this library itself decides is wrong.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from compute_firewall.operation import Operation


class ComputeFirewallError(Exception):
    """Base exception for all compute-firewall errors."""


class ConfigurationError(ComputeFirewallError):
    """Raised for invalid configuration or a malformed compute context."""


class OperationError(ComputeFirewallError):
    """Raised when a remote operation finishes with an error payload."""

    def __init__(self, operation: Operation, errors: list[dict[str, Any]]) -> None:
        self.operation = operation
        self.errors = errors
        messages = "; ".join(e.get("message", e.get("code", "unknown")) for e in errors)
        super().__init__(f"Operation {operation.name} failed: {messages}")


class OperationTimeoutError(ComputeFirewallError):
    """Raised when an operation does not reach DONE before the deadline."""

    def __init__(self, operation: Operation, timeout: float) -> None:
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"Operation {operation.name} not done after {timeout}s")
