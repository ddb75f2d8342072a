"""Outcome of a mutating call: an operation handle or the request failure.

Both variants keep the three-field ``(error, operation, raw_response)``
shape that completion callbacks receive, so either style reads the same::

    match await firewall.delete():
        case Ok(operation=op):
            await op.wait()
        case Err(error=err, raw_response=raw):
            log.warning("delete failed: {err}", err=err)

    err, op, raw = await firewall.set_metadata({"priority": 900})
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from compute_firewall.operation import Operation

Callback: TypeAlias = Callable[[Exception | None, "Operation | None", Any], object]


@dataclass(frozen=True, slots=True)
class Ok:
    operation: Operation | None
    raw_response: Any
    resource: Any = None

    @property
    def error(self) -> None:
        return None

    def unpack(self) -> tuple[None, Operation | None, Any]:
        return None, self.operation, self.raw_response

    def unwrap(self) -> Operation | None:
        return self.operation

    def __iter__(self) -> Iterator[Any]:
        return iter(self.unpack())


@dataclass(frozen=True, slots=True)
class Err:
    error: Exception
    raw_response: Any = None

    @property
    def operation(self) -> None:
        return None

    def unpack(self) -> tuple[Exception, None, Any]:
        return self.error, None, self.raw_response

    def unwrap(self) -> Operation | None:
        raise self.error

    def __iter__(self) -> Iterator[Any]:
        return iter(self.unpack())


OperationResult: TypeAlias = Ok | Err


def notify(result: OperationResult, callback: Callback | None) -> OperationResult:
    """Hand ``result`` to ``callback`` (if any) and return it unchanged."""
    if callback is not None:
        callback(*result.unpack())
    return result
