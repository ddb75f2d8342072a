from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

PROJECT_ID = "project-id"


@dataclass(frozen=True, slots=True)
class Call:
    method: str
    path: str
    json: Any = None
    params: Any = None


class FakeHttp:
    """Records requests; ``handler`` decides the response (an Exception is raised)."""

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.handler: Callable[[Call], Any] = lambda _: None
        self.closed = False

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Any = None,
    ) -> Any:
        call = Call(method, path, json, params)
        self.calls.append(call)
        result = self.handler(call)
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> FakeHttp:
        return self
