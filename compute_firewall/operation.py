"""Handle for a global Compute Engine operation.

Mutations (insert, patch, delete) are accepted by the API immediately and
finish asynchronously; the response body is an Operation resource. This
handle carries that body in ``metadata`` and can poll it until DONE.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_delay,
    wait_fixed,
)

from compute_firewall.core.exceptions import OperationError, OperationTimeoutError
from compute_firewall.observability.logger import logger
from compute_firewall.service import RestResource

if TYPE_CHECKING:
    from compute_firewall.compute import Compute


class OperationPendingError(Exception):
    """Operation not DONE yet - poll again."""


class Operation:
    def __init__(self, compute: Compute, name: str) -> None:
        self.compute = compute
        self.name = name
        self.metadata: dict[str, Any] = {}
        self._resource = RestResource(parent=compute, base_url="/global/operations", id=name)
        self._log = logger.bind(component="operation", name=name)

    def __repr__(self) -> str:
        return f"Operation(name={self.name!r}, status={self.status!r})"

    @property
    def status(self) -> str | None:
        return self.metadata.get("status")

    @property
    def done(self) -> bool:
        return self.status == "DONE"

    @property
    def errors(self) -> list[dict[str, Any]]:
        return list(self.metadata.get("error", {}).get("errors", []))

    async def get_metadata(self) -> dict[str, Any]:
        """Fetch the operation resource and store it in ``metadata``."""
        self.metadata = await self._resource.get_metadata() or {}
        return self.metadata

    async def _poll(self) -> None:
        if not self.done:
            await self.get_metadata()
        if not self.done:
            self._log.trace("Operation status {status}", status=self.status)
            raise OperationPendingError()

    async def wait(
        self,
        poll_interval: float | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Poll until the operation is DONE and return its final metadata.

        Args:
            poll_interval: Seconds between polls. Defaults to the compute
                client's ``poll_interval``.
            timeout: Deadline in seconds. Defaults to the compute client's
                ``operation_timeout``.

        Raises:
            OperationError: The operation finished with an error payload.
            OperationTimeoutError: The operation was not DONE in time.
            HttpError: Polling itself failed.
        """
        interval = self.compute.poll_interval if poll_interval is None else poll_interval
        deadline = self.compute.operation_timeout if timeout is None else timeout

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_delay(deadline),
                wait=wait_fixed(interval),
                retry=retry_if_exception_type(OperationPendingError),
            ):
                with attempt:
                    await self._poll()
        except RetryError as e:
            raise OperationTimeoutError(self, deadline) from e

        if errors := self.errors:
            self._log.error("Operation finished with errors: {errors}", errors=errors)
            raise OperationError(self, errors)

        self._log.debug("Operation done")
        return self.metadata


def operation_from_response(compute: Compute, raw: Any) -> Operation | None:
    """Build the operation handle for an accepted mutation's response body.

    Returns ``None`` when the body names no operation.
    """
    if not isinstance(raw, dict) or not (name := raw.get("name")):
        return None
    operation = compute.operation(name)
    operation.metadata = raw
    return operation
