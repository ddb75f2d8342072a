"""Firewall rule handle.

A ``FirewallResource`` is a cheap, local reference to one named firewall
rule in a project. Constructing it makes no request; every method issues
its own call through the composed ``RestResource``.

Mutations (``delete``, ``set_metadata``, ``create``) never raise request
failures. They return an ``Ok``/``Err`` result and, when a callback is
given, also call it once with ``(error, operation, raw_response)``::

    firewall = compute.firewall("tcp-3000")

    err, operation, raw = await firewall.delete()
    if err is None:
        await operation.wait()

    await firewall.set_metadata({"priority": 900}, callback=on_done)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from compute_firewall.core.exceptions import ConfigurationError
from compute_firewall.infra.http import HttpError
from compute_firewall.observability.logger import logger
from compute_firewall.operation import operation_from_response
from compute_firewall.result import Callback, Err, Ok, OperationResult, notify
from compute_firewall.service import RestResource

if TYPE_CHECKING:
    from compute_firewall.compute import Compute

DEFAULT_NETWORK = "global/networks/default"
FIREWALLS_BASE_URL = "/global/firewalls"


def _validate_compute(compute: object) -> None:
    if compute is None:
        raise ConfigurationError("A compute client is required to build a firewall handle")
    if not isinstance(getattr(compute, "project_id", None), str):
        raise ConfigurationError(f"{type(compute).__name__} has no string project_id")
    if not callable(getattr(compute, "operation", None)):
        raise ConfigurationError(f"{type(compute).__name__} has no operation() factory")
    if not callable(getattr(getattr(compute, "http", None), "request", None)):
        raise ConfigurationError(f"{type(compute).__name__} has no http client with request()")


class FirewallResource:
    """One named firewall rule, addressed as ``global/firewalls/{name}``.

    Args:
        compute: Owning client; must expose ``project_id``, ``operation(name)``
            and ``http.request``.
        name: Firewall rule name, unique within the project.
        metadata: Known rule fields. Merged over the default network.

    Raises:
        ConfigurationError: ``compute`` is not a usable client.
    """

    def __init__(
        self,
        compute: Compute,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        _validate_compute(compute)
        self.compute = compute
        self.name = name
        self.metadata: dict[str, Any] = {"network": DEFAULT_NETWORK, **(metadata or {})}
        self._resource = RestResource(
            parent=compute,
            base_url=FIREWALLS_BASE_URL,
            id=name,
            create_fn=getattr(compute, "create_firewall", None),
        )
        self._log = logger.bind(component="firewall", name=name)
        self._log.trace("Firewall handle created")

    def __repr__(self) -> str:
        return f"FirewallResource(name={self.name!r}, network={self.metadata.get('network')!r})"

    @property
    def uri(self) -> str:
        return self._resource.uri

    def _to_operation(self, raw: Any) -> Ok:
        operation = operation_from_response(self.compute, raw)
        if operation is not None:
            self._log.info("Request accepted, operation={op}", op=raw["name"])
        return Ok(operation, raw)

    # ─── Mutations ───────────────────────────────────────────────────

    async def create(
        self,
        config: dict[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> OperationResult:
        """Create this rule remotely from ``config`` (see ``Compute.create_firewall``)."""
        result = await self._resource.create(config or {}, callback=callback)
        if isinstance(result, Ok) and result.resource is not None:
            self.metadata = dict(result.resource.metadata)
        return result

    async def delete(self, callback: Callback | None = None) -> OperationResult:
        try:
            raw = await self._resource.delete()
        except HttpError as e:
            return notify(Err(e, e.response), callback)
        return notify(self._to_operation(raw), callback)

    async def set_metadata(
        self,
        metadata: dict[str, Any],
        callback: Callback | None = None,
    ) -> OperationResult:
        """Replace the rule's fields with the local metadata merged with ``metadata``.

        The PATCH body is the whole merged object, not just the changed
        fields. ``self.metadata`` is left untouched.
        """
        body = {**self.metadata, **metadata, "name": self.name}
        try:
            raw = await self._resource.request("PATCH", "", json=body)
        except HttpError as e:
            return notify(Err(e, e.response), callback)
        return notify(self._to_operation(raw), callback)

    # ─── Reads ───────────────────────────────────────────────────────

    async def get_metadata(self) -> dict[str, Any]:
        """Fetch the rule and store the response in ``metadata``."""
        self.metadata = await self._resource.get_metadata() or {}
        return self.metadata

    async def exists(self) -> bool:
        return await self._resource.exists()

    async def get(
        self,
        auto_create: bool = False,
        config: dict[str, Any] | None = None,
    ) -> FirewallResource:
        """Load metadata and return ``self``.

        With ``auto_create``, a missing rule is created from ``config``
        and waited on before loading.
        """
        try:
            await self.get_metadata()
        except HttpError as e:
            if e.status != 404 or not auto_create:
                raise
            self._log.debug("Firewall missing, creating it")
            operation = (await self.create(config)).unwrap()
            if operation is not None:
                await operation.wait()
            await self.get_metadata()
        return self
