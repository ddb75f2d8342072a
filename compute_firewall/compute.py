"""Compute Engine client scoped to one project.

Owns the HTTP client and acts as the parent of every resource handle it
hands out (firewalls, operations).

Example:
    from compute_firewall import Compute

    async with Compute.from_config() as compute:
        result = await compute.create_firewall(
            "tcp-3000",
            {"protocols": {"tcp": [3000]}, "ranges": ["0.0.0.0/0"]},
        )
        await result.unwrap().wait()

        for fw in await compute.get_firewalls(filter="network eq .*default"):
            print(fw.name, fw.metadata.get("sourceRanges"))
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from compute_firewall.config import ComputeConfig, resolve_project
from compute_firewall.firewall import DEFAULT_NETWORK, FIREWALLS_BASE_URL, FirewallResource
from compute_firewall.infra.http import GoogleAuth, HttpClient, HttpError
from compute_firewall.observability.logger import logger
from compute_firewall.operation import Operation, operation_from_response
from compute_firewall.result import Callback, Err, Ok, OperationResult, notify

log = logger.bind(component="compute")


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _network_path(network: str | None) -> str:
    if not network:
        return DEFAULT_NETWORK
    if "/" in network:
        return network
    return f"global/networks/{network}"


def build_firewall_body(name: str, config: dict[str, Any]) -> dict[str, Any]:
    """Translate shorthand firewall config into a Compute API Firewall body.

    ``protocols`` maps a protocol to its ports: a port or list of ports,
    ``True`` for every port, ``False``/empty to skip the protocol.
    ``ranges`` and ``tags`` become ``sourceRanges`` and ``sourceTags``.
    """
    body = {k: v for k, v in config.items() if k not in ("protocols", "ranges", "tags")}
    body["name"] = name
    body["network"] = _network_path(config.get("network"))

    if (protocols := config.get("protocols")) is not None:
        allowed = _as_list(body.get("allowed"))
        for protocol, ports in protocols.items():
            match ports:
                case True:
                    allowed.append({"IPProtocol": protocol})
                case False | None | [] | ():
                    continue
                case _:
                    allowed.append({
                        "IPProtocol": protocol,
                        "ports": [str(p) for p in _as_list(ports)],
                    })
        body["allowed"] = allowed

    if (ranges := config.get("ranges")) is not None:
        body["sourceRanges"] = _as_list(ranges)

    if (tags := config.get("tags")) is not None:
        body["sourceTags"] = _as_list(tags)

    return body


class Compute:
    """Project-scoped Compute Engine client.

    Args:
        project_id: GCP project every resource path is built under.
        http: Authenticated JSON client rooted at the Compute API endpoint.
        poll_interval: Default delay between operation polls.
        operation_timeout: Default deadline for ``Operation.wait``.
    """

    def __init__(
        self,
        project_id: str,
        http: HttpClient,
        *,
        poll_interval: float = 2.0,
        operation_timeout: float = 300.0,
    ) -> None:
        self._project_id = project_id
        self._http = http
        self.poll_interval = poll_interval
        self.operation_timeout = operation_timeout

    @classmethod
    def from_config(cls, config: ComputeConfig | None = None) -> Compute:
        """Build a client authenticated with Application Default Credentials."""
        config = config or ComputeConfig()
        project = resolve_project(config.project)
        log.info("Resolved GCP project: {project}", project=project)
        http = HttpClient(
            config.api_endpoint,
            GoogleAuth.default(config.scopes),
            timeout=config.timeout,
        )
        return cls(
            project,
            http,
            poll_interval=config.poll_interval,
            operation_timeout=config.operation_timeout,
        )

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def http(self) -> HttpClient:
        return self._http

    # ─── Handles ─────────────────────────────────────────────────────

    def operation(self, name: str) -> Operation:
        return Operation(self, name)

    def firewall(self, name: str, metadata: dict[str, Any] | None = None) -> FirewallResource:
        return FirewallResource(self, name, metadata)

    # ─── Firewalls ───────────────────────────────────────────────────

    @property
    def _firewalls_path(self) -> str:
        return f"/projects/{self._project_id}{FIREWALLS_BASE_URL}"

    async def create_firewall(
        self,
        name: str,
        config: dict[str, Any],
        callback: Callback | None = None,
    ) -> OperationResult:
        """Insert a firewall rule.

        On success the result carries the insert operation and, as
        ``resource``, a handle for the new rule.
        """
        body = build_firewall_body(name, config)
        log.debug("Creating firewall {name}", name=name)
        try:
            raw = await self._http.request("POST", self._firewalls_path, json=body)
        except HttpError as e:
            return notify(Err(e, e.response), callback)

        firewall = self.firewall(name, body)
        operation = operation_from_response(self, raw)
        if operation is not None:
            log.info("Firewall {name} insert accepted, operation={op}", name=name, op=raw["name"])
        return notify(Ok(operation, raw, resource=firewall), callback)

    async def iter_firewalls(
        self,
        *,
        filter: str | None = None,  # noqa: A002
        max_results: int | None = None,
    ) -> AsyncIterator[FirewallResource]:
        """Yield every firewall rule in the project, following page tokens."""
        params: dict[str, Any] = {}
        if filter:
            params["filter"] = filter
        if max_results is not None:
            params["maxResults"] = max_results

        while True:
            page = await self._http.request("GET", self._firewalls_path, params=params) or {}
            for item in page.get("items", []):
                yield self.firewall(item["name"], item)
            if not (token := page.get("nextPageToken")):
                return
            params = {**params, "pageToken": token}

    async def get_firewalls(
        self,
        *,
        filter: str | None = None,  # noqa: A002
        max_results: int | None = None,
    ) -> list[FirewallResource]:
        return [fw async for fw in self.iter_firewalls(filter=filter, max_results=max_results)]

    # ─── Lifecycle ───────────────────────────────────────────────────

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> Compute:
        await self._http.__aenter__()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
