"""Generic REST resource primitive.

A ``RestResource`` knows where one remote resource lives and how to issue
requests against it. Typed resources (firewalls, operations) hold one and
call into it explicitly.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, runtime_checkable

from compute_firewall.core.exceptions import ConfigurationError
from compute_firewall.infra.http import HttpClient, HttpError

CreateFn: TypeAlias = Callable[..., Awaitable[Any]]


@runtime_checkable
class ServiceParent(Protocol):
    """What a resource needs from its owning client."""

    @property
    def project_id(self) -> str: ...

    @property
    def http(self) -> HttpClient: ...


@dataclass(frozen=True, slots=True)
class RestResource:
    """Location and primitive operations of one project-scoped resource.

    Attributes:
        parent: Owning client; supplies the project and the HTTP client.
        base_url: Collection path relative to the project, e.g. "/global/firewalls".
        id: Resource name within the collection.
        create_fn: Coroutine function creating the resource, called as
            ``create(id, config, **kwargs)``.
    """

    parent: ServiceParent
    base_url: str
    id: str
    create_fn: CreateFn | None = None

    @property
    def collection_uri(self) -> str:
        return f"/projects/{self.parent.project_id}{self.base_url}"

    @property
    def uri(self) -> str:
        return f"{self.collection_uri}/{self.id}"

    def _path(self, uri: str) -> str:
        if not uri:
            return self.uri
        if uri.startswith("/"):
            return f"/projects/{self.parent.project_id}{uri}"
        return f"{self.uri}/{uri}"

    async def request(
        self,
        method: str,
        uri: str = "",
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send ``method`` to this resource (``uri`` is relative to it) and return the raw body."""
        return await self.parent.http.request(method, self._path(uri), json=json, params=params)

    async def create(self, config: dict[str, Any], **kwargs: Any) -> Any:
        if self.create_fn is None:
            raise ConfigurationError(f"{self.base_url} resources cannot be created from a handle")
        return await self.create_fn(self.id, config, **kwargs)

    async def delete(self) -> Any:
        return await self.request("DELETE")

    async def get_metadata(self) -> Any:
        return await self.request("GET")

    async def exists(self) -> bool:
        try:
            await self.get_metadata()
        except HttpError as e:
            if e.status == 404:
                return False
            raise
        return True
