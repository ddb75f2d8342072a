from __future__ import annotations

import asyncio
import json as jsonlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import aiohttp
from google.auth import exceptions as auth_exceptions

from compute_firewall.observability.logger import logger

if TYPE_CHECKING:
    from google.auth.credentials import Credentials

# ─── Errors ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class HttpError(Exception):
    """A failed request. ``status`` is 0 when no HTTP response was received."""

    status: int
    body: str
    response: Any = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.body}"


def _decode_error_body(body: str) -> Any:
    try:
        return jsonlib.loads(body)
    except ValueError:
        return None


# ─── Auth ────────────────────────────────────────────────────────────


@runtime_checkable
class Auth(Protocol):
    async def headers(self) -> dict[str, str]: ...
    async def on_401(self) -> None: ...


class BearerAuth:
    def __init__(self, token: str) -> None:
        self._token = token

    async def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }

    async def on_401(self) -> None:
        pass


class GoogleAuth:
    """Bearer auth backed by google-auth credentials.

    Token minting is blocking in google-auth, so refreshes run in a
    worker thread. A 401 forces a refresh on the next request.
    """

    def __init__(self, credentials: Credentials) -> None:
        self._credentials = credentials
        self._stale = False
        self._lock = asyncio.Lock()

    @classmethod
    def default(cls, scopes: tuple[str, ...]) -> GoogleAuth:
        import google.auth

        credentials, _ = google.auth.default(scopes=list(scopes))
        return cls(credentials)

    def _refresh(self) -> None:
        from google.auth.transport.requests import Request

        self._credentials.refresh(Request())

    async def headers(self) -> dict[str, str]:
        async with self._lock:
            if self._stale or not self._credentials.valid:
                logger.bind(component="http").debug("Refreshing Google credentials")
                await asyncio.to_thread(self._refresh)
                self._stale = False
        return {
            "Authorization": f"Bearer {self._credentials.token}",
            "Accept": "application/json",
        }

    async def on_401(self) -> None:
        async with self._lock:
            self._stale = True


# ─── Client ──────────────────────────────────────────────────────────


class HttpClient:
    def __init__(
        self,
        base_url: str,
        auth: Auth | None = None,
        *,
        timeout: float = 30,
        default_headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth = auth
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._default_headers = default_headers or {}
        self._session: aiohttp.ClientSession | None = None
        self._log = logger.bind(component="http")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _build_headers(self) -> dict[str, str]:
        headers = dict(self._default_headers)
        if self._auth:
            headers.update(await self._auth.headers())
        return headers

    async def _send(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | list[Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        session = await self._ensure_session()
        self._log.debug("{method} {path}", method=method, path=path)

        try:
            headers = await self._build_headers()
            async with session.request(
                method, self._url(path), headers=headers, json=json, params=params
            ) as resp:
                if resp.status == 401 and self._auth:
                    self._log.debug("401 received, refreshing auth and resending")
                    await self._auth.on_401()
                    retry_headers = await self._build_headers()
                    async with session.request(
                        method,
                        self._url(path),
                        headers=retry_headers,
                        json=json,
                        params=params,
                    ) as retry_resp:
                        return await self._parse(retry_resp)

                return await self._parse(resp)
        except aiohttp.ClientResponseError as e:
            raise HttpError(status=e.status, body=e.message) from e
        except aiohttp.ClientError as e:
            raise HttpError(status=0, body=str(e)) from e
        except TimeoutError as e:
            raise HttpError(status=0, body=f"{method} {path} timed out") from e
        except auth_exceptions.GoogleAuthError as e:
            self._log.warning("Credential refresh failed: {error}", error=str(e))
            raise HttpError(status=0, body=f"credential refresh failed: {e}") from e

    async def _parse(self, resp: aiohttp.ClientResponse) -> Any:
        if resp.status >= 400:
            body = await resp.text()
            self._log.warning(
                "HTTP {status} from {url}: {body}",
                status=resp.status, url=str(resp.url), body=body[:500],
            )
            raise HttpError(status=resp.status, body=body, response=_decode_error_body(body))
        body = await resp.read()
        if not body:
            return None
        try:
            return jsonlib.loads(body)
        except ValueError as e:
            text = body.decode(errors="replace")
            self._log.warning(
                "Undecodable HTTP {status} body from {url}: {body}",
                status=resp.status, url=str(resp.url), body=text[:500],
            )
            raise HttpError(status=resp.status, body=text) from e

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | list[Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (``None`` when empty)."""
        return await self._send(method, path, json=json, params=params)

    # ─── Lifecycle ───────────────────────────────────────────────────

    async def close(self) -> None:
        if self._session and not self._session.closed:
            self._log.debug("Closing HTTP session")
            await self._session.close()

    async def __aenter__(self) -> HttpClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
