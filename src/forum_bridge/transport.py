"""Authenticated HTTP transport for the Discord REST API."""

from __future__ import annotations

import weakref
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, DiscordAPIError, EncodeError, RequestBuildError, TransportError
from .models import WireModel

logger = structlog.get_logger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"
DEFAULT_TIMEOUT = 10.0
USER_AGENT = "DiscordBot (forum-bridge, 0.1.0)"

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True, slots=True, weakref_slot=True)
class DiscordTransport:
    """Sends bot-authenticated JSON requests; never retries.

    The underlying ``httpx.Client`` pools connections and may be shared
    between threads.
    """

    token: str = field(repr=False)
    base_url: str = DISCORD_API_BASE
    timeout: float = DEFAULT_TIMEOUT
    _client: httpx.Client = field(init=False, repr=False, compare=False)
    _finalizer: weakref.finalize | None = field(init=False, repr=False, compare=False, default=None)

    def __post_init__(self) -> None:
        client = httpx.Client(timeout=self.timeout, headers=self._headers())
        object.__setattr__(self, "_client", client)
        object.__setattr__(self, "_finalizer", weakref.finalize(self, client.close))

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bot {self.token}",
            "User-Agent": USER_AGENT,
        }

    def request(self, method: str, path: str, body: WireModel | None = None) -> httpx.Response:
        """Send one request and return the raw response, whatever its status."""
        headers: dict[str, str] = {}
        content: str | None = None
        if body is not None:
            try:
                content = body.to_json()
            except PydanticSerializationError as e:
                raise EncodeError(f"failed to encode {type(body).__name__}: {e}") from e
            headers["Content-Type"] = "application/json"

        try:
            request = self._client.build_request(
                method, f"{self.base_url}{path}", content=content, headers=headers
            )
        except httpx.InvalidURL as e:
            raise RequestBuildError(f"failed to build {method} request for {path}: {e}") from e

        try:
            logger.info("discord_api_request", method=method, path=path)
            return self._client.send(request)
        except httpx.RequestError as e:
            logger.error("discord_api_connection_failed", method=method, path=path, error=str(e))
            raise TransportError(f"Discord API connection failed: {e}") from e

    def call(
        self,
        method: str,
        path: str,
        body: WireModel | None = None,
        *,
        expect: Collection[int] = (200,),
    ) -> httpx.Response:
        """Send a request and raise ``DiscordAPIError`` unless the status is expected."""
        response = self.request(method, path, body)
        if response.status_code not in expect:
            logger.error("discord_api_error", method=method, path=path, status=response.status_code)
            raise DiscordAPIError(response.status_code, response.text, method=method, path=path)
        logger.info(
            "discord_api_success",
            method=method,
            path=path,
            status=response.status_code,
            rate_limit_remaining=response.headers.get("X-RateLimit-Remaining"),
        )
        return response

    def decode(self, response: httpx.Response, model: type[M]) -> M:
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            logger.error("discord_api_decode_failed", model=model.__name__, error=str(e))
            raise DecodeError(f"failed to parse {model.__name__}: {e}") from e

    def close(self) -> None:
        if self._finalizer and self._finalizer.alive:
            self._finalizer.detach()
        self._client.close()

    def __enter__(self) -> DiscordTransport:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["DiscordTransport", "DISCORD_API_BASE", "DEFAULT_TIMEOUT"]
