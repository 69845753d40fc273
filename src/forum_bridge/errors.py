"""Error taxonomy for the Discord forum client."""

from __future__ import annotations


class ForumBridgeError(Exception):
    """Base class for every error raised by the client."""


class RequestBuildError(ForumBridgeError):
    """The request could not be constructed (malformed URL)."""


class TransportError(ForumBridgeError):
    """The request could not be sent or the response not received."""


class EncodeError(ForumBridgeError):
    """A request body could not be serialized to JSON."""


class DecodeError(ForumBridgeError):
    """A response body was not JSON or did not have the expected shape."""


class DiscordAPIError(ForumBridgeError):
    """Discord answered with an unexpected status code.

    The raw response body is kept verbatim for operator diagnosis.
    """

    def __init__(self, status_code: int, body: str, *, method: str = "", path: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.method = method
        self.path = path
        super().__init__(f"discord API error (status {status_code}): {body}")


class TagNotFoundError(ForumBridgeError):
    """The channel update succeeded but the new tag is absent from the response."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"tag created but not found in response: {name!r}")


__all__ = [
    "ForumBridgeError",
    "RequestBuildError",
    "TransportError",
    "EncodeError",
    "DecodeError",
    "DiscordAPIError",
    "TagNotFoundError",
]
