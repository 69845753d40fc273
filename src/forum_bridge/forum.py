"""Discord forum client: repository tags and thread lifecycle."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from .errors import DecodeError, TagNotFoundError
from .models import (
    ArchiveThreadRequest,
    CreateThreadRequest,
    CreateThreadResponse,
    ForumChannelResponse,
    ForumTag,
    ThreadMessage,
    UpdateTagsRequest,
)
from .transport import DEFAULT_TIMEOUT, DISCORD_API_BASE, DiscordTransport

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ForumClient:
    """Client session bound to a single forum channel.

    Holds no state besides the transport's connection pool, so one instance
    can be shared by independent callers. Nothing is retried and nothing is
    serialized internally.
    """

    forum_channel_id: str
    transport: DiscordTransport

    @classmethod
    def create(
        cls,
        token: str,
        forum_channel_id: str,
        *,
        base_url: str = DISCORD_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> ForumClient:
        transport = DiscordTransport(token=token, base_url=base_url, timeout=timeout)
        return cls(forum_channel_id=forum_channel_id, transport=transport)

    @property
    def _channel_path(self) -> str:
        return f"/channels/{self.forum_channel_id}"

    def get_or_create_repo_tag(self, repo_name: str) -> str:
        """Return the id of the forum tag named ``repo_name``, creating it if absent.

        The tag catalog lives on the channel itself, so creation is a
        read-modify-write: fetch the channel, append the tag, PATCH the whole
        list back. Two concurrent first-time calls for the same repository can
        both append, leaving a duplicate or dropping one addition. Callers that
        need exactly one tag per repository must serialize calls per
        repository; later calls reuse whichever tag survived.
        """
        channel = self.transport.decode(
            self.transport.call("GET", self._channel_path), ForumChannelResponse
        )
        existing = channel.find_tag(repo_name)
        if existing is not None:
            if not existing.id:
                raise DecodeError(f"forum tag {repo_name!r} has no id")
            logger.debug("forum_tag_found", repo=repo_name, tag_id=existing.id)
            return existing.id

        tags = [*channel.available_tags, ForumTag(name=repo_name)]
        response = self.transport.call(
            "PATCH", self._channel_path, UpdateTagsRequest(available_tags=tags)
        )
        updated = self.transport.decode(response, ForumChannelResponse)

        created = updated.find_tag(repo_name)
        if created is None or not created.id:
            logger.error(
                "forum_tag_missing_after_update",
                repo=repo_name,
                tag_count=len(updated.available_tags),
            )
            raise TagNotFoundError(repo_name)
        logger.info("forum_tag_created", repo=repo_name, tag_id=created.id)
        return created.id

    def create_thread(self, title: str, message: ThreadMessage, *tag_ids: str) -> str:
        """Open a new forum thread and return its id."""
        body = CreateThreadRequest(name=title, message=message, applied_tags=list(tag_ids))
        response = self.transport.call(
            "POST", f"{self._channel_path}/threads", body, expect=(201,)
        )
        thread = self.transport.decode(response, CreateThreadResponse)
        logger.info("forum_thread_created", thread_id=thread.id, title=title, tags=list(tag_ids))
        return thread.id

    def post_message(self, thread_id: str, message: ThreadMessage) -> None:
        # Discord answers 200 or 201 depending on the message shape
        self.transport.call(
            "POST", f"/channels/{thread_id}/messages", message, expect=(200, 201)
        )
        logger.info("forum_message_posted", thread_id=thread_id)

    def archive_thread(self, thread_id: str) -> None:
        """Archive a thread. There is no way back through this client."""
        self.transport.call(
            "PATCH", f"/channels/{thread_id}", ArchiveThreadRequest(archived=True)
        )
        logger.info("forum_thread_archived", thread_id=thread_id)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> ForumClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["ForumClient"]
