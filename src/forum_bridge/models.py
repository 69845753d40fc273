"""Pydantic models for the Discord forum wire format."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for request bodies: unset and empty fields are left off the wire."""

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True, exclude_defaults=True)


class EmbedField(WireModel):
    name: str
    value: str
    inline: bool = False


class EmbedFooter(WireModel):
    text: str
    icon_url: str | None = None


class Embed(WireModel):
    title: str | None = None
    description: str | None = None
    url: str | None = None
    color: int | None = None
    fields: list[EmbedField] = Field(default_factory=list)
    timestamp: str | None = None  # ISO 8601
    footer: EmbedFooter | None = None


class ThreadMessage(WireModel):
    content: str | None = None
    embeds: list[Embed] = Field(default_factory=list)


class ForumTag(WireModel):
    # moderated / emoji_id / emoji_name survive a catalog rewrite untouched
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str


class CreateThreadRequest(WireModel):
    name: str
    message: ThreadMessage
    applied_tags: list[str] = Field(default_factory=list)


class UpdateTagsRequest(WireModel):
    available_tags: list[ForumTag]


class ArchiveThreadRequest(WireModel):
    archived: bool


class CreateThreadResponse(BaseModel):
    id: str
    name: str | None = None


class ForumChannelResponse(BaseModel):
    available_tags: list[ForumTag] = Field(default_factory=list)

    def find_tag(self, name: str) -> ForumTag | None:
        for tag in self.available_tags:
            if tag.name == name:
                return tag
        return None


__all__ = [
    "WireModel",
    "EmbedField",
    "EmbedFooter",
    "Embed",
    "ThreadMessage",
    "ForumTag",
    "CreateThreadRequest",
    "UpdateTagsRequest",
    "ArchiveThreadRequest",
    "CreateThreadResponse",
    "ForumChannelResponse",
]
