"""Pydantic models for the remote resources the pipeline reads and writes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class WordPressBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RenderedText(WordPressBaseModel):
    rendered: str | None = None
    raw: str | None = None

    @property
    def text(self) -> str:
        return self.rendered or self.raw or ""


def _coerce_rendered(value: object) -> object:
    if value is None:
        return {}
    if isinstance(value, str):
        return {"rendered": value}
    return value


class RemoteResource(WordPressBaseModel):
    """A post (or page) as returned by the collection endpoints."""

    id: int
    title: RenderedText = Field(default_factory=RenderedText)
    status: str | None = None
    slug: str | None = None
    featured_media: int | None = None
    categories: list[int] = Field(default_factory=list)
    tags: list[int] = Field(default_factory=list)

    _coerce_title = field_validator("title", mode="before")(_coerce_rendered)

    @property
    def title_text(self) -> str:
        return self.title.text


class RemoteTerm(WordPressBaseModel):
    id: int
    name: str
    slug: str | None = None
    taxonomy: str | None = None


class RemoteMedia(WordPressBaseModel):
    id: int
    source_url: str | None = None
    mime_type: str | None = None


class ErrorResponse(WordPressBaseModel):
    code: str | None = None
    message: str | None = None
    data: object | None = None


class ResourceDraft(WordPressBaseModel):
    """Write payload for creating or updating a post.

    Only fields that are set end up in the request body; SEO keys travel as
    extra top-level fields.
    """

    model_config = ConfigDict(extra="allow")

    title: str
    content: str
    status: str
    slug: str | None = None
    excerpt: str | None = None
    categories: list[int] | None = None
    tags: list[int] | None = None
    featured_media: int | None = None
    acf: dict[str, object] | None = None

    def to_body(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


RESOURCE_LIST = TypeAdapter(list[RemoteResource])
TERM_LIST = TypeAdapter(list[RemoteTerm])
