"""Pydantic models for documents read from the content store.

Store documents use underscore-prefixed system fields (``_id``,
``_createdAt``, ``_ref``, ``_type``); the models expose them under
plain names through aliases and ignore fields they do not know.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


# Editors can publish documents with empty fields; those render as ""
Text = Annotated[str, BeforeValidator(lambda value: "" if value is None else value)]


class StoreDocument(BaseModel):
    """Base for content store documents."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Reference(StoreDocument):
    """Reference to another document or asset."""

    ref: str = Field(alias="_ref")
    type: str = Field(default="reference", alias="_type")


class ImageRef(StoreDocument):
    """Image field: an asset reference plus optional alt text."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    asset: Reference | None = None
    alt: str | None = None


class Slug(StoreDocument):
    """URL slug."""

    current: str


class Author(StoreDocument):
    """Post author, resolved from the post's author reference."""

    name: Text = ""
    image: ImageRef | None = None


class Comment(StoreDocument):
    """Reader comment.

    ``approved`` is flipped by a moderator in the content store; only
    approved comments that reference a post are shown on it.
    """

    id: str = Field(alias="_id")
    post: Reference | None = None
    name: Text = ""
    email: str | None = None
    comment: Text = ""
    approved: bool = False
    created_at: datetime | None = Field(default=None, alias="_createdAt")

    def is_visible_on(self, post_id: str) -> bool:
        """Whether this comment may be displayed on the given post."""
        return self.approved and self.post is not None and self.post.ref == post_id


class Post(StoreDocument):
    """Blog post with its author and approved comments."""

    id: str = Field(alias="_id")
    created_at: datetime | None = Field(default=None, alias="_createdAt")
    title: Text = ""
    description: str | None = None
    slug: Slug
    main_image: ImageRef | None = Field(default=None, alias="mainImage")
    author: Author | None = None
    body: list[dict[str, Any]] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)


class PostPath(StoreDocument):
    """One entry of the slug enumeration."""

    id: str = Field(alias="_id")
    slug: Slug | None = None
