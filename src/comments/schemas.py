"""Pydantic schemas for comment submission."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateCommentRequest(BaseModel):
    """Comment submitted from a post page.

    ``_id`` is the id of the post being commented on.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    post_id: str = Field(..., alias="_id", min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=1, max_length=320)
    comment: str = Field(..., min_length=1, max_length=10000)

    @field_validator("post_id", "name", "email", "comment", mode="before")
    @classmethod
    def strip_whitespace(cls, v: Any) -> Any:
        """Strip surrounding whitespace so blank values count as missing."""
        if isinstance(v, str):
            return v.strip()
        return v


class MessageResponse(BaseModel):
    """Successful submission."""

    message: str


class ErrorResponse(BaseModel):
    """Failed submission with the underlying error."""

    message: str
    error: dict[str, Any]
