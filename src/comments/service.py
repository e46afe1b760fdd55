"""Comment submission service.

Writes reader comments to the content store as unapproved ``comment``
documents that reference their post. Approval happens in the store.
"""

from typing import Any

import structlog

from src.content.client import ContentStore, ContentStoreError

from .schemas import CreateCommentRequest


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(
        self, message: str, code: str = "comment_error", details: Any = None
    ) -> None:
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class CommentSubmissionError(CommentError):
    """The content store rejected or failed the write."""

    def __init__(self, error: ContentStoreError) -> None:
        super().__init__(error.message, error.code, error.to_dict())


# ==============================================================================
# Comment Service
# ==============================================================================


def build_comment_document(request: CreateCommentRequest) -> dict[str, Any]:
    """Build the store document for a submitted comment.

    The approval flag is left unset so the store default (unapproved)
    applies.
    """
    return {
        "_type": "comment",
        "post": {
            "_type": "reference",
            "_ref": request.post_id,
        },
        "name": request.name,
        "email": request.email,
        "comment": request.comment,
    }


class CommentService:
    """Service for comment submission."""

    def __init__(self, store: ContentStore) -> None:
        """Initialize with a content store."""
        self.store = store

    async def submit(self, request: CreateCommentRequest) -> dict[str, Any]:
        """Create an unapproved comment for a post.

        Args:
            request: Validated submission.

        Returns:
            The created comment document.

        Raises:
            CommentSubmissionError: If the write fails.
        """
        document = build_comment_document(request)

        try:
            created = await self.store.create(document)
        except ContentStoreError as e:
            logger.error(
                "comment_submission_failed",
                post_id=request.post_id,
                error=e.message,
                error_code=e.code,
            )
            raise CommentSubmissionError(e) from e

        logger.info(
            "comment_submitted",
            post_id=request.post_id,
            comment_id=created.get("_id"),
        )
        return created
