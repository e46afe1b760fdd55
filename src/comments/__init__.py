"""Comment submission module.

Readers submit comments from post pages; they are stored unapproved and
only appear once a moderator approves them in the content store.

Note: Router is not exported here to avoid circular imports.
Import directly from src.comments.router when needed.
"""

from .schemas import CreateCommentRequest, ErrorResponse, MessageResponse
from .service import (
    CommentError,
    CommentService,
    CommentSubmissionError,
    build_comment_document,
)


__all__ = [
    "CommentError",
    "CommentService",
    "CommentSubmissionError",
    "CreateCommentRequest",
    "ErrorResponse",
    "MessageResponse",
    "build_comment_document",
]
