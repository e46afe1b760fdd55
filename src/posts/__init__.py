"""Blog posts as read from the content store."""

from .models import Author, Comment, ImageRef, Post, PostPath, Reference, Slug
from .service import PostService


__all__ = [
    "Author",
    "Comment",
    "ImageRef",
    "Post",
    "PostPath",
    "PostService",
    "Reference",
    "Slug",
]
