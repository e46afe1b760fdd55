"""Content store access: HTTP client, queries and image URLs."""

from src.content.client import (
    ContentStore,
    ContentStoreError,
    ContentStoreNotConfiguredError,
    ContentStoreRequestError,
    ContentStoreTimeoutError,
    ContentStoreUnavailableError,
    SanityClient,
)
from src.content.images import ImageUrlBuilder, InvalidImageReferenceError
from src.content.queries import POST_BY_SLUG_QUERY, POST_PATHS_QUERY


__all__ = [
    "POST_BY_SLUG_QUERY",
    "POST_PATHS_QUERY",
    "ContentStore",
    "ContentStoreError",
    "ContentStoreNotConfiguredError",
    "ContentStoreRequestError",
    "ContentStoreTimeoutError",
    "ContentStoreUnavailableError",
    "ImageUrlBuilder",
    "InvalidImageReferenceError",
    "SanityClient",
]
