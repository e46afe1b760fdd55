"""Shared fixtures.

The environment is set before any ``src`` import so the cached settings
and the module-level app pick it up.
"""

import os
import tempfile
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4


os.environ["ENVIRONMENT"] = "testing"
os.environ["SANITY_PROJECT_ID"] = "testproj"
os.environ["SANITY_DATASET"] = "production"
os.environ["SANITY_API_TOKEN"] = "sk-test-token"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="inkwell-logs-")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.content.client import ContentStoreRequestError  # noqa: E402
from src.content.queries import POST_BY_SLUG_QUERY, POST_PATHS_QUERY  # noqa: E402


class FakeContentStore:
    """In-memory content store that answers the post page queries.

    Documents are kept as store-shaped dicts. ``fetch`` evaluates the two
    known queries the way the real store would; ``create`` rejects comments
    that reference a post that does not exist.
    """

    def __init__(self, documents: list[dict[str, Any]] | None = None) -> None:
        self.documents: list[dict[str, Any]] = list(documents or [])
        self.fetch_calls: list[tuple[str, dict[str, Any] | None]] = []
        self.created: list[dict[str, Any]] = []
        self.fail_writes_with: Exception | None = None

    def of_type(self, doc_type: str) -> list[dict[str, Any]]:
        return [d for d in self.documents if d.get("_type") == doc_type]

    def by_id(self, doc_id: str) -> dict[str, Any] | None:
        return next((d for d in self.documents if d.get("_id") == doc_id), None)

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        self.fetch_calls.append((query, params))

        if query == POST_PATHS_QUERY:
            return [
                {"_id": p["_id"], "slug": {"current": p["slug"]["current"]}}
                if p.get("slug")
                else {"_id": p["_id"], "slug": None}
                for p in self.of_type("post")
            ]

        if query == POST_BY_SLUG_QUERY:
            slug = (params or {})["slug"]
            post = next(
                (
                    p
                    for p in self.of_type("post")
                    if (p.get("slug") or {}).get("current") == slug
                ),
                None,
            )
            if post is None:
                return None

            author = self.by_id((post.get("author") or {}).get("_ref", ""))
            comments = [
                c
                for c in self.of_type("comment")
                if c["post"]["_ref"] == post["_id"] and c.get("approved") is True
            ]
            return {
                "_id": post["_id"],
                "_createdAt": post.get("_createdAt"),
                "title": post.get("title"),
                "author": {"name": author.get("name"), "image": author.get("image")}
                if author
                else None,
                "comments": comments,
                "description": post.get("description"),
                "mainImage": post.get("mainImage"),
                "slug": post["slug"],
                "body": post.get("body", []),
            }

        msg = f"Unexpected query: {query}"
        raise AssertionError(msg)

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        if self.fail_writes_with is not None:
            raise self.fail_writes_with

        ref = (document.get("post") or {}).get("_ref")
        target = self.by_id(ref) if ref else None
        if target is None or target.get("_type") != "post":
            raise ContentStoreRequestError(
                409,
                {
                    "error": {
                        "description": f"Document references non-existent document {ref!r}",
                        "type": "mutationError",
                    }
                },
            )

        created = {
            **document,
            "_id": uuid4().hex,
            "_createdAt": datetime.now(UTC).isoformat(),
        }
        self.documents.append(created)
        self.created.append(created)
        return created


def make_post(
    post_id: str,
    slug: str,
    *,
    title: str = "Hello World",
    author_id: str = "author-1",
    body: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {
        "_id": post_id,
        "_type": "post",
        "_createdAt": "2026-10-19T15:04:05Z",
        "title": title,
        "description": f"About {title}",
        "slug": {"_type": "slug", "current": slug},
        "author": {"_type": "reference", "_ref": author_id},
        "mainImage": {
            "_type": "image",
            "asset": {
                "_type": "reference",
                "_ref": "image-Tb9Ew8CXIwaY6R1kjMvI0uRR-2000x3000-jpg",
            },
        },
        "body": body or [],
    }


def make_comment(
    comment_id: str, post_id: str, *, approved: bool, name: str = "Reader"
) -> dict[str, Any]:
    return {
        "_id": comment_id,
        "_type": "comment",
        "post": {"_type": "reference", "_ref": post_id},
        "name": name,
        "email": f"{comment_id}@example.com",
        "comment": f"Comment {comment_id}",
        "approved": approved,
    }


@pytest.fixture
def store() -> FakeContentStore:
    """Store with two posts, one author and a mix of comments."""
    return FakeContentStore(
        [
            {
                "_id": "author-1",
                "_type": "author",
                "name": "Ada Writer",
                "image": {
                    "_type": "image",
                    "asset": {
                        "_type": "reference",
                        "_ref": "image-a1b2c3-100x100-png",
                    },
                },
            },
            make_post(
                "post1",
                "hello-world",
                body=[
                    {
                        "_type": "block",
                        "_key": "b1",
                        "style": "normal",
                        "markDefs": [],
                        "children": [{"_type": "span", "text": "First paragraph."}],
                    }
                ],
            ),
            make_post("post2", "second-post", title="Second Post"),
            make_comment("c1", "post1", approved=True, name="Alice"),
            make_comment("c2", "post1", approved=False, name="Mallory"),
            make_comment("c3", "post2", approved=True, name="Bob"),
        ]
    )


@pytest.fixture
def client(store: FakeContentStore) -> TestClient:
    """Test client wired to the fake content store (lifespan not run)."""
    from src.config import get_settings
    from src.main import app, init_services

    init_services(app, store, get_settings())
    return TestClient(app)
