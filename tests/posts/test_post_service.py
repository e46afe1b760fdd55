"""Tests for reading posts from the content store."""

from unittest.mock import AsyncMock

import pytest

from src.content.queries import POST_BY_SLUG_QUERY, POST_PATHS_QUERY
from src.posts.models import Comment, Post
from src.posts.service import PostService


class TestQueries:
    """The read query joins only approved comments of the post."""

    def test_comment_join_filters_on_post_and_approval(self):
        assert 'slug.current == $slug' in POST_BY_SLUG_QUERY
        assert "post._ref == ^._id" in POST_BY_SLUG_QUERY
        assert "approved == true" in POST_BY_SLUG_QUERY

    def test_paths_query_selects_slug(self):
        assert '_type == "post"' in POST_PATHS_QUERY
        assert "current" in POST_PATHS_QUERY


class TestGetPost:
    """Tests for PostService.get_post."""

    @pytest.mark.asyncio
    async def test_every_slug_has_only_its_approved_comments(self, store):
        """For each post, comments are approved and reference that post."""
        service = PostService(store)

        for slug in await service.list_slugs():
            post = await service.get_post(slug)

            assert post is not None
            for comment in post.comments:
                assert comment.approved is True
                assert comment.post is not None
                assert comment.post.ref == post.id

    @pytest.mark.asyncio
    async def test_post_is_fully_populated(self, store):
        post = await PostService(store).get_post("hello-world")

        assert isinstance(post, Post)
        assert post.id == "post1"
        assert post.title == "Hello World"
        assert post.author is not None
        assert post.author.name == "Ada Writer"
        assert [c.id for c in post.comments] == ["c1"]
        assert post.body[0]["style"] == "normal"
        assert post.main_image is not None

    @pytest.mark.asyncio
    async def test_unknown_slug_is_not_found(self, store):
        assert await PostService(store).get_post("does-not-exist") is None

    @pytest.mark.asyncio
    async def test_query_is_parameterized_by_slug(self, store):
        await PostService(store).get_post("hello-world")

        assert store.fetch_calls[-1] == (POST_BY_SLUG_QUERY, {"slug": "hello-world"})

    @pytest.mark.asyncio
    async def test_unapproved_comments_are_dropped_even_if_returned(self):
        """Comments the store should not have returned are filtered out."""
        fetch = AsyncMock(
            return_value={
                "_id": "post1",
                "_createdAt": "2026-10-19T15:04:05Z",
                "title": "T",
                "slug": {"current": "t"},
                "comments": [
                    {"_id": "ok", "post": {"_ref": "post1"}, "name": "A", "comment": "x", "approved": True},
                    {"_id": "pending", "post": {"_ref": "post1"}, "name": "B", "comment": "y"},
                    {"_id": "other", "post": {"_ref": "post2"}, "name": "C", "comment": "z", "approved": True},
                ],
            }
        )
        store = AsyncMock()
        store.fetch = fetch

        post = await PostService(store).get_post("t")

        assert [c.id for c in post.comments] == ["ok"]


class TestListPaths:
    """Tests for slug enumeration."""

    @pytest.mark.asyncio
    async def test_lists_every_slug(self, store):
        assert sorted(await PostService(store).list_slugs()) == [
            "hello-world",
            "second-post",
        ]

    @pytest.mark.asyncio
    async def test_posts_without_slug_are_skipped(self):
        store = AsyncMock()
        store.fetch.return_value = [
            {"_id": "a", "slug": {"current": "a"}},
            {"_id": "b", "slug": None},
        ]

        assert await PostService(store).list_slugs() == ["a"]


class TestCommentModel:
    """Tests for the visibility rule."""

    @pytest.mark.parametrize(
        ("approved", "ref", "visible"),
        [
            (True, "post1", True),
            (False, "post1", False),
            (True, "post2", False),
        ],
    )
    def test_is_visible_on(self, approved: bool, ref: str, visible: bool):
        comment = Comment.model_validate(
            {
                "_id": "c",
                "post": {"_ref": ref},
                "name": "A",
                "comment": "hi",
                "approved": approved,
            }
        )

        assert comment.is_visible_on("post1") is visible
