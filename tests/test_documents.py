"""Tests for storage/documents.py — view models and paging arithmetic."""

import pytest
from storage.documents import (
    AuthorSummary,
    Page,
    Thread,
    User,
    has_next_page,
    skip_amount,
)
from tests.conftest import BASE_TIME, author_row, thread_row, user_row


class TestPaging:
    @pytest.mark.parametrize("page_number, page_size, expected", [
        (1, 20, 0),
        (2, 20, 20),
        (3, 10, 20),
    ])
    def test_skip_amount(self, page_number, page_size, expected):
        assert skip_amount(page_number, page_size) == expected

    def test_no_next_when_total_fits(self):
        # 25 total, page 2 of 20 → skip 20, 5 returned
        assert has_next_page(25, 20, 5) is False

    def test_next_when_more_remain(self):
        assert has_next_page(25, 0, 20) is True

    def test_exact_boundary(self):
        assert has_next_page(40, 20, 20) is False


class TestUser:
    def test_from_record(self):
        user = User.from_record(user_row(1, threads=["thread-1"]))
        assert user.id == "user-1"
        assert user.threads == ["thread-1"]
        assert user.onboarded is True

    def test_null_threads(self):
        user = User.from_record(user_row(1, threads=None))
        assert user.threads == []

    def test_to_dict_serializes_nested(self):
        user = User.from_record(user_row(1))
        user.threads = [Thread.from_record(thread_row(1))]
        data = user.to_dict()
        assert data["created_at"] == (BASE_TIME.replace(minute=1)).isoformat()
        assert data["threads"][0]["id"] == "thread-1"
        assert data["threads"][0]["author"] == "user-1"


class TestThread:
    def test_top_level(self):
        assert Thread.from_record(thread_row(1)).parent_id is None

    def test_reply(self):
        reply = Thread.from_record(thread_row(2, parent_id="thread-1"))
        assert reply.parent_id == "thread-1"

    def test_to_dict_with_populated_author(self):
        thread = Thread.from_record(thread_row(1))
        thread.author = AuthorSummary.from_record(author_row(1))
        data = thread.to_dict()
        assert data["author"] == {
            "id": "user-1",
            "external_id": "ext-1",
            "name": "User 1",
            "image": "https://img.example.com/1.png",
        }
        assert data["community"] is None


class TestPage:
    def test_to_dict_key(self):
        page = Page(items=[Thread.from_record(thread_row(1))], is_next=True)
        data = page.to_dict("posts")
        assert data["is_next"] is True
        assert data["posts"][0]["id"] == "thread-1"
