"""Tests for utils/errors.py — wrapped repository errors."""

from utils.errors import NotFoundError, RepositoryError, ThreadlineError


class TestRepositoryError:
    def test_message_embeds_original(self):
        original = RuntimeError("disk full")
        err = RepositoryError("Failed to fetch user", original)
        assert str(err) == "Failed to fetch user: disk full"
        assert err.operation == "Failed to fetch user"
        assert err.original is original

    def test_without_original(self):
        assert str(RepositoryError("Failed to fetch user")) == "Failed to fetch user"

    def test_is_threadline_error(self):
        assert isinstance(RepositoryError("x"), ThreadlineError)


class TestNotFoundError:
    def test_message(self):
        err = NotFoundError("Thread", "thread-1")
        assert str(err) == "Thread not found"
        assert err.key == "thread-1"
