"""Thread actions: list, create, read and reply."""

from uuid import UUID

from quart import Blueprint, current_app, jsonify, request
from config.constants import DEFAULT_PAGE_NUMBER, HOME_PATH, MAX_PAGE_SIZE
from config.settings import settings
from forms.validation import CommentValidation, ThreadValidation, validate
from storage.page_cache import PageCache
from storage.repositories.thread_repo import ThreadRepository

threads_bp = Blueprint("threads", __name__)


def _cache() -> PageCache:
    return current_app.page_cache  # type: ignore[attr-defined]


def _repo() -> ThreadRepository:
    return ThreadRepository(current_app.db_pool, _cache())  # type: ignore[attr-defined]


@threads_bp.route("", methods=["GET"])
async def list_threads():
    page_number = max(request.args.get("page", DEFAULT_PAGE_NUMBER, type=int), 1)
    page_size = min(
        max(request.args.get("page_size", settings.default_page_size, type=int), 1),
        MAX_PAGE_SIZE,
    )
    # The home feed (first page, default size) is served from the page cache
    cacheable = page_number == DEFAULT_PAGE_NUMBER and page_size == settings.default_page_size
    if cacheable:
        cached = _cache().get(HOME_PATH)
        if cached is not None:
            return jsonify(cached)

    page = await _repo().fetch_threads(page_number, page_size)
    body = page.to_dict("posts")
    if cacheable:
        _cache().set(HOME_PATH, body)
    return jsonify(body)


@threads_bp.route("", methods=["POST"])
async def create_thread():
    payload = await request.get_json(silent=True) or {}
    result = validate(ThreadValidation, payload)
    if not result.valid:
        return jsonify({"errors": result.errors}), 400

    path = payload.get("path") or HOME_PATH
    thread_id = await _repo().create_thread(
        text=result.values["thread"],
        author=result.values["account_id"],
        community_id=payload.get("community_id"),
        path=path,
    )
    # A new top-level thread always lands on the home feed
    if path != HOME_PATH:
        _cache().revalidate_path(HOME_PATH)
    return jsonify({"id": thread_id}), 201


@threads_bp.route("/<uuid:thread_id>", methods=["GET"])
async def get_thread(thread_id: UUID):
    thread = await _repo().fetch_thread_by_id(str(thread_id))
    if thread is None:
        return jsonify({"error": "Thread not found"}), 404
    return jsonify(thread.to_dict())


@threads_bp.route("/<uuid:thread_id>/comments", methods=["POST"])
async def add_comment(thread_id: UUID):
    payload = await request.get_json(silent=True) or {}
    result = validate(CommentValidation, payload)
    if not result.valid:
        return jsonify({"errors": result.errors}), 400

    comment_id = await _repo().add_comment_to_thread(
        thread_id=str(thread_id),
        text=result.values["thread"],
        author=result.values["author"],
        path=payload.get("path") or f"/thread/{thread_id}",
    )
    # The home feed embeds each thread's replies
    _cache().revalidate_path(HOME_PATH)
    return jsonify({"id": comment_id}), 201
