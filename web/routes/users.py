"""User actions: search, profile lookup, authored threads and activity."""

from quart import Blueprint, current_app, jsonify, request
from config.constants import DEFAULT_PAGE_NUMBER, MAX_PAGE_SIZE, SortOrder
from config.settings import settings
from storage.repositories.user_repo import UserRepository

users_bp = Blueprint("users", __name__)


def _repo() -> UserRepository:
    return UserRepository(current_app.db_pool, current_app.page_cache)  # type: ignore[attr-defined]


@users_bp.route("", methods=["GET"])
async def list_users():
    user_id = request.args.get("user_id", "")
    if not user_id:
        return jsonify({"errors": {"user_id": "Field required"}}), 400
    page_number = max(request.args.get("page", DEFAULT_PAGE_NUMBER, type=int), 1)
    page_size = min(
        max(request.args.get("page_size", settings.default_page_size, type=int), 1),
        MAX_PAGE_SIZE,
    )
    try:
        page = await _repo().fetch_users(
            user_id=user_id,
            search_string=request.args.get("q", ""),
            page_number=page_number,
            page_size=page_size,
            sort_by=request.args.get("sort", SortOrder.DESC.value),
        )
    except ValueError as e:
        return jsonify({"errors": {"sort": str(e)}}), 400
    return jsonify(page.to_dict("users"))


@users_bp.route("/<user_id>", methods=["GET"])
async def get_user(user_id: str):
    user = await _repo().fetch_user(user_id)
    if user is None:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user.to_dict())


@users_bp.route("/<user_id>/posts", methods=["GET"])
async def get_user_posts(user_id: str):
    user = await _repo().fetch_user_posts(user_id)
    if user is None:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user.to_dict())


@users_bp.route("/<user_id>/activity", methods=["GET"])
async def get_activity(user_id: str):
    replies = await _repo().fetch_activity(user_id)
    return jsonify([r.to_dict() for r in replies])
