"""Profile edit and profile view routes."""

import structlog
from quart import Blueprint, current_app, jsonify, redirect, request, url_for
from config.constants import HOME_PATH, PROFILE_EDIT_PATH
from forms.account_profile import AccountProfileForm
from storage.repositories.user_repo import UserRepository
from utils.errors import RepositoryError

log = structlog.get_logger(__name__)

profile_bp = Blueprint("profile", __name__)


def _repo() -> UserRepository:
    return UserRepository(current_app.db_pool, current_app.page_cache)  # type: ignore[attr-defined]


async def _load_form(user_id: str, btn_title: str) -> AccountProfileForm:
    user = await _repo().fetch_user(user_id)
    seed = user.to_dict() if user else {"external_id": user_id}
    return AccountProfileForm(seed, btn_title=btn_title)


@profile_bp.route("/edit", methods=["GET"])
async def edit_profile_page():
    user_id = request.args.get("user_id", "")
    if not user_id:
        return jsonify({"errors": {"user_id": "Field required"}}), 400
    form = await _load_form(user_id, btn_title="Save")
    return jsonify({
        "user_id": form.user_id,
        "values": form.values,
        "btn_title": form.btn_title,
        "state": form.state.value,
        "markup": form.render(),
    })


@profile_bp.route("/edit", methods=["POST"])
async def submit_profile():
    data = await request.form
    files = await request.files
    user_id = data.get("user_id", "")
    if not user_id:
        return jsonify({"errors": {"user_id": "Field required"}}), 400

    form = await _load_form(user_id, btn_title="Save")
    form.update(data)
    await form.handle_image(files.getlist("profile_photo"))

    result = await form.on_submit()
    if not result.valid:
        return jsonify({"errors": result.errors}), 400

    try:
        await _repo().update_user(
            user_id=user_id,
            username=result.values["username"],
            name=result.values["name"],
            bio=result.values["bio"],
            image=result.values["profile_photo"],
            path=PROFILE_EDIT_PATH,
        )
    except RepositoryError as e:
        log.error("profile_save_failed", user_id=user_id, error=str(e))
        return jsonify({"error": "Could not save your profile. Please try again."}), 500

    # Feed entries embed the author document
    current_app.page_cache.revalidate_path(HOME_PATH)  # type: ignore[attr-defined]
    return redirect(url_for("profile.profile_page", user_id=user_id))


@profile_bp.route("/<user_id>", methods=["GET"])
async def profile_page(user_id: str):
    user = await _repo().fetch_user_posts(user_id)
    if user is None:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user.to_dict())
