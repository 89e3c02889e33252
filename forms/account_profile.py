"""Account profile form: the onboarding / profile-edit component."""

import asyncio
import base64
import re
from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol

import structlog

from config.constants import SUPPORTED_IMAGE_PREFIX
from forms.validation import UserValidation, ValidationResult, validate

log = structlog.get_logger(__name__)

_DATA_URL_RE = re.compile(r"^data:image/[a-z0-9.+-]+;base64,", re.IGNORECASE)

FIELDS = ("profile_photo", "name", "username", "bio")


class Upload(Protocol):
    """What the form needs from an uploaded file (werkzeug's FileStorage fits)."""
    filename: str | None
    mimetype: str

    def read(self, size: int = -1) -> bytes: ...


class FormState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"


def encode_data_url(mimetype: str, data: bytes) -> str:
    """Inline representation of an image: ``data:<mime>;base64,<payload>``."""
    return f"data:{mimetype};base64,{base64.b64encode(data).decode('utf-8')}"


def is_base64_image(value: str) -> bool:
    return bool(_DATA_URL_RE.match(value or ""))


class AccountProfileForm:
    """Profile form seeded from a user record.

    ``handle_image`` decodes a chosen picture into ``profile_photo`` and
    ``on_submit`` validates the values. Persisting them is left to the
    caller (see ``web.routes.profile``).
    """

    def __init__(self, user: dict[str, Any] | None = None, btn_title: str = "Continue") -> None:
        user = user or {}
        self.btn_title = btn_title
        self.user_id = user.get("external_id") or user.get("id") or ""
        self.values: dict[str, str] = {
            "profile_photo": user.get("image") or "",
            "name": user.get("name") or "",
            "username": user.get("username") or "",
            "bio": user.get("bio") or "",
        }
        self.errors: dict[str, str] = {}
        self.state = FormState.IDLE

    def set_value(self, name: str, value: str) -> None:
        if name not in FIELDS:
            raise KeyError(name)
        self.values[name] = value
        self.state = FormState.EDITING

    def update(self, values: dict[str, Any]) -> None:
        """Apply submitted fields, ignoring anything the form does not own."""
        for name in FIELDS:
            if name in values and values[name] is not None:
                self.set_value(name, str(values[name]))

    async def handle_image(self, files: Sequence[Upload]) -> bool:
        """Load a selected picture into ``profile_photo``.

        Only a selection of more than one file is read, and then only the
        first file. Non-image files are ignored. Returns True when the photo
        changed.
        """
        if len(files) <= 1:
            return False

        file = files[0]
        mimetype = file.mimetype or ""
        if not mimetype.startswith(SUPPORTED_IMAGE_PREFIX):
            log.debug("profile_image_rejected", filename=file.filename, mimetype=mimetype)
            return False

        data = await asyncio.to_thread(file.read)
        self.set_value("profile_photo", encode_data_url(mimetype, data))
        log.debug("profile_image_loaded", filename=file.filename, size=len(data))
        return True

    def validate(self) -> ValidationResult:
        return validate(UserValidation, self.values)

    async def on_submit(self) -> ValidationResult:
        """Validate the current values and log them.

        Does not write anything; on invalid input the form goes back to
        editing with ``errors`` filled in.
        """
        self.state = FormState.VALIDATING
        result = self.validate()
        if not result.valid:
            self.errors = result.errors
            self.state = FormState.EDITING
            return result

        self.errors = {}
        self.state = FormState.SUBMITTING
        photo = result.values["profile_photo"]
        log.info(
            "profile_form_submitted",
            username=result.values["username"],
            name=result.values["name"],
            bio=result.values["bio"],
            profile_photo="<inline image>" if is_base64_image(photo) else photo,
        )
        self.state = FormState.IDLE
        return result

    def render(self) -> str:
        return ""
