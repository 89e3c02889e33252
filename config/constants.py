"""Constants used across the application."""

from enum import Enum


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Accepted spellings for a sort direction
SORT_ALIASES = {
    "asc": SortOrder.ASC,
    "ascending": SortOrder.ASC,
    "1": SortOrder.ASC,
    "desc": SortOrder.DESC,
    "descending": SortOrder.DESC,
    "-1": SortOrder.DESC,
}

# Route whose data changes after a profile update
PROFILE_EDIT_PATH = "/profile/edit"
HOME_PATH = "/"

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Population depth for nested thread expansion
DEFAULT_POPULATE_DEPTH = 2

# Profile field bounds
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 30
BIO_MIN_LENGTH = 3
BIO_MAX_LENGTH = 1000
THREAD_MIN_LENGTH = 3

SUPPORTED_IMAGE_PREFIX = "image/"
