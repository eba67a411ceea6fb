"""Static configuration for agora.

All user-editable settings (site paths, directory, previews, sanitizer
whitelist, emoticons, logging) live in a single JSON file for quick edits
without touching Python.
"""

import json
import os

from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# .env may point at another config file or database.
load_dotenv(os.path.join(PROJECT_ROOT, ".env"))

# Where to store the SQLite database.
DB_PATH = os.getenv("AGORA_DB_PATH") or os.path.join(os.path.dirname(__file__), "agora.db")

CONFIG_PATH = os.getenv("AGORA_CONFIG") or os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _normalize_attributes(raw_attributes: dict) -> dict[str, tuple[str, ...]]:
    """Map each tag to a tuple of attribute names, dropping empty entries."""

    attributes: dict[str, tuple[str, ...]] = {}
    for tag, names in raw_attributes.items():
        if not names:
            continue
        attributes[str(tag).lower()] = tuple(str(name).lower() for name in names)
    return attributes


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Base URLs. Member profiles and tags hang off SERVE_PATH, emoji images off STATIC_PATH.
_site = _CONFIG.get("site", {})
SERVE_PATH = str(_site.get("serve_path", "http://localhost:8080")).rstrip("/")
STATIC_PATH = str(_site.get("static_path", SERVE_PATH)).rstrip("/")

# Directory snapshot settings.
# - NULL_USER_NAME: sentinel account never listed in the directory
# - PREFIX_LIMIT: default number of prefix search results
_directory = _CONFIG.get("directory", {})
DEFAULT_AVATAR_URL = _directory.get("default_avatar_url", f"{STATIC_PATH}/images/user-thumbnail.png")
NULL_USER_NAME = _directory.get("null_user_name", "_")
PREFIX_LIMIT = int(_directory.get("prefix_limit", 4))

_mentions = _CONFIG.get("mentions", {})
MAX_NAME_LENGTH = int(_mentions.get("max_name_length", 20))

_preview = _CONFIG.get("preview", {})
PREVIEW_MAX_CHARS = int(_preview.get("max_chars", 150))
PREVIEW_MARKER = _preview.get("marker", " ....")

# Notices shown instead of a preview. {user} becomes the author's profile link.
_labels = _CONFIG.get("labels", {})
CONTENT_BLOCKED_LABEL = _labels.get("content_blocked", "This content has been blocked.")
DISCUSSION_LABEL = _labels.get(
    "discussion_invite_only",
    "This is a discussion, only {user} and the members invited can view it.",
)

# Full-render whitelist. Previews always strip every tag.
_sanitizer = _CONFIG.get("sanitizer", {})
ALLOWED_TAGS = frozenset(str(tag).lower() for tag in _sanitizer.get("tags", []))
ALLOWED_ATTRIBUTES = _normalize_attributes(_sanitizer.get("attributes", {}))
ALLOWED_PROTOCOLS = frozenset(_sanitizer.get("protocols", ["http", "https", "mailto"]))

_emoticons = _CONFIG.get("emoticons", {})
EMOTICON_NAMES = tuple(_emoticons.get("names", []))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
