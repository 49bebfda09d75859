"""
Quillboard Backend: Field Validation
=====================================

What:  Plain validation functions for post, comment, category and
       registration input.
How:   Each function normalizes its input (trimming short strings; post
       bodies are kept verbatim) and raises a ValidationError naming the
       offending field. No storage access here; existence checks (unknown
       category ids, duplicate emails) live in the services.
Who:   Called by the services before any write.
"""

import re
from typing import Any, Dict, Optional

from quillboard.exceptions import ValidationError

TITLE_MAX_LENGTH = 100
EXCERPT_MAX_LENGTH = 500
COMMENT_MAX_LENGTH = 1000
CATEGORY_NAME_MAX_LENGTH = 50
USER_NAME_MAX_LENGTH = 50

# Deliberately loose: one "@", something on each side, a dot in the domain
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _as_text(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(message=f"{field.capitalize()} must be a string", field=field)
    return value.strip()


def require_text(value: Any, field: str, max_length: Optional[int] = None) -> str:
    """Trimmed, non-empty string no longer than max_length."""
    text = _as_text(value, field)
    if not text:
        raise ValidationError(message=f"{field.capitalize()} is required", field=field)
    if max_length is not None and len(text) > max_length:
        raise ValidationError(
            message=f"{field.capitalize()} must be at most {max_length} characters",
            field=field,
            context={"max_length": max_length, "length": len(text)},
        )
    return text


def require_body(value: Any, field: str) -> str:
    """Non-empty string, returned exactly as sent (indentation and newlines kept)."""
    if _as_text(value, field) == "":
        raise ValidationError(message=f"{field.capitalize()} is required", field=field)
    return value


def optional_text(value: Any, field: str, max_length: int) -> Optional[str]:
    """Trimmed string or None when empty; bounded by max_length."""
    text = _as_text(value, field)
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(
            message=f"{field.capitalize()} must be at most {max_length} characters",
            field=field,
            context={"max_length": max_length, "length": len(text)},
        )
    return text


def validate_post_fields(fields: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Validate the text fields of a post.

    Args:
        fields:  Field values keyed by model attribute name (title, content,
                 excerpt). Unknown keys are ignored.
        partial: When True, only keys present in `fields` are validated
                 (update); otherwise title and content are required (create).

    Returns:
        Normalized values for the keys that were validated.
    """
    cleaned: Dict[str, Any] = {}
    if not partial or "title" in fields:
        cleaned["title"] = require_text(fields.get("title"), "title", TITLE_MAX_LENGTH)
    if not partial or "content" in fields:
        cleaned["content"] = require_body(fields.get("content"), "content")
    if not partial or "excerpt" in fields:
        cleaned["excerpt"] = optional_text(fields.get("excerpt"), "excerpt", EXCERPT_MAX_LENGTH)
    return cleaned


def validate_comment_content(value: Any) -> str:
    return require_text(value, "content", COMMENT_MAX_LENGTH)


def validate_category_name(value: Any) -> str:
    return require_text(value, "name", CATEGORY_NAME_MAX_LENGTH)


def validate_registration(
    name: Any,
    email: Any,
    password: Any,
    min_password_length: int,
) -> Dict[str, str]:
    """Normalize registration input; email is lower-cased."""
    clean_name = require_text(name, "name", USER_NAME_MAX_LENGTH)
    clean_email = require_text(email, "email", 255).lower()
    if not _EMAIL_RE.match(clean_email):
        raise ValidationError(message="Please provide a valid email address", field="email")
    if not isinstance(password, str) or len(password) < min_password_length:
        raise ValidationError(
            message=f"Password must be at least {min_password_length} characters",
            field="password",
            context={"min_length": min_password_length},
        )
    return {"name": clean_name, "email": clean_email, "password": password}
