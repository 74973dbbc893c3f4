"""Public tracking code generation and share links."""

from __future__ import annotations

import secrets
import string

from ..config import settings

# URL-safe alphabet (same symbols as base64url); codes are displayed upper-case.
URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"
DEFAULT_CODE_LENGTH = 10


def generate_tracking_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return a random, unguessable tracking code rendered upper-case."""

    if length < 1:
        raise ValueError("Tracking code length must be positive.")
    return "".join(secrets.choice(URL_SAFE_ALPHABET) for _ in range(length)).upper()


def normalize_tracking_code(code: str) -> str:
    """Canonical form used for storage and case-insensitive lookup."""

    return code.strip().upper()


def tracking_link(tracking_code: str, base_url: str | None = None) -> str:
    base = (base_url or settings.app_base_url).rstrip("/")
    return f"{base}/rastrear/{tracking_code}"
