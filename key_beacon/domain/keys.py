from __future__ import annotations

import base64
import binascii
import os
import re
from pathlib import Path

from ..config import (
    ENV_PUBLIC_KEY,
    ENV_PUBLIC_KEY_BASE64,
    ENV_PUBLIC_KEY_FILE,
    fallback_key_enabled,
)
from ..logging_conf import get_logger

__all__ = [
    "FALLBACK_PUBLIC_KEY",
    "normalize_pem",
    "decode_pem_base64",
    "read_pem_file",
    "resolve_public_key",
    "resolve_public_key_from_env",
]

logger = get_logger("domain.keys")

# Served only when nothing is configured; see KEY_BEACON_FALLBACK_KEY.
FALLBACK_PUBLIC_KEY = """
-----BEGIN PUBLIC KEY-----
MFkwEwYHKoZIzj0CAQYIKoZIzj0DAQcDQgAEE/508A42d9++IF62A/5NfKqQ9wJ/
3WPEaNbFALv3jl0cW8N4x82+3cNer3aLz8VjPYf2d2c6z1gI4a/sBCHwZw==
-----END PUBLIC KEY-----
"""

_BEGIN_MARKER_RE = re.compile(r"-----BEGIN [A-Z ]+-----")


def normalize_pem(value: str | None) -> str | None:
    """Turn escaped newlines into real ones and trim.

    Returns None for empty input or input that is only whitespace.
    """
    if not value:
        return None
    text = str(value).replace("\\n", "\n").strip()
    return text or None


def decode_pem_base64(value: str | None) -> str | None:
    """Decode a base64-wrapped PEM.

    Decoding is lenient about whitespace, url-safe characters and missing
    padding. The result must contain a BEGIN marker, else None.
    """
    if not value:
        return None
    compact = "".join(value.split()).replace("-", "+").replace("_", "/")
    compact += "=" * (-len(compact) % 4)
    try:
        decoded = base64.b64decode(compact).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.warning("key.base64_invalid", extra={"event": "key_base64_invalid"})
        return None
    pem = normalize_pem(decoded)
    if pem and _BEGIN_MARKER_RE.search(pem):
        return pem
    logger.warning("key.base64_not_pem", extra={"event": "key_base64_not_pem"})
    return None


def read_pem_file(path: str | os.PathLike[str] | None) -> str | None:
    """Read and normalize a PEM file; unreadable files yield None."""
    if not path:
        return None
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(
            "key.file_unreadable",
            extra={"event": "key_file_unreadable", "path": str(path), "error": str(e)},
        )
        return None
    return normalize_pem(text)


def resolve_public_key(
    *,
    pem: str | None = None,
    pem_base64: str | None = None,
    pem_file: str | os.PathLike[str] | None = None,
    fallback: str | None = None,
) -> str | None:
    """Return the first usable key: raw PEM, then base64, then file, then fallback."""
    return (
        normalize_pem(pem)
        or decode_pem_base64(pem_base64)
        or read_pem_file(pem_file)
        or normalize_pem(fallback)
    )


def resolve_public_key_from_env() -> str | None:
    """Resolve the key from the process environment.

    Not cached: each call re-reads the environment and the key file.
    """
    configured = resolve_public_key(
        pem=os.getenv(ENV_PUBLIC_KEY),
        pem_base64=os.getenv(ENV_PUBLIC_KEY_BASE64),
        pem_file=os.getenv(ENV_PUBLIC_KEY_FILE),
    )
    if configured:
        return configured
    if not fallback_key_enabled():
        return None
    logger.warning("key.fallback", extra={"event": "key_fallback"})
    return normalize_pem(FALLBACK_PUBLIC_KEY)
