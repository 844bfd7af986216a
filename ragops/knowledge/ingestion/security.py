"""Indexing security filters and content fingerprinting."""

from __future__ import annotations

import hashlib
import re
from pathlib import PurePosixPath

CONFIDENTIAL_PATTERN = re.compile(r"\[CONFIDENTIAL\]", re.IGNORECASE)
SYSTEM_FILE_EXTENSIONS = (".env", ".local", ".key", ".pem", ".secret")
EXCLUDED_DIRECTORIES = frozenset({"node_modules"})

SSN_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
EMAIL_PATTERN = re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE)


def is_indexable(filename: str, content: str) -> bool:
    """Return False for content or files that must never reach the search backend."""

    if CONFIDENTIAL_PATTERN.search(content or ""):
        return False

    name = (filename or "").lower()
    if any(name.endswith(ext) or ext in name for ext in SYSTEM_FILE_EXTENSIONS):
        return False

    segments = PurePosixPath(name.replace("\\", "/")).parts
    if any(segment in EXCLUDED_DIRECTORIES for segment in segments):
        return False
    return True


def fingerprint(content: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoded content."""

    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def document_id_for(filename: str) -> str:
    # Ids are not namespaced by source; equal filenames share an id.
    return hashlib.md5(filename.encode("utf-8")).hexdigest()  # noqa: S324


def contains_pii(text: str) -> bool:
    return bool(SSN_PATTERN.search(text) or EMAIL_PATTERN.search(text))


def sanitize_for_index(text: str) -> str:
    """Redact SSN-shaped numbers and e-mail addresses."""

    redacted = SSN_PATTERN.sub("[REDACTED_SSN]", text)
    return EMAIL_PATTERN.sub("[REDACTED_EMAIL]", redacted)


__all__ = [
    "contains_pii",
    "document_id_for",
    "fingerprint",
    "is_indexable",
    "sanitize_for_index",
]
