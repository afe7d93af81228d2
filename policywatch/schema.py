from typing import Any, Dict, List
from urllib.parse import urlparse

REQUIRED_STR_FIELDS = ["url"]
OPTIONAL_STR_FIELDS = [
    "content",
    "title",
    "content_hash",
    "last_modified",
    "extracted_at",
]

PAGE_NOT_FOUND_PATTERNS = [
    "sorry, this page can't be found",
    "page can't be found",
    "sorry, we couldn't find that page",
    "the page you're looking for isn't available",
    "page not found",
    "404 not found",
    "error 404",
]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme and p.netloc)
    except Exception:
        return False


def validate_snapshot(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Snapshot must be a JSON object"]

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if f in data and data[f] is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if _is_non_empty_str(data.get("url")) and not _valid_url(data["url"]):
        errors.append("Field 'url' must be a valid absolute URL (scheme + host)")

    return errors


def looks_like_missing_page(content: str) -> bool:
    """True for empty extractions and "page not found" placeholders."""
    if not isinstance(content, str) or not content.strip():
        return True
    lowered = content.lower()
    return any(pattern in lowered for pattern in PAGE_NOT_FOUND_PATTERNS)
