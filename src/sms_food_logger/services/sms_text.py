"""Text helpers for composing SMS replies."""

import re

ELLIPSIS = "..."

_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_BARE_URL = re.compile(
    r"(?:https?://|www\.)[^\s()<>]*[^\s()<>.,;:!?'\"]", re.IGNORECASE
)
_EMPTY_BRACKETS = re.compile(r"\(\s*\)|\[\s*\]")
_SPACE_BEFORE_PUNCT = re.compile(r"[ \t]+([.,;:!?])")
_INLINE_SPACE = re.compile(r"[ \t]{2,}")
_NON_DIGIT = re.compile(r"\D")


def strip_links(text: str) -> str:
    """Remove URLs and collapse markdown links to their label."""
    cleaned = _MARKDOWN_LINK.sub(r"\1", text)
    cleaned = _BARE_URL.sub("", cleaned)
    cleaned = _EMPTY_BRACKETS.sub("", cleaned)
    cleaned = _SPACE_BEFORE_PUNCT.sub(r"\1", cleaned)
    lines = [_INLINE_SPACE.sub(" ", line).strip() for line in cleaned.splitlines()]
    return "\n".join(line for line in lines if line).strip()


def truncate_for_sms(text: str, max_length: int) -> str:
    """Truncate text to a single SMS segment, marking the cut with an ellipsis."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)].rstrip() + ELLIPSIS


def compose_sms_reply(text: str, max_length: int) -> str:
    """Strip links first so they never count against the length ceiling."""
    return truncate_for_sms(strip_links(text), max_length)


def normalize_phone(raw: str) -> str:
    """Return an E.164 form of a phone number.

    Ten-digit numbers are assumed to be North American. Anything else simply
    gets the leading ``+`` that some carriers and tools drop.
    """
    digits = _NON_DIGIT.sub("", raw)
    if not digits:
        return ""
    if not raw.strip().startswith("+") and len(digits) == 10:  # noqa: PLR2004
        return f"+1{digits}"
    return f"+{digits}"
