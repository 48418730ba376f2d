"""Detection and redaction of sensitive text.

The passes run in a fixed order and every pass sees the output of the previous
ones, so a broad early pattern (API keys) can swallow text a narrower later one
(emails) would have matched. Keep the order of ``SCRUB_PASSES`` stable.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PAD_CHAR = "_"


class ScrubCategory(StrEnum):
    """Categories of sensitive data, valued after their ScrubConfig field."""

    API_KEY = "api_key"
    PHONE = "phone"
    EMAIL = "email"
    SSN = "ssn"
    ZIP_CODE = "zip_code"
    NAME = "name"
    CREDIT_CARD = "credit_card"
    IP_ADDRESS = "ip_address"
    UUID = "uuid"
    URL = "url"
    ADDRESS = "address"


_PATTERNS: dict[ScrubCategory, re.Pattern[str]] = {
    # A token made only of digits is a number, not a key.
    ScrubCategory.API_KEY: re.compile(
        r"(?![0-9]+(?![A-Za-z0-9_\-.]))[A-Za-z0-9_\-.]{20,}",
        re.ASCII,
    ),
    ScrubCategory.PHONE: re.compile(
        r"\b(?:\+\d{1,3}[-.\s]?)?(?:\(?\d{3}\)?[-.\s]?)\d{3}[-.\s]?\d{4}\b",
        re.ASCII,
    ),
    ScrubCategory.EMAIL: re.compile(
        r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b",
        re.ASCII,
    ),
    ScrubCategory.SSN: re.compile(r"\b\d{3}[-.\s]?\d{2}[-.\s]?\d{4}\b", re.ASCII),
    ScrubCategory.ZIP_CODE: re.compile(r"\b\d{5}(?:[-\s]\d{4})?\b", re.ASCII),
    ScrubCategory.NAME: re.compile(r"\b[A-Z][a-z]+(?:[\s'-][A-Z][a-z]+)*\b", re.ASCII),
    ScrubCategory.CREDIT_CARD: re.compile(r"\b(?:\d{4}[-\s]?){3}\d{4}\b|\b\d{16}\b", re.ASCII),
    ScrubCategory.IP_ADDRESS: re.compile(
        r"\b(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
        r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b",
        re.ASCII,
    ),
    ScrubCategory.UUID: re.compile(
        r"\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b",
        re.ASCII | re.IGNORECASE,
    ),
    ScrubCategory.URL: re.compile(
        r"https?://(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
        r"(?:[-a-zA-Z0-9()@:%_+.~#?&/=]*)",
        re.ASCII | re.IGNORECASE,
    ),
    ScrubCategory.ADDRESS: re.compile(
        r"\b\d+\s+[A-Za-z0-9\s,]+"
        r"(?:Avenue|Ave|Street|St|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr|Court|Ct|Plaza|Plz|Way)\b",
        re.ASCII | re.IGNORECASE,
    ),
}

SCRUB_PASSES: tuple[ScrubCategory, ...] = (
    ScrubCategory.API_KEY,
    ScrubCategory.PHONE,
    ScrubCategory.EMAIL,
    ScrubCategory.SSN,
    ScrubCategory.ZIP_CODE,
    ScrubCategory.NAME,
    ScrubCategory.CREDIT_CARD,
    ScrubCategory.IP_ADDRESS,
    ScrubCategory.UUID,
    ScrubCategory.URL,
    ScrubCategory.ADDRESS,
)

# Names, URLs and street addresses are too noisy to be worth counting.
DETECTION_CATEGORIES: tuple[ScrubCategory, ...] = (
    ScrubCategory.API_KEY,
    ScrubCategory.PHONE,
    ScrubCategory.EMAIL,
    ScrubCategory.SSN,
    ScrubCategory.ZIP_CODE,
    ScrubCategory.CREDIT_CARD,
    ScrubCategory.IP_ADDRESS,
    ScrubCategory.UUID,
)


class ScrubConfig(BaseModel):
    """Replacement tokens for each category of sensitive data.

    Attributes:
        preserve_format: When True, each token is truncated or right-padded with
            ``_`` so the scrubbed text keeps the length of what it replaced.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str = Field(default="API_KEY", description="Replacement for tokens and keys.")
    phone: str = Field(default="PHONE_NUMBER", description="Replacement for phone numbers.")
    email: str = Field(default="EMAIL@EXAMPLE.COM", description="Replacement for emails.")
    ssn: str = Field(default="SSN", description="Replacement for social security numbers.")
    zip_code: str = Field(default="ZIP_CODE", description="Replacement for ZIP codes.")
    name: str = Field(default="NAME", description="Replacement for capitalized names.")
    credit_card: str = Field(default="CREDIT_CARD", description="Replacement for card numbers.")
    ip_address: str = Field(default="IP_ADDRESS", description="Replacement for IPv4 addresses.")
    uuid: str = Field(default="UUID", description="Replacement for UUIDs.")
    url: str = Field(default="URL", description="Replacement for http(s) URLs.")
    address: str = Field(default="ADDRESS", description="Replacement for street addresses.")
    preserve_format: bool = Field(default=True, description="Keep replaced spans at their length.")

    def replacement(self, category: ScrubCategory) -> str:
        return getattr(self, category.value)


def format_replacement(match: str, replacement: str, *, preserve_format: bool) -> str:
    """Fit a replacement token to the span it replaces.

    Args:
        match (str): the matched sensitive text
        replacement (str): the placeholder token
        preserve_format (bool): whether the result must have the length of `match`

    Returns:
        str: the token, truncated or padded with ``_`` when `preserve_format` is set
    """
    if not preserve_format:
        return replacement
    if len(match) <= len(replacement):
        return replacement[: len(match)]
    return replacement + PAD_CHAR * (len(match) - len(replacement))


def scrub(content: Any, config: ScrubConfig | None = None) -> str:  # noqa: ANN401
    """Replace sensitive data in `content` with placeholder tokens.

    Args:
        content: the text to scrub; anything but a string yields ""
        config (ScrubConfig | None): tokens and format flag, defaults when None

    Returns:
        str: the scrubbed text
    """
    if not isinstance(content, str):
        return ""
    cfg = config or ScrubConfig()
    result = content
    for category in SCRUB_PASSES:
        token = cfg.replacement(category)
        result = _PATTERNS[category].sub(
            lambda m, token=token: format_replacement(m.group(0), token, preserve_format=cfg.preserve_format),
            result,
        )
    return result


def detect_sensitive_info(content: Any) -> dict[str, int]:  # noqa: ANN401
    """Count sensitive-looking matches per category without changing anything.

    Each category is matched against the original text independently.

    Returns:
        dict[str, int]: match counts keyed by category value, only for categories found
    """
    if not isinstance(content, str):
        return {}
    counts: dict[str, int] = {}
    for category in DETECTION_CATEGORIES:
        found = len(_PATTERNS[category].findall(content))
        if found:
            counts[category.value] = found
    return counts
