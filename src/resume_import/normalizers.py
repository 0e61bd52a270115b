"""
Field normalizers for imported resume data.

Pure functions turning loosely-typed extracted values into canonical field
values. None of them raise: anything that cannot be normalized comes back as
None (or as the documented default) so that callers can downgrade the gap to
a warning.
"""

import math
import re
import unicodedata
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional, Type
from urllib.parse import quote, urlsplit, urlunsplit

from src.resume_import.types import (
    YEAR_MONTH_PATTERN,
    ProficiencyLevel,
    ReferenceRelationship,
    SkillCategory,
    is_email,
)

SUMMARY_MAX_LENGTH = 600
ELLIPSIS = "..."

YEAR_PATTERN = re.compile(r"^[0-9]{4}$")
PRESENT_PATTERN = re.compile(r"present|current", re.IGNORECASE)
SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
PHONE_DISALLOWED = re.compile(r"[^0-9+()\s-]")
DOMAIN_PATTERN = re.compile(r"^(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z][a-z0-9-]*[a-z0-9]\.?$")
IPV4_PATTERN = re.compile(r"^[0-9]{1,3}(?:\.[0-9]{1,3}){3}$")

DEFAULT_PORTS = {"http": 80, "https": 443}

# Resume date layouts tried after ISO parsing, most specific first
DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %Y",
    "%b %Y",
    "%B, %Y",
    "%b, %Y",
    "%b. %Y",
    "%m/%Y",
    "%m-%Y",
    "%m.%Y",
    "%Y/%m",
    "%Y.%m",
]


def string_or_none(value: Any) -> Optional[str]:
    """Trimmed string, or None for non-strings and blank strings."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def collapse_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def is_present_token(value: Any) -> bool:
    """True for end-date strings such as "Present" or "Current role"."""
    text = string_or_none(value)
    return bool(text and PRESENT_PATTERN.search(text))


# ===== DATES =====

def normalize_date(value: Any) -> Optional[str]:
    """
    Normalize a resume date to ``YYYY-MM``.

    - ``YYYY-MM`` passes through unchanged
    - a bare year becomes ``YYYY-01``
    - "present"/"current" (any case) becomes None
    - ISO dates and common resume layouts are converted (UTC for offset-aware values)
    - fullwidth digits are folded to ASCII first
    - blank or unparseable input becomes None
    """
    text = string_or_none(value)
    if text is None:
        return None
    text = unicodedata.normalize("NFKC", text)

    if YEAR_MONTH_PATTERN.match(text):
        return text

    if YEAR_PATTERN.match(text):
        return f"{text}-01"

    if PRESENT_PATTERN.search(text):
        return None

    parsed = _parse_date(text)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def _parse_date(text: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed
    except ValueError:
        pass

    cleaned = collapse_whitespace(text)
    # strptime knows "Sep" but not "Sept"
    cleaned = re.sub(r"\bsept\b", "Sep", cleaned, flags=re.IGNORECASE)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


# ===== URLS =====

def sanitize_url(value: Any) -> Optional[str]:
    """
    Canonical absolute http(s) URL, or None.

    Scheme-less input is treated as https. The canonical form has a
    lower-cased scheme and host, no default port, at least "/" as path and
    percent-encoded unsafe characters, so ``example.com`` becomes
    ``https://example.com/``.
    """
    text = string_or_none(value)
    if text is None or any(ch.isspace() for ch in text):
        return None

    candidate = text if SCHEME_PATTERN.match(text) else f"https://{text}"

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        return None

    host = _canonical_host(parts.hostname)
    if host is None:
        return None

    netloc = host
    if parts.username is not None:
        userinfo = quote(parts.username, safe="")
        if parts.password is not None:
            userinfo += ":" + quote(parts.password, safe="")
        netloc = f"{userinfo}@{netloc}"
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    path = quote(parts.path, safe="/%:@!$&'()*+,;=-._~") or "/"
    query = quote(parts.query, safe="/?%:@!$&'()*+,;=-._~")
    fragment = quote(parts.fragment, safe="/?%:@!$&'()*+,;=-._~")

    return urlunsplit((scheme, netloc, path, query, fragment))


def _canonical_host(hostname: Optional[str]) -> Optional[str]:
    """Lower-cased ASCII host if it is a domain with a TLD or an IP literal."""
    if not hostname:
        return None

    if ":" in hostname:
        # IPv6 literal; urlsplit has already checked the brackets
        return f"[{hostname.lower()}]"

    if IPV4_PATTERN.match(hostname):
        octets = hostname.split(".")
        return hostname if all(int(octet) <= 255 for octet in octets) else None

    try:
        ascii_host = hostname.encode("idna").decode("ascii").lower()
    except UnicodeError:
        return None

    return ascii_host if DOMAIN_PATTERN.match(ascii_host) else None


# ===== NUMBERS & ENUMS =====

def normalize_years_of_experience(value: Any) -> Optional[int]:
    """Round half up and clamp at zero; non-numbers, NaN and infinities give None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return max(0, math.floor(value + 0.5))


def _allowed_value(enum_cls: Type[Enum], value: Any) -> Optional[str]:
    text = string_or_none(value)
    if text is None:
        return None
    try:
        return enum_cls(text.lower()).value
    except ValueError:
        return None


def normalize_skill_category(value: Any) -> str:
    """Category is mandatory, so anything outside the allow-list becomes "technical"."""
    return _allowed_value(SkillCategory, value) or SkillCategory.TECHNICAL.value


def normalize_proficiency_level(value: Any) -> Optional[str]:
    return _allowed_value(ProficiencyLevel, value)


def normalize_relationship(value: Any) -> Optional[str]:
    return _allowed_value(ReferenceRelationship, value)


# ===== TEXT =====

def sanitize_phone(value: Any) -> Optional[str]:
    """Keep digits, "+", parentheses, hyphens and whitespace."""
    text = string_or_none(value)
    if text is None:
        return None
    return PHONE_DISALLOWED.sub("", text).strip() or None


def normalize_email(value: Any) -> Optional[str]:
    text = string_or_none(value)
    if text is None:
        return None
    if text.lower().startswith("mailto:"):
        text = text[len("mailto:"):].strip()
    return text if is_email(text) else None


def truncate_summary(value: Any, limit: int = SUMMARY_MAX_LENGTH) -> Optional[str]:
    """Cap text at ``limit`` characters, the last three being "..." when cut."""
    text = string_or_none(value)
    if text is None:
        return None
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def dedupe_warnings(warnings: Iterable[Any]) -> List[str]:
    """Trimmed, non-blank, first occurrence kept."""
    seen = set()
    result = []
    for warning in warnings:
        text = string_or_none(warning)
        if text and text not in seen:
            seen.add(text)
            result.append(text)
    return result


def join_string_list(values: Any) -> Optional[str]:
    """
    Join loosely-typed members with ", ".

    Only non-blank strings and numbers survive; None when nothing is left.
    """
    if values is None:
        return None
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, Iterable):
        return None

    parts = []
    for member in values:
        if isinstance(member, bool):
            continue
        if isinstance(member, (int, float)):
            member = str(member)
        text = string_or_none(member)
        if text:
            parts.append(text)
    return ", ".join(parts) if parts else None
