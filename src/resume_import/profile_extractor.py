"""
Profile Extractor: resume text -> profile draft, raw sections, warnings.

Extraction runs an ordered list of strategies. Each returns a
StrategyOutcome holding either an extraction or the error that stopped it;
the first success wins. The structured-model strategy is only included when
an extraction-model key is configured and is tried once. The heuristic
strategy is always last and cannot fail.

Local warnings (missing name, email, phone) are derived after whichever
strategy won, then all warnings are de-duplicated in first-seen order.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlsplit

from langchain_core.messages import HumanMessage, SystemMessage

from src.common.config import Config
from src.common.json_utils import parse_llm_json
from src.common.llm_factory import create_extraction_llm
from src.common.logger import get_logger
from src.resume_import.normalizers import (
    collapse_whitespace,
    dedupe_warnings,
    normalize_email,
    sanitize_phone,
    sanitize_url,
    truncate_summary,
)
from src.resume_import.prompts import (
    PROFILE_EXTRACTION_SYSTEM_PROMPT,
    PROFILE_EXTRACTION_USER_TEMPLATE,
)
from src.resume_import.types import AIProfilePayload, ProfileExtraction, ProfileFieldsDraft

logger = get_logger(__name__, stage="profile_extraction")

WARN_NO_TEXT = "The uploaded resume did not contain readable text."
WARN_AI_FAILED = (
    "AI parsing failed. Populating fields using basic text extraction, please review and edit."
)
WARN_AI_NOT_CONFIGURED = (
    "Structured AI parsing is not configured. Imported values use basic text extraction, please review."
)
WARN_HEURISTIC = (
    "Resume import used heuristic extraction. Double-check the populated fields before saving."
)
WARN_NO_SECTIONS = "Structured sections could not be inferred automatically."
WARN_NO_NAME = "Name was not detected."
WARN_NO_EMAIL = "Email address was not detected."
WARN_NO_PHONE = "Phone number was not detected."

# ===== HEURISTIC PATTERNS =====

NAME_SCAN_LINES = 6
NAME_MAX_LENGTH = 60
NAME_MAX_TOKENS = 6
NAME_PATTERN = re.compile(r"^[^\W\d_](?:[^\W\d_]|[\s.,'-])*$")
MARKDOWN_DECORATION = re.compile(r"^(?:#{1,6}\s+|>\s*)|[*_`]")

EMAIL_PATTERN = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"\+?\d[\d \t().-]{6,}\d")
YEAR_RANGE_PATTERN = re.compile(r"^(?:19|20)\d{2}\s*[-.]\s*(?:19|20)\d{2}$")
PHONE_MIN_DIGITS = 8

URL_TAIL = r"[^\s)\]>|\"']+"
LINKEDIN_PATTERN = re.compile(r"(?:https?://)?(?:[a-z]{2,3}\.)?linkedin\.com/" + URL_TAIL, re.IGNORECASE)
GITHUB_PATTERN = re.compile(r"(?:https?://)?(?:www\.)?github\.com/" + URL_TAIL, re.IGNORECASE)
URL_PATTERN = re.compile(r"(?:https?://|www\.)" + URL_TAIL, re.IGNORECASE)
PROFILE_DOMAINS = ("linkedin.com", "github.com")

SUMMARY_LABELS = frozenset({
    "summary",
    "professional summary",
    "profile",
    "about me",
    "objective",
})
# Lines that head a resume but are never a person's name
NON_NAME_HEADINGS = SUMMARY_LABELS | {"resume", "curriculum vitae", "cv", "contact"}
MARKDOWN_HEADING = re.compile(r"^#{1,6}\s")


def collect_warnings(profile: ProfileFieldsDraft, extras: Iterable[Optional[str]] = ()) -> List[str]:
    """Merge extra warnings with the ones derived from missing profile fields."""
    derived = []
    if not profile.first_name and not profile.last_name:
        derived.append(WARN_NO_NAME)
    if not profile.email:
        derived.append(WARN_NO_EMAIL)
    if not profile.phone:
        derived.append(WARN_NO_PHONE)
    return dedupe_warnings([*extras, *derived])


@dataclass
class StrategyOutcome:
    """Result of one extraction strategy: an extraction or the error that stopped it."""
    strategy: str
    extraction: Optional[ProfileExtraction] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.extraction is not None


class ExtractionStrategy(ABC):
    name: str = "strategy"

    @abstractmethod
    def run(self, text: str) -> StrategyOutcome:
        pass


class StructuredModelStrategy(ExtractionStrategy):
    """
    One structured-extraction model call, validated against AIProfilePayload.

    Any failure (transport, timeout, unparseable JSON, schema violation)
    becomes a failed outcome. No retries.
    """

    name = "structured_model"

    def __init__(self, llm=None):
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = create_extraction_llm()
        return self._llm

    def run(self, text: str) -> StrategyOutcome:
        try:
            payload = self._call_model(text)
            extraction = self._to_extraction(payload)
        except Exception as e:
            logger.warning(f"Structured extraction failed: {type(e).__name__}: {e}")
            return StrategyOutcome(self.name, error=e)

        logger.info(
            f"Structured extraction succeeded: {len(extraction.work_experiences)} work experiences, "
            f"{len(extraction.skills)} skills"
        )
        return StrategyOutcome(self.name, extraction=extraction)

    def _call_model(self, text: str) -> AIProfilePayload:
        messages = [
            SystemMessage(content=PROFILE_EXTRACTION_SYSTEM_PROMPT),
            HumanMessage(content=PROFILE_EXTRACTION_USER_TEMPLATE.format(resume_markdown=text)),
        ]
        response = self.llm.invoke(messages)
        data = parse_llm_json(response.content)
        return AIProfilePayload.model_validate(data)

    def _to_extraction(self, payload: AIProfilePayload) -> ProfileExtraction:
        profile = ProfileFieldsDraft(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=normalize_email(payload.email),
            phone=sanitize_phone(payload.phone),
            address=payload.address,
            city=payload.city,
            state=payload.state,
            zip_code=payload.zip_code,
            country=payload.country,
            linkedin_url=sanitize_url(payload.linkedin_url),
            github_url=sanitize_url(payload.github_url),
            portfolio_url=sanitize_url(payload.portfolio_url),
            professional_summary=truncate_summary(payload.professional_summary),
        )
        return ProfileExtraction(
            profile=profile,
            work_experiences=payload.work_experiences,
            education=payload.education,
            skills=payload.skills,
            projects=payload.projects,
            certifications=payload.certifications,
            achievements=payload.achievements,
            references=payload.references,
            warnings=payload.warnings,
        )


class HeuristicStrategy(ExtractionStrategy):
    """Pattern-based extraction of the profile fields; sections stay empty."""

    name = "heuristic"

    def run(self, text: str) -> StrategyOutcome:
        lines = [line.strip() for line in text.splitlines()]
        first_name, last_name = find_name(lines)

        profile = ProfileFieldsDraft(
            first_name=first_name,
            last_name=last_name,
            email=normalize_email(_first_match(EMAIL_PATTERN, text)),
            phone=sanitize_phone(find_phone(text)),
            linkedin_url=sanitize_url(_first_match(LINKEDIN_PATTERN, text)),
            github_url=sanitize_url(_first_match(GITHUB_PATTERN, text)),
            portfolio_url=find_portfolio_url(text),
            professional_summary=find_summary(lines),
        )
        return StrategyOutcome(
            self.name,
            extraction=ProfileExtraction(
                profile=profile,
                warnings=[WARN_HEURISTIC, WARN_NO_SECTIONS],
            ),
        )


# ===== HEURISTIC RULES =====

def _first_match(pattern: re.Pattern, text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(0).rstrip(".,;:") if match else None


def _plain_line(line: str) -> str:
    return collapse_whitespace(MARKDOWN_DECORATION.sub("", line))


def _label_key(line: str) -> str:
    """Lower-cased line with markdown and punctuation removed, for label lookups."""
    return collapse_whitespace(re.sub(r"[^\w\s]|_", " ", line)).lower()


def find_name(lines: List[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    First short, letters-only line among the first six non-empty lines.

    Returns (first name, rest of the name); (None, None) when nothing matches.
    """
    candidates = [line for line in lines if line][:NAME_SCAN_LINES]
    for line in candidates:
        candidate = _plain_line(line)
        if not candidate or len(candidate) > NAME_MAX_LENGTH:
            continue
        if not NAME_PATTERN.match(candidate):
            continue
        if _label_key(candidate) in NON_NAME_HEADINGS:
            continue

        tokens = candidate.split(" ")
        if len(tokens) > NAME_MAX_TOKENS:
            continue
        return tokens[0], (" ".join(tokens[1:]) or None)
    return None, None


def find_phone(text: str) -> Optional[str]:
    """First digit run with at least eight digits that is not a year range."""
    for match in PHONE_PATTERN.finditer(text):
        candidate = match.group(0).strip()
        digits = sum(ch.isdigit() for ch in candidate)
        if digits >= PHONE_MIN_DIGITS and not YEAR_RANGE_PATTERN.match(candidate):
            return candidate
    return None


def find_portfolio_url(text: str) -> Optional[str]:
    """First URL that is not a LinkedIn or GitHub profile."""
    for match in URL_PATTERN.finditer(text):
        url = sanitize_url(match.group(0).rstrip(".,;:"))
        if url is None:
            continue
        host = urlsplit(url).hostname or ""
        if any(host == domain or host.endswith("." + domain) for domain in PROFILE_DOMAINS):
            continue
        return url
    return None


def find_summary(lines: List[str]) -> Optional[str]:
    """
    Text under the first summary-style label line.

    Collection starts after the label, skips leading blank lines and stops at
    a markdown heading, another summary label or the first blank line after
    some text.
    """
    collected: List[str] = []
    collecting = False

    for line in lines:
        is_label = _label_key(line) in SUMMARY_LABELS

        if not collecting:
            collecting = is_label
            continue

        if is_label or MARKDOWN_HEADING.match(line):
            break
        if not line:
            if collected:
                break
            continue
        collected.append(line)

    return truncate_summary(" ".join(collected))


# ===== ORCHESTRATION =====

class ProfileExtractor:
    """
    Runs the extraction strategies in order and derives local warnings.

    Usage:
        extractor = ProfileExtractor()
        extraction = extractor.extract(markdown)
    """

    def __init__(self, strategies: Optional[List[ExtractionStrategy]] = None):
        self._strategies = strategies

    def _default_strategies(self) -> Tuple[List[ExtractionStrategy], List[str]]:
        if Config.has_extraction_credentials():
            return [StructuredModelStrategy(), HeuristicStrategy()], []
        logger.info("No extraction model key configured; using heuristic extraction")
        return [HeuristicStrategy()], [WARN_AI_NOT_CONFIGURED]

    def extract(self, text: Optional[str]) -> ProfileExtraction:
        if not text or not text.strip():
            return ProfileExtraction(warnings=[WARN_NO_TEXT])

        if self._strategies is not None:
            strategies, notices = list(self._strategies), []
        else:
            strategies, notices = self._default_strategies()

        for strategy in strategies:
            outcome = strategy.run(text)
            if outcome.succeeded:
                extraction = outcome.extraction
                extraction.warnings = collect_warnings(
                    extraction.profile, [*notices, *extraction.warnings]
                )
                return extraction
            notices.append(WARN_AI_FAILED)

        # Only reachable when the strategy list ends without the heuristic tier
        fallback = HeuristicStrategy().run(text).extraction
        fallback.warnings = collect_warnings(fallback.profile, [*notices, *fallback.warnings])
        return fallback
