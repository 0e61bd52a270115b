"""
Data model for resume import.

Three families of models live here:

- Extracted records: what the extraction tiers hand over. Every field is
  optional and loosely typed, because model output and heuristics are
  untrusted. Blank strings become None, numbers given for text fields are
  stringified, list fields accept a delimited string.
- Create requests: the strict payloads the profile repository accepts. A
  section draft's ``request`` is always one of these, fully validated.
- Import results: the profile draft, section drafts and the response of a
  single import.

Wire payloads use the camelCase keys of the profile API (``jobTitle``,
``displayOrder``); Python code uses snake_case attribute names.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, List, Optional
from urllib.parse import urlsplit

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    SerializeAsAny,
    field_validator,
)
from pydantic.alias_generators import to_camel


YEAR_MONTH_PATTERN = re.compile(r"^[0-9]{4}-(0[1-9]|1[0-2])$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LIST_DELIMITERS = re.compile(r"[\n,;•]")


# ===== ENUMS =====

class ImportSectionKey(str, Enum):
    """The seven profile sections an import produces drafts for, in commit order."""
    WORK_EXPERIENCES = "work_experiences"
    EDUCATION = "education"
    SKILLS = "skills"
    PROJECTS = "projects"
    CERTIFICATIONS = "certifications"
    ACHIEVEMENTS = "achievements"
    REFERENCES = "references"


class SkillCategory(str, Enum):
    TECHNICAL = "technical"
    SOFT = "soft"
    LANGUAGE = "language"
    TOOL = "tool"
    FRAMEWORK = "framework"
    OTHER = "other"


class ProficiencyLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class ReferenceRelationship(str, Enum):
    MANAGER = "manager"
    COLLEAGUE = "colleague"
    CLIENT = "client"
    PROFESSOR = "professor"
    MENTOR = "mentor"
    OTHER = "other"


# ===== SHARED CHECKS =====

def is_http_url(value: str) -> bool:
    """Absolute http(s) URL with a host and no whitespace."""
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def is_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ===== LOOSE COERCION (extracted records) =====

def _coerce_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (list, tuple)):
        parts = [_coerce_text(member) for member in value]
        joined = "\n".join(part for part in parts if part)
        return joined or None
    return None


def _coerce_list(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        members = LIST_DELIMITERS.split(value)
    elif isinstance(value, (list, tuple)):
        members = value
    else:
        members = [value]
    cleaned = []
    for member in members:
        if isinstance(member, (list, tuple)):
            continue
        text = _coerce_text(member)
        if text:
            cleaned.append(text)
    return cleaned or None


def _coerce_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "y"):
            return True
        if lowered in ("false", "no", "n"):
            return False
    return None


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _coerce_records(value: Any) -> Any:
    return [] if value is None else value


LooseText = Annotated[Optional[str], BeforeValidator(_coerce_text)]
LooseList = Annotated[Optional[List[str]], BeforeValidator(_coerce_list)]
LooseBool = Annotated[Optional[bool], BeforeValidator(_coerce_bool)]
LooseNumber = Annotated[Optional[float], BeforeValidator(_coerce_number)]


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExtractedRecord(CamelModel):
    model_config = ConfigDict(extra="ignore")


class ExtractedWorkExperience(ExtractedRecord):
    job_title: LooseText = None
    company: LooseText = None
    location: LooseText = None
    start_date: LooseText = None
    end_date: LooseText = None
    is_current: LooseBool = None
    description: LooseText = None
    technologies: LooseList = None


class ExtractedEducation(ExtractedRecord):
    degree: LooseText = None
    field_of_study: LooseText = None
    institution: LooseText = None
    location: LooseText = None
    start_date: LooseText = None
    end_date: LooseText = None
    gpa: LooseText = None
    honors: LooseText = None
    relevant_coursework: LooseList = None


class ExtractedSkill(ExtractedRecord):
    name: LooseText = None
    category: LooseText = None
    proficiency_level: LooseText = None
    years_of_experience: LooseNumber = None


class ExtractedProject(ExtractedRecord):
    title: LooseText = None
    description: LooseText = None
    technologies: LooseList = None
    project_url: LooseText = None
    github_url: LooseText = None
    start_date: LooseText = None
    end_date: LooseText = None
    is_ongoing: LooseBool = None


class ExtractedCertification(ExtractedRecord):
    name: LooseText = None
    issuing_organization: LooseText = None
    issue_date: LooseText = None
    expiration_date: LooseText = None
    credential_id: LooseText = None
    credential_url: LooseText = None


class ExtractedAchievement(ExtractedRecord):
    title: LooseText = None
    description: LooseText = None
    organization: LooseText = None
    date: LooseText = None
    url: LooseText = None


class ExtractedReference(ExtractedRecord):
    name: LooseText = None
    title: LooseText = None
    company: LooseText = None
    email: LooseText = None
    phone: LooseText = None
    relationship: LooseText = None


# ===== PROFILE =====

class ProfileFieldsDraft(CamelModel):
    """
    Candidate profile fields proposed by an import.

    Exactly one per import; all fields are None when nothing was extracted.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    professional_summary: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_missing(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return _blank_to_none(v)

    @field_validator("email")
    @classmethod
    def email_must_look_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_email(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("linkedin_url", "github_url", "portfolio_url")
    @classmethod
    def url_must_be_absolute(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_http_url(v):
            raise ValueError("URL must be an absolute http(s) URL")
        return v

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class AIProfilePayload(CamelModel):
    """Shape the structured-extraction model must return."""
    model_config = ConfigDict(extra="ignore")

    first_name: LooseText = None
    last_name: LooseText = None
    email: LooseText = None
    phone: LooseText = None
    address: LooseText = None
    city: LooseText = None
    state: LooseText = None
    zip_code: LooseText = None
    country: LooseText = None
    linkedin_url: LooseText = None
    github_url: LooseText = None
    portfolio_url: LooseText = None
    professional_summary: LooseText = None

    work_experiences: List[ExtractedWorkExperience] = Field(default_factory=list)
    education: List[ExtractedEducation] = Field(default_factory=list)
    skills: List[ExtractedSkill] = Field(default_factory=list)
    projects: List[ExtractedProject] = Field(default_factory=list)
    certifications: List[ExtractedCertification] = Field(default_factory=list)
    achievements: List[ExtractedAchievement] = Field(default_factory=list)
    references: List[ExtractedReference] = Field(default_factory=list)

    warnings: List[str] = Field(default_factory=list)

    @field_validator(
        "work_experiences", "education", "skills", "projects",
        "certifications", "achievements", "references", "warnings",
        mode="before",
    )
    @classmethod
    def null_list_is_empty(cls, v):
        return _coerce_records(v)


# ===== CREATE REQUESTS =====

class CreateRequest(CamelModel):
    """Base for the strict per-section payloads the repository accepts."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        use_enum_values=True,
        extra="forbid",
    )

    display_order: int = Field(default=0, ge=0)

    @field_validator("*", mode="before")
    @classmethod
    def blank_is_missing(cls, v):
        return _blank_to_none(v)


def _check_year_month(v: Optional[str]) -> Optional[str]:
    if v is not None and not YEAR_MONTH_PATTERN.match(v):
        raise ValueError("Date must use the YYYY-MM format")
    return v


def _check_url(v: Optional[str]) -> Optional[str]:
    if v is not None and not is_http_url(v):
        raise ValueError("URL must be an absolute http(s) URL")
    return v


YearMonth = Annotated[str, AfterValidator(_check_year_month)]
OptionalYearMonth = Annotated[Optional[str], AfterValidator(_check_year_month)]
OptionalHttpUrl = Annotated[Optional[str], AfterValidator(_check_url)]


class CreateWorkExperienceRequest(CreateRequest):
    job_title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: Optional[str] = None
    start_date: YearMonth
    end_date: OptionalYearMonth = None
    is_current: bool = False
    description: Optional[str] = None
    technologies: Optional[str] = None


class CreateEducationRequest(CreateRequest):
    degree: str = Field(..., min_length=1)
    field_of_study: Optional[str] = None
    institution: str = Field(..., min_length=1)
    location: Optional[str] = None
    start_date: OptionalYearMonth = None
    end_date: OptionalYearMonth = None
    gpa: Optional[str] = None
    honors: Optional[str] = None
    relevant_coursework: Optional[str] = None


class CreateSkillRequest(CreateRequest):
    name: str = Field(..., min_length=1)
    category: SkillCategory
    proficiency_level: Optional[ProficiencyLevel] = None
    years_of_experience: Optional[int] = Field(default=None, ge=0)


class CreateProjectRequest(CreateRequest):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    technologies: Optional[str] = None
    project_url: OptionalHttpUrl = None
    github_url: OptionalHttpUrl = None
    start_date: OptionalYearMonth = None
    end_date: OptionalYearMonth = None
    is_ongoing: bool = False


class CreateCertificationRequest(CreateRequest):
    name: str = Field(..., min_length=1)
    issuing_organization: str = Field(..., min_length=1)
    issue_date: OptionalYearMonth = None
    expiration_date: OptionalYearMonth = None
    credential_id: Optional[str] = None
    credential_url: OptionalHttpUrl = None


class CreateAchievementRequest(CreateRequest):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    organization: Optional[str] = None
    date: OptionalYearMonth = None
    url: OptionalHttpUrl = None


class CreateReferenceRequest(CreateRequest):
    name: str = Field(..., min_length=1)
    title: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[ReferenceRelationship] = None

    @field_validator("email")
    @classmethod
    def email_must_look_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_email(v):
            raise ValueError("Invalid email address")
        return v


# ===== IMPORT RESULTS =====

class SectionDraftItem(CamelModel):
    """One reviewable draft: a validated create request plus its own warnings."""
    id: str
    request: SerializeAsAny[CreateRequest]
    warnings: List[str] = Field(default_factory=list)


class PendingSectionResult(CamelModel):
    items: List[SectionDraftItem] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class ImportContextCounts(CamelModel):
    """Persisted entity count per section when the import was staged."""
    work_experiences: int = Field(default=0, ge=0)
    education: int = Field(default=0, ge=0)
    skills: int = Field(default=0, ge=0)
    projects: int = Field(default=0, ge=0)
    certifications: int = Field(default=0, ge=0)
    achievements: int = Field(default=0, ge=0)
    references: int = Field(default=0, ge=0)

    def for_section(self, section: ImportSectionKey) -> int:
        return getattr(self, ImportSectionKey(section).value)


class ProfileExtraction(CamelModel):
    """Output of the profile extractor: profile draft, raw sections, warnings."""
    profile: ProfileFieldsDraft = Field(default_factory=ProfileFieldsDraft)
    work_experiences: List[ExtractedWorkExperience] = Field(default_factory=list)
    education: List[ExtractedEducation] = Field(default_factory=list)
    skills: List[ExtractedSkill] = Field(default_factory=list)
    projects: List[ExtractedProject] = Field(default_factory=list)
    certifications: List[ExtractedCertification] = Field(default_factory=list)
    achievements: List[ExtractedAchievement] = Field(default_factory=list)
    references: List[ExtractedReference] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    def section_items(self, section: ImportSectionKey) -> List[ExtractedRecord]:
        return getattr(self, ImportSectionKey(section).value)


class ResumeImportResponse(ProfileExtraction):
    """What one import returns to the caller."""
    markdown: Optional[str] = None


@dataclass(frozen=True)
class RawDocument:
    """Uploaded bytes plus the declared media type. Consumed once."""
    content: bytes
    media_type: str
