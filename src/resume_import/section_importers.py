"""
Section importers: turn raw extracted records into reviewable drafts.

One builder per profile section. Every builder walks the raw records in
order, drops records that miss a mandatory field (reporting an indexed
warning such as "Work experience #2: Missing company."), normalizes the rest
and assigns ``display_order`` continuing after the records already stored.
Dropped records do not consume a display-order slot.

A passing record may still carry warnings of its own when a supplied value
had to be discarded (an unreadable date, an invalid URL or email). Those are
reported on the draft and, indexed, in the section warnings.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from src.resume_import.normalizers import (
    is_present_token,
    join_string_list,
    normalize_date,
    normalize_email,
    normalize_proficiency_level,
    normalize_relationship,
    normalize_skill_category,
    normalize_years_of_experience,
    sanitize_phone,
    sanitize_url,
    string_or_none,
)
from src.resume_import.types import (
    CreateAchievementRequest,
    CreateCertificationRequest,
    CreateEducationRequest,
    CreateProjectRequest,
    CreateReferenceRequest,
    CreateRequest,
    CreateSkillRequest,
    CreateWorkExperienceRequest,
    ExtractedAchievement,
    ExtractedCertification,
    ExtractedEducation,
    ExtractedProject,
    ExtractedRecord,
    ExtractedReference,
    ExtractedSkill,
    ExtractedWorkExperience,
    ImportSectionKey,
    PendingSectionResult,
    SectionDraftItem,
)

RawRecords = Optional[Iterable[Any]]
Normalized = Tuple[Optional[CreateRequest], List[str]]


# ===== FIELD HELPERS =====

def _checked_date(raw: Optional[str], field: str, warnings: List[str]) -> Optional[str]:
    """Normalize an optional date, noting a supplied value that could not be read."""
    normalized = normalize_date(raw)
    if normalized is None and raw and not is_present_token(raw):
        warnings.append(f'Unrecognized {field} "{raw}"; left blank.')
    return normalized


def _checked_url(raw: Optional[str], field: str, warnings: List[str]) -> Optional[str]:
    sanitized = sanitize_url(raw)
    if sanitized is None and raw:
        warnings.append(f'Invalid {field} "{raw}"; left blank.')
    return sanitized


def _infer_flag(flag: Optional[bool], raw_end: Optional[str], end_date: Optional[str]) -> bool:
    """Explicit flag wins; otherwise true for a "Present"-style end date."""
    if flag is not None:
        return flag
    return end_date is None and is_present_token(raw_end)


# ===== PER-SECTION NORMALIZATION =====

def _normalize_work_experience(record: ExtractedWorkExperience, display_order: int) -> Normalized:
    warnings: List[str] = []

    job_title = string_or_none(record.job_title)
    company = string_or_none(record.company)
    start_date = normalize_date(record.start_date)

    if not job_title:
        warnings.append("Missing job title.")
    if not company:
        warnings.append("Missing company.")
    if not start_date:
        warnings.append("Missing or invalid start date.")

    if not (job_title and company and start_date):
        return None, warnings

    end_date = _checked_date(record.end_date, "end date", warnings)

    request = CreateWorkExperienceRequest(
        job_title=job_title,
        company=company,
        location=string_or_none(record.location),
        start_date=start_date,
        end_date=end_date,
        is_current=_infer_flag(record.is_current, record.end_date, end_date),
        description=string_or_none(record.description),
        technologies=join_string_list(record.technologies),
        display_order=display_order,
    )
    return request, warnings


def _normalize_education(record: ExtractedEducation, display_order: int) -> Normalized:
    warnings: List[str] = []

    degree = string_or_none(record.degree)
    institution = string_or_none(record.institution)

    if not degree:
        warnings.append("Missing degree.")
    if not institution:
        warnings.append("Missing institution.")

    if not (degree and institution):
        return None, warnings

    request = CreateEducationRequest(
        degree=degree,
        field_of_study=string_or_none(record.field_of_study),
        institution=institution,
        location=string_or_none(record.location),
        start_date=_checked_date(record.start_date, "start date", warnings),
        end_date=_checked_date(record.end_date, "end date", warnings),
        gpa=string_or_none(record.gpa),
        honors=string_or_none(record.honors),
        relevant_coursework=join_string_list(record.relevant_coursework),
        display_order=display_order,
    )
    return request, warnings


def _normalize_skill(record: ExtractedSkill, display_order: int) -> Normalized:
    name = string_or_none(record.name)
    if not name:
        return None, ["Missing skill name."]

    request = CreateSkillRequest(
        name=name,
        category=normalize_skill_category(record.category),
        proficiency_level=normalize_proficiency_level(record.proficiency_level),
        years_of_experience=normalize_years_of_experience(record.years_of_experience),
        display_order=display_order,
    )
    return request, []


def _normalize_project(record: ExtractedProject, display_order: int) -> Normalized:
    title = string_or_none(record.title)
    if not title:
        return None, ["Missing project title."]

    warnings: List[str] = []
    end_date = _checked_date(record.end_date, "end date", warnings)

    request = CreateProjectRequest(
        title=title,
        description=string_or_none(record.description),
        technologies=join_string_list(record.technologies),
        project_url=_checked_url(record.project_url, "project URL", warnings),
        github_url=_checked_url(record.github_url, "GitHub URL", warnings),
        start_date=_checked_date(record.start_date, "start date", warnings),
        end_date=end_date,
        is_ongoing=_infer_flag(record.is_ongoing, record.end_date, end_date),
        display_order=display_order,
    )
    return request, warnings


def _normalize_certification(record: ExtractedCertification, display_order: int) -> Normalized:
    warnings: List[str] = []

    name = string_or_none(record.name)
    issuing_organization = string_or_none(record.issuing_organization)

    if not name:
        warnings.append("Missing certification name.")
    if not issuing_organization:
        warnings.append("Missing issuing organization.")

    if not (name and issuing_organization):
        return None, warnings

    request = CreateCertificationRequest(
        name=name,
        issuing_organization=issuing_organization,
        issue_date=_checked_date(record.issue_date, "issue date", warnings),
        expiration_date=_checked_date(record.expiration_date, "expiration date", warnings),
        credential_id=string_or_none(record.credential_id),
        credential_url=_checked_url(record.credential_url, "credential URL", warnings),
        display_order=display_order,
    )
    return request, warnings


def _normalize_achievement(record: ExtractedAchievement, display_order: int) -> Normalized:
    title = string_or_none(record.title)
    if not title:
        return None, ["Missing achievement title."]

    warnings: List[str] = []
    request = CreateAchievementRequest(
        title=title,
        description=string_or_none(record.description),
        organization=string_or_none(record.organization),
        date=_checked_date(record.date, "date", warnings),
        url=_checked_url(record.url, "URL", warnings),
        display_order=display_order,
    )
    return request, warnings


def _normalize_reference(record: ExtractedReference, display_order: int) -> Normalized:
    name = string_or_none(record.name)
    if not name:
        return None, ["Missing reference name."]

    warnings: List[str] = []
    email = normalize_email(record.email)
    if email is None and record.email:
        warnings.append(f'Invalid email "{record.email}"; left blank.')

    request = CreateReferenceRequest(
        name=name,
        title=string_or_none(record.title),
        company=string_or_none(record.company),
        email=email,
        phone=sanitize_phone(record.phone),
        relationship=normalize_relationship(record.relationship),
        display_order=display_order,
    )
    return request, warnings


# ===== SHARED BUILDER =====

def _as_record(record_cls: Type[ExtractedRecord], raw: Any) -> ExtractedRecord:
    if isinstance(raw, record_cls):
        return raw
    if isinstance(raw, BaseModel):
        raw = raw.model_dump()
    if not isinstance(raw, Mapping):
        # Not an object at all: treat as a record with every field missing
        return record_cls()
    return record_cls.model_validate(dict(raw))


def _build_items(
    raw_items: RawRecords,
    existing_count: int,
    label: str,
    record_cls: Type[ExtractedRecord],
    normalize: Callable[[Any, int], Normalized],
    dedupe_key: Optional[Callable[[CreateRequest], str]] = None,
) -> PendingSectionResult:
    items: List[SectionDraftItem] = []
    warnings: List[str] = []
    seen = set()

    for index, raw in enumerate(raw_items or []):
        if raw is None:
            continue

        record = _as_record(record_cls, raw)
        request, item_warnings = normalize(record, existing_count + len(items))
        warnings.extend(f"{label} #{index + 1}: {warning}" for warning in item_warnings)

        if request is None:
            continue

        if dedupe_key is not None:
            key = dedupe_key(request)
            if key in seen:
                continue
            seen.add(key)

        items.append(
            SectionDraftItem(id=uuid.uuid4().hex, request=request, warnings=item_warnings)
        )

    return PendingSectionResult(items=items, warnings=warnings)


def build_work_experience_items(raw_items: RawRecords, existing_count: int) -> PendingSectionResult:
    return _build_items(
        raw_items, existing_count, "Work experience",
        ExtractedWorkExperience, _normalize_work_experience,
    )


def build_education_items(raw_items: RawRecords, existing_count: int) -> PendingSectionResult:
    return _build_items(
        raw_items, existing_count, "Education",
        ExtractedEducation, _normalize_education,
    )


def build_skill_items(raw_items: RawRecords, existing_count: int) -> PendingSectionResult:
    """Skills are additionally de-duplicated by case-insensitive name, silently."""
    return _build_items(
        raw_items, existing_count, "Skill",
        ExtractedSkill, _normalize_skill,
        dedupe_key=lambda request: request.name.lower(),
    )


def build_project_items(raw_items: RawRecords, existing_count: int) -> PendingSectionResult:
    return _build_items(
        raw_items, existing_count, "Project",
        ExtractedProject, _normalize_project,
    )


def build_certification_items(raw_items: RawRecords, existing_count: int) -> PendingSectionResult:
    return _build_items(
        raw_items, existing_count, "Certification",
        ExtractedCertification, _normalize_certification,
    )


def build_achievement_items(raw_items: RawRecords, existing_count: int) -> PendingSectionResult:
    return _build_items(
        raw_items, existing_count, "Achievement",
        ExtractedAchievement, _normalize_achievement,
    )


def build_reference_items(raw_items: RawRecords, existing_count: int) -> PendingSectionResult:
    return _build_items(
        raw_items, existing_count, "Reference",
        ExtractedReference, _normalize_reference,
    )


# ===== REGISTRY =====

@dataclass(frozen=True)
class SectionSpec:
    """How one section is built, validated and described in summaries."""
    key: ImportSectionKey
    label: str
    builder: Callable[[RawRecords, int], PendingSectionResult]
    request_model: Type[CreateRequest]
    singular: str
    plural: str

    def describe(self, count: int) -> str:
        """e.g. "1 skill", "3 education entries"."""
        return f"{count} {self.singular if count == 1 else self.plural}"


SECTION_SPECS: Dict[ImportSectionKey, SectionSpec] = {
    spec.key: spec
    for spec in (
        SectionSpec(ImportSectionKey.WORK_EXPERIENCES, "Work experience", build_work_experience_items,
                    CreateWorkExperienceRequest, "work experience", "work experiences"),
        SectionSpec(ImportSectionKey.EDUCATION, "Education", build_education_items,
                    CreateEducationRequest, "education entry", "education entries"),
        SectionSpec(ImportSectionKey.SKILLS, "Skill", build_skill_items,
                    CreateSkillRequest, "skill", "skills"),
        SectionSpec(ImportSectionKey.PROJECTS, "Project", build_project_items,
                    CreateProjectRequest, "project", "projects"),
        SectionSpec(ImportSectionKey.CERTIFICATIONS, "Certification", build_certification_items,
                    CreateCertificationRequest, "certification", "certifications"),
        SectionSpec(ImportSectionKey.ACHIEVEMENTS, "Achievement", build_achievement_items,
                    CreateAchievementRequest, "achievement", "achievements"),
        SectionSpec(ImportSectionKey.REFERENCES, "Reference", build_reference_items,
                    CreateReferenceRequest, "reference", "references"),
    )
}


def build_section_items(
    section: ImportSectionKey, raw_items: RawRecords, existing_count: int
) -> PendingSectionResult:
    return SECTION_SPECS[ImportSectionKey(section)].builder(raw_items, existing_count)
