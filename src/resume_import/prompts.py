"""
Resume Profile Extraction Prompts

System and user prompts for structured resume extraction.
The model receives OCR markdown and must answer with one JSON object
matching PROFILE_OUTPUT_SCHEMA.
"""

# JSON schema for structured output
PROFILE_OUTPUT_SCHEMA = """{
  "firstName": "string|null",
  "lastName": "string|null",
  "email": "string|null",
  "phone": "string|null",
  "address": "string|null",
  "city": "string|null",
  "state": "string|null",
  "zipCode": "string|null",
  "country": "string|null",
  "linkedinUrl": "string|null",
  "githubUrl": "string|null",
  "portfolioUrl": "string|null",
  "professionalSummary": "string|null (600 characters or fewer)",
  "workExperiences": [{
    "jobTitle": "string|null", "company": "string|null", "location": "string|null",
    "startDate": "YYYY-MM|null", "endDate": "YYYY-MM|Present|null", "isCurrent": "boolean|null",
    "description": "string|null", "technologies": ["string", ...]
  }],
  "education": [{
    "degree": "string|null", "fieldOfStudy": "string|null", "institution": "string|null",
    "location": "string|null", "startDate": "YYYY-MM|null", "endDate": "YYYY-MM|null",
    "gpa": "string|null", "honors": "string|null", "relevantCoursework": ["string", ...]
  }],
  "skills": [{
    "name": "string|null",
    "category": "technical|soft|language|tool|framework|other|null",
    "proficiencyLevel": "beginner|intermediate|advanced|expert|null",
    "yearsOfExperience": "number|null"
  }],
  "projects": [{
    "title": "string|null", "description": "string|null", "technologies": ["string", ...],
    "projectUrl": "string|null", "githubUrl": "string|null",
    "startDate": "YYYY-MM|null", "endDate": "YYYY-MM|Present|null", "isOngoing": "boolean|null"
  }],
  "certifications": [{
    "name": "string|null", "issuingOrganization": "string|null", "issueDate": "YYYY-MM|null",
    "expirationDate": "YYYY-MM|null", "credentialId": "string|null", "credentialUrl": "string|null"
  }],
  "achievements": [{
    "title": "string|null", "description": "string|null", "organization": "string|null",
    "date": "YYYY-MM|null", "url": "string|null"
  }],
  "references": [{
    "name": "string|null", "title": "string|null", "company": "string|null",
    "email": "string|null", "phone": "string|null",
    "relationship": "manager|colleague|client|professor|mentor|other|null"
  }],
  "warnings": ["anything in the resume you could not map confidently", ...]
}"""


PROFILE_EXTRACTION_SYSTEM_PROMPT = f"""You are assisting with resume onboarding for a job-application tool.

The resume content has already been converted to GitHub-Flavored Markdown via OCR.
Populate the provided schema using only facts that appear in the resume.

Rules:
- Use null for fields that are missing; use [] for sections with no entries.
- Keep URLs complete.
- Limit the professional summary to 600 characters or fewer.
- Do not invent information.

Respond with ONLY a JSON object in this exact shape:
{PROFILE_OUTPUT_SCHEMA}"""


PROFILE_EXTRACTION_USER_TEMPLATE = """Extract the profile from this resume.

=== RESUME (markdown) ===
{resume_markdown}
=== END RESUME ==="""
