"""Canonical profile schema (version 0): sections, field kinds and defaults."""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, Mapping

SCHEMA_VERSION = 0


class Section(str, Enum):
    MY_INFORMATION = "my_information"
    MY_EXPERIENCE = "my_experience"
    APPLICATION_QUESTIONS = "application_questions"
    PERSONAL_INFORMATION = "personal_information"
    SELF_IDENTITY = "self_identity"


class FieldKind(str, Enum):
    SCALAR = "scalar"
    RECORD = "record"  # a single structured record
    SEQUENCE = "sequence"  # ordered list of structured records


# Blank entries used when a sequence item is appended without explicit values.
ITEM_TEMPLATES: Dict[str, Dict[str, str]] = {
    "work_experience": {
        "job_title": "",
        "company_name": "",
        "location": "",
        "start_date": "",
        "end_date": "",
        "description": "",
    },
    "education": {
        "school_name": "",
        "degree": "",
        "field_of_study": "",
        "overall_result": "",
        "from": "",
        "to": "",
    },
    "skills": {"skill_name": ""},
    "social_network_urls": {"platform": "", "url": ""},
}

RESUME_TEMPLATE: Dict[str, str] = {"path": "", "filename": "", "file_url": ""}

CANONICAL_PROFILE: Dict[str, Dict[str, Any]] = {
    Section.MY_INFORMATION.value: {
        "how_did_you_hear_about_us": "Social Media",
        "country": "United States",
        "first_name": "",
        "last_name": "",
        "address_line_1": "",
        "address_line_2": "",
        "city": "",
        "state": "",
        "postal_code": "",
        "email_address": "",
        "phone_device_type": "",
        "country_phone_code": "",
        "phone_number": "",
        "phone_extension": "",
    },
    Section.MY_EXPERIENCE.value: {
        "work_experience": [
            {
                "job_title": "",
                "company_name": "Company Name",
                "location": "City, State",
                "start_date": "MM/DD/YYYY",
                "end_date": "MM/DD/YYYY",
                "description": "- Description of responsibilities and accomplishments here.",
            }
        ],
        "education": [
            {
                "school_name": "University Name",
                "degree": "Degree Type",
                "field_of_study": "Field of Study",
                "overall_result": "",
                "from": "YYYY",
                "to": "YYYY",
            }
        ],
        "skills": [{"skill_name": "Skill 1"}, {"skill_name": "Skill 2"}],
        "resume": dict(RESUME_TEMPLATE),
        "social_network_urls": [
            {"platform": "LinkedIn", "url": ""},
            {"platform": "GitHub", "url": ""},
        ],
    },
    Section.APPLICATION_QUESTIONS.value: {
        "Are you able to perform the essential functions of the job for which you are applying with or without reasonable accomodation": "Yes",
        "Are you legally authorized to work in the country for which you are applying": "Yes",
        "Will you now, or in the future, require sponsorship for an employment visa": "No",
        "Are you currently or previously employed at this company": "No",
        "Do you have any criminal convictions": "No",
        "Have you been employed at any company before": "Yes",
    },
    Section.PERSONAL_INFORMATION.value: {
        "gender": "",
        "date_of_birth": "",
        "race": "",
        "religion": "",
        "marital_status": "",
        "invitation_to_self_identify_as_a_protected_veteran": "",
    },
    Section.SELF_IDENTITY.value: {
        "language": "",
        "name": "",
        "date": "",
        "disability": "",
    },
}


def _kind_of(default: Any) -> FieldKind:
    if isinstance(default, list):
        return FieldKind.SEQUENCE
    if isinstance(default, Mapping):
        return FieldKind.RECORD
    return FieldKind.SCALAR


FIELD_KINDS: Dict[Section, Dict[str, FieldKind]] = {
    Section(name): {field: _kind_of(default) for field, default in fields.items()}
    for name, fields in CANONICAL_PROFILE.items()
}


def field_kind(section: Section, field: str) -> FieldKind:
    """Return the kind of ``field``; KeyError when it is not in the schema."""
    return FIELD_KINDS[section][field]


def record_keys(field: str) -> frozenset:
    """Keys allowed in a structured record or sequence item stored at ``field``."""
    if field in ITEM_TEMPLATES:
        return frozenset(ITEM_TEMPLATES[field])
    if field == "resume":
        return frozenset(RESUME_TEMPLATE)
    return frozenset()


def blank_item(field: str) -> Dict[str, Any]:
    return dict(ITEM_TEMPLATES[field])


def default_document() -> Dict[str, Dict[str, Any]]:
    """A fresh deep copy of the canonical default profile."""
    return copy.deepcopy(CANONICAL_PROFILE)
