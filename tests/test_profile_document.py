"""Tests for the path-addressable profile document."""

from __future__ import annotations

import pytest

from applydesk.errors import ItemIndexError, PathError, SchemaError
from applydesk.state.profile_document import ProfileDocument, ProfilePath
from applydesk.state.profile_schema import CANONICAL_PROFILE, Section


def test_default_document_has_all_sections():
    document = ProfileDocument.default()

    assert set(document.to_dict()) == {section.value for section in Section}
    assert document.to_dict() == CANONICAL_PROFILE


def test_missing_section_is_back_filled_from_defaults():
    row = {
        "user_id": "u-1",
        "my_information": {"first_name": "Ada"},
        "my_experience": {"resume": {"filename": "cv.pdf"}},
    }

    document = ProfileDocument.from_persisted(row)
    data = document.to_dict()

    assert data["self_identity"] == CANONICAL_PROFILE["self_identity"]
    assert data["personal_information"] == CANONICAL_PROFILE["personal_information"]
    assert data["my_information"]["first_name"] == "Ada"
    assert data["my_information"]["country"] == "United States"
    assert data["my_experience"]["resume"] == {"path": "", "filename": "cv.pdf", "file_url": ""}
    assert data["my_experience"]["skills"] == CANONICAL_PROFILE["my_experience"]["skills"]


def test_persisted_items_and_unknown_keys():
    row = {
        "my_experience": {"skills": [{"skill_name": "Python", "level": "expert"}, "not-an-item"]},
        "self_identity": {"language": "English", "favourite_colour": "blue"},
        "personal_information": "corrupted",
    }

    data = ProfileDocument.from_persisted(row).to_dict()

    assert data["my_experience"]["skills"] == [{"skill_name": "Python"}]
    assert "favourite_colour" not in data["self_identity"]
    assert data["self_identity"]["language"] == "English"
    assert data["personal_information"] == CANONICAL_PROFILE["personal_information"]


def test_absent_row_yields_defaults():
    assert ProfileDocument.from_persisted(None) == ProfileDocument.default()


@pytest.mark.parametrize(
    "section, field",
    [("not_a_section", "first_name"), ("my_information", "middle_name")],
)
def test_unknown_section_or_field_is_rejected(section, field):
    with pytest.raises(PathError):
        ProfilePath(section, field)


def test_path_shape_is_validated():
    with pytest.raises(PathError):
        ProfilePath(Section.MY_INFORMATION, "first_name", 0)
    with pytest.raises(PathError):
        ProfilePath(Section.MY_EXPERIENCE, "skills", 0, "proficiency")
    with pytest.raises(PathError):
        ProfilePath(Section.MY_EXPERIENCE, "skills", None, "skill_name")


def test_get_out_of_bounds_raises_path_error():
    document = ProfileDocument.default()

    with pytest.raises(PathError):
        document.get(ProfilePath(Section.MY_EXPERIENCE, "skills", 5, "skill_name"))
    with pytest.raises(PathError):
        document.get(ProfilePath(Section.MY_EXPERIENCE, "skills", -1))


@pytest.mark.parametrize(
    "path, value",
    [
        (ProfilePath(Section.MY_INFORMATION, "first_name"), "Grace"),
        (ProfilePath(Section.PERSONAL_INFORMATION, "gender"), "Female"),
        (ProfilePath(Section.MY_EXPERIENCE, "work_experience", 0, "job_title"), "Engineer"),
        (ProfilePath(Section.MY_EXPERIENCE, "social_network_urls", 1, "url"), "https://github.com/g"),
    ],
)
def test_set_round_trips_without_touching_siblings(path, value):
    before = ProfileDocument.default()

    after = before.set(path, value)

    assert after.get(path) == value
    expected = before.to_dict()
    target = expected[path.section.value]
    if path.index is None:
        target[path.field] = value
    else:
        target[path.field][path.index][path.subfield] = value
    assert after.to_dict() == expected
    # The original value is untouched.
    assert before == ProfileDocument.default()


def test_subfield_update_leaves_other_elements_alone():
    document = ProfileDocument.default().append_item(Section.MY_EXPERIENCE, "skills", {"skill_name": "Go"})

    updated = document.set(ProfilePath(Section.MY_EXPERIENCE, "skills", 1, "skill_name"), "Rust")

    assert updated.get(ProfilePath(Section.MY_EXPERIENCE, "skills")) == [
        {"skill_name": "Skill 1"},
        {"skill_name": "Rust"},
        {"skill_name": "Go"},
    ]


def test_record_field_is_shallow_merged():
    path = ProfilePath(Section.MY_EXPERIENCE, "resume")
    document = ProfileDocument.default().set(path, {"path": "resumes/a.pdf", "filename": "a.pdf"})

    updated = document.set(path, {"path": "https://cdn.test/b.pdf"})

    assert updated.get(path) == {"path": "https://cdn.test/b.pdf", "filename": "a.pdf", "file_url": ""}


def test_record_field_rejects_unknown_keys():
    with pytest.raises(PathError):
        ProfileDocument.default().set(ProfilePath(Section.MY_EXPERIENCE, "resume"), {"size": 10})


def test_scalar_field_rejects_structured_values():
    with pytest.raises(SchemaError):
        ProfileDocument.default().set(ProfilePath(Section.MY_INFORMATION, "city"), {"name": "Paris"})


def test_replacing_an_element_fills_missing_keys():
    path = ProfilePath(Section.MY_EXPERIENCE, "education", 0)

    updated = ProfileDocument.default().set(path, {"school_name": "MIT"})

    assert updated.get(path) == {
        "school_name": "MIT",
        "degree": "",
        "field_of_study": "",
        "overall_result": "",
        "from": "",
        "to": "",
    }


def test_append_item_uses_blank_template():
    document = ProfileDocument.default().append_item("my_experience", "work_experience")

    items = document.get(ProfilePath(Section.MY_EXPERIENCE, "work_experience"))

    assert len(items) == 2
    assert items[1] == {
        "job_title": "",
        "company_name": "",
        "location": "",
        "start_date": "",
        "end_date": "",
        "description": "",
    }


def test_append_item_requires_sequence_field():
    with pytest.raises(SchemaError):
        ProfileDocument.default().append_item(Section.MY_EXPERIENCE, "resume", {"path": "x"})
    with pytest.raises(SchemaError):
        ProfileDocument.default().append_item(Section.MY_INFORMATION, "city")


def test_remove_item_preserves_order():
    document = (
        ProfileDocument.default()
        .append_item(Section.MY_EXPERIENCE, "skills", {"skill_name": "Skill 3"})
        .remove_item(Section.MY_EXPERIENCE, "skills", 1)
    )

    assert document.get(ProfilePath(Section.MY_EXPERIENCE, "skills")) == [
        {"skill_name": "Skill 1"},
        {"skill_name": "Skill 3"},
    ]


def test_remove_item_out_of_bounds_raises_index_error():
    with pytest.raises(IndexError):
        ProfileDocument.default().remove_item(Section.MY_EXPERIENCE, "skills", 2)
    with pytest.raises(ItemIndexError):
        ProfileDocument.default().remove_item(Section.MY_EXPERIENCE, "skills", -1)


def test_readers_never_receive_a_mutable_alias():
    document = ProfileDocument.default()

    skills = document.get(ProfilePath(Section.MY_EXPERIENCE, "skills"))
    skills.append({"skill_name": "Injected"})
    section = document.section("my_information")
    section["first_name"] = "Mallory"

    assert document == ProfileDocument.default()


def test_every_mutation_returns_a_new_document():
    document = ProfileDocument.default()

    updated = document.set(ProfilePath(Section.SELF_IDENTITY, "language"), "French")

    assert updated is not document
    assert updated != document
