"""Path-addressable, immutable profile document.

A path is ``(section, field, index?, subfield?)``. Paths are validated
against the canonical schema when they are built, so an unknown section or
field is rejected up front and never creates a new key. Every mutation
returns a new ``ProfileDocument``; unchanged sections and items are shared
between versions but never handed out, since readers always receive copies.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from applydesk.errors import ItemIndexError, PathError, SchemaError
from applydesk.state.profile_schema import (
    FieldKind,
    Section,
    blank_item,
    default_document,
    field_kind,
    record_keys,
)

logger = logging.getLogger(__name__)

SectionLike = Union[Section, str]


def _as_section(section: SectionLike) -> Section:
    try:
        return Section(section)
    except ValueError:
        raise PathError(f"Unknown profile section: {section!r}") from None


def _is_structured(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


@dataclass(frozen=True)
class ProfilePath:
    section: Section
    field: str
    index: Optional[int] = None
    subfield: Optional[str] = None

    def __post_init__(self) -> None:
        section = _as_section(self.section)
        object.__setattr__(self, "section", section)
        try:
            kind = field_kind(section, self.field)
        except KeyError:
            raise PathError(f"Unknown field {self.field!r} in section {section.value!r}") from None

        if self.index is not None:
            if kind is not FieldKind.SEQUENCE:
                raise PathError(f"Field {self.field!r} is not a sequence and cannot be indexed")
            if isinstance(self.index, bool) or not isinstance(self.index, int):
                raise PathError(f"Index must be an integer, got {self.index!r}")
        if self.subfield is not None:
            if self.index is None:
                raise PathError("A subfield can only be addressed inside an indexed item")
            if self.subfield not in record_keys(self.field):
                raise PathError(f"Unknown subfield {self.subfield!r} for {self.field!r}")

    @property
    def kind(self) -> FieldKind:
        return field_kind(self.section, self.field)

    def __str__(self) -> str:
        text = f"{self.section.value}.{self.field}"
        if self.index is not None:
            text += f"[{self.index}]"
        if self.subfield is not None:
            text += f".{self.subfield}"
        return text


def _check_index(field: str, index: int, length: int) -> None:
    if not 0 <= index < length:
        raise ItemIndexError(f"Index {index} out of range for {field!r} ({length} item(s))")


def _check_record_keys(field: str, value: Mapping) -> None:
    unknown = set(value) - record_keys(field)
    if unknown:
        raise PathError(f"Unknown key(s) for {field!r}: {', '.join(sorted(map(str, unknown)))}")


def _coerce_item(field: str, item: Any) -> Dict[str, Any]:
    if not isinstance(item, Mapping):
        raise SchemaError(f"Items of {field!r} must be mappings")
    _check_record_keys(field, item)
    for key, value in item.items():
        if _is_structured(value):
            raise SchemaError(f"{field}.{key} expects a scalar value")
    merged = blank_item(field)
    merged.update(item)
    return merged


class ProfileDocument:
    """The five-section profile of one identity."""

    __slots__ = ("_data",)

    def __init__(self, data: Dict[str, Dict[str, Any]]) -> None:
        # Internal constructor; use default() or from_persisted().
        self._data = data

    @classmethod
    def default(cls) -> "ProfileDocument":
        return cls(default_document())

    @classmethod
    def from_persisted(cls, row: Optional[Mapping[str, Any]]) -> "ProfileDocument":
        """Merge a persisted row over the canonical defaults.

        Missing sections and fields keep their defaults, structured records
        and sequence items are merged one level deep, and keys outside the
        schema are dropped.
        """
        data = default_document()
        if not row:
            return cls(data)

        for section in Section:
            persisted = row.get(section.value)
            if persisted is None:
                continue
            if not isinstance(persisted, Mapping):
                logger.warning("Ignoring malformed profile section %s", section.value)
                continue
            target = data[section.value]
            for field, value in persisted.items():
                if field not in target:
                    logger.debug("Dropping unknown profile field %s.%s", section.value, field)
                    continue
                merged = _merge_field(section, field, target[field], value)
                if merged is None:
                    logger.warning("Ignoring malformed value for %s.%s", section.value, field)
                    continue
                target[field] = merged
        return cls(data)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, path: ProfilePath) -> Any:
        value = self._data[path.section.value][path.field]
        if path.index is not None:
            _check_index(path.field, path.index, len(value))
            value = value[path.index]
            if path.subfield is not None:
                value = value.get(path.subfield)
        return copy.deepcopy(value)

    def section(self, section: SectionLike) -> Dict[str, Any]:
        return copy.deepcopy(self._data[_as_section(section).value])

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return copy.deepcopy(self._data)

    # ------------------------------------------------------------------
    # Mutations (each returns a new document)
    # ------------------------------------------------------------------

    def set(self, path: ProfilePath, value: Any) -> "ProfileDocument":
        current = self._data[path.section.value][path.field]
        kind = path.kind

        if path.index is not None:
            items = list(current)
            _check_index(path.field, path.index, len(items))
            if path.subfield is None:
                items[path.index] = _coerce_item(path.field, value)
            else:
                if _is_structured(value):
                    raise SchemaError(f"{path} expects a scalar value")
                element = dict(items[path.index])
                element[path.subfield] = value
                items[path.index] = element
            return self._replace(path.section, path.field, items)

        if kind is FieldKind.SCALAR:
            if _is_structured(value):
                raise SchemaError(f"{path} expects a scalar value")
            new_value = value
        elif kind is FieldKind.RECORD:
            if not isinstance(value, Mapping):
                raise SchemaError(f"{path} expects a mapping")
            _check_record_keys(path.field, value)
            # Partial update: keys not named keep their values.
            new_value = {**current, **copy.deepcopy(dict(value))}
        else:
            if not isinstance(value, (list, tuple)):
                raise SchemaError(f"{path} expects a list of items")
            new_value = [_coerce_item(path.field, item) for item in value]
        return self._replace(path.section, path.field, new_value)

    def append_item(
        self,
        section: SectionLike,
        field: str,
        item: Optional[Mapping[str, Any]] = None,
    ) -> "ProfileDocument":
        path = ProfilePath(section, field)
        if path.kind is not FieldKind.SEQUENCE:
            raise SchemaError(f"Field {field!r} is not a sequence")
        new_item = _coerce_item(field, item if item is not None else {})
        items = list(self._data[path.section.value][field])
        items.append(new_item)
        return self._replace(path.section, field, items)

    def remove_item(self, section: SectionLike, field: str, index: int) -> "ProfileDocument":
        path = ProfilePath(section, field, index)
        items = list(self._data[path.section.value][field])
        _check_index(field, index, len(items))
        del items[index]
        return self._replace(path.section, field, items)

    def _replace(self, section: Section, field: str, value: Any) -> "ProfileDocument":
        data = dict(self._data)
        updated_section = dict(data[section.value])
        updated_section[field] = value
        data[section.value] = updated_section
        return ProfileDocument(data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProfileDocument):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"ProfileDocument(sections={list(self._data)})"


def _merge_field(section: Section, field: str, default: Any, value: Any) -> Any:
    """Merge one persisted field over its default; None means malformed."""
    kind = field_kind(section, field)
    if kind is FieldKind.RECORD:
        if not isinstance(value, Mapping):
            return None
        allowed = record_keys(field)
        return {**default, **{key: val for key, val in value.items() if key in allowed}}
    if kind is FieldKind.SEQUENCE:
        if not isinstance(value, list):
            return None
        allowed = record_keys(field)
        merged = []
        for item in value:
            if not isinstance(item, Mapping):
                continue
            entry = blank_item(field)
            entry.update({key: val for key, val in item.items() if key in allowed})
            merged.append(entry)
        return merged
    if _is_structured(value):
        return None
    return value
