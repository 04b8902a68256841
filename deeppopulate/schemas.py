# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/schemas.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Content-type schema models.

Raw schemas use the CMS vocabulary (``"type": "dynamiczone"`` and so on).
They are parsed once into typed attribute variants so that the populate
builder dispatches on a closed set of kinds instead of string keys:

- RelationAttribute: reference to another content type
- MediaAttribute: uploaded file(s)
- ComponentAttribute: embedded sub-schema
- DynamicZoneAttribute: list of candidate component variants
- OtherAttribute: scalars and anything else

Examples:
    >>> schema = ContentTypeSchema.from_dict(
    ...     "api::article.article",
    ...     {"attributes": {"title": {"type": "string"}, "cover": {"type": "media"}}},
    ... )
    >>> [(name, attr.kind.value) for name, attr in schema.attributes.items()]
    [('title', 'other'), ('cover', 'media')]
"""

# Standard
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type

# Third-Party
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# First-Party
from deeppopulate.errors import InvalidSchemaError


class AttributeKind(str, Enum):
    """Attribute kinds the populate builder distinguishes."""

    RELATION = "relation"
    MEDIA = "media"
    COMPONENT = "component"
    DYNAMIC_ZONE = "dynamiczone"
    OTHER = "other"


class SchemaAttribute(BaseModel):
    """Fields shared by every attribute kind."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: ClassVar[AttributeKind] = AttributeKind.OTHER

    type: str = Field(..., min_length=1, description="Raw attribute type as declared in the schema")
    visible: bool = Field(default=True, description="Whether the attribute is exposed through the API")
    private: bool = Field(default=False, description="Whether the attribute is excluded from responses")


class RelationAttribute(SchemaAttribute):
    """Reference to another content type."""

    kind: ClassVar[AttributeKind] = AttributeKind.RELATION

    relation: str = Field(..., min_length=1, description="Relation shape, e.g. oneToMany or morphToMany")
    target: Optional[str] = Field(None, description="Target content-type identifier (absent for morph relations)")

    @property
    def is_morph(self) -> bool:
        """Return True for polymorphic relations whose target is not statically known.

        Returns:
            bool: True if the relation shape starts with "morph" (any case).

        Examples:
            >>> RelationAttribute(type="relation", relation="morphToMany").is_morph
            True
            >>> RelationAttribute(type="relation", relation="MorphOne").is_morph
            True
            >>> RelationAttribute(type="relation", relation="oneToMany", target="api::tag.tag").is_morph
            False
        """
        return self.relation.lower().startswith("morph")


class MediaAttribute(SchemaAttribute):
    """Uploaded media."""

    kind: ClassVar[AttributeKind] = AttributeKind.MEDIA

    multiple: bool = False


class ComponentAttribute(SchemaAttribute):
    """Embedded component."""

    kind: ClassVar[AttributeKind] = AttributeKind.COMPONENT

    component: str = Field(..., min_length=1, description="Identifier of the embedded component")
    repeatable: bool = False


class DynamicZoneAttribute(SchemaAttribute):
    """Polymorphic list of components."""

    kind: ClassVar[AttributeKind] = AttributeKind.DYNAMIC_ZONE

    components: List[str] = Field(default_factory=list, description="Candidate component identifiers, in declaration order")


class OtherAttribute(SchemaAttribute):
    """Any attribute the builder does not populate."""


_ATTRIBUTE_TYPES: Dict[str, Type[SchemaAttribute]] = {
    AttributeKind.RELATION.value: RelationAttribute,
    AttributeKind.MEDIA.value: MediaAttribute,
    AttributeKind.COMPONENT.value: ComponentAttribute,
    AttributeKind.DYNAMIC_ZONE.value: DynamicZoneAttribute,
}


def _describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic validation error into one line.

    Args:
        exc: The validation error.

    Returns:
        str: ``field: message`` pairs joined by ``; ``.
    """
    return "; ".join(f"{'.'.join(str(part) for part in error['loc']) or 'attribute'}: {error['msg']}" for error in exc.errors())


def parse_attribute(uid: str, name: str, raw: Any) -> SchemaAttribute:
    """Parse one raw attribute definition into its typed variant.

    Args:
        uid: Identifier of the content type that owns the attribute.
        name: Attribute name.
        raw: Raw attribute definition.

    Returns:
        SchemaAttribute: The typed attribute.

    Raises:
        InvalidSchemaError: If the definition is not a mapping or misses required fields.

    Examples:
        >>> parse_attribute("api::page.page", "blocks", {"type": "dynamiczone", "components": ["a.b"]}).components
        ['a.b']
        >>> parse_attribute("api::page.page", "slug", {"type": "uid"}).kind
        <AttributeKind.OTHER: 'other'>
        >>> parse_attribute("api::page.page", "seo", {"type": "component"})
        Traceback (most recent call last):
        ...
        deeppopulate.errors.InvalidSchemaError: Invalid schema for 'api::page.page' (attribute 'seo'): component: Field required
    """
    if not isinstance(raw, Mapping):
        raise InvalidSchemaError(uid, "attribute definition must be an object", attribute=name)

    type_name = raw.get("type")
    if type_name is not None and not isinstance(type_name, str):
        raise InvalidSchemaError(uid, "'type' must be a string", attribute=name)

    model = _ATTRIBUTE_TYPES.get(type_name, OtherAttribute)
    try:
        return model.model_validate(dict(raw))
    except ValidationError as exc:
        raise InvalidSchemaError(uid, _describe_validation_error(exc), attribute=name) from exc


class ContentTypeSchema(BaseModel):
    """A named collection of attributes, in declaration order."""

    model_config = ConfigDict(frozen=True)

    uid: str = Field(..., min_length=1, description="Content-type or component identifier")
    attributes: Dict[str, SchemaAttribute] = Field(default_factory=dict)

    @classmethod
    def from_dict(cls, uid: str, raw: Any) -> "ContentTypeSchema":
        """Build a schema from its raw definition.

        Args:
            uid: Identifier the schema is registered under.
            raw: Raw schema, a mapping with an ``attributes`` mapping.

        Returns:
            ContentTypeSchema: The parsed schema.

        Raises:
            InvalidSchemaError: If the schema or any attribute is malformed.

        Examples:
            >>> ContentTypeSchema.from_dict("shared.empty", {}).attributes
            {}
            >>> ContentTypeSchema.from_dict("shared.bad", {"attributes": []})
            Traceback (most recent call last):
            ...
            deeppopulate.errors.InvalidSchemaError: Invalid schema for 'shared.bad': 'attributes' must be an object
        """
        if not isinstance(raw, Mapping):
            raise InvalidSchemaError(uid, "schema must be an object")

        raw_attributes = raw.get("attributes", {})
        if not isinstance(raw_attributes, Mapping):
            raise InvalidSchemaError(uid, "'attributes' must be an object")

        attributes = {name: parse_attribute(uid, name, definition) for name, definition in raw_attributes.items()}
        return cls(uid=uid, attributes=attributes)
