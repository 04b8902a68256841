# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/builder.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Recursive populate directive builder.

Given a content-type identifier, walks its schema and produces the nested
``populate`` tree the retrieval layer understands:

- relations: ``{"populate": "*"}`` (or an override field path)
- media: ``{"populate": "*"}``
- components: ``{"populate": <tree of the component>}``
- dynamic zones: ``{"on": {<variant>: {"populate": <tree of the variant>}}}``

Morph relations are skipped because their target is not statically known.
Identifiers already on the current recursion path are not expanded again;
such a branch ends with an empty tree, so cyclic component graphs terminate.

Examples:
    >>> from deeppopulate.registry import SchemaRegistry
    >>> registry = SchemaRegistry.from_dict({
    ...     "api::article.article": {"attributes": {
    ...         "title": {"type": "string"},
    ...         "cover": {"type": "media"},
    ...         "body": {"type": "component", "component": "shared.paragraph"},
    ...     }},
    ...     "shared.paragraph": {"attributes": {"image": {"type": "media"}}},
    ... })
    >>> PopulateSpecBuilder(registry).build("api::article.article")
    {'cover': {'populate': '*'}, 'body': {'populate': {'image': {'populate': '*'}}}}
"""

# Standard
import logging
from typing import Any, Dict, FrozenSet, Mapping, Optional

# First-Party
from deeppopulate.registry import SchemaLookup
from deeppopulate.schemas import ComponentAttribute, ContentTypeSchema, DynamicZoneAttribute, MediaAttribute, RelationAttribute, SchemaAttribute
from deeppopulate.visibility import AUDIT_ATTRIBUTES, DefaultVisibilityPolicy, VisibilityPolicy

logger = logging.getLogger(__name__)

WILDCARD = "*"

# Relation attribute name -> field path populated instead of the wildcard
DEFAULT_POPULATE_OVERRIDES: Dict[str, str] = {"testimonials": "user.image"}

PopulateTree = Dict[str, Dict[str, Any]]


class PopulateSpecBuilder:
    """Builds populate directive trees from a schema lookup.

    The builder holds no per-request state and may be shared between
    concurrent requests.
    """

    def __init__(
        self,
        schema_lookup: SchemaLookup,
        visibility_policy: Optional[VisibilityPolicy] = None,
        populate_overrides: Optional[Mapping[str, str]] = None,
        include_audit_fields: bool = False,
    ):
        """Create a builder.

        Args:
            schema_lookup: Resolves identifiers to schemas.
            visibility_policy: Decides which relations are exposed. Defaults to ``DefaultVisibilityPolicy``.
            populate_overrides: Relation name to field path table. Defaults to ``DEFAULT_POPULATE_OVERRIDES``.
            include_audit_fields: Populate createdBy/updatedBy even when they are hidden.
        """
        self.schema_lookup = schema_lookup
        self.visibility_policy = visibility_policy or DefaultVisibilityPolicy()
        self.populate_overrides = dict(DEFAULT_POPULATE_OVERRIDES if populate_overrides is None else populate_overrides)
        self.include_audit_fields = include_audit_fields

    def build(self, uid: str) -> PopulateTree:
        """Build the populate tree for a content type.

        Args:
            uid: Content-type identifier.

        Returns:
            PopulateTree: Attribute name to directive, in schema declaration order.

        Raises:
            SchemaNotFoundError: If ``uid`` or any nested component is unknown.
        """
        return self._build(uid, frozenset())

    def _build(self, uid: str, active_path: FrozenSet[str]) -> PopulateTree:
        """Build the tree for ``uid`` with ``active_path`` already being expanded.

        Args:
            uid: Identifier to expand.
            active_path: Identifiers on the current recursion path.

        Returns:
            PopulateTree: The tree for ``uid``.
        """
        schema = self.schema_lookup.get_model(uid)
        active_path = active_path | {uid}

        tree: PopulateTree = {}
        for name, attribute in schema.attributes.items():
            directive = self._directive(schema, name, attribute, active_path)
            if directive is not None:
                tree[name] = directive
        return tree

    def _directive(self, schema: ContentTypeSchema, name: str, attribute: SchemaAttribute, active_path: FrozenSet[str]) -> Optional[Dict[str, Any]]:
        """Return the directive for one attribute, or None to leave it out.

        Args:
            schema: Schema that owns the attribute.
            name: Attribute name.
            attribute: Attribute definition.
            active_path: Identifiers on the current recursion path.

        Returns:
            Optional[Dict[str, Any]]: The directive, or None.
        """
        if isinstance(attribute, RelationAttribute):
            if attribute.is_morph or not self._relation_visible(schema, name):
                return None
            return {"populate": self.populate_overrides.get(name, WILDCARD)}

        if isinstance(attribute, MediaAttribute):
            return {"populate": WILDCARD}

        if isinstance(attribute, ComponentAttribute):
            return {"populate": self._nested(attribute.component, active_path, schema.uid, name)}

        if isinstance(attribute, DynamicZoneAttribute):
            variants = {variant: {"populate": self._nested(variant, active_path, schema.uid, name)} for variant in attribute.components}
            return {"on": variants}

        return None

    def _relation_visible(self, schema: ContentTypeSchema, name: str) -> bool:
        """Apply the visibility policy, with the optional audit-field exemption.

        Args:
            schema: Schema that owns the relation.
            name: Relation attribute name.

        Returns:
            bool: Whether the relation is populated.
        """
        if self.visibility_policy.is_visible(schema, name):
            return True
        return self.include_audit_fields and name in AUDIT_ATTRIBUTES

    def _nested(self, uid: str, active_path: FrozenSet[str], owner: str, attribute_name: str) -> PopulateTree:
        """Build a nested tree unless ``uid`` is already being expanded.

        Args:
            uid: Component identifier to expand.
            active_path: Identifiers on the current recursion path.
            owner: Identifier that declares the attribute, for logging.
            attribute_name: Attribute being expanded, for logging.

        Returns:
            PopulateTree: The nested tree, empty for a cycle.
        """
        if uid in active_path:
            logger.debug(f"Cycle detected at {owner}.{attribute_name} -> {uid}; not expanding further")
            return {}
        return self._build(uid, active_path)
