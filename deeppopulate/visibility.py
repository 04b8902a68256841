# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/visibility.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Attribute visibility policy.

The default policy hides identifier and timestamp attributes plus anything
declared with ``"visible": false``. Audit relations (createdBy, updatedBy)
are normally declared non-visible, so they are hidden too.
"""

# Standard
from typing import FrozenSet, Protocol

# First-Party
from deeppopulate.schemas import ContentTypeSchema

ID_ATTRIBUTES: FrozenSet[str] = frozenset({"id", "documentId"})
TIMESTAMP_ATTRIBUTES: FrozenSet[str] = frozenset({"createdAt", "updatedAt", "publishedAt"})
CREATED_BY_ATTRIBUTE = "createdBy"
UPDATED_BY_ATTRIBUTE = "updatedBy"
AUDIT_ATTRIBUTES: FrozenSet[str] = frozenset({CREATED_BY_ATTRIBUTE, UPDATED_BY_ATTRIBUTE})


class VisibilityPolicy(Protocol):
    """Decides whether an attribute is exposed."""

    def is_visible(self, schema: ContentTypeSchema, attribute_name: str) -> bool:
        """Return True if ``attribute_name`` is exposed on ``schema``.

        Args:
            schema: The schema that owns the attribute.
            attribute_name: The attribute to check.

        Returns:
            bool: Whether the attribute is visible.
        """
        ...  # pragma: no cover


class DefaultVisibilityPolicy:
    """Visibility rules of the host CMS.

    Examples:
        >>> schema = ContentTypeSchema.from_dict("api::post.post", {"attributes": {
        ...     "author": {"type": "relation", "relation": "manyToOne", "target": "api::author.author"},
        ...     "createdBy": {"type": "relation", "relation": "oneToOne", "target": "admin::user", "visible": False},
        ...     "createdAt": {"type": "datetime"},
        ... }})
        >>> policy = DefaultVisibilityPolicy()
        >>> [policy.is_visible(schema, name) for name in ("author", "createdBy", "createdAt", "missing")]
        [True, False, False, False]
    """

    hidden_attributes: FrozenSet[str] = ID_ATTRIBUTES | TIMESTAMP_ATTRIBUTES

    def is_visible(self, schema: ContentTypeSchema, attribute_name: str) -> bool:
        """Return True if ``attribute_name`` is exposed on ``schema``.

        Args:
            schema: The schema that owns the attribute.
            attribute_name: The attribute to check.

        Returns:
            bool: Whether the attribute is visible.
        """
        if attribute_name in self.hidden_attributes:
            return False
        attribute = schema.attributes.get(attribute_name)
        return attribute is not None and attribute.visible
