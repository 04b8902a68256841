# -*- coding: utf-8 -*-
"""Location: ./deeppopulate/registry.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Schema lookup.

The populate builder never touches a global model registry. It receives a
``SchemaLookup`` and asks it for one schema at a time. ``SchemaRegistry`` is
the in-memory implementation used by the middleware and the CLI; it can be
filled programmatically or from a CMS-style source tree:

    <root>/api/<api>/content-types/<name>/schema.json  -> api::<api>.<name>
    <root>/components/<category>/<name>.json           -> <category>.<name>

Registration swaps the whole mapping under a lock, so readers never lock.

Examples:
    >>> registry = SchemaRegistry()
    >>> _ = registry.register_raw("shared.quote", {"attributes": {"text": {"type": "text"}}})
    >>> "shared.quote" in registry
    True
    >>> registry.get_model("shared.quote").uid
    'shared.quote'
"""

# Standard
import logging
from pathlib import Path
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Union

# Third-Party
import orjson

# First-Party
from deeppopulate.errors import InvalidSchemaError, SchemaNotFoundError
from deeppopulate.schemas import ContentTypeSchema

logger = logging.getLogger(__name__)


class SchemaLookup(Protocol):
    """Resolves content-type identifiers to schemas."""

    def get_model(self, uid: str) -> ContentTypeSchema:
        """Return the schema registered under ``uid``.

        Args:
            uid: Content-type or component identifier.

        Returns:
            ContentTypeSchema: The schema.

        Raises:
            SchemaNotFoundError: If ``uid`` is unknown.
        """
        ...  # pragma: no cover


class SchemaRegistry:
    """Thread-safe in-memory ``SchemaLookup``."""

    def __init__(self, schemas: Optional[Iterable[ContentTypeSchema]] = None):
        """Create a registry.

        Args:
            schemas: Schemas to register up front.
        """
        self._lock = threading.Lock()
        self._schemas: Dict[str, ContentTypeSchema] = {}
        if schemas:
            self.register_many(schemas)

    def __contains__(self, uid: object) -> bool:
        return uid in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def uids(self) -> List[str]:
        """Return registered identifiers in registration order.

        Returns:
            List[str]: Registered identifiers.
        """
        return list(self._schemas)

    def get_model(self, uid: str) -> ContentTypeSchema:
        """Return the schema registered under ``uid``.

        Args:
            uid: Content-type or component identifier.

        Returns:
            ContentTypeSchema: The schema.

        Raises:
            SchemaNotFoundError: If ``uid`` is unknown.

        Examples:
            >>> SchemaRegistry().get_model("api::missing.missing")
            Traceback (most recent call last):
            ...
            deeppopulate.errors.SchemaNotFoundError: No schema registered for content type 'api::missing.missing'
        """
        schema = self._schemas.get(uid)
        if schema is None:
            raise SchemaNotFoundError(uid)
        return schema

    def register(self, schema: ContentTypeSchema) -> ContentTypeSchema:
        """Register (or replace) a schema.

        Args:
            schema: The schema to register.

        Returns:
            ContentTypeSchema: The registered schema.
        """
        return self.register_many([schema])[0]

    def register_many(self, schemas: Iterable[ContentTypeSchema]) -> List[ContentTypeSchema]:
        """Register several schemas in one swap.

        Args:
            schemas: The schemas to register.

        Returns:
            List[ContentTypeSchema]: The registered schemas.
        """
        schemas = list(schemas)
        with self._lock:
            updated = dict(self._schemas)
            for schema in schemas:
                if schema.uid in updated:
                    logger.debug(f"Replacing schema for {schema.uid}")
                updated[schema.uid] = schema
            self._schemas = updated
        return schemas

    def register_raw(self, uid: str, raw: Any) -> ContentTypeSchema:
        """Parse and register a raw schema definition.

        Args:
            uid: Identifier to register under.
            raw: Raw schema mapping with an ``attributes`` mapping.

        Returns:
            ContentTypeSchema: The registered schema.

        Raises:
            InvalidSchemaError: If the definition is malformed.
        """
        return self.register(ContentTypeSchema.from_dict(uid, raw))

    @classmethod
    def from_dict(cls, raw_schemas: Mapping[str, Any]) -> "SchemaRegistry":
        """Build a registry from ``{uid: raw schema}``.

        Args:
            raw_schemas: Raw schemas keyed by identifier.

        Returns:
            SchemaRegistry: The populated registry.

        Raises:
            InvalidSchemaError: If any definition is malformed.

        Examples:
            >>> registry = SchemaRegistry.from_dict({"a.one": {}, "a.two": {"attributes": {}}})
            >>> registry.uids()
            ['a.one', 'a.two']
        """
        return cls(ContentTypeSchema.from_dict(uid, raw) for uid, raw in raw_schemas.items())

    @classmethod
    def from_directory(cls, root: Union[str, Path]) -> "SchemaRegistry":
        """Load every schema file under a CMS source tree.

        ``root`` may be the project directory or its ``src`` directory.

        Args:
            root: Directory to scan.

        Returns:
            SchemaRegistry: The populated registry.

        Raises:
            InvalidSchemaError: If a schema file cannot be read or parsed.
            FileNotFoundError: If ``root`` does not exist.
        """
        root = Path(root)
        if not root.is_dir():
            raise FileNotFoundError(f"Schema directory not found: {root}")
        if (root / "src").is_dir():
            root = root / "src"

        schemas: List[ContentTypeSchema] = []
        for schema_file in sorted(root.glob("api/*/content-types/*/schema.json")):
            api_name = schema_file.parents[2].name
            uid = f"api::{api_name}.{schema_file.parent.name}"
            schemas.append(ContentTypeSchema.from_dict(uid, _read_schema_file(uid, schema_file)))

        for schema_file in sorted(root.glob("components/*/*.json")):
            uid = f"{schema_file.parent.name}.{schema_file.stem}"
            schemas.append(ContentTypeSchema.from_dict(uid, _read_schema_file(uid, schema_file)))

        logger.info(f"Loaded {len(schemas)} schemas from {root}")
        return cls(schemas)


def _read_schema_file(uid: str, path: Path) -> Any:
    """Read and decode one JSON schema file.

    Args:
        uid: Identifier the file maps to, for error messages.
        path: File to read.

    Returns:
        Any: The decoded JSON document.

    Raises:
        InvalidSchemaError: If the file cannot be read or is not valid JSON.
    """
    try:
        return orjson.loads(path.read_bytes())
    except OSError as exc:
        raise InvalidSchemaError(uid, f"cannot read {path}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise InvalidSchemaError(uid, f"invalid JSON in {path}: {exc}") from exc
