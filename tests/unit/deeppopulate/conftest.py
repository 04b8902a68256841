# -*- coding: utf-8 -*-
"""Location: ./tests/unit/deeppopulate/conftest.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Shared fixtures for deeppopulate unit tests.
"""

# Third-Party
import pytest

# First-Party
from deeppopulate.config import settings
from deeppopulate.middleware.path_filter import content_type_uid, singularize
from deeppopulate.registry import SchemaRegistry

ARTICLE_SCHEMAS = {
    "api::article.article": {
        "attributes": {
            "title": {"type": "string"},
            "cover": {"type": "media", "multiple": False},
            "author": {"type": "relation", "relation": "manyToOne", "target": "api::author.author"},
            "body": {"type": "component", "component": "shared.paragraph"},
            "sections": {"type": "dynamiczone", "components": ["shared.quote", "shared.image-block"]},
            "related": {"type": "relation", "relation": "morphToMany"},
            "createdBy": {"type": "relation", "relation": "oneToOne", "target": "admin::user", "visible": False, "private": True},
            "updatedBy": {"type": "relation", "relation": "oneToOne", "target": "admin::user", "visible": False, "private": True},
            "testimonials": {"type": "relation", "relation": "oneToMany", "target": "api::testimonial.testimonial"},
        }
    },
    "shared.paragraph": {
        "attributes": {
            "text": {"type": "richtext"},
            "image": {"type": "media"},
        }
    },
    "shared.quote": {
        "attributes": {
            "text": {"type": "text"},
            "author": {"type": "relation", "relation": "oneToOne", "target": "api::author.author"},
        }
    },
    "shared.image-block": {
        "attributes": {
            "image": {"type": "media"},
            "caption": {"type": "component", "component": "shared.paragraph"},
        }
    },
}


@pytest.fixture
def article_registry() -> SchemaRegistry:
    """Registry holding the article content type and its components."""
    return SchemaRegistry.from_dict(ARTICLE_SCHEMAS)


@pytest.fixture(autouse=True)
def clear_caches(monkeypatch):
    """Isolate tests from the environment and from cached settings."""
    for name in ("ENABLED", "API_PREFIX", "EXCLUDED_PATHS", "POPULATE_OVERRIDES", "INCLUDE_AUDIT_FIELDS", "UID_NAMESPACE", "SCHEMA_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(f"DEEP_POPULATE_{name}", raising=False)
    settings.cache_clear()
    content_type_uid.cache_clear()
    singularize.cache_clear()
    yield
    settings.cache_clear()
