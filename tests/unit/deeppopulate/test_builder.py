# -*- coding: utf-8 -*-
"""Location: ./tests/unit/deeppopulate/test_builder.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Tests for the recursive populate builder.
"""

# Standard
from unittest.mock import MagicMock

# Third-Party
import pytest

# First-Party
from deeppopulate.builder import DEFAULT_POPULATE_OVERRIDES, PopulateSpecBuilder
from deeppopulate.errors import SchemaNotFoundError
from deeppopulate.registry import SchemaRegistry


def _keys_everywhere(tree):
    """Collect every attribute key at every level of a populate tree."""
    keys = []
    for name, directive in tree.items():
        keys.append(name)
        populate = directive.get("populate")
        if isinstance(populate, dict):
            keys.extend(_keys_everywhere(populate))
        for variant in directive.get("on", {}).values():
            keys.extend(_keys_everywhere(variant["populate"]))
    return keys


class TestArticleExample:
    """The canonical article schema."""

    def test_full_tree(self, article_registry):
        builder = PopulateSpecBuilder(article_registry)
        paragraph = builder.build("shared.paragraph")

        assert builder.build("api::article.article") == {
            "cover": {"populate": "*"},
            "author": {"populate": "*"},
            "body": {"populate": paragraph},
            "sections": {
                "on": {
                    "shared.quote": {"populate": builder.build("shared.quote")},
                    "shared.image-block": {"populate": builder.build("shared.image-block")},
                }
            },
            "testimonials": {"populate": "user.image"},
        }

    def test_output_order_follows_declaration_order(self, article_registry):
        tree = PopulateSpecBuilder(article_registry).build("api::article.article")
        assert list(tree) == ["cover", "author", "body", "sections", "testimonials"]
        assert list(tree["sections"]["on"]) == ["shared.quote", "shared.image-block"]

    def test_nested_component_trees(self, article_registry):
        builder = PopulateSpecBuilder(article_registry)
        assert builder.build("shared.paragraph") == {"image": {"populate": "*"}}
        assert builder.build("shared.image-block") == {
            "image": {"populate": "*"},
            "caption": {"populate": {"image": {"populate": "*"}}},
        }

    def test_every_key_exists_on_its_schema(self, article_registry):
        tree = PopulateSpecBuilder(article_registry).build("api::article.article")
        article = article_registry.get_model("api::article.article")
        assert set(tree) <= set(article.attributes)


class TestRelations:
    """Relation handling."""

    def test_morph_relations_never_appear(self):
        registry = SchemaRegistry.from_dict(
            {
                "api::page.page": {
                    "attributes": {
                        "related": {"type": "relation", "relation": "morphToMany"},
                        "blocks": {"type": "dynamiczone", "components": ["blocks.link"]},
                    }
                },
                "blocks.link": {
                    "attributes": {
                        "target": {"type": "relation", "relation": "MorphOne"},
                        "page": {"type": "relation", "relation": "oneToOne", "target": "api::page.page"},
                    }
                },
            }
        )
        tree = PopulateSpecBuilder(registry).build("api::page.page")

        assert "related" not in _keys_everywhere(tree)
        assert "target" not in _keys_everywhere(tree)
        assert tree == {"blocks": {"on": {"blocks.link": {"populate": {"page": {"populate": "*"}}}}}}

    def test_hidden_relations_are_skipped(self, article_registry):
        tree = PopulateSpecBuilder(article_registry).build("api::article.article")
        assert "createdBy" not in tree
        assert "updatedBy" not in tree

    def test_audit_fields_included_when_enabled(self, article_registry):
        tree = PopulateSpecBuilder(article_registry, include_audit_fields=True).build("api::article.article")
        assert tree["createdBy"] == {"populate": "*"}
        assert tree["updatedBy"] == {"populate": "*"}

    def test_audit_exemption_does_not_apply_to_other_hidden_relations(self):
        registry = SchemaRegistry.from_dict(
            {"api::post.post": {"attributes": {"secret": {"type": "relation", "relation": "oneToOne", "target": "api::x.x", "visible": False}}}}
        )
        assert PopulateSpecBuilder(registry, include_audit_fields=True).build("api::post.post") == {}

    def test_custom_visibility_policy(self, article_registry):
        policy = MagicMock()
        policy.is_visible.side_effect = lambda schema, name: name != "author"

        tree = PopulateSpecBuilder(article_registry, visibility_policy=policy).build("api::article.article")

        assert "author" not in tree
        assert tree["testimonials"] == {"populate": "user.image"}
        assert tree["sections"]["on"]["shared.quote"]["populate"] == {}

    def test_media_ignores_visibility_policy(self, article_registry):
        policy = MagicMock()
        policy.is_visible.return_value = False

        tree = PopulateSpecBuilder(article_registry, visibility_policy=policy).build("api::article.article")

        assert tree["cover"] == {"populate": "*"}
        assert "author" not in tree

    def test_override_table_is_configurable(self, article_registry):
        tree = PopulateSpecBuilder(article_registry, populate_overrides={"author": "avatar"}).build("api::article.article")
        assert tree["author"] == {"populate": "avatar"}
        assert tree["testimonials"] == {"populate": "*"}

    def test_default_override_table(self):
        assert DEFAULT_POPULATE_OVERRIDES == {"testimonials": "user.image"}


class TestShapes:
    """Output shape edge cases."""

    def test_schema_without_populatable_attributes(self):
        registry = SchemaRegistry.from_dict({"api::tag.tag": {"attributes": {"name": {"type": "string"}, "slug": {"type": "uid"}, "rank": {"type": "integer"}}}})
        assert PopulateSpecBuilder(registry).build("api::tag.tag") == {}

    def test_empty_dynamic_zone(self):
        registry = SchemaRegistry.from_dict({"api::page.page": {"attributes": {"blocks": {"type": "dynamiczone", "components": []}}}})
        assert PopulateSpecBuilder(registry).build("api::page.page") == {"blocks": {"on": {}}}

    def test_component_matches_direct_build(self, article_registry):
        builder = PopulateSpecBuilder(article_registry)
        tree = builder.build("api::article.article")
        assert tree["body"]["populate"] == builder.build("shared.paragraph")

    def test_repeated_component_in_siblings_is_expanded_each_time(self):
        registry = SchemaRegistry.from_dict(
            {
                "api::home.home": {
                    "attributes": {
                        "hero": {"type": "component", "component": "shared.image"},
                        "footer": {"type": "component", "component": "shared.image"},
                    }
                },
                "shared.image": {"attributes": {"file": {"type": "media"}}},
            }
        )
        tree = PopulateSpecBuilder(registry).build("api::home.home")
        assert tree["hero"] == tree["footer"] == {"populate": {"file": {"populate": "*"}}}


class TestCycles:
    """Recursion termination on cyclic schemas."""

    def test_mutual_component_cycle_terminates(self):
        registry = SchemaRegistry.from_dict(
            {
                "shared.a": {"attributes": {"pic": {"type": "media"}, "b": {"type": "component", "component": "shared.b"}}},
                "shared.b": {"attributes": {"a": {"type": "component", "component": "shared.a"}}},
            }
        )
        tree = PopulateSpecBuilder(registry).build("shared.a")
        assert tree == {"pic": {"populate": "*"}, "b": {"populate": {"a": {"populate": {}}}}}

    def test_self_referencing_component(self):
        registry = SchemaRegistry.from_dict({"menu.item": {"attributes": {"children": {"type": "component", "component": "menu.item", "repeatable": True}}}})
        assert PopulateSpecBuilder(registry).build("menu.item") == {"children": {"populate": {}}}

    def test_cycle_through_dynamic_zone(self):
        registry = SchemaRegistry.from_dict(
            {
                "api::page.page": {"attributes": {"blocks": {"type": "dynamiczone", "components": ["blocks.section"]}}},
                "blocks.section": {"attributes": {"children": {"type": "dynamiczone", "components": ["blocks.section", "blocks.text"]}}},
                "blocks.text": {"attributes": {"image": {"type": "media"}}},
            }
        )
        tree = PopulateSpecBuilder(registry).build("api::page.page")
        assert tree == {
            "blocks": {
                "on": {
                    "blocks.section": {
                        "populate": {
                            "children": {
                                "on": {
                                    "blocks.section": {"populate": {}},
                                    "blocks.text": {"populate": {"image": {"populate": "*"}}},
                                }
                            }
                        }
                    }
                }
            }
        }


class TestFailures:
    """Schema lookup failures are fatal."""

    def test_unknown_root(self, article_registry):
        with pytest.raises(SchemaNotFoundError) as exc_info:
            PopulateSpecBuilder(article_registry).build("api::missing.missing")
        assert exc_info.value.uid == "api::missing.missing"

    def test_unknown_nested_component(self):
        registry = SchemaRegistry.from_dict({"api::post.post": {"attributes": {"seo": {"type": "component", "component": "shared.seo"}}}})
        with pytest.raises(SchemaNotFoundError, match="shared.seo"):
            PopulateSpecBuilder(registry).build("api::post.post")

    def test_unknown_dynamic_zone_variant(self):
        registry = SchemaRegistry.from_dict({"api::post.post": {"attributes": {"blocks": {"type": "dynamiczone", "components": ["blocks.gone"]}}}})
        with pytest.raises(SchemaNotFoundError, match="blocks.gone"):
            PopulateSpecBuilder(registry).build("api::post.post")

    def test_schema_lookup_errors_propagate(self):
        lookup = MagicMock()
        lookup.get_model.side_effect = RuntimeError("registry offline")
        with pytest.raises(RuntimeError, match="registry offline"):
            PopulateSpecBuilder(lookup).build("api::post.post")
