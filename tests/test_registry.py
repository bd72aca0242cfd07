"""
Tests registry de blocs — lookup, defaults, création de configs, props résolues.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from leadpages.blocks import BlockMetadata, BlockRegistry, block_registry
from leadpages.blocks.base import BlockProps
from leadpages.core.schemas import BlockConfig

BUILTIN_TYPES = [
    "address-finder", "text-input", "email-input", "phone-input", "radio-cards", "checkbox",
    "headline", "subheadline", "body-text", "hero-image", "spacer",
    "stats-bar", "testimonial-card", "agent-card",
    "container", "columns", "card",
    "cta-button", "progress-bar", "trust-badges",
]


class _Props(BlockProps):
    text: str = "hello"


def _render(ctx):
    return f"<p>{ctx.props.text}</p>"


# ── Built-ins ──────────────────────────────────────────────────────────────

class TestBuiltinRegistration:
    def test_all_builtin_types_registered(self):
        for t in BUILTIN_TYPES:
            assert block_registry.has(t), t

    def test_metadata_type_matches_key(self):
        for t in BUILTIN_TYPES:
            assert block_registry.get_metadata(t).type == t

    def test_by_category_has_five_keys(self):
        grouped = block_registry.get_by_category()
        assert set(grouped) >= {"form", "content", "social-proof", "layout", "conversion"}
        assert {m.type for m in grouped["form"]} == {
            "address-finder", "text-input", "email-input", "phone-input", "radio-cards", "checkbox"}
        assert {m.type for m in grouped["layout"]} == {"container", "columns", "card"}

    def test_get_all_types_lists_every_builtin(self):
        assert set(BUILTIN_TYPES) <= set(block_registry.get_all_types())
        assert len(block_registry.get_all_metadata()) == len(block_registry.get_all_types())


# ── Defaults ───────────────────────────────────────────────────────────────

class TestCreateDefaultConfig:
    @pytest.mark.parametrize("block_type", BUILTIN_TYPES)
    def test_props_match_default_props(self, block_type):
        config = block_registry.create_default_config(block_type)
        assert config.type == block_type
        assert config.props == block_registry.get_metadata(block_type).default_props

    @pytest.mark.parametrize("block_type", BUILTIN_TYPES)
    def test_props_satisfy_schema_defaults(self, block_type):
        config = block_registry.create_default_config(block_type)
        for entry in block_registry.get_metadata(block_type).props_schema:
            if entry.default is not None:
                assert config.props.get(entry.key) == entry.default, entry.key

    @pytest.mark.parametrize("block_type", BUILTIN_TYPES)
    def test_default_props_validate_against_model(self, block_type):
        config = block_registry.create_default_config(block_type)
        block_registry.resolve_props(config)

    def test_ids_unique_across_calls(self):
        ids = {block_registry.create_default_config("headline").id for _ in range(200)}
        assert len(ids) == 200

    def test_id_prefixed_with_type(self):
        assert block_registry.create_default_config("cta-button").id.startswith("cta-button-")

    def test_default_visibility_all_true(self):
        vis = block_registry.create_default_config("spacer").visibility
        assert vis.desktop and vis.tablet and vis.mobile

    def test_props_are_copies(self):
        a = block_registry.create_default_config("stats-bar")
        a.props["stats"].append({"value": "1", "label": "x"})
        b = block_registry.create_default_config("stats-bar")
        assert len(b.props["stats"]) == 4


class TestUnknownType:
    def test_lookups_return_none(self):
        assert block_registry.get_component("nope") is None
        assert block_registry.get_metadata("nope") is None
        assert block_registry.create_default_config("nope") is None
        assert block_registry.has("nope") is False


# ── Registry isolé ─────────────────────────────────────────────────────────

class TestRegister:
    def test_defaults_derived_from_props_model(self):
        reg = BlockRegistry()
        reg.register("demo", _render, BlockMetadata(name="Demo", category="content"), _Props)
        assert reg.get_metadata("demo").default_props == {"text": "hello"}

    def test_accepts_dict_metadata(self):
        reg = BlockRegistry()
        reg.register("demo", _render, {"name": "Demo", "category": "content"})
        assert reg.get_metadata("demo").name == "Demo"

    def test_last_registration_wins(self):
        reg = BlockRegistry()
        reg.register("demo", _render, BlockMetadata(name="First", category="content"))
        reg.register("demo", _render, BlockMetadata(name="Second", category="layout"))
        assert reg.get_metadata("demo").name == "Second"
        assert [m.name for m in reg.get_by_category()["layout"]] == ["Second"]
        assert reg.get_by_category()["content"] == []

    def test_empty_registry_has_all_categories(self):
        grouped = BlockRegistry().get_by_category()
        assert all(v == [] for v in grouped.values())
        assert len(grouped) == 5


class TestResolvedProps:
    def test_merged_props_overrides_defaults(self):
        config = BlockConfig(id="h", type="headline", props={"text": "Hi"})
        merged = block_registry.merged_props(config)
        assert merged["text"] == "Hi"
        assert merged["level"] == "h1"

    def test_unknown_props_ignored_by_model(self):
        config = BlockConfig(id="h", type="headline", props={"text": "Hi", "bogus": 1})
        props = block_registry.resolve_props(config)
        assert props.text == "Hi"
        assert not hasattr(props, "bogus")

    def test_field_name_falls_back_to_default(self):
        config = BlockConfig(id="e", type="email-input", props={})
        assert block_registry.field_name_of(config) == "email"
        assert block_registry.is_required(config) is True

    def test_field_name_none_for_content_block(self):
        config = BlockConfig(id="h", type="headline", props={})
        assert block_registry.field_name_of(config) is None

    def test_explicit_optional_overrides_required_default(self):
        config = BlockConfig(id="p", type="phone-input", props={"required": False})
        assert block_registry.is_required(config) is False
        assert block_registry.validate_value(config, "") is None

    def test_auto_advance(self):
        on = BlockConfig(id="r", type="radio-cards", props={"autoAdvance": True})
        off = BlockConfig(id="r2", type="radio-cards", props={})
        assert block_registry.auto_advance_of(on) is True
        assert block_registry.auto_advance_of(off) is False

    def test_invalid_props_fall_back_to_text_validation(self):
        config = BlockConfig(id="r", type="radio-cards", props={"columns": 9, "required": True})
        assert block_registry.validate_value(config, "") == "This field is required"
        assert block_registry.validate_value(config, "anything") is None
