"""Tests for infokit.core.objects, frame and templates — the persisted document models."""

import json

import pytest
from pydantic import ValidationError

from infokit.core.frame import ASPECT_RATIO_PRESETS, Frame
from infokit.core.objects import (
    BackgroundObject,
    BaseObject,
    HeroObject,
    ImageObject,
    TextObject,
    describe_object,
    merge_object,
    new_object_id,
    object_source,
    parse_object,
)
from infokit.core.templates import TEMPLATE_VERSION, TemplatePayload, utc_timestamp


# ── Frame ───────────────────────────────────────────────────────────────

class TestFrame:
    def test_defaults(self):
        frame = Frame()
        assert frame.aspect_ratio == "1:1"
        assert (frame.width, frame.height) == (1080, 1080)
        assert frame.background_color == "#ffffff"

    def test_presets(self):
        assert ASPECT_RATIO_PRESETS == {
            "1:1": (1080, 1080),
            "4:3": (1080, 810),
            "16:9": (1920, 1080),
        }

    def test_apply_preset_sets_dimensions(self):
        frame = Frame().apply_preset("16:9")
        assert (frame.aspect_ratio, frame.width, frame.height) == ("16:9", 1920, 1080)
        assert frame.matches_preset()

    def test_apply_custom_keeps_size(self):
        frame = Frame(width=1234, height=567).apply_preset("custom")
        assert (frame.aspect_ratio, frame.width, frame.height) == ("custom", 1234, 567)

    def test_manual_size_leaves_ratio(self):
        frame = Frame(aspect_ratio="4:3", width=500, height=500)
        assert frame.aspect_ratio == "4:3"
        assert not frame.matches_preset()

    def test_unknown_ratio_rejected(self):
        with pytest.raises(ValidationError):
            Frame(aspect_ratio="21:9")

    def test_apply_unknown_preset_rejected(self):
        with pytest.raises(ValueError):
            Frame().apply_preset("2:1")

    def test_camel_case_payload(self):
        assert Frame().to_payload() == {
            "aspectRatio": "1:1",
            "width": 1080,
            "height": 1080,
            "backgroundColor": "#ffffff",
        }

    def test_field_name_resolves_alias(self):
        assert Frame.field_name("backgroundColor") == "background_color"
        assert Frame.field_name("background_color") == "background_color"
        assert Frame.field_name("nope") is None


# ── Objects ─────────────────────────────────────────────────────────────

class TestObjectDefaults:
    def test_ids_are_short_and_unique(self):
        ids = {new_object_id() for _ in range(200)}
        assert len(ids) == 200
        assert all(len(i) == 8 for i in ids)

    def test_text_defaults(self):
        text = TextObject()
        assert (text.x, text.y, text.width, text.height) == (100, 100, 200, 50)
        assert text.content == "New Text"
        assert text.font_size == 32
        assert text.fill == "#000000"
        assert text.line_height == 1.2
        assert text.visible and not text.locked

    def test_background_is_locked(self):
        bg = BackgroundObject()
        assert bg.locked is True
        assert bg.scale_mode == "fill"

    def test_variant_tags(self):
        assert HeroObject().type == "hero"
        assert BackgroundObject().type == "background"
        assert TextObject().type == "text"
        assert ImageObject().type == "image"


class TestParseObject:
    def test_dispatches_on_type(self):
        obj = parse_object({"type": "text", "id": "t1", "key": "TITLE", "fontSize": 48})
        assert isinstance(obj, TextObject)
        assert obj.font_size == 48
        assert obj.key == "TITLE"

    def test_accepts_snake_case(self):
        obj = parse_object({"type": "background", "scale_mode": "fit"})
        assert isinstance(obj, BackgroundObject)
        assert obj.scale_mode == "fit"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_object({"type": "shape"})

    def test_serializes_with_aliases(self):
        payload = HeroObject(id="h", original_path="/a.jpg").to_payload()
        assert payload["originalPath"] == "/a.jpg"
        assert payload["type"] == "hero"
        assert "original_path" not in payload


class TestMergeObject:
    def test_merges_alias_and_field_names(self):
        text = TextObject(id="t1")
        merged = merge_object(text, {"fontSize": 20, "content": "Hello"})
        assert merged.font_size == 20
        assert merged.content == "Hello"
        assert text.content == "New Text"

    def test_ignores_id_type_and_unknown_keys(self):
        text = TextObject(id="t1")
        merged = merge_object(text, {"id": "other", "type": "image", "bogus": 1})
        assert merged == text

    def test_invalid_value_rejected(self):
        with pytest.raises(ValidationError):
            merge_object(TextObject(), {"align": "justify"})


class TestDescribeObject:
    def test_each_variant(self):
        assert describe_object(HeroObject(original_path="/p.jpg")) == "/p.jpg"
        assert describe_object(BackgroundObject(src="bg.png")) == "fill · bg.png"
        assert describe_object(TextObject(key="TEXT-1", content="Hi")) == "TEXT-1: Hi"
        assert describe_object(ImageObject(src="logo.png")) == "logo.png"

    def test_long_text_truncated(self):
        detail = describe_object(TextObject(key="K", content="x" * 60))
        assert detail == "K: " + "x" * 40 + "..."

    def test_unknown_variant_raises(self):
        with pytest.raises(TypeError):
            describe_object(BaseObject())

    def test_object_source(self):
        assert object_source(HeroObject(src="u", original_path="/p.jpg")) == "/p.jpg"
        assert object_source(ImageObject(src="logo.png")) == "logo.png"
        assert object_source(TextObject()) is None
        with pytest.raises(TypeError):
            object_source(BaseObject())


# ── Template payload ────────────────────────────────────────────────────

class TestTemplatePayload:
    def test_encode_shape(self):
        payload = TemplatePayload(
            name="promo",
            created_at="2024-01-01T00:00:00Z",
            objects=[TextObject(id="t1", key="TEXT-1")],
            table_data={"/a.jpg": {"TEXT-1": "A"}},
        )
        data = json.loads(payload.encode())
        assert data["version"] == TEMPLATE_VERSION == 1
        assert data["name"] == "promo"
        assert data["createdAt"] == "2024-01-01T00:00:00Z"
        assert data["frame"]["aspectRatio"] == "1:1"
        assert data["objects"][0]["fontFamily"] == "Inter, system-ui, sans-serif"
        assert data["tableData"] == {"/a.jpg": {"TEXT-1": "A"}}

    def test_decode_restores_variants(self):
        original = TemplatePayload(
            name="promo",
            frame=Frame(aspect_ratio="16:9", width=1920, height=1080),
            objects=[HeroObject(id="h"), TextObject(id="t", content="Hi"), ImageObject(id="i")],
        )
        decoded = TemplatePayload.decode(original.encode())
        assert decoded == original
        assert [type(o) for o in decoded.objects] == [HeroObject, TextObject, ImageObject]

    def test_missing_table_data_decodes_empty(self):
        blob = json.dumps({"version": 1, "name": "old", "createdAt": "x",
                           "frame": Frame().to_payload(), "objects": []})
        assert TemplatePayload.decode(blob).table_data == {}

    def test_corrupt_blob_rejected(self):
        with pytest.raises(ValidationError):
            TemplatePayload.decode("{not json")

    def test_timestamp_is_utc_iso(self):
        stamp = utc_timestamp()
        assert stamp.endswith("Z")
        assert "T" in stamp
