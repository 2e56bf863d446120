"""Tests for infographic_mcp.server — tool input checks and error reporting."""

import json
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from infographic_mcp import server
from infokit.core.state import EditorStore


@pytest.fixture
def tool_store():
    store = EditorStore()
    with patch.object(server, "_store", store):
        yield store


# ── Frame ───────────────────────────────────────────────────────────────

class TestSetFrameTool:
    def test_unknown_aspect_ratio_reported(self, tool_store):
        result = server.set_frame(MagicMock(), aspect_ratio="2:1")
        assert result.startswith("Error:")
        assert tool_store.frame.aspect_ratio == "1:1"

    def test_preset_applied(self, tool_store):
        data = json.loads(server.set_frame(MagicMock(), aspect_ratio="16:9"))
        assert (data["aspectRatio"], data["width"], data["height"]) == ("16:9", 1920, 1080)


# ── Layers ──────────────────────────────────────────────────────────────

class TestLayerTools:
    def test_unknown_scale_mode_adds_nothing(self, tool_store):
        result = server.set_background(MagicMock(), "/bg.png", scale_mode="cover")
        assert result.startswith("Error:")
        assert tool_store.background() is None

    def test_background_with_scale_mode(self, tool_store):
        data = json.loads(server.set_background(MagicMock(), "/bg.png", scale_mode="fit"))
        assert data["scaleMode"] == "fit"
        assert data["originalPath"] == "/bg.png"

    def test_invalid_update_reported(self, tool_store):
        obj_id = tool_store.add_text()
        result = server.update_object(MagicMock(), obj_id, {"fontWeight": "heavy"})
        assert result.startswith("Error:")
        assert tool_store.get_object(obj_id).font_weight == "normal"

    def test_valid_update(self, tool_store):
        obj_id = tool_store.add_text()
        data = json.loads(server.update_object(MagicMock(), obj_id, {"fontSize": 48}))
        assert data["fontSize"] == 48


# ── Scale-mode preview ──────────────────────────────────────────────────

class TestPreviewScaleMode:
    def test_image_layer_previews_as_fit(self, tool_store, tmp_path):
        path = tmp_path / "logo.png"
        Image.new("RGB", (400, 200)).save(path)
        obj_id = tool_store.add_image(str(path), original_path=str(path))

        data = json.loads(server.preview_scale_mode(MagicMock(), obj_id))
        assert data["natural_size"] == [400, 200]
        assert data["crop"] is None
        assert data["render"] == {"x": 0, "y": 0, "width": 200, "height": 100}

    def test_background_uses_its_scale_mode(self, tool_store, tmp_path):
        path = tmp_path / "bg.png"
        Image.new("RGB", (2000, 1000)).save(path)
        obj_id = tool_store.set_background(str(path), original_path=str(path))

        data = json.loads(server.preview_scale_mode(MagicMock(), obj_id))
        assert data["crop"] == {"x": 500, "y": 0, "width": 1000, "height": 1000}

    def test_text_layer_rejected(self, tool_store):
        obj_id = tool_store.add_text()
        assert server.preview_scale_mode(MagicMock(), obj_id).startswith("Error:")
