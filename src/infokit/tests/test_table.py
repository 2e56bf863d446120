"""Tests for infokit.core.table and the store's batch-table edits."""

from infokit.core.objects import TextObject
from infokit.core.state import TABLE_DATA
from infokit.core.table import (
    fill_column,
    initialize_rows,
    parse_column_block,
    resolve_cell,
    set_cell,
    table_columns,
    to_rows,
)

from conftest import WORKING_DIR

P1, P2, P3 = (f"{WORKING_DIR}/p{i}.jpg" for i in (1, 2, 3))


# ── Pure helpers ────────────────────────────────────────────────────────

class TestColumns:
    def test_visible_text_layers_only(self):
        shown = TextObject(id="a", key="A")
        hidden = TextObject(id="b", key="B", visible=False)
        assert table_columns([shown, hidden]) == [shown]


class TestInitializeRows:
    def test_fills_defaults_from_layer_content(self):
        table = {}
        columns = [TextObject(key="TITLE", content="Sale")]
        assert initialize_rows(table, ["/a", "/b"], columns)
        assert table == {"/a": {"TITLE": "Sale"}, "/b": {"TITLE": "Sale"}}

    def test_never_overwrites(self):
        table = {"/a": {"TITLE": "Custom"}}
        columns = [TextObject(key="TITLE", content="Sale")]
        assert not initialize_rows(table, ["/a"], columns)
        assert table["/a"]["TITLE"] == "Custom"

    def test_keeps_empty_strings(self):
        table = {"/a": {"TITLE": ""}}
        initialize_rows(table, ["/a"], [TextObject(key="TITLE", content="Sale")])
        assert table["/a"]["TITLE"] == ""


class TestCells:
    def test_set_cell_creates_row(self):
        table = {}
        assert set_cell(table, "/a", "K", "v")
        assert table == {"/a": {"K": "v"}}
        assert not set_cell(table, "/a", "K", "v")

    def test_resolve_falls_back_to_content(self):
        text = TextObject(key="K", content="default")
        assert resolve_cell({}, "/a", text) == "default"
        assert resolve_cell({"/a": {"K": "over"}}, "/a", text) == "over"

    def test_to_rows(self):
        text = TextObject(key="K", content="d")
        rows = to_rows({"/b": {"K": "x"}}, ["/a", "/b"], [text])
        assert rows == [
            {"image": "/a", "values": {"K": "d"}},
            {"image": "/b", "values": {"K": "x"}},
        ]


class TestParseColumnBlock:
    def test_trims_and_keeps_blank_lines(self):
        assert parse_column_block("A\n B \n\nC") == ["A", "B", "", "C"]

    def test_single_value(self):
        assert parse_column_block("only") == ["only"]


class TestFillColumn:
    def test_shorter_values_leave_rest_untouched(self):
        table = {"/c": {"K": "keep"}}
        assert fill_column(table, "K", ["/a", "/b", "/c"], ["1", "2"]) == 2
        assert table == {"/a": {"K": "1"}, "/b": {"K": "2"}, "/c": {"K": "keep"}}

    def test_extra_values_ignored(self):
        table = {}
        assert fill_column(table, "K", ["/a"], "1\n2\n3") == 1
        assert table == {"/a": {"K": "1"}}


# ── Store integration ───────────────────────────────────────────────────

class TestStoreTable:
    def test_initialize_for_selected_images(self, editor_store):
        editor_store.add_text({"content": "Sale"})
        editor_store.initialize_table_data()
        assert editor_store.table_data == {
            P1: {"TEXT-1": "Sale"},
            P2: {"TEXT-1": "Sale"},
            P3: {"TEXT-1": "Sale"},
        }

    def test_initialize_ignores_hidden_text(self, editor_store):
        obj_id = editor_store.add_text()
        editor_store.update_object(obj_id, {"visible": False})
        editor_store.initialize_table_data()
        assert editor_store.table_data[P1] == {}

    def test_column_paste_partial(self, editor_store):
        editor_store.add_text({"content": "Default"})
        editor_store.initialize_table_data()
        editor_store.set_table_text_column("TEXT-1", ["A", "B"])
        table = editor_store.table_data
        assert table[P1]["TEXT-1"] == "A"
        assert table[P2]["TEXT-1"] == "B"
        assert table[P3]["TEXT-1"] == "Default"

    def test_column_paste_without_rows(self, editor_store):
        editor_store.add_text()
        editor_store.set_table_text_column("TEXT-1", "A\nB")
        assert P3 not in editor_store.table_data

    def test_column_paste_follows_directory_order(self, editor_store):
        editor_store.add_text()
        editor_store.deselect_all_images()
        editor_store.toggle_image_selection(P3)
        editor_store.toggle_image_selection(P1)
        editor_store.set_table_text_column("TEXT-1", "first\nsecond")
        table = editor_store.table_data
        assert table[P1]["TEXT-1"] == "first"
        assert table[P3]["TEXT-1"] == "second"

    def test_set_value_notifies_once(self, editor_store):
        events = []
        editor_store.subscribe(lambda _s, changed: events.append(changed))
        editor_store.set_table_text_value(P1, "TEXT-1", "x")
        editor_store.set_table_text_value(P1, "TEXT-1", "x")
        assert events == [frozenset({TABLE_DATA})]

    def test_deselected_rows_are_kept(self, editor_store):
        editor_store.add_text()
        editor_store.initialize_table_data()
        editor_store.set_table_text_value(P2, "TEXT-1", "kept")
        editor_store.toggle_image_selection(P2)
        editor_store.initialize_table_data()
        assert editor_store.table_data[P2]["TEXT-1"] == "kept"
        assert [r["image"] for r in editor_store.table_rows()] == [P1, P3]
