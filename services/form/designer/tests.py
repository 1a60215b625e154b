"""Tests for the template designer."""
from __future__ import annotations

import io
from unittest import TestCase, mock

import requests

from . import geometry
from .client import TemplateClient, TemplateClientError
from .controller import CanvasController
from .document import FIELD_TYPES, Template, TemplateField, new_field
from .events import CanvasRect, KeyEvent, PointerEvent
from .pages import LAST_PAGE_MESSAGE, PageManager
from .properties import PropertyPanel, parse_bool, parse_int
from .session import (
    NAME_REQUIRED_MESSAGE,
    SAVE_FAILED_MESSAGE,
    SAVED_MESSAGE,
    DesignerSession,
)
from .state import DesignerState


def _mock_response(status_code: int = 200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def _place(state: DesignerState, left: float, top: float, field_type: str = "text") -> TemplateField:
    item = new_field(field_type, left, top)
    state.add_field(item)
    return item


class GeometryTests(TestCase):
    def test_snap_rounds_to_nearest_grid_line(self) -> None:
        self.assertEqual(geometry.snap(233), 230)
        self.assertEqual(geometry.snap(57), 60)
        self.assertEqual(geometry.snap(45), 50)
        self.assertEqual(geometry.snap(-15), -10)
        self.assertEqual(geometry.snap(233, enabled=False), 233)

    def test_snap_is_idempotent(self) -> None:
        for value in (-37.5, -5, 0, 4.9, 5, 14.99, 15, 123.4, 999):
            once = geometry.snap(value)
            self.assertEqual(geometry.snap(once), once)

    def test_corner_beats_edge(self) -> None:
        self.assertEqual(geometry.hit_test(3, 4, 200, 40), geometry.NORTH_WEST)
        self.assertEqual(geometry.hit_test(197, 2, 200, 40), geometry.NORTH_EAST)
        self.assertEqual(geometry.hit_test(8, 32, 200, 40), geometry.SOUTH_WEST)
        self.assertEqual(geometry.hit_test(192, 39, 200, 40), geometry.SOUTH_EAST)

    def test_edges_and_interior(self) -> None:
        self.assertEqual(geometry.hit_test(100, 1, 200, 40), geometry.NORTH)
        self.assertEqual(geometry.hit_test(100, 35, 200, 40), geometry.SOUTH)
        self.assertEqual(geometry.hit_test(0, 20, 200, 40), geometry.WEST)
        self.assertEqual(geometry.hit_test(195, 20, 200, 40), geometry.EAST)
        self.assertIsNone(geometry.hit_test(100, 20, 200, 40))

    def test_cursor_for(self) -> None:
        self.assertEqual(geometry.cursor_for("se"), "nw-resize")
        self.assertEqual(geometry.cursor_for("sw"), "ne-resize")
        self.assertEqual(geometry.cursor_for("n"), "ns-resize")
        self.assertEqual(geometry.cursor_for("w"), "ew-resize")
        self.assertEqual(geometry.cursor_for(None), "grab")

    def test_resize_formulas(self) -> None:
        start = geometry.Box(left=100, top=100, width=200, height=40)
        self.assertEqual(geometry.resize("se", start, 30, 10), geometry.Box(100, 100, 230, 50))
        self.assertEqual(geometry.resize("sw", start, 30, 10), geometry.Box(130, 100, 170, 50))
        self.assertEqual(geometry.resize("ne", start, 30, -10), geometry.Box(100, 90, 230, 50))
        self.assertEqual(geometry.resize("nw", start, -20, -10), geometry.Box(80, 90, 220, 50))
        self.assertEqual(geometry.resize("n", start, 99, 10), geometry.Box(100, 110, 200, 30))
        self.assertEqual(geometry.resize("s", start, 99, 10), geometry.Box(100, 100, 200, 50))
        self.assertEqual(geometry.resize("e", start, 10, 99), geometry.Box(100, 100, 210, 40))
        self.assertEqual(geometry.resize("w", start, 10, 99), geometry.Box(110, 100, 190, 40))

    def test_resize_never_goes_below_minimum(self) -> None:
        start = geometry.Box(left=100, top=100, width=200, height=40)
        for handle in geometry.HANDLES:
            for dx, dy in ((-5000, -5000), (5000, 5000), (5000, -5000), (-5000, 5000)):
                box = geometry.resize(handle, start, dx, dy)
                self.assertGreaterEqual(box.width, geometry.MIN_WIDTH)
                self.assertGreaterEqual(box.height, geometry.MIN_HEIGHT)

    def test_shrinking_west_and_north_keeps_opposite_edge(self) -> None:
        start = geometry.Box(left=100, top=100, width=200, height=40)
        box = geometry.resize("nw", start, 1000, 1000)
        self.assertEqual((box.width, box.height), (50, 20))
        self.assertEqual(box.left + box.width, 300)
        self.assertEqual(box.top + box.height, 140)

    def test_unknown_handle(self) -> None:
        with self.assertRaises(ValueError):
            geometry.resize("middle", geometry.Box(0, 0, 100, 100), 1, 1)

    def test_clamp_position(self) -> None:
        self.assertEqual(geometry.clamp_position(-10, 900, 200, 40, 794, 800), (0, 760))
        self.assertEqual(geometry.clamp_position(50, 50, 1000, 40, 794, 800), (0, 50))


class DocumentTests(TestCase):
    def test_new_field_defaults(self) -> None:
        item = new_field("checkbox", 12, 34)
        self.assertEqual(item.label, "新しいチェックボックス")
        self.assertEqual(item.id, item.field_id)
        self.assertTrue(item.id.startswith("field_"))
        self.assertEqual((item.style.left, item.style.top), (12, 34))
        self.assertEqual((item.style.width, item.style.height), (200, 40))
        self.assertEqual(item.style.z_index, 1000)
        self.assertEqual(item.style.background_color, "transparent")

    def test_new_field_rejects_unknown_type(self) -> None:
        with self.assertRaises(ValueError):
            new_field("signature", 0, 0)

    def test_palette_lists_every_type(self) -> None:
        self.assertEqual(
            [field_type for field_type, _ in FIELD_TYPES],
            ["text", "checkbox", "select", "textarea", "date", "number", "calculation", "radio"],
        )

    def test_blank_template_has_one_page(self) -> None:
        template = Template()
        self.assertEqual(template.to_dict(), {"name": "", "description": "", "pages": [{"pageNumber": 1, "fields": []}]})

    def test_round_trip(self) -> None:
        template = Template(name="Inspection", id=7)
        item = new_field("select", 10, 20)
        item.options = ["OK", "NG"]
        item.style.border_color = "#ff0000"
        template.pages[0].fields.append(item)
        template.pages[0].background_image = "/media/uploads/templates/a.png"

        data = template.to_dict()
        self.assertEqual(data["pages"][0]["fields"][0]["style"]["borderColor"], "#ff0000")
        self.assertNotIn("fontWeight", data["pages"][0]["fields"][0]["style"])
        self.assertEqual(Template.from_dict(data), template)

    def test_from_dict_requires_an_object(self) -> None:
        for payload in ([], None, "template"):
            with self.assertRaises(ValueError):
                Template.from_dict(payload)

    def test_from_api_payload_ignores_extra_keys(self) -> None:
        template = Template.from_dict(
            {
                "id": 3,
                "name": "Saved",
                "usageCount": 2,
                "createdAt": "2026-01-01T00:00:00Z",
                "pages": [{"pageNumber": 1, "fields": [{"fieldId": "f1", "type": "date", "label": "Date", "style": {"left": 1, "top": 2}}]}],
            }
        )
        self.assertEqual(template.id, 3)
        self.assertEqual(template.pages[0].fields[0].id, "f1")


class StateTests(TestCase):
    def setUp(self) -> None:
        self.state = DesignerState()
        self.item = _place(self.state, 50, 50)
        self.item.label = "X"

    def test_selection_follows_mutations(self) -> None:
        self.state.select(self.item.id)
        self.state.update_style(self.item.id, left=90)
        self.assertEqual(self.state.selected_field.style.left, 90)
        self.assertIs(self.state.selected_field, self.state.current_page.fields[0])

    def test_update_rejects_unknown_attributes(self) -> None:
        with self.assertRaises(ValueError):
            self.state.update_style(self.item.id, rotation=90)
        with self.assertRaises(ValueError):
            self.state.update_field(self.item.id, colour="red")

    def test_delete_clears_selection(self) -> None:
        other = _place(self.state, 300, 300)
        self.state.select(self.item.id)
        self.assertTrue(self.state.delete_field(other.id))
        self.assertEqual(self.state.selected_field_id, self.item.id)
        self.assertTrue(self.state.delete_field(self.item.id))
        self.assertIsNone(self.state.selected_field)
        self.assertFalse(self.state.delete_field(self.item.id))

    def test_paste_creates_new_identity(self) -> None:
        self.state.select(self.item.id)
        self.assertTrue(self.state.copy_selected())
        pasted = self.state.paste()
        self.assertNotEqual(pasted.id, self.item.id)
        self.assertNotEqual(pasted.field_id, self.item.field_id)
        self.assertEqual(pasted.id, pasted.field_id)
        self.assertEqual(pasted.label, "X (コピー)")
        self.assertEqual((pasted.style.left, pasted.style.top), (70, 70))
        self.assertEqual(self.state.selected_field_id, pasted.id)

    def test_paste_twice_stacks_on_the_copied_position(self) -> None:
        self.state.select(self.item.id)
        self.state.copy_selected()
        first = self.state.paste()
        second = self.state.paste()
        self.assertEqual((first.style.left, first.style.top), (70, 70))
        self.assertEqual((second.style.left, second.style.top), (70, 70))
        self.assertEqual(first.label, second.label)
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(len(self.state.current_page.fields), 3)

    def test_clipboard_is_a_snapshot(self) -> None:
        self.state.select(self.item.id)
        self.state.copy_selected()
        self.state.update_style(self.item.id, left=400)
        self.state.update_field(self.item.id, label="Moved")
        pasted = self.state.paste()
        self.assertEqual(pasted.style.left, 70)
        self.assertEqual(pasted.label, "X (コピー)")

    def test_copy_and_paste_without_source(self) -> None:
        self.assertFalse(self.state.copy_selected())
        self.assertIsNone(self.state.paste())


class CanvasControllerTests(TestCase):
    def setUp(self) -> None:
        self.state = DesignerState(template=Template(name="Test"))
        self.canvas = CanvasRect(left=20, top=30, width=794, height=1123)
        self.controller = CanvasController(self.state, self.canvas)

    def test_drop_creates_and_selects_field(self) -> None:
        event = PointerEvent.at(120, 130)
        item = self.controller.drop("text", event)
        self.assertEqual((item.style.left, item.style.top), (100, 100))
        self.assertEqual(item.label, "新しいテキスト")
        self.assertEqual(self.state.selected_field_id, item.id)
        self.assertTrue(event.default_prevented)

    def test_drop_is_not_clamped(self) -> None:
        item = self.controller.drop("number", PointerEvent.at(2000, 5))
        self.assertEqual((item.style.left, item.style.top), (1980, -25))

    def test_pointer_down_inside_starts_drag(self) -> None:
        item = _place(self.state, 100, 100)
        event = PointerEvent.at(220, 150)
        self.assertIsNone(self.controller.pointer_down(item.id, event))
        self.assertTrue(self.controller.dragging)
        self.assertFalse(self.controller.resizing)
        self.assertEqual(self.state.selected_field_id, item.id)
        self.assertTrue(event.propagation_stopped)
        self.assertTrue(event.default_prevented)

    def test_pointer_down_on_border_starts_resize(self) -> None:
        item = _place(self.state, 100, 100)
        event = PointerEvent.at(20 + 100 + 198, 30 + 100 + 38)
        self.assertEqual(self.controller.pointer_down(item.id, event), "se")
        self.assertTrue(self.controller.resizing)
        self.assertTrue(event.propagation_stopped)

    def test_drag_moves_with_offset_and_snaps(self) -> None:
        item = _place(self.state, 100, 100)
        self.controller.pointer_down(item.id, PointerEvent.at(20 + 110, 30 + 120))
        self.controller.pointer_move(PointerEvent.at(20 + 163, 30 + 176))
        self.assertEqual((item.style.left, item.style.top), (150, 160))
        self.controller.pointer_up()
        self.assertFalse(self.controller.dragging)
        self.assertIsNone(self.controller.pointer_move(PointerEvent.at(500, 500)))
        self.assertEqual((item.style.left, item.style.top), (150, 160))

    def test_drag_without_snap(self) -> None:
        self.state.snap_to_grid = False
        item = _place(self.state, 100, 100)
        self.controller.pointer_down(item.id, PointerEvent.at(20 + 110, 30 + 120))
        self.controller.pointer_move(PointerEvent.at(20 + 163, 30 + 176))
        self.assertEqual((item.style.left, item.style.top), (153, 156))

    def test_drag_stays_on_canvas(self) -> None:
        item = _place(self.state, 100, 100)
        self.controller.pointer_down(item.id, PointerEvent.at(20 + 150, 30 + 120))
        for x, y in ((-500, -500), (5000, 5000), (20 + 640, 30 + 1100), (20 + 645, 30 + 1104)):
            self.controller.pointer_move(PointerEvent.at(x, y))
            self.assertGreaterEqual(item.style.left, 0)
            self.assertGreaterEqual(item.style.top, 0)
            self.assertLessEqual(item.style.left, self.canvas.width - item.style.width)
            self.assertLessEqual(item.style.top, self.canvas.height - item.style.height)

    def test_resize_from_handle_snaps_all_values(self) -> None:
        item = _place(self.state, 150, 160)
        self.controller.handle_pointer_down(item.id, "se", PointerEvent.at(400, 300))
        self.controller.pointer_move(PointerEvent.at(433, 317))
        self.assertEqual(
            (item.style.left, item.style.top, item.style.width, item.style.height),
            (150, 160, 230, 60),
        )

    def test_resize_west_moves_left_edge(self) -> None:
        item = _place(self.state, 100, 100)
        self.controller.handle_pointer_down(item.id, "w", PointerEvent.at(400, 300))
        self.controller.pointer_move(PointerEvent.at(1000, 300))
        self.assertEqual((item.style.left, item.style.width), (250, 50))

    def test_resize_is_measured_from_gesture_start(self) -> None:
        item = _place(self.state, 100, 100)
        self.controller.handle_pointer_down(item.id, "e", PointerEvent.at(400, 300))
        self.controller.pointer_move(PointerEvent.at(450, 300))
        self.controller.pointer_move(PointerEvent.at(420, 300))
        self.assertEqual(item.style.width, 220)

    def test_resize_does_not_clamp_to_canvas(self) -> None:
        item = _place(self.state, 700, 100)
        self.controller.handle_pointer_down(item.id, "e", PointerEvent.at(0, 0))
        self.controller.pointer_move(PointerEvent.at(500, 0))
        self.assertEqual(item.style.width, 700)

    def test_unknown_handle_is_rejected(self) -> None:
        item = _place(self.state, 100, 100)
        with self.assertRaises(ValueError):
            self.controller.handle_pointer_down(item.id, "middle", PointerEvent.at(0, 0))

    def test_hover_reports_cursor_without_mutating(self) -> None:
        item = _place(self.state, 100, 100)
        before = item.style
        self.assertEqual(self.controller.hover(item.id, PointerEvent.at(20 + 101, 30 + 101)), "nw-resize")
        self.assertEqual(self.controller.hover_handle, "nw")
        self.assertEqual(self.controller.hover(item.id, PointerEvent.at(20 + 200, 30 + 120)), "grab")
        self.assertIs(item.style, before)
        self.controller.leave()
        self.assertIsNone(self.controller.hover_field_id)

    def test_hover_is_ignored_during_gesture(self) -> None:
        item = _place(self.state, 100, 100)
        self.controller.pointer_down(item.id, PointerEvent.at(20 + 200, 30 + 120))
        self.assertIsNone(self.controller.hover(item.id, PointerEvent.at(20 + 101, 30 + 101)))

    def test_deleting_dragged_field_ends_gesture(self) -> None:
        item = _place(self.state, 100, 100)
        self.controller.pointer_down(item.id, PointerEvent.at(20 + 200, 30 + 120))
        self.state.delete_field(item.id)
        self.assertIsNone(self.controller.pointer_move(PointerEvent.at(300, 300)))
        self.assertFalse(self.controller.dragging)

    def test_pointer_down_on_missing_field(self) -> None:
        with self.assertRaises(KeyError):
            self.controller.pointer_down("field_missing", PointerEvent.at(0, 0))


class PageManagerTests(TestCase):
    def setUp(self) -> None:
        self.state = DesignerState()
        self.alerts = []
        self.pages = PageManager(self.state, self.alerts.append)

    def test_last_page_cannot_be_deleted(self) -> None:
        before = list(self.state.template.pages)
        self.assertFalse(self.pages.delete_page())
        self.assertEqual(self.state.template.pages, before)
        self.assertEqual(self.alerts, [LAST_PAGE_MESSAGE])

    def test_add_page_switches_to_it(self) -> None:
        page = self.pages.add_page()
        self.assertEqual(page.page_number, 2)
        self.assertEqual(self.pages.index, 1)
        self.assertEqual(self.pages.label(), "ページ 2 / 2")

    def test_delete_keeps_stale_page_numbers(self) -> None:
        self.pages.add_page()
        self.pages.add_page()
        self.pages.go_to(1)
        self.assertTrue(self.pages.delete_page())
        self.assertEqual([page.page_number for page in self.state.template.pages], [1, 3])
        self.assertEqual(self.pages.index, 0)
        self.pages.add_page()
        self.assertEqual([page.page_number for page in self.state.template.pages], [1, 3, 3])

    def test_navigation_is_clamped(self) -> None:
        self.pages.add_page()
        self.pages.next()
        self.assertEqual(self.pages.index, 1)
        self.pages.previous()
        self.pages.previous()
        self.assertEqual(self.pages.index, 0)

    def test_changing_page_clears_selection(self) -> None:
        item = _place(self.state, 10, 10)
        self.state.select(item.id)
        self.pages.add_page()
        self.assertIsNone(self.state.selected_field)

    def test_set_background(self) -> None:
        self.pages.set_background("/media/uploads/templates/bg.png")
        self.assertEqual(self.state.current_page.background_image, "/media/uploads/templates/bg.png")


class PropertyPanelTests(TestCase):
    def setUp(self) -> None:
        self.state = DesignerState()
        self.item = _place(self.state, 10, 10)
        self.panel = PropertyPanel(self.state)

    def test_nothing_selected(self) -> None:
        self.assertIsNone(self.panel.values())
        self.assertIsNone(self.panel.change("label", "Name"))

    def test_values_use_display_defaults(self) -> None:
        self.state.select(self.item.id)
        values = self.panel.values()
        self.assertEqual(values["fontWeight"], "normal")
        self.assertEqual(values["borderColor"], "#d1d5db")
        self.assertEqual(values["placeholder"], "")

    def test_changes_merge_into_document(self) -> None:
        self.state.select(self.item.id)
        self.panel.change("label", "Inspector")
        self.panel.change("required", True)
        self.panel.change("width", "320")
        self.panel.change("fontSize", "18px")
        self.panel.change("fontWeight", "bold")
        self.panel.change("borderColor", "#ff0000")
        field = self.state.current_page.fields[0]
        self.assertEqual(field.label, "Inspector")
        self.assertTrue(field.required)
        self.assertEqual(field.style.width, 320)
        self.assertEqual(field.style.font_size, 18)
        self.assertEqual(field.style.font_weight, "bold")
        self.assertEqual(field.style.border_color, "#ff0000")

    def test_unparseable_numbers_are_ignored(self) -> None:
        self.state.select(self.item.id)
        self.assertIsNone(self.panel.change("height", "tall"))
        self.assertEqual(self.item.style.height, 40)

    def test_unknown_property(self) -> None:
        self.state.select(self.item.id)
        with self.assertRaises(KeyError):
            self.panel.change("rotation", 45)

    def test_buttons_mirror_shortcuts(self) -> None:
        self.state.select(self.item.id)
        self.assertTrue(self.panel.copy())
        pasted = self.panel.paste()
        self.assertEqual(self.state.selected_field_id, pasted.id)
        self.assertTrue(self.panel.delete())
        self.assertEqual([field.id for field in self.state.current_page.fields], [self.item.id])
        self.panel.close()
        self.assertIsNone(self.state.selected_field)

    def test_parse_int(self) -> None:
        self.assertEqual(parse_int(" 42abc"), 42)
        self.assertEqual(parse_int(12.9), 12)
        self.assertIsNone(parse_int(""))
        self.assertIsNone(parse_int(True))

    def test_required_reads_checkbox_strings(self) -> None:
        self.state.select(self.item.id)
        self.panel.change("required", "true")
        self.assertTrue(self.item.required)
        self.panel.change("required", "false")
        self.assertFalse(self.item.required)
        self.panel.change("required", "on")
        self.assertIsNone(self.panel.change("required", "maybe"))
        self.assertTrue(self.item.required)
        self.assertIs(parse_bool(0), False)
        self.assertIs(parse_bool(" No "), False)


class TemplateClientTests(TestCase):
    def setUp(self) -> None:
        self.session = mock.Mock()
        self.client = TemplateClient(base_url="http://forms.test/", timeout=3, session=self.session)

    def test_fetch(self) -> None:
        self.session.request.return_value = _mock_response(payload={"id": 5, "name": "A"})
        self.assertEqual(self.client.fetch(5), {"id": 5, "name": "A"})
        self.session.request.assert_called_once_with(
            "GET", "http://forms.test/api/forms/templates/5/", timeout=3
        )

    def test_save_posts_new_and_puts_existing(self) -> None:
        self.session.request.return_value = _mock_response(201, {"id": 9})
        self.client.save({"name": "New", "pages": []})
        self.assertEqual(self.session.request.call_args.args, ("POST", "http://forms.test/api/forms/templates/"))

        self.session.request.return_value = _mock_response(200, {"id": 9})
        self.client.save({"id": 9, "name": "New", "pages": []})
        self.assertEqual(self.session.request.call_args.args, ("PUT", "http://forms.test/api/forms/templates/9/"))
        self.assertEqual(self.session.request.call_args.kwargs["json"]["id"], 9)

    def test_upload_returns_url(self) -> None:
        self.session.request.return_value = _mock_response(payload={"url": "/media/x.png"})
        fileobj = io.BytesIO(b"png")
        self.assertEqual(self.client.upload("x.png", fileobj, "image/png"), "/media/x.png")
        files = self.session.request.call_args.kwargs["files"]
        self.assertEqual(files["file"], ("x.png", fileobj, "image/png"))

    def test_errors_are_wrapped(self) -> None:
        self.session.request.return_value = _mock_response(500, {"detail": "boom"})
        with self.assertRaises(TemplateClientError) as ctx:
            self.client.fetch(1)
        self.assertEqual(ctx.exception.status_code, 500)

        self.session.request.side_effect = requests.ConnectionError("down")
        with self.assertRaises(TemplateClientError):
            self.client.fetch(1)

    def test_invalid_json(self) -> None:
        response = _mock_response()
        response.json.side_effect = ValueError("not json")
        self.session.request.return_value = response
        with self.assertRaises(TemplateClientError):
            self.client.fetch(1)


class DesignerSessionTests(TestCase):
    def setUp(self) -> None:
        self.client = mock.Mock(spec=TemplateClient)
        self.alerts = []

    def _session(self, template_id=None) -> DesignerSession:
        return DesignerSession(template_id=template_id, client=self.client, alert=self.alerts.append)

    def test_mount_loads_existing_template(self) -> None:
        self.client.fetch.return_value = {
            "id": 4,
            "name": "Loaded",
            "pages": [{"pageNumber": 1, "fields": []}, {"pageNumber": 2, "fields": []}],
        }
        session = self._session(4)
        session.mount()
        self.assertEqual(session.template.name, "Loaded")
        self.assertEqual(len(session.template.pages), 2)

    def test_mount_failure_keeps_empty_template(self) -> None:
        self.client.fetch.side_effect = TemplateClientError("down")
        session = self._session(4)
        with self.assertLogs("designer.session", level="ERROR"):
            session.mount()
        self.assertEqual(session.template, Template())
        self.assertEqual(self.alerts, [])

    def test_mount_with_malformed_payload_keeps_empty_template(self) -> None:
        for payload in ([], None, {"name": "Bad", "pages": [1]}, {"pages": [{"fields": [{"type": "text", "style": 5}]}]}):
            self.client.fetch.return_value = payload
            session = self._session(5)
            with self.assertLogs("designer.session", level="ERROR"):
                session.mount()
            self.assertEqual(session.template, Template())
        self.assertEqual(self.alerts, [])

    def test_new_session_does_not_fetch(self) -> None:
        session = self._session("new")
        session.mount()
        self.assertTrue(session.is_new)
        self.client.fetch.assert_not_called()

    def test_save_requires_name(self) -> None:
        session = self._session()
        self.assertIsNone(session.save())
        self.assertEqual(self.alerts, [NAME_REQUIRED_MESSAGE])
        self.client.save.assert_not_called()

    def test_save_new_then_existing(self) -> None:
        self.client.save.return_value = {"id": 12, "name": "Test"}
        session = self._session()
        session.rename("Test")
        session.save()
        self.assertNotIn("id", self.client.save.call_args.args[0])
        self.assertEqual(session.template_id, 12)
        self.assertFalse(session.is_new)

        session.save()
        self.assertEqual(self.client.save.call_args.args[0]["id"], 12)
        self.assertEqual(self.alerts, [SAVED_MESSAGE, SAVED_MESSAGE])

    def test_save_failure_alerts_and_keeps_document(self) -> None:
        self.client.save.side_effect = TemplateClientError("boom", status_code=500)
        session = self._session()
        session.rename("Test")
        session.canvas.drop("text", PointerEvent.at(10, 10))
        with self.assertLogs("designer.session", level="ERROR"):
            self.assertIsNone(session.save())
        self.assertEqual(self.alerts, [SAVE_FAILED_MESSAGE])
        self.assertEqual(len(session.state.current_page.fields), 1)
        self.assertTrue(session.is_new)

    def test_upload_background(self) -> None:
        self.client.upload.return_value = "/media/uploads/templates/bg.png"
        session = self._session()
        session.upload_background("bg.png", io.BytesIO(b"png"), "image/png")
        self.assertEqual(session.state.current_page.background_image, "/media/uploads/templates/bg.png")

    def test_upload_failure_is_only_logged(self) -> None:
        self.client.upload.side_effect = TemplateClientError("too big", status_code=400)
        session = self._session()
        with self.assertLogs("designer.session", level="ERROR"):
            self.assertIsNone(session.upload_background("bg.png", io.BytesIO(b"png"), "image/png"))
        self.assertIsNone(session.state.current_page.background_image)
        self.assertEqual(self.alerts, [])

    def test_keyboard_shortcuts(self) -> None:
        session = self._session()
        item = session.canvas.drop("text", PointerEvent.at(50, 50))
        session.properties.change("label", "X")

        copy_event = KeyEvent(key="c", ctrl=True)
        self.assertTrue(session.key_down(copy_event))
        self.assertTrue(copy_event.default_prevented)

        self.assertTrue(session.key_down(KeyEvent(key="v", meta=True)))
        self.assertTrue(session.key_down(KeyEvent(key="V", ctrl=True)))
        fields = session.state.current_page.fields
        self.assertEqual(len(fields), 3)
        self.assertEqual([(f.style.left, f.style.top) for f in fields[1:]], [(70, 70), (70, 70)])
        self.assertEqual({f.label for f in fields[1:]}, {"X (コピー)"})

        self.assertTrue(session.key_down(KeyEvent(key="Delete")))
        self.assertEqual(len(session.state.current_page.fields), 2)
        self.assertIsNone(session.state.selected_field)
        self.assertFalse(session.key_down(KeyEvent(key="Delete")))
        self.assertFalse(session.key_down(KeyEvent(key="c", ctrl=True)))
        self.assertEqual(item.label, "X")

    def test_ctrl_s_saves(self) -> None:
        session = self._session()
        event = KeyEvent(key="s", ctrl=True)
        self.assertTrue(session.key_down(event))
        self.assertTrue(event.default_prevented)
        self.assertEqual(self.alerts, [NAME_REQUIRED_MESSAGE])

    def test_create_move_resize_scenario(self) -> None:
        self.client.save.return_value = {"id": 1, "name": "Test"}
        session = self._session()
        session.rename("Test")
        item = session.canvas.drop("text", PointerEvent.at(100, 100))
        session.canvas.pointer_down(item.id, PointerEvent.at(120, 110))
        session.canvas.pointer_move(PointerEvent.at(170, 170))
        session.canvas.pointer_up()
        self.assertEqual((item.style.left, item.style.top), (150, 160))

        session.canvas.handle_pointer_down(item.id, "se", PointerEvent.at(350, 200))
        session.canvas.pointer_move(PointerEvent.at(383, 217))
        session.canvas.pointer_up()
        self.assertEqual((item.style.width, item.style.height), (230, 60))

        session.save()
        sent = self.client.save.call_args.args[0]
        reloaded = Template.from_dict(sent)
        self.assertEqual(reloaded.pages[0].fields, session.template.pages[0].fields)
