"""Tests for the form template API."""
from __future__ import annotations

import shutil
import tempfile
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from designer.controller import CanvasController
from designer.document import Template
from designer.events import PointerEvent
from designer.state import DesignerState

from .formulas import MAX_FORMULA_LENGTH, FormulaError, apply_calculations, evaluate
from .models import FormData, FormTemplate, FormTemplateField


def _field(field_id: str, **overrides):
    field = {
        "id": field_id,
        "fieldId": field_id,
        "type": "text",
        "label": "Inspector",
        "required": True,
        "style": {
            "left": 40,
            "top": 60,
            "width": 200,
            "height": 40,
            "fontSize": 14,
            "backgroundColor": "transparent",
            "color": "#000000",
            "zIndex": 1000,
        },
    }
    field.update(overrides)
    return field


class FormTemplateApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def _create(self, **overrides):
        payload = {
            "name": "Extinguisher inspection",
            "description": "Annual inspection report.",
            "pages": [{"pageNumber": 1, "fields": [_field("field_1_inspector")]}],
        }
        payload.update(overrides)
        return self.client.post(reverse("form-template-list"), payload, format="json")

    def test_create_and_list_templates(self) -> None:
        response = self._create()
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["usageCount"], 0)

        response = self.client.get(reverse("form-template-list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(FormTemplateField.objects.count(), 1)

    def test_paths_without_trailing_slash(self) -> None:
        response = self.client.post(
            "/api/forms/templates",
            {"name": "Hose test", "pages": [{"pageNumber": 1, "fields": []}]},
            format="json",
        )
        self.assertEqual(response.status_code, 201)

        response = self.client.get(f"/api/forms/templates/{response.data['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["name"], "Hose test")

    def test_retrieve_echoes_field_id_and_omits_unset_attributes(self) -> None:
        template_id = self._create().data["id"]

        response = self.client.get(reverse("form-template-detail", args=[template_id]))
        self.assertEqual(response.status_code, 200)
        field = response.data["pages"][0]["fields"][0]
        self.assertEqual(field["id"], "field_1_inspector")
        self.assertEqual(field["fieldId"], "field_1_inspector")
        self.assertEqual(field["style"]["left"], 40)
        self.assertNotIn("placeholder", field)
        self.assertNotIn("options", field)
        self.assertNotIn("backgroundImage", response.data["pages"][0])

    def test_blank_name_is_rejected(self) -> None:
        response = self._create(name="")
        self.assertEqual(response.status_code, 400)
        self.assertIn("name", response.data)

    def test_template_needs_a_page(self) -> None:
        response = self._create(pages=[])
        self.assertEqual(response.status_code, 400)
        self.assertIn("pages", response.data)

    def test_field_style_is_validated(self) -> None:
        bad_field = _field("field_bad", style={"left": "far", "top": 0, "width": 100, "height": 20})
        response = self._create(pages=[{"pageNumber": 1, "fields": [bad_field]}])
        self.assertEqual(response.status_code, 400)

    def test_field_with_only_id_uses_it_as_field_id(self) -> None:
        field = _field("field_only_id")
        del field["fieldId"]
        response = self._create(pages=[{"pageNumber": 1, "fields": [field]}])
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["pages"][0]["fields"][0]["fieldId"], "field_only_id")

    def test_update_replaces_pages(self) -> None:
        template_id = self._create().data["id"]
        payload = {
            "name": "Extinguisher inspection v2",
            "pages": [
                {"pageNumber": 1, "fields": []},
                {
                    "pageNumber": 3,
                    "backgroundImage": "/media/uploads/templates/p2.png",
                    "fields": [_field("field_2_a"), _field("field_2_b", type="number")],
                },
            ],
        }
        response = self.client.put(
            reverse("form-template-detail", args=[template_id]), payload, format="json"
        )
        self.assertEqual(response.status_code, 200)
        pages = response.data["pages"]
        self.assertEqual([page["pageNumber"] for page in pages], [1, 3])
        self.assertEqual(
            [field["fieldId"] for field in pages[1]["fields"]], ["field_2_a", "field_2_b"]
        )
        self.assertEqual(FormTemplateField.objects.count(), 2)

    def test_invalid_update_keeps_existing_pages(self) -> None:
        template_id = self._create().data["id"]
        bad_field = _field("field_bad", type="signature")
        response = self.client.put(
            reverse("form-template-detail", args=[template_id]),
            {"name": "Broken", "pages": [{"pageNumber": 1, "fields": [bad_field]}]},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(FormTemplate.objects.get().name, "Extinguisher inspection")
        self.assertEqual(FormTemplateField.objects.get().field_id, "field_1_inspector")

    def test_overlong_formula_is_rejected(self) -> None:
        formula = "+".join(["qty"] * 500)
        response = self.client.post(
            reverse("form-template-list"),
            {
                "name": "Long formula",
                "pages": [
                    {"pageNumber": 1, "fields": [_field("total", type="calculation", formula=formula)]}
                ],
            },
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(FormTemplate.objects.exists())

    def test_missing_template_returns_404(self) -> None:
        response = self.client.get(reverse("form-template-detail", args=[999]))
        self.assertEqual(response.status_code, 404)

    def test_delete_template(self) -> None:
        template_id = self._create().data["id"]
        response = self.client.delete(reverse("form-template-detail", args=[template_id]))
        self.assertEqual(response.status_code, 204)
        self.assertFalse(FormTemplate.objects.exists())
        self.assertFalse(FormTemplateField.objects.exists())

    def test_duplicate_template(self) -> None:
        template_id = self._create().data["id"]
        response = self.client.post(reverse("form-template-duplicate", args=[template_id]))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["name"], "Extinguisher inspection (コピー)")
        self.assertNotEqual(response.data["id"], template_id)
        self.assertEqual(
            response.data["pages"][0]["fields"][0]["fieldId"], "field_1_inspector"
        )
        self.assertEqual(FormTemplate.objects.count(), 2)

    def test_search_templates(self) -> None:
        self._create()
        self._create(name="Sprinkler checklist", description="")
        response = self.client.get(reverse("form-template-list"), {"search": "sprinkler"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["name"] for item in response.data], ["Sprinkler checklist"])

    def test_designer_document_round_trip(self) -> None:
        state = DesignerState(template=Template(name="Test"))
        controller = CanvasController(state)
        field = controller.drop("text", PointerEvent.at(100, 100))
        controller.pointer_down(field.id, PointerEvent.at(110, 120))
        controller.pointer_move(PointerEvent.at(160, 180))
        controller.pointer_up()
        controller.handle_pointer_down(field.id, "se", PointerEvent.at(350, 200))
        controller.pointer_move(PointerEvent.at(383, 217))
        controller.pointer_up()

        response = self.client.post(
            reverse("form-template-list"), state.template.to_dict(), format="json"
        )
        self.assertEqual(response.status_code, 201)

        response = self.client.get(reverse("form-template-detail", args=[response.data["id"]]))
        loaded = Template.from_dict(response.data)
        self.assertEqual(loaded.pages, state.template.pages)
        style = loaded.pages[0].fields[0].style
        self.assertEqual((style.left, style.top, style.width, style.height), (150, 160, 230, 60))


class TemplateUploadTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.media_root = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media_root, ignore_errors=True)

    def test_upload_image(self) -> None:
        upload = SimpleUploadedFile("background.png", b"\x89PNG\r\n\x1a\n", content_type="image/png")
        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post(reverse("form-upload"), {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["url"].startswith("/media/uploads/templates/template_"))
        self.assertTrue(response.data["fileName"].endswith(".png"))
        self.assertEqual(response.data["type"], "image/png")
        self.assertEqual(response.data["size"], 8)

    def test_rejects_non_image(self) -> None:
        upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        with override_settings(MEDIA_ROOT=self.media_root):
            response = self.client.post(reverse("form-upload"), {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.data)

    def test_rejects_oversized_file(self) -> None:
        upload = SimpleUploadedFile("big.png", b"x" * 64, content_type="image/png")
        with override_settings(MEDIA_ROOT=self.media_root, FORM_UPLOAD_MAX_BYTES=32):
            response = self.client.post(reverse("form-upload"), {"file": upload}, format="multipart")
        self.assertEqual(response.status_code, 400)

    def test_requires_file(self) -> None:
        response = self.client.post(reverse("form-upload"), {}, format="multipart")
        self.assertEqual(response.status_code, 400)


class FormDataApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        response = self.client.post(
            reverse("form-template-list"),
            {
                "name": "Pump inspection",
                "pages": [
                    {
                        "pageNumber": 1,
                        "fields": [
                            _field("qty", type="number"),
                            _field("price", type="number"),
                            _field("total", type="calculation", formula="qty * price"),
                            _field("grand", type="calculation", formula="sum(total, 100)"),
                        ],
                    }
                ],
            },
            format="json",
        )
        self.template_id = response.data["id"]

    def test_draft_does_not_count_as_usage(self) -> None:
        response = self.client.post(
            reverse("form-data-list"),
            {"templateId": self.template_id, "data": {"qty": 2, "price": 150}},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], FormData.DRAFT)
        self.assertIsNone(response.data["submittedAt"])
        self.assertEqual(FormTemplate.objects.get().usage_count, 0)

    def test_submission_computes_calculations_and_counts_usage(self) -> None:
        response = self.client.post(
            reverse("form-data-list"),
            {
                "templateId": self.template_id,
                "orderId": "ORD-7",
                "data": {"qty": "3", "price": 200},
                "status": "submitted",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["total"], 600)
        self.assertEqual(response.data["data"]["grand"], 700)
        self.assertIsNotNone(response.data["submittedAt"])
        self.assertEqual(FormTemplate.objects.get().usage_count, 1)

    def test_broken_formula_leaves_value_unset(self) -> None:
        response = self.client.post(
            reverse("form-data-list"),
            {"templateId": self.template_id, "data": {"qty": "many", "price": 1, "total": 5}},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertNotIn("total", response.data["data"])

    def test_fields_left_out_of_the_submission_count_as_zero(self) -> None:
        response = self.client.post(
            reverse("form-data-list"),
            {"templateId": self.template_id, "data": {"qty": 2}},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["data"]["total"], 0)
        self.assertEqual(response.data["data"]["grand"], 100)
        self.assertNotIn("price", response.data["data"])

    def test_data_must_be_an_object(self) -> None:
        response = self.client.post(
            reverse("form-data-list"),
            {"templateId": self.template_id, "data": [1, 2]},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_filter_by_template_and_status(self) -> None:
        other = FormTemplate.objects.create(name="Other")
        FormData.objects.create(template_id=self.template_id, status=FormData.DRAFT)
        FormData.objects.create(template_id=self.template_id, status=FormData.SUBMITTED)
        FormData.objects.create(template=other, status=FormData.SUBMITTED)

        response = self.client.get(
            reverse("form-data-list"), {"templateId": self.template_id, "status": "submitted"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["templateId"], self.template_id)

        response = self.client.get(reverse("form-data-list"), {"templateId": "abc"})
        self.assertEqual(response.data, [])


class FormulaTests(TestCase):
    def test_arithmetic_and_sum(self) -> None:
        self.assertEqual(evaluate("(a + b) * 2 - sum(a, 1) % 3", {"a": 4, "b": "1.5"}), 9.0)

    def test_blank_values_count_as_zero(self) -> None:
        self.assertEqual(evaluate("a + b", {"a": "", "b": None}), 0)

    def test_rejects_unknown_references_and_code(self) -> None:
        with self.assertRaises(FormulaError):
            evaluate("missing + 1", {})
        with self.assertRaises(FormulaError):
            evaluate("__import__('os')", {})
        with self.assertRaises(FormulaError):
            evaluate("a / 0", {"a": 1})
        with self.assertRaises(FormulaError):
            evaluate("1 +", {})

    def test_long_or_deeply_nested_formulas_are_formula_errors(self) -> None:
        with self.assertRaises(FormulaError):
            evaluate("+".join(["1"] * 5000), {})
        self.assertEqual(evaluate("+".join(["1"] * 200), {}), 200)
        with mock.patch("form_templates.formulas.ast.parse", side_effect=RecursionError):
            with self.assertRaises(FormulaError):
                evaluate("1 + 1", {})
        with mock.patch("form_templates.formulas._evaluate", side_effect=RecursionError):
            with self.assertRaises(FormulaError):
                evaluate("1 + 1", {})

    def test_calculations_only_see_template_fields(self) -> None:
        fields = [
            FormTemplateField(field_id="qty", field_type=FormTemplateField.NUMBER),
            FormTemplateField(field_id="total", field_type=FormTemplateField.CALCULATION, formula="qty * bonus"),
            FormTemplateField(field_id="grand", field_type=FormTemplateField.CALCULATION, formula="total + 1"),
        ]
        with self.assertLogs("form_templates.formulas", level="WARNING"):
            result = apply_calculations(fields, {"qty": 2, "bonus": 10, "total": 999})
        self.assertNotIn("total", result)
        self.assertEqual(result["grand"], 1)
        self.assertEqual(result["bonus"], 10)


class HealthTests(TestCase):
    def test_health(self) -> None:
        response = APIClient().get(reverse("form-health"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "ok")
