"""Serializers for form templates and form data.

The JSON shape matches the designer's document model: camelCase keys,
``pages`` -> ``fields`` -> ``style``.
"""
from __future__ import annotations

from typing import Any, Dict, List

from django.db import transaction
from django.db.models import F
from rest_framework import serializers

from .formulas import MAX_FORMULA_LENGTH, apply_calculations
from .models import FormData, FormTemplate, FormTemplateField, FormTemplatePage


def _drop_none(data: Dict[str, Any], keys: List[str]) -> Dict[str, Any]:
    for key in keys:
        if data.get(key) is None:
            data.pop(key, None)
    return data


class FieldStyleSerializer(serializers.Serializer):
    left = serializers.FloatField()
    top = serializers.FloatField()
    width = serializers.FloatField(min_value=0)
    height = serializers.FloatField(min_value=0)
    fontSize = serializers.IntegerField(min_value=1, default=14)
    backgroundColor = serializers.CharField(max_length=64, allow_blank=True, default="transparent")
    color = serializers.CharField(max_length=64, allow_blank=True, default="#000000")
    zIndex = serializers.IntegerField(default=1000)
    borderColor = serializers.CharField(max_length=64, allow_blank=True, required=False)
    fontWeight = serializers.CharField(max_length=32, allow_blank=True, required=False)


class FormTemplateFieldSerializer(serializers.ModelSerializer):
    id = serializers.CharField(source="field_id", read_only=True)
    fieldId = serializers.CharField(source="field_id", max_length=255)
    type = serializers.ChoiceField(source="field_type", choices=FormTemplateField.FIELD_TYPES)
    formula = serializers.CharField(
        max_length=MAX_FORMULA_LENGTH, required=False, allow_null=True, allow_blank=True
    )
    options = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        allow_null=True,
    )
    style = FieldStyleSerializer()

    class Meta:
        model = FormTemplateField
        fields = [
            "id",
            "fieldId",
            "type",
            "label",
            "placeholder",
            "required",
            "validation",
            "formula",
            "options",
            "style",
        ]

    def to_internal_value(self, data):  # type: ignore[override]
        """Accept fields that only carry ``id``; the designer keeps both equal."""

        if isinstance(data, dict) and not data.get("fieldId") and data.get("id"):
            data = {**data, "fieldId": data["id"]}
        return super().to_internal_value(data)

    def to_representation(self, instance):  # type: ignore[override]
        data = super().to_representation(instance)
        return _drop_none(data, ["placeholder", "validation", "formula", "options"])


class FormTemplatePageSerializer(serializers.ModelSerializer):
    pageNumber = serializers.IntegerField(source="page_number", min_value=0)
    backgroundImage = serializers.CharField(
        source="background_image",
        max_length=500,
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    fields = FormTemplateFieldSerializer(many=True, required=False)

    class Meta:
        model = FormTemplatePage
        fields = ["pageNumber", "backgroundImage", "fields"]

    def to_representation(self, instance):  # type: ignore[override]
        data = super().to_representation(instance)
        if not data.get("backgroundImage"):
            data.pop("backgroundImage", None)
        return data


def _create_pages(template: FormTemplate, pages: List[Dict[str, Any]]) -> None:
    for page_index, page in enumerate(pages):
        fields = page.pop("fields", [])
        page_obj = FormTemplatePage.objects.create(template=template, position=page_index, **page)
        FormTemplateField.objects.bulk_create(
            FormTemplateField(page=page_obj, position=field_index, **dict(field))
            for field_index, field in enumerate(fields)
        )


class FormTemplateSerializer(serializers.ModelSerializer):
    pages = FormTemplatePageSerializer(many=True, allow_empty=False)
    createdBy = serializers.CharField(source="created_by", read_only=True)
    usageCount = serializers.IntegerField(source="usage_count", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = FormTemplate
        fields = [
            "id",
            "name",
            "description",
            "createdBy",
            "usageCount",
            "createdAt",
            "updatedAt",
            "pages",
        ]

    def create(self, validated_data):  # type: ignore[override]
        pages = validated_data.pop("pages", [])
        with transaction.atomic():
            template = FormTemplate.objects.create(**validated_data)
            _create_pages(template, pages)
        return template

    def update(self, instance, validated_data):  # type: ignore[override]
        pages = validated_data.pop("pages", None)
        with transaction.atomic():
            for attr, value in validated_data.items():
                setattr(instance, attr, value)
            instance.save()

            if pages is not None:
                instance.pages.all().delete()
                _create_pages(instance, pages)
        return instance


class FormDataSerializer(serializers.ModelSerializer):
    templateId = serializers.PrimaryKeyRelatedField(
        source="template", queryset=FormTemplate.objects.all()
    )
    orderId = serializers.CharField(source="order_id", max_length=64, required=False, allow_blank=True)
    customerId = serializers.CharField(
        source="customer_id", max_length=64, required=False, allow_blank=True
    )
    data = serializers.JSONField(required=False, default=dict)
    submittedBy = serializers.CharField(source="submitted_by", read_only=True)
    submittedAt = serializers.DateTimeField(source="submitted_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = FormData
        fields = [
            "id",
            "templateId",
            "orderId",
            "customerId",
            "data",
            "status",
            "submittedBy",
            "submittedAt",
            "createdAt",
            "updatedAt",
        ]

    def validate_data(self, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise serializers.ValidationError("Must be a JSON object.")
        return value

    def create(self, validated_data):  # type: ignore[override]
        template: FormTemplate = validated_data["template"]
        submitted_by = validated_data.pop("submitted_by", "")
        fields = FormTemplateField.objects.filter(page__template=template).order_by(
            "page__position", "page__id", "position", "id"
        )
        validated_data["data"] = apply_calculations(fields, validated_data.get("data") or {})

        with transaction.atomic():
            instance = FormData(**validated_data)
            if instance.status == FormData.SUBMITTED:
                instance.mark_submitted(submitted_by)
                FormTemplate.objects.filter(pk=template.pk).update(usage_count=F("usage_count") + 1)
            instance.save()
        return instance
