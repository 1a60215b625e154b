"""Database models for form templates and the data entered into them."""
from __future__ import annotations

from django.db import models
from django.utils import timezone


class FormTemplate(models.Model):
    """A printable form laid out over one or more pages."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_by = models.CharField(max_length=255, blank=True)
    usage_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "id"]

    def __str__(self) -> str:
        return self.name


class FormTemplatePage(models.Model):
    """A page of a template. ``position`` is document order; ``page_number`` is display only."""

    template = models.ForeignKey(FormTemplate, related_name="pages", on_delete=models.CASCADE)
    page_number = models.PositiveIntegerField(default=1)
    background_image = models.CharField(max_length=500, null=True, blank=True)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self) -> str:
        return f"{self.template} p.{self.page_number}"


class FormTemplateField(models.Model):
    """A field placed on a page; ``style`` holds its position, size and colors."""

    TEXT = "text"
    CHECKBOX = "checkbox"
    SELECT = "select"
    TEXTAREA = "textarea"
    DATE = "date"
    NUMBER = "number"
    CALCULATION = "calculation"
    RADIO = "radio"

    FIELD_TYPES = [
        (TEXT, "Text"),
        (CHECKBOX, "Checkbox"),
        (SELECT, "Select"),
        (TEXTAREA, "Textarea"),
        (DATE, "Date"),
        (NUMBER, "Number"),
        (CALCULATION, "Calculation"),
        (RADIO, "Radio"),
    ]

    page = models.ForeignKey(FormTemplatePage, related_name="fields", on_delete=models.CASCADE)
    field_id = models.CharField(max_length=255)
    field_type = models.CharField(max_length=32, choices=FIELD_TYPES)
    label = models.CharField(max_length=255, blank=True)
    placeholder = models.CharField(max_length=255, null=True, blank=True)
    required = models.BooleanField(default=False)
    validation = models.TextField(null=True, blank=True)
    formula = models.TextField(null=True, blank=True)
    options = models.JSONField(null=True, blank=True)
    style = models.JSONField(default=dict)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self) -> str:
        return f"{self.label} ({self.field_type})"


class FormData(models.Model):
    """Values entered into a template, kept as a draft or submitted."""

    DRAFT = "draft"
    SUBMITTED = "submitted"

    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (SUBMITTED, "Submitted"),
    ]

    template = models.ForeignKey(FormTemplate, related_name="submissions", on_delete=models.CASCADE)
    order_id = models.CharField(max_length=64, blank=True)
    customer_id = models.CharField(max_length=64, blank=True)
    data = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=DRAFT)
    submitted_by = models.CharField(max_length=255, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="form_data_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.template} ({self.status})"

    def mark_submitted(self, submitted_by: str) -> None:
        self.status = self.SUBMITTED
        self.submitted_by = submitted_by
        self.submitted_at = timezone.now()
