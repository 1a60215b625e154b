"""API views for form templates, background uploads and form data."""
from __future__ import annotations

import logging
import os
import time

from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.crypto import get_random_string
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import FormData, FormTemplate
from .serializers import FormDataSerializer, FormTemplateSerializer

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (コピー)"
_RANDOM_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"


def _username(request: Request) -> str:
    return getattr(request.user, "username", "") or ""


class FormTemplateViewSet(viewsets.ModelViewSet):
    queryset = FormTemplate.objects.prefetch_related("pages__fields").all()
    serializer_class = FormTemplateSerializer
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "updated_at", "usage_count"]
    ordering = ["-updated_at"]

    def perform_create(self, serializer):  # type: ignore[override]
        template = serializer.save(created_by=_username(self.request))
        logger.info("Created template %s (%s)", template.id, template.name)

    def perform_update(self, serializer):  # type: ignore[override]
        template = serializer.save()
        logger.info("Updated template %s", template.id)

    def perform_destroy(self, instance):  # type: ignore[override]
        logger.info("Deleting template %s", instance.id)
        instance.delete()

    @action(detail=True, methods=["post"], url_path="duplicate")
    def duplicate(self, request, *args, **kwargs):  # type: ignore[override]
        """Copy a template with all of its pages and fields."""

        source = self.get_object()
        payload = dict(self.get_serializer(source).data)
        payload["name"] = f"{source.name}{COPY_SUFFIX}"
        serializer = self.get_serializer(data=payload)
        serializer.is_valid(raise_exception=True)
        template = serializer.save(created_by=_username(request))
        logger.info("Duplicated template %s as %s", source.id, template.id)
        return Response(serializer.data, status=status.HTTP_201_CREATED)


class TemplateUploadView(APIView):
    """Store a page background image and return its public URL."""

    parser_classes = [MultiPartParser, FormParser]

    def post(self, request: Request) -> Response:
        upload = request.FILES.get("file")
        if upload is None:
            return Response({"error": "No file was uploaded."}, status=status.HTTP_400_BAD_REQUEST)
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            return Response(
                {"error": "Only image files can be uploaded."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if upload.size > settings.FORM_UPLOAD_MAX_BYTES:
            limit_mb = settings.FORM_UPLOAD_MAX_BYTES // (1024 * 1024)
            return Response(
                {"error": f"Files must be {limit_mb}MB or smaller."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        extension = os.path.splitext(upload.name)[1]
        file_name = (
            f"template_{int(time.time() * 1000)}_"
            f"{get_random_string(13, _RANDOM_CHARS)}{extension}"
        )
        path = default_storage.save(f"{settings.FORM_UPLOAD_DIR}/{file_name}", upload)
        logger.info("Stored template background %s (%s bytes)", path, upload.size)
        return Response(
            {
                "url": default_storage.url(path),
                "fileName": os.path.basename(path),
                "size": upload.size,
                "type": content_type,
            }
        )


class FormDataViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = FormDataSerializer

    def get_queryset(self):  # type: ignore[override]
        queryset = FormData.objects.select_related("template").all()
        template_id = self.request.query_params.get("templateId")
        if template_id:
            if not template_id.isdigit():
                return queryset.none()
            queryset = queryset.filter(template_id=template_id)
        status_value = self.request.query_params.get("status")
        if status_value:
            queryset = queryset.filter(status=status_value)
        return queryset

    def perform_create(self, serializer):  # type: ignore[override]
        form_data = serializer.save(submitted_by=_username(self.request))
        logger.info(
            "Saved form data %s for template %s (%s)",
            form_data.id,
            form_data.template_id,
            form_data.status,
        )


@api_view(["GET"])
def health(request):  # type: ignore[override]
    """Readiness endpoint for orchestration tooling."""

    return Response({"status": "ok"})
