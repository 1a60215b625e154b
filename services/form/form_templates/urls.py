"""Route registration for the form service."""
from __future__ import annotations

from django.urls import include, path, re_path
from rest_framework.routers import DefaultRouter

from .views import FormDataViewSet, FormTemplateViewSet, TemplateUploadView, health

router = DefaultRouter()
# Accept /api/forms/templates as well as /api/forms/templates/.
router.trailing_slash = "/?"
router.register("forms/templates", FormTemplateViewSet, basename="form-template")
router.register("forms/data", FormDataViewSet, basename="form-data")

urlpatterns = [
    path("healthz/", health, name="form-health"),
    re_path(r"^forms/upload/?$", TemplateUploadView.as_view(), name="form-upload"),
    path("", include(router.urls)),
]
