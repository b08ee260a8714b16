"""
Root URL configuration.

The clinic routes are included last because they end with the page
catch-all; ``/admin/``, ``/swagger/`` and ``/redoc/`` must match first.
"""
from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework.permissions import AllowAny

api_info = openapi.Info(
    title="Healthify API",
    default_version="v1",
    description="Clinic administration: access control, appointments, directories and memberships.",
)

schema_view = get_schema_view(api_info, public=True, permission_classes=(AllowAny,))

urlpatterns = [
    path("admin/", admin.site.urls),
    path("swagger/", schema_view.with_ui("swagger", cache_timeout=0), name="schema-swagger-ui"),
    path("redoc/", schema_view.with_ui("redoc", cache_timeout=0), name="schema-redoc"),
    path("", include("clinic.routers")),
]
