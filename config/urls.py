"""
URL configuration for the salon point-of-sale platform.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("apps.core.urls")),
    path("", include("apps.crm.urls")),
    path("", include("apps.sales.urls")),
    path("", include("apps.reporting.urls")),
]
