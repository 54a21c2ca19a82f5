"""
URL configuration for core app.
"""

from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    # Staff
    path("api/staff/", views.StaffMemberListCreateView.as_view(), name="staff_list"),
    path(
        "api/staff/<uuid:staff_id>/",
        views.StaffMemberDetailView.as_view(),
        name="staff_detail",
    ),
    path(
        "api/staff/<uuid:staff_id>/commission/",
        views.staff_commission,
        name="staff_commission",
    ),
    path(
        "api/staff/<uuid:staff_id>/visibility-mask/",
        views.staff_visibility_mask,
        name="staff_visibility_mask",
    ),
    # Business settings
    path("api/settings/", views.business_settings, name="business_settings"),
]
