"""
URL configuration for CRM app.
"""

from django.urls import path

from . import views

app_name = "crm"

urlpatterns = [
    path("api/clients/", views.ClientListCreateView.as_view(), name="client_list"),
    path("api/clients/<uuid:client_id>/", views.ClientDetailView.as_view(), name="client_detail"),
    path("api/clients/<uuid:client_id>/redeem/", views.client_redeem, name="client_redeem"),
    path(
        "api/clients/<uuid:client_id>/add-points/",
        views.client_add_points,
        name="client_add_points",
    ),
]
