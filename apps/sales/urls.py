"""
URL configuration for sales app.
"""

from django.urls import path

from . import views

app_name = "sales"

urlpatterns = [
    path("api/checkout/", views.checkout, name="checkout"),
    path("api/transactions/", views.TransactionRecordListView.as_view(), name="transaction_list"),
    path(
        "api/transactions/<uuid:record_id>/",
        views.transaction_delete,
        name="transaction_delete",
    ),
    path(
        "api/transactions/<uuid:record_id>/payment-method/",
        views.transaction_payment_method,
        name="transaction_payment_method",
    ),
]
