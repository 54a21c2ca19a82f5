"""
URL patterns for the reporting app.
"""

from django.urls import path

from . import views

app_name = "reporting"

urlpatterns = [
    path("api/reports/aggregate/", views.aggregate, name="aggregate"),
    path("api/reports/summary/", views.summary_report, name="summary_report"),
    path("api/reports/by-day/", views.report_by_day, name="report_by_day"),
    path("api/reports/by-month/", views.report_by_month, name="report_by_month"),
    path("api/reports/salary/", views.salary_report, name="salary_report"),
    path(
        "api/reports/staff/<uuid:staff_id>/breakdown/",
        views.staff_breakdown,
        name="staff_breakdown",
    ),
    path("api/reports/points-usage/", views.points_usage, name="points_usage"),
]
