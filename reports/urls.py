# reports/urls.py

from django.urls import path
from .views import AssignmentReportView, SummaryView

urlpatterns = [
    path("assignments/", AssignmentReportView.as_view(), name="report-assignments"),
    path("summary/", SummaryView.as_view(), name="report-summary"),
]
