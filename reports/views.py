# reports/views.py

from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from hotels.views import HotelScopedMixin

from .assignment_report import build_assignment_report, build_summary


def _list_param(request, name):
    """Accept ?name=a,b and ?name=a&name=b."""
    values = []
    for raw in request.query_params.getlist(name):
        values.extend(v.strip() for v in raw.split(",") if v.strip())
    return values


class AssignmentReportView(HotelScopedMixin, APIView):
    """
    GET /api/reports/assignments/?start_date=YYYY-MM-DD&end_date=YYYY-MM-DD
                                 &staff_ids=..&room_ids=..&shifts=..

    Returns JSON with:
    - filters: the effective filters
    - count: number of rows
    - rows: [{ "date", "staff_name", "staff_code", "room_number", "shift",
               "start_time", "end_time", "status" }, ...]

    Dates default to today; an empty list filter means "all".
    """

    def get(self, request):
        dates = {}
        for name in ("start_date", "end_date"):
            raw = (request.query_params.get(name) or "").strip()
            dates[name] = parse_date(raw) if raw else None
            if raw and dates[name] is None:
                return Response(
                    {"detail": f"Invalid {name.replace('_', ' ')}. Use YYYY-MM-DD."},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        if dates["start_date"] and dates["end_date"] and dates["start_date"] > dates["end_date"]:
            return Response(
                {"detail": "Start date must be on or before end date."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        filters = {
            "staff_ids": _list_param(request, "staff_ids"),
            "room_ids": _list_param(request, "room_ids"),
            "shifts": _list_param(request, "shifts"),
        }
        rows = build_assignment_report(self.get_store(), **dates, **filters)

        effective = {
            "start_date": str(dates["start_date"] or ""),
            "end_date": str(dates["end_date"] or ""),
            **filters,
        }
        return Response({"filters": effective, "count": len(rows), "rows": rows})


class SummaryView(HotelScopedMixin, APIView):
    """
    GET /api/reports/summary/
    Dashboard cards: staff/room counts, active assignments, tip totals,
    onboarding state.
    """

    def get(self, request):
        return Response(build_summary(self.get_store()))
