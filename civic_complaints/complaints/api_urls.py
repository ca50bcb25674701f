from django.urls import path

from .api import (
    AdminComplaintDetailAPIView,
    AdminComplaintListAPIView,
    AdminComplaintResponseAPIView,
    AdminComplaintStatusAPIView,
    ComplaintCollectionAPIView,
    ComplaintDetailAPIView,
    ComplaintStatsAPIView,
    TrackComplaintAPIView,
)

app_name = "api"

urlpatterns = [
    path("complaints/", ComplaintCollectionAPIView.as_view(), name="complaints"),
    path("complaints/track/", TrackComplaintAPIView.as_view(), name="complaint_track"),
    path("complaints/stats/", ComplaintStatsAPIView.as_view(), name="complaint_stats"),
    path("complaints/<uuid:complaint_id>/", ComplaintDetailAPIView.as_view(), name="complaint_detail"),
    path("admin/complaints/", AdminComplaintListAPIView.as_view(), name="admin_complaints"),
    path(
        "admin/complaints/<uuid:complaint_id>/",
        AdminComplaintDetailAPIView.as_view(),
        name="admin_complaint_detail",
    ),
    path(
        "admin/complaints/<uuid:complaint_id>/status/",
        AdminComplaintStatusAPIView.as_view(),
        name="admin_complaint_status",
    ),
    path(
        "admin/complaints/<uuid:complaint_id>/responses/",
        AdminComplaintResponseAPIView.as_view(),
        name="admin_complaint_responses",
    ),
]
