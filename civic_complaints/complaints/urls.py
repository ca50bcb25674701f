from django.urls import path

from .views import (
    AdminComplaintDetailView,
    AdminComplaintResponseView,
    AdminComplaintStatusView,
    AdminDashboardView,
    AttachmentDownloadView,
    ComplaintSubmitView,
    TrackComplaintView,
)

app_name = "complaints"

urlpatterns = [
    path("submit/", ComplaintSubmitView.as_view(), name="complaint_submit"),
    path("track/", TrackComplaintView.as_view(), name="complaint_track"),
    path("dashboard/", AdminDashboardView.as_view(), name="admin_dashboard"),
    path(
        "dashboard/complaints/<uuid:complaint_id>/",
        AdminComplaintDetailView.as_view(),
        name="admin_complaint_detail",
    ),
    path(
        "dashboard/complaints/<uuid:complaint_id>/status/",
        AdminComplaintStatusView.as_view(),
        name="admin_complaint_status",
    ),
    path(
        "dashboard/complaints/<uuid:complaint_id>/respond/",
        AdminComplaintResponseView.as_view(),
        name="admin_complaint_respond",
    ),
    path("attachments/<int:attachment_id>/download/", AttachmentDownloadView.as_view(), name="attachment_download"),
]
