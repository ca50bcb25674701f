from django.contrib import admin

from .models import Attachment, Complaint, Response, TimelineEvent


class AttachmentInline(admin.TabularInline):
    model = Attachment
    extra = 0
    readonly_fields = ("uploaded_at", "original_filename")


class TimelineEventInline(admin.TabularInline):
    model = TimelineEvent
    extra = 0
    can_delete = False
    readonly_fields = ("status", "note", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


class ResponseInline(admin.TabularInline):
    model = Response
    extra = 0
    can_delete = False
    readonly_fields = ("respondent", "message", "created_at")

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = (
        "tracking_id",
        "title",
        "category",
        "agency",
        "status",
        "email",
        "created_at",
    )
    list_filter = ("status", "category", "agency", "created_at")
    search_fields = ("tracking_id", "title", "description", "location", "email")
    readonly_fields = ("tracking_id", "status", "created_at", "updated_at")
    inlines = [TimelineEventInline, ResponseInline, AttachmentInline]

    # Complaints are only created through the submit page and API.
    def has_add_permission(self, request):
        return False
