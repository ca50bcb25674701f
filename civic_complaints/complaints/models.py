import os
import uuid

from django.conf import settings
from django.db import models
from django.urls import reverse


class Complaint(models.Model):
    class Category(models.TextChoices):
        ROADS = "ROADS", "Roads and Infrastructure"
        WATER_SUPPLY = "WATER_SUPPLY", "Water Supply"
        ELECTRICITY = "ELECTRICITY", "Electricity"
        WASTE_MANAGEMENT = "WASTE_MANAGEMENT", "Waste Management"
        PUBLIC_TRANSPORT = "PUBLIC_TRANSPORT", "Public Transport"
        HEALTHCARE = "HEALTHCARE", "Healthcare"
        EDUCATION = "EDUCATION", "Education"
        PUBLIC_SAFETY = "PUBLIC_SAFETY", "Public Safety"
        ENVIRONMENT = "ENVIRONMENT", "Environment"
        OTHER = "OTHER", "Other"

    class Agency(models.TextChoices):
        PUBLIC_WORKS = "PUBLIC_WORKS", "Department of Public Works"
        WATER_AUTHORITY = "WATER_AUTHORITY", "Water Authority"
        ELECTRICITY_BOARD = "ELECTRICITY_BOARD", "Electricity Board"
        WASTE_MANAGEMENT = "WASTE_MANAGEMENT", "Waste Management Department"
        TRANSPORT_AUTHORITY = "TRANSPORT_AUTHORITY", "Transport Authority"
        HEALTH = "HEALTH", "Health Department"
        EDUCATION = "EDUCATION", "Education Department"
        POLICE = "POLICE", "Police Department"
        ENVIRONMENTAL_PROTECTION = "ENVIRONMENTAL_PROTECTION", "Environmental Protection Agency"
        GENERAL_ADMINISTRATION = "GENERAL_ADMINISTRATION", "General Administration"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        IN_PROGRESS = "IN_PROGRESS", "In Progress"
        RESOLVED = "RESOLVED", "Resolved"
        REJECTED = "REJECTED", "Rejected"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tracking_id = models.CharField(max_length=16, unique=True, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField()
    category = models.CharField(max_length=50, choices=Category.choices)
    agency = models.CharField(max_length=50, choices=Agency.choices)
    location = models.CharField(max_length=255, blank=True)
    name = models.CharField(max_length=150)
    email = models.EmailField()
    phone = models.CharField(max_length=32, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="complaints",
        null=True,
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.tracking_id or f"Complaint {self.pk}"

    @classmethod
    def agency_for_category(cls, category) -> str:
        """Default handling department for a category, as routed by the intake form."""
        return CATEGORY_AGENCY_ROUTING.get(category, cls.Agency.GENERAL_ADMINISTRATION)

    @property
    def is_closed(self) -> bool:
        return self.status in (self.Status.RESOLVED, self.Status.REJECTED)


CATEGORY_AGENCY_ROUTING = {
    Complaint.Category.ROADS: Complaint.Agency.PUBLIC_WORKS,
    Complaint.Category.WATER_SUPPLY: Complaint.Agency.WATER_AUTHORITY,
    Complaint.Category.ELECTRICITY: Complaint.Agency.ELECTRICITY_BOARD,
    Complaint.Category.WASTE_MANAGEMENT: Complaint.Agency.WASTE_MANAGEMENT,
    Complaint.Category.PUBLIC_TRANSPORT: Complaint.Agency.TRANSPORT_AUTHORITY,
    Complaint.Category.HEALTHCARE: Complaint.Agency.HEALTH,
    Complaint.Category.EDUCATION: Complaint.Agency.EDUCATION,
    Complaint.Category.PUBLIC_SAFETY: Complaint.Agency.POLICE,
    Complaint.Category.ENVIRONMENT: Complaint.Agency.ENVIRONMENTAL_PROTECTION,
    Complaint.Category.OTHER: Complaint.Agency.GENERAL_ADMINISTRATION,
}


class TimelineEvent(models.Model):
    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="timeline",
    )
    status = models.CharField(max_length=20, choices=Complaint.Status.choices)
    note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.complaint.tracking_id} - {self.status}"


class Response(models.Model):
    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="responses",
    )
    respondent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="complaint_responses",
    )
    message = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.respondent} - {self.complaint.tracking_id}"


class Attachment(models.Model):
    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="attachments",
    )
    file = models.FileField(upload_to="complaint_attachments/%Y/%m/%d/")
    uploaded_at = models.DateTimeField(auto_now_add=True)
    original_filename = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["uploaded_at"]

    def __str__(self):
        return self.original_filename or os.path.basename(self.file.name)

    @property
    def url(self) -> str:
        return reverse("complaints:attachment_download", kwargs={"attachment_id": self.pk})

    def save(self, *args, **kwargs):
        if not self.original_filename and self.file:
            self.original_filename = os.path.basename(self.file.name)
        super().save(*args, **kwargs)
