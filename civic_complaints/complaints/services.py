"""Complaint lifecycle: intake, status transitions, responses and statistics.

Every function acquires what it needs from the ORM for the duration of the
call only; no state is kept between calls. Writes that must land together
(a complaint and its first timeline entry, a status change and its timeline
entry) run inside a single transaction.
"""

import logging
import string
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone
from django.utils.crypto import get_random_string

from civic_portal.errors import InvalidInput, NotFound, StoreUnavailable

from .forms import ComplaintFilterForm, ComplaintForm, validate_attachment
from .models import Attachment, Complaint, Response, TimelineEvent

logger = logging.getLogger(__name__)

TRACKING_ID_ALPHABET = string.ascii_uppercase + string.digits

# Offered by the admin surface only; transition_status accepts any target.
ALLOWED_TRANSITIONS = {
    Complaint.Status.PENDING: (
        Complaint.Status.IN_PROGRESS,
        Complaint.Status.RESOLVED,
        Complaint.Status.REJECTED,
    ),
    Complaint.Status.IN_PROGRESS: (
        Complaint.Status.RESOLVED,
        Complaint.Status.REJECTED,
    ),
}


@dataclass(frozen=True)
class ComplaintFilters:
    status: str = ""
    category: str = ""
    agency: str = ""
    search: str = ""
    date_range: str = ""

    @classmethod
    def from_query(cls, params) -> "ComplaintFilters":
        form = ComplaintFilterForm.from_query(params)
        if not form.is_valid():
            raise InvalidInput.from_form(form)
        return cls.from_form(form)

    @classmethod
    def from_form(cls, form) -> "ComplaintFilters":
        return cls(**{key: (value or "").strip() for key, value in form.cleaned_data.items()})


def allowed_transitions(status) -> tuple:
    return ALLOWED_TRANSITIONS.get(status, ())


def generate_tracking_id(length: Optional[int] = None) -> str:
    return get_random_string(length or settings.TRACKING_ID_LENGTH, allowed_chars=TRACKING_ID_ALPHABET)


def normalize_tracking_id(tracking_id) -> str:
    return (tracking_id or "").strip().upper()


def _unused_tracking_id() -> str:
    for _ in range(settings.TRACKING_ID_MAX_ATTEMPTS):
        candidate = generate_tracking_id()
        if not Complaint.objects.filter(tracking_id=candidate).exists():
            return candidate
        logger.warning("Tracking id collision on %s, regenerating", candidate)
    raise StoreUnavailable("Could not allocate a tracking ID. Please try again.")


def _check_attachments(attachments):
    errors = []
    for file_obj in attachments:
        try:
            validate_attachment(file_obj)
        except ValidationError as error:
            errors.extend(f"{file_obj.name}: {message}" for message in error.messages)
    if errors:
        raise InvalidInput(errors={"attachments": errors})


def send_submission_email(complaint):
    if not complaint.email:
        return
    send_mail(
        subject=f"Complaint Submitted: {complaint.tracking_id}",
        message=(
            f"Dear {complaint.name},\n\n"
            f"Your complaint has been submitted successfully.\n"
            f"Tracking ID: {complaint.tracking_id}\n"
            f"Status: {complaint.get_status_display()}\n\n"
            "Use the tracking ID to follow the progress of your complaint."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[complaint.email],
        fail_silently=True,
    )


def send_status_change_email(complaint, old_status, new_status):
    if not complaint.email:
        return
    labels = dict(Complaint.Status.choices)
    send_mail(
        subject=f"Complaint Status Updated: {complaint.tracking_id}",
        message=(
            f"Dear {complaint.name},\n\n"
            f"Your complaint {complaint.tracking_id} status changed from "
            f"{labels.get(old_status, old_status)} to {labels.get(new_status, new_status)}.\n\n"
            "Thank you."
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[complaint.email],
        fail_silently=True,
    )


def create_complaint(data, *, user=None, attachments=()) -> Complaint:
    """Validate and persist a new complaint with its initial PENDING timeline entry.

    Raises InvalidInput before touching the store when ``data`` or any of the
    ``attachments`` does not validate, and StoreUnavailable when the write fails; in that case nothing
    is left behind.
    """
    form = ComplaintForm(data)
    if not form.is_valid():
        raise InvalidInput.from_form(form)
    attachments = list(attachments)
    _check_attachments(attachments)

    for _ in range(settings.TRACKING_ID_MAX_ATTEMPTS):
        try:
            with transaction.atomic():
                complaint = form.save(commit=False)
                complaint.tracking_id = _unused_tracking_id()
                complaint.status = Complaint.Status.PENDING
                if user is not None and user.is_authenticated:
                    complaint.user = user
                complaint.save()
                TimelineEvent.objects.create(
                    complaint=complaint,
                    status=Complaint.Status.PENDING,
                    note="Complaint submitted",
                )
                for file_obj in attachments:
                    Attachment.objects.create(
                        complaint=complaint,
                        file=file_obj,
                        original_filename=file_obj.name,
                    )
        except IntegrityError:
            # Another request claimed the same tracking id between the check and the insert.
            logger.warning("Tracking id %s taken concurrently, retrying", complaint.tracking_id)
            continue
        except DatabaseError as exc:
            logger.exception("Failed to create complaint")
            raise StoreUnavailable() from exc
        break
    else:
        raise StoreUnavailable("Could not allocate a tracking ID. Please try again.")

    logger.info("Created complaint %s (%s)", complaint.tracking_id, complaint.pk)
    transaction.on_commit(lambda: send_submission_email(complaint))
    return complaint


def _get_complaint(complaint_id, queryset=None) -> Complaint:
    queryset = queryset if queryset is not None else Complaint.objects.all()
    try:
        return queryset.get(pk=complaint_id)
    except (Complaint.DoesNotExist, ValidationError, ValueError) as exc:
        raise NotFound("Complaint not found") from exc
    except DatabaseError as exc:
        logger.exception("Failed to load complaint %s", complaint_id)
        raise StoreUnavailable() from exc


def with_history(queryset=None):
    queryset = queryset if queryset is not None else Complaint.objects.all()
    return queryset.select_related("user").prefetch_related("timeline", "responses__respondent", "attachments")


def get_complaint(complaint_id) -> Complaint:
    return _get_complaint(complaint_id, with_history())


def lookup(tracking_id) -> Complaint:
    """Find a complaint by its public tracking id, ignoring case and surrounding blanks."""
    normalized = normalize_tracking_id(tracking_id)
    if not normalized:
        raise NotFound("No complaint found with this tracking ID")
    try:
        return with_history().get(tracking_id=normalized)
    except Complaint.DoesNotExist as exc:
        raise NotFound("No complaint found with this tracking ID") from exc
    except DatabaseError as exc:
        logger.exception("Failed to look up complaint %s", normalized)
        raise StoreUnavailable() from exc


def transition_status(complaint_id, new_status, note="") -> Complaint:
    """Move a complaint to ``new_status`` and record the change on its timeline.

    Any of the four statuses is accepted, including the current one and
    statuses that skip intermediate steps.
    """
    if new_status not in Complaint.Status.values:
        raise InvalidInput(errors={"status": [f"Invalid status: {new_status}"]})

    try:
        with transaction.atomic():
            complaint = _get_complaint(complaint_id)
            previous_status = complaint.status
            complaint.status = new_status
            complaint.save(update_fields=["status", "updated_at"])
            TimelineEvent.objects.create(
                complaint=complaint,
                status=new_status,
                note=(note or "").strip(),
            )
    except DatabaseError as exc:
        logger.exception("Failed to transition complaint %s", complaint_id)
        raise StoreUnavailable() from exc

    logger.info("Complaint %s moved from %s to %s", complaint.tracking_id, previous_status, new_status)
    if previous_status != new_status:
        transaction.on_commit(lambda: send_status_change_email(complaint, previous_status, new_status))
    return complaint


def respond(complaint_id, respondent, message) -> Response:
    message = (message or "").strip()
    if not message:
        raise InvalidInput(errors={"message": ["Response message is required."]})

    complaint = _get_complaint(complaint_id)
    try:
        response = Response.objects.create(
            complaint=complaint,
            respondent=respondent,
            message=message,
        )
    except DatabaseError as exc:
        logger.exception("Failed to store response for complaint %s", complaint_id)
        raise StoreUnavailable() from exc

    logger.info("Response %s added to complaint %s", response.pk, complaint.tracking_id)
    return response


def update_complaint(complaint_id, *, status=None, response=None, respondent=None) -> Complaint:
    """Apply a combined status/response update.

    A response text is stored as a Response record authored by ``respondent``;
    a status change goes through :func:`transition_status` so it is recorded
    on the timeline.
    """
    complaint = _get_complaint(complaint_id)
    if response:
        respond(complaint.pk, respondent, response)
    if status:
        transition_status(complaint.pk, status)
    return get_complaint(complaint.pk)


def delete_complaint(complaint_id) -> None:
    complaint = _get_complaint(complaint_id)
    tracking_id = complaint.tracking_id
    try:
        with transaction.atomic():
            for attachment in complaint.attachments.all():
                attachment.file.delete(save=False)
            complaint.delete()
    except DatabaseError as exc:
        logger.exception("Failed to delete complaint %s", complaint_id)
        raise StoreUnavailable() from exc
    logger.info("Deleted complaint %s", tracking_id)


def date_range_start(date_range, now=None):
    now = now or timezone.now()
    if date_range == "today":
        return timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range == "week":
        return now - timedelta(days=7)
    if date_range == "month":
        return now - timedelta(days=30)
    if date_range == "year":
        return now - timedelta(days=365)
    return None


def apply_complaint_filters(queryset, filters: ComplaintFilters, now=None):
    if filters.status:
        queryset = queryset.filter(status=filters.status)
    if filters.category:
        queryset = queryset.filter(category=filters.category)
    if filters.agency:
        queryset = queryset.filter(agency=filters.agency)
    if filters.search:
        queryset = queryset.filter(
            Q(title__icontains=filters.search)
            | Q(description__icontains=filters.search)
            | Q(tracking_id__icontains=filters.search)
            | Q(location__icontains=filters.search)
        )
    start = date_range_start(filters.date_range, now=now)
    if start is not None:
        queryset = queryset.filter(created_at__gte=start)
    return queryset


def list_complaints(filters: Optional[ComplaintFilters] = None, limit: Optional[int] = None):
    queryset = apply_complaint_filters(Complaint.objects.all(), filters or ComplaintFilters())
    queryset = queryset.order_by("-created_at")
    if limit is not None:
        queryset = queryset[:limit]
    try:
        return list(queryset)
    except DatabaseError as exc:
        logger.exception("Failed to list complaints")
        raise StoreUnavailable() from exc


def complaint_stats() -> dict:
    """Aggregate counts straight from the complaint table."""
    try:
        total = Complaint.objects.count()
        status_rows = Complaint.objects.values("status").annotate(count=Count("id")).order_by()
        category_rows = (
            Complaint.objects.values("category").annotate(count=Count("id")).order_by("-count", "category")
        )
        by_status = {status: 0 for status in Complaint.Status.values}
        for row in status_rows:
            by_status[row["status"]] = row["count"]
        categories = [{"name": row["category"], "count": row["count"]} for row in category_rows]
    except DatabaseError as exc:
        logger.exception("Failed to compute complaint statistics")
        raise StoreUnavailable() from exc

    return {
        "total": total,
        "by_status": by_status,
        "categories": categories,
    }
