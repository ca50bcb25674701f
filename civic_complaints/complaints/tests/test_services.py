import re
import uuid
from datetime import timedelta
from unittest import mock

from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone

from civic_portal.errors import InvalidInput, NotFound, StoreUnavailable
from complaints import services
from complaints.models import Complaint, Response, TimelineEvent

from .base import ComplaintTestMixin

TRACKING_ID_PATTERN = re.compile(r"^[A-Z0-9]{10}$")


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
class CreateComplaintTests(ComplaintTestMixin, TestCase):
    def test_create_assigns_tracking_id_and_pending_status(self):
        complaint = self.create_complaint()

        self.assertRegex(complaint.tracking_id, TRACKING_ID_PATTERN)
        self.assertEqual(complaint.status, Complaint.Status.PENDING)
        timeline = list(complaint.timeline.all())
        self.assertEqual(len(timeline), 1)
        self.assertEqual(timeline[0].status, Complaint.Status.PENDING)
        self.assertEqual(complaint.created_at, Complaint.objects.get(pk=complaint.pk).created_at)

    def test_tracking_ids_are_unique(self):
        tracking_ids = {self.create_complaint(title=f"Complaint {index}").tracking_id for index in range(20)}
        self.assertEqual(len(tracking_ids), 20)

    def test_location_and_phone_are_optional(self):
        complaint = self.create_complaint(location="", phone="")
        self.assertEqual(complaint.location, "")
        self.assertEqual(complaint.phone, "")

    def test_blank_title_is_rejected_without_persisting(self):
        with self.assertRaises(InvalidInput) as ctx:
            self.create_complaint(title="   ")
        self.assertIn("title", ctx.exception.errors)
        self.assertFalse(Complaint.objects.exists())

    def test_unknown_category_and_agency_are_rejected(self):
        with self.assertRaises(InvalidInput) as ctx:
            self.create_complaint(category="POTHOLES", agency="NASA")
        self.assertIn("category", ctx.exception.errors)
        self.assertIn("agency", ctx.exception.errors)

    def test_malformed_email_is_rejected(self):
        with self.assertRaises(InvalidInput) as ctx:
            self.create_complaint(email="not-an-email")
        self.assertIn("email", ctx.exception.errors)

    def test_tracking_id_collision_is_regenerated(self):
        existing = self.create_complaint()
        with mock.patch(
            "complaints.services.generate_tracking_id",
            side_effect=[existing.tracking_id, "NEWID12345"],
        ):
            complaint = self.create_complaint(title="Second")
        self.assertEqual(complaint.tracking_id, "NEWID12345")

    @override_settings(TRACKING_ID_MAX_ATTEMPTS=3)
    def test_exhausted_tracking_id_attempts_signal_store_unavailable(self):
        existing = self.create_complaint()
        with mock.patch("complaints.services.generate_tracking_id", return_value=existing.tracking_id):
            with self.assertRaises(StoreUnavailable):
                self.create_complaint(title="Second")
        self.assertEqual(Complaint.objects.count(), 1)

    def test_timeline_failure_leaves_no_orphaned_complaint(self):
        with mock.patch.object(TimelineEvent.objects, "create", side_effect=DatabaseError("disk full")):
            with self.assertLogs("complaints.services", level="ERROR"):
                with self.assertRaises(StoreUnavailable) as ctx:
                    self.create_complaint()
        self.assertNotIn("disk full", ctx.exception.message)
        self.assertFalse(Complaint.objects.exists())

    def test_submission_email_sent_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            complaint = self.create_complaint()
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(complaint.tracking_id, mail.outbox[0].subject)

    def test_authenticated_submitter_is_linked(self):
        complaint = services.create_complaint(self.complaint_data(), user=self.citizen)
        self.assertEqual(complaint.user, self.citizen)

    def test_disallowed_attachment_is_rejected_before_storing(self):
        uploads = [
            SimpleUploadedFile("photo.jpg", b"jpeg", content_type="image/jpeg"),
            SimpleUploadedFile("script.html", b"<script></script>", content_type="text/html"),
        ]
        with self.assertRaises(InvalidInput) as ctx:
            services.create_complaint(self.complaint_data(), attachments=uploads)
        self.assertEqual(len(ctx.exception.errors["attachments"]), 1)
        self.assertIn("script.html", ctx.exception.errors["attachments"][0])
        self.assertFalse(Complaint.objects.exists())

    @mock.patch("complaints.forms.MAX_ATTACHMENT_SIZE_BYTES", 10)
    def test_oversized_attachment_is_rejected(self):
        upload = SimpleUploadedFile("scan.pdf", b"%PDF-1.4 larger than ten bytes", content_type="application/pdf")
        with self.assertRaises(InvalidInput):
            services.create_complaint(self.complaint_data(), attachments=[upload])
        self.assertFalse(Complaint.objects.exists())


@override_settings(EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend")
class TransitionStatusTests(ComplaintTestMixin, TestCase):
    def test_transition_appends_timeline_event(self):
        complaint = self.create_complaint()
        created_updated_at = complaint.updated_at

        updated = services.transition_status(complaint.pk, Complaint.Status.RESOLVED, note="Fixed")

        self.assertEqual(updated.status, Complaint.Status.RESOLVED)
        self.assertGreater(updated.updated_at, created_updated_at)
        timeline = list(TimelineEvent.objects.filter(complaint=complaint))
        self.assertEqual([event.status for event in timeline], ["PENDING", "RESOLVED"])
        self.assertEqual(timeline[-1].note, "Fixed")

    def test_n_transitions_produce_n_plus_one_events(self):
        complaint = self.create_complaint()
        sequence = [
            Complaint.Status.IN_PROGRESS,
            Complaint.Status.RESOLVED,
            Complaint.Status.IN_PROGRESS,
            Complaint.Status.REJECTED,
        ]
        for status in sequence:
            services.transition_status(complaint.pk, status)

        complaint.refresh_from_db()
        self.assertEqual(complaint.status, sequence[-1])
        self.assertEqual(complaint.timeline.count(), len(sequence) + 1)
        self.assertGreaterEqual(complaint.updated_at, complaint.created_at)

    def test_resolved_complaint_can_be_transitioned_again(self):
        complaint = self.create_complaint()
        services.transition_status(complaint.pk, Complaint.Status.RESOLVED)
        updated = services.transition_status(complaint.pk, Complaint.Status.PENDING)
        self.assertEqual(updated.status, Complaint.Status.PENDING)

    def test_unknown_complaint_signals_not_found(self):
        with self.assertRaises(NotFound):
            services.transition_status(uuid.uuid4(), Complaint.Status.RESOLVED)

    def test_unknown_status_is_rejected(self):
        complaint = self.create_complaint()
        with self.assertRaises(InvalidInput):
            services.transition_status(complaint.pk, "CLOSED")
        self.assertEqual(complaint.timeline.count(), 1)

    def test_status_change_notifies_submitter(self):
        complaint = self.create_complaint()
        with self.captureOnCommitCallbacks(execute=True):
            services.transition_status(complaint.pk, Complaint.Status.IN_PROGRESS)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("In Progress", mail.outbox[0].body)

    def test_allowed_transitions_offered_by_admin_surface(self):
        self.assertEqual(
            set(services.allowed_transitions(Complaint.Status.PENDING)),
            {Complaint.Status.IN_PROGRESS, Complaint.Status.RESOLVED, Complaint.Status.REJECTED},
        )
        self.assertEqual(
            set(services.allowed_transitions(Complaint.Status.IN_PROGRESS)),
            {Complaint.Status.RESOLVED, Complaint.Status.REJECTED},
        )
        self.assertEqual(services.allowed_transitions(Complaint.Status.RESOLVED), ())


class RespondTests(ComplaintTestMixin, TestCase):
    def test_respond_records_response_without_changing_status(self):
        complaint = self.create_complaint()
        response = services.respond(complaint.pk, self.admin, "  We are on it.  ")

        self.assertEqual(response.message, "We are on it.")
        self.assertEqual(response.respondent, self.admin)
        complaint.refresh_from_db()
        self.assertEqual(complaint.status, Complaint.Status.PENDING)
        self.assertEqual(complaint.timeline.count(), 1)

    def test_blank_message_is_rejected(self):
        complaint = self.create_complaint()
        with self.assertRaises(InvalidInput):
            services.respond(complaint.pk, self.admin, "   ")
        self.assertFalse(Response.objects.exists())

    def test_missing_complaint_signals_not_found(self):
        with self.assertRaises(NotFound):
            services.respond(uuid.uuid4(), self.admin, "Hello")

    def test_combined_update_uses_response_collection(self):
        complaint = self.create_complaint()
        updated = services.update_complaint(
            complaint.pk,
            status=Complaint.Status.IN_PROGRESS,
            response="Crew dispatched.",
            respondent=self.admin,
        )
        self.assertEqual(updated.status, Complaint.Status.IN_PROGRESS)
        self.assertEqual([r.message for r in updated.responses.all()], ["Crew dispatched."])
        self.assertEqual(updated.timeline.count(), 2)


class LookupTests(ComplaintTestMixin, TestCase):
    def test_lookup_normalizes_case_and_whitespace(self):
        complaint = self.create_complaint()
        found = services.lookup(f"  {complaint.tracking_id.lower()} ")
        self.assertEqual(found.tracking_id, complaint.tracking_id)

    def test_lookup_unknown_signals_not_found(self):
        with self.assertRaises(NotFound):
            services.lookup("ZZZZZZZZZZ")

    def test_get_complaint_with_invalid_id_signals_not_found(self):
        with self.assertRaises(NotFound):
            services.get_complaint("not-a-uuid")

    def test_delete_removes_complaint_and_history(self):
        complaint = self.create_complaint()
        services.respond(complaint.pk, self.admin, "Noted")
        services.delete_complaint(complaint.pk)
        self.assertFalse(Complaint.objects.exists())
        self.assertFalse(TimelineEvent.objects.exists())
        self.assertFalse(Response.objects.exists())


class ListAndStatsTests(ComplaintTestMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.roads = self.create_complaint(title="Broken road")
        self.water = self.create_complaint(
            title="No water",
            description="Taps are dry since MONDAY",
            category=Complaint.Category.WATER_SUPPLY,
            agency=Complaint.Agency.WATER_AUTHORITY,
            location="Sector 9",
        )
        self.lights = self.create_complaint(
            title="Street lights off",
            category=Complaint.Category.ROADS,
            agency=Complaint.Agency.ELECTRICITY_BOARD,
        )
        services.transition_status(self.water.pk, Complaint.Status.RESOLVED)

    def test_no_filters_returns_all_newest_first(self):
        complaints = services.list_complaints()
        self.assertEqual([c.pk for c in complaints], [self.lights.pk, self.water.pk, self.roads.pk])

    def test_limit(self):
        self.assertEqual(len(services.list_complaints(limit=2)), 2)

    def test_status_filter_returns_matching_subset(self):
        complaints = services.list_complaints(services.ComplaintFilters(status="PENDING"))
        self.assertEqual({c.pk for c in complaints}, {self.roads.pk, self.lights.pk})
        self.assertTrue(all(c.status == "PENDING" for c in complaints))

    def test_combined_filters_intersect(self):
        by_category = {c.pk for c in services.list_complaints(services.ComplaintFilters(category="ROADS"))}
        by_agency = {c.pk for c in services.list_complaints(services.ComplaintFilters(agency="PUBLIC_WORKS"))}
        combined = {
            c.pk
            for c in services.list_complaints(services.ComplaintFilters(category="ROADS", agency="PUBLIC_WORKS"))
        }
        self.assertEqual(combined, by_category & by_agency)
        self.assertEqual(combined, {self.roads.pk})

    def test_search_matches_description_tracking_id_and_location(self):
        by_description = services.list_complaints(services.ComplaintFilters(search="monday"))
        by_location = services.list_complaints(services.ComplaintFilters(search="sector 9"))
        by_tracking_id = services.list_complaints(
            services.ComplaintFilters(search=self.roads.tracking_id.lower())
        )
        self.assertEqual([c.pk for c in by_description], [self.water.pk])
        self.assertEqual([c.pk for c in by_location], [self.water.pk])
        self.assertEqual([c.pk for c in by_tracking_id], [self.roads.pk])

    def test_date_range_filter(self):
        Complaint.objects.filter(pk=self.roads.pk).update(created_at=timezone.now() - timedelta(days=10))
        last_week = services.list_complaints(services.ComplaintFilters(date_range="week"))
        last_month = services.list_complaints(services.ComplaintFilters(date_range="month"))
        self.assertNotIn(self.roads.pk, {c.pk for c in last_week})
        self.assertIn(self.roads.pk, {c.pk for c in last_month})

    def test_filters_from_query_reject_unknown_values(self):
        with self.assertRaises(InvalidInput):
            services.ComplaintFilters.from_query({"status": "ARCHIVED"})
        filters = services.ComplaintFilters.from_query({"dateRange": "today", "search": " road "})
        self.assertEqual(filters.date_range, "today")
        self.assertEqual(filters.search, "road")

    def test_stats_are_consistent_with_listing(self):
        stats = services.complaint_stats()
        self.assertEqual(stats["total"], len(services.list_complaints()))
        self.assertEqual(sum(stats["by_status"].values()), stats["total"])
        self.assertEqual(stats["by_status"]["RESOLVED"], 1)
        self.assertEqual(stats["by_status"]["REJECTED"], 0)
        self.assertEqual(stats["categories"][0], {"name": "ROADS", "count": 2})

    def test_stats_reflect_transition_immediately(self):
        services.transition_status(self.roads.pk, Complaint.Status.REJECTED)
        self.assertEqual(services.complaint_stats()["by_status"]["REJECTED"], 1)
