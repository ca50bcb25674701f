from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from complaints import services
from complaints.models import Complaint

User = get_user_model()


class Command(BaseCommand):
    help = "Seed the database with sample users and complaints."

    def handle(self, *args, **options):
        admin_user, created_admin = User.objects.get_or_create(
            username="admin@example.com",
            defaults={
                "email": "admin@example.com",
                "name": "Portal Admin",
                "role": User.Role.ADMIN,
                "is_staff": True,
            },
        )
        if created_admin:
            admin_user.set_password("AdminPass123!")
            admin_user.save()

        citizen_user, created_citizen = User.objects.get_or_create(
            username="citizen@example.com",
            defaults={"email": "citizen@example.com", "name": "Jane Citizen"},
        )
        if created_citizen:
            citizen_user.set_password("CitizenPass123!")
            citizen_user.save()

        sample_definitions = [
            {
                "title": "Overflowing Garbage Bins",
                "description": "Municipal bins are not being cleared regularly in Zone 2.",
                "category": Complaint.Category.WASTE_MANAGEMENT,
                "location": "Zone 2 - Main Street",
                "status": None,
            },
            {
                "title": "Pothole on Main St",
                "description": "Large potholes causing traffic congestion and accidents.",
                "category": Complaint.Category.ROADS,
                "location": "Ring Road Block A",
                "status": Complaint.Status.IN_PROGRESS,
            },
            {
                "title": "Streetlights Not Working",
                "description": "Streetlights remain off at night near public park.",
                "category": Complaint.Category.ELECTRICITY,
                "location": "Public Park Road",
                "status": Complaint.Status.RESOLVED,
            },
        ]

        created_count = 0
        for item in sample_definitions:
            if Complaint.objects.filter(title=item["title"], email=citizen_user.email).exists():
                continue
            complaint = services.create_complaint(
                {
                    "title": item["title"],
                    "description": item["description"],
                    "category": item["category"],
                    "agency": Complaint.agency_for_category(item["category"]),
                    "location": item["location"],
                    "name": citizen_user.name,
                    "email": citizen_user.email,
                },
                user=citizen_user,
            )
            created_count += 1
            if item["status"]:
                services.transition_status(complaint.pk, item["status"], "Auto-seeded status change.")
                services.respond(complaint.pk, admin_user, "Complaint has been reviewed by staff.")

        self.stdout.write(self.style.SUCCESS("Seed complete."))
        self.stdout.write(
            self.style.WARNING(
                "Credentials: citizen@example.com / CitizenPass123!, "
                "admin@example.com / AdminPass123!"
            )
        )
        self.stdout.write(self.style.SUCCESS(f"New complaints created: {created_count}"))
