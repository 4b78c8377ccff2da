# ward/management/commands/seed_ward.py
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from ward.models import LaborRoom, MessageTemplate, User

ROOMS = ["Labor Room 1", "Labor Room 2", "Labor Room 3", "Labor Room 4"]

TEMPLATES = [
    (
        "Standard Birth Notification",
        "Congratulations! {{patientName}} has successfully delivered a healthy {{babyGender}} baby at "
        "{{deliveryTime}}. Both mother and baby are doing well. Contact the hospital for visiting hours.",
    ),
    (
        "Simple Notification",
        "Good news! {{patientName}} has delivered safely. Please contact the hospital for more details.",
    ),
]

# (email, first name, last name, role, room the nurse looks after)
STAFF = [
    ("admin@hospital.com", "Sarah", "Admin", User.Role.ADMIN, None),
    ("frontdesk@hospital.com", "Mary", "Johnson", User.Role.FRONT_DESK, None),
    ("nurse1@hospital.com", "Lisa", "Brown", User.Role.LABOR_NURSE, "Labor Room 1"),
    ("nurse2@hospital.com", "Carol", "White", User.Role.LABOR_NURSE, "Labor Room 2"),
]


class Command(BaseCommand):
    help = "Create the default labor rooms, SMS templates and staff accounts (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", default="password123", help="password set on the seeded staff accounts")

    @transaction.atomic
    def handle(self, *args, **opts):
        for name in ROOMS:
            _, created = LaborRoom.objects.get_or_create(name=name)
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: room {name}"))

        admin = None
        for email, first, last, role, room_name in STAFF:
            u, created = User.objects.get_or_create(
                username=email,
                defaults={
                    "email": email,
                    "first_name": first,
                    "last_name": last,
                    "role": role,
                    "is_staff": role == User.Role.ADMIN,
                    "is_superuser": role == User.Role.ADMIN,
                },
            )
            # reset so the seeded password always works
            u.password = make_password(opts["password"])
            u.is_active = True
            u.save(update_fields=["password", "is_active"])
            if role == User.Role.ADMIN:
                admin = u
            if room_name:
                LaborRoom.objects.filter(name=room_name, assigned_nurse__isnull=True).update(assigned_nurse=u)
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: {email} ({role})"))

        for name, content in TEMPLATES:
            _, created = MessageTemplate.objects.get_or_create(
                name=name, defaults={"content": content, "is_active": True, "created_by": admin}
            )
            self.stdout.write(self.style.SUCCESS(f"{'created' if created else 'ok'}: template {name}"))

        self.stdout.write(self.style.SUCCESS("Ward seeded."))
