"""
Management command to load demo accounts and causes.

Safe to run repeatedly:
    python manage.py seed_data
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from causes.models import Cause

User = get_user_model()


SEED_USERS = [
    {
        "email": "admin@givehopegh.org",
        "name": "Admin User",
        "phone": "+233201234567",
        "role": "ADMIN",
    },
    {
        "email": "john.doe@example.com",
        "name": "John Doe",
        "phone": "+233241234567",
        "role": "DONOR",
    },
    {
        "email": "jane.smith@example.com",
        "name": "Jane Smith",
        "phone": "+233261234567",
        "role": "DONOR",
    },
]

SEED_CAUSES = [
    {
        "title": "Clean Water for Rural Communities in Northern Ghana",
        "description": (
            "Help provide clean drinking water to rural communities in Northern Ghana "
            "through the construction of water wells and purification systems. This "
            "project will benefit over 5,000 people across 10 communities."
        ),
        "target_amount": Decimal("50000"),
        "category": "Health & Sanitation",
        "location": "Northern Ghana",
        "featured": True,
        "image_url": "https://images.unsplash.com/photo-1559827260728-1c00da094a0b?w=800",
    },
    {
        "title": "Education for Underprivileged Children in Accra",
        "description": (
            "Support education initiatives for children from low-income families in "
            "Accra, including school supplies, uniforms, and tuition assistance."
        ),
        "target_amount": Decimal("30000"),
        "category": "Education",
        "location": "Accra",
        "featured": False,
        "image_url": "https://images.unsplash.com/photo-1503676260728-1c00da094a0b?w=800",
    },
    {
        "title": "Healthcare Access for Rural Villages",
        "description": (
            "Establish mobile health clinics and provide medical supplies to under "
            "served rural communities across Ghana."
        ),
        "target_amount": Decimal("75000"),
        "category": "Healthcare",
        "location": "Rural Ghana",
        "featured": True,
        "image_url": "https://images.unsplash.com/photo-1576091160399-112ba8d25d1f?w=800",
    },
    {
        "title": "Emergency Relief for Flood Victims",
        "description": (
            "Provide immediate relief to communities affected by recent flooding, "
            "including food, clean water, shelter, and medical assistance."
        ),
        "target_amount": Decimal("25000"),
        "category": "Emergency Relief",
        "location": "Eastern Region",
        "featured": False,
        "image_url": "https://images.unsplash.com/photo-1566576912321-d58ddd7a6088?w=800",
    },
]


class Command(BaseCommand):
    help = "Seed demo users and causes"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be created without actually creating",
        )
        parser.add_argument(
            "--admin-password",
            type=str,
            default="admin123",
            help="Password for the seeded admin account",
        )
        parser.add_argument(
            "--donor-password",
            type=str,
            default="password123",
            help="Password for the seeded donor accounts",
        )

    def handle(self, *args, **options):
        dry_run = options.get("dry_run", False)

        self.stdout.write("Starting database seeding...")

        if dry_run:
            for entry in SEED_USERS:
                self.stdout.write(
                    self.style.SUCCESS(f"  DRY-RUN: Would upsert user {entry['email']}")
                )
            for entry in SEED_CAUSES:
                self.stdout.write(
                    self.style.SUCCESS(f"  DRY-RUN: Would upsert cause '{entry['title']}'")
                )
            return

        created_count = 0
        updated_count = 0

        with transaction.atomic():
            for entry in SEED_USERS:
                password = (
                    options["admin_password"]
                    if entry["role"] == "ADMIN"
                    else options["donor_password"]
                )
                user = User.objects.filter(email=entry["email"]).first()
                if user is None:
                    user = User.objects.create_user(
                        password=password,
                        is_staff=entry["role"] == "ADMIN",
                        **entry,
                    )
                    created_count += 1
                    self.stdout.write(self.style.SUCCESS(f"  CREATED: user {user.email}"))
                else:
                    user.name = entry["name"]
                    user.phone = entry["phone"]
                    user.role = entry["role"]
                    user.set_password(password)
                    user.save()
                    updated_count += 1
                    self.stdout.write(self.style.WARNING(f"  UPDATED: user {user.email}"))

            for entry in SEED_CAUSES:
                defaults = {key: value for key, value in entry.items() if key != "title"}
                cause, created = Cause.objects.get_or_create(
                    title=entry["title"], defaults=defaults
                )
                if created:
                    created_count += 1
                    self.stdout.write(self.style.SUCCESS(f"  CREATED: cause '{cause.title}'"))
                else:
                    self.stdout.write(self.style.WARNING(f"  SKIP: cause '{cause.title}' (exists)"))

        # Summary
        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS(f"Created: {created_count}"))
        self.stdout.write(self.style.WARNING(f"Updated: {updated_count}"))
