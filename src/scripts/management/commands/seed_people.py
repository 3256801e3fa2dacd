"""Seed demo admin, editor and author accounts."""

from django.core.management.base import BaseCommand

from people.choices import Level
from people.models import AuthorProfile, User

DEMO_PEOPLE = [
    {"email": "admin@example.com", "name": "Admin", "level": Level.ADMIN, "password": "adminpass"},
    {"email": "editor@example.com", "name": "Editor", "level": Level.EDITOR, "password": "editorpass"},
    {"email": "author@example.com", "name": "Author", "level": Level.AUTHOR, "password": "authorpass"},
]

DEMO_AUTHOR_PROFILE = {
    "school": "Example High School",
    "biography": "Writes about local history.",
    "country": "Norway",
    "teacher": "Ms. Example",
}


def create_demo_people() -> dict[str, User]:
    """Create (or reuse) the demo accounts and return them keyed by level."""
    people = {}
    for entry in DEMO_PEOPLE:
        user = User.objects.filter(email=entry["email"]).first()
        if user is None:
            extra = {"is_staff": True, "is_superuser": True} if entry["level"] == Level.ADMIN else {}
            user = User.objects.create_user(
                entry["email"], entry["password"], name=entry["name"], level=entry["level"], **extra
            )
        people[entry["level"]] = user

    AuthorProfile.objects.get_or_create(user=people[Level.AUTHOR], defaults=DEMO_AUTHOR_PROFILE)
    return people


def delete_demo_people() -> int:
    deleted, _ = User.objects.filter(email__in=[entry["email"] for entry in DEMO_PEOPLE]).delete()
    return deleted


class Command(BaseCommand):
    """Management command to seed demo people."""

    help = "Seed demo admin/editor/author accounts. Use --reset to remove them first."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete the demo accounts (and their author profiles) before seeding.",
        )

    def handle(self, *args, **options):
        """Entrypoint for the management command."""
        if options.get("reset"):
            self.stdout.write("Resetting demo people...")
            delete_demo_people()
            self.stdout.write(self.style.WARNING("Demo people cleared."))

        self.stdout.write("Seeding demo people...")
        people = create_demo_people()
        for level, user in people.items():
            self.stdout.write(f"  {level}: {user.email}")
        self.stdout.write(self.style.SUCCESS("Seed completed."))
