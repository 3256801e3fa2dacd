import uuid

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Article",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("folder_id", models.CharField(editable=False, max_length=128)),
                ("doc_id", models.CharField(editable=False, max_length=128)),
                ("marking_grid_id", models.CharField(blank=True, max_length=128)),
                ("wordpress_id", models.PositiveBigIntegerField(blank=True, null=True)),
                ("copyright_score", models.FloatField(blank=True, null=True)),
                ("copyright_report", models.JSONField(blank=True, default=dict)),
                ("copyright_checked_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "authors",
                    models.ManyToManyField(related_name="authored_articles", to=settings.AUTH_USER_MODEL),
                ),
                (
                    "editors",
                    models.ManyToManyField(blank=True, related_name="assigned_articles", to=settings.AUTH_USER_MODEL),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
