import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("complaints", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("channel", models.CharField(default="email", max_length=30, verbose_name="Channel")),
                ("template_code", models.CharField(max_length=60, verbose_name="Template Code")),
                ("payload", models.JSONField(blank=True, null=True, verbose_name="Payload")),
                ("delivered_at", models.DateTimeField(blank=True, null=True, verbose_name="Delivered At")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("complaint", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to="complaints.complaint", verbose_name="Complaint")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL, verbose_name="Recipient")),
            ],
            options={
                "verbose_name": "Notification",
                "verbose_name_plural": "Notifications",
                "db_table": "notifications",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="idx_notifications_user"),
                ],
            },
        ),
    ]
