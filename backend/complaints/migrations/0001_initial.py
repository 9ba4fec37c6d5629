import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("created", "Created"),
    ("validated", "Validated"),
    ("in_review", "In Review"),
    ("in_execution", "In Execution"),
    ("resolved", "Resolved"),
    ("rejected", "Rejected"),
    ("archived", "Archived"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="IncidentCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=80, unique=True, verbose_name="Name")),
                ("description", models.CharField(blank=True, max_length=200, null=True, verbose_name="Description")),
            ],
            options={
                "verbose_name": "Incident Category",
                "verbose_name_plural": "Incident Categories",
                "db_table": "incident_categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Zone",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, verbose_name="Name")),
                ("code", models.CharField(blank=True, max_length=50, null=True, unique=True, verbose_name="Code")),
                ("parent", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="children", to="complaints.zone", verbose_name="Parent Zone")),
            ],
            options={
                "verbose_name": "Zone",
                "verbose_name_plural": "Zones",
                "db_table": "zones",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Complaint",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Updated At")),
                ("title", models.CharField(max_length=140, verbose_name="Title")),
                ("description", models.TextField(verbose_name="Description")),
                ("status", models.CharField(choices=STATUS_CHOICES, default="created", max_length=20, verbose_name="Current Status")),
                ("priority", models.CharField(blank=True, choices=[("low", "Low"), ("medium", "Medium"), ("high", "High")], max_length=10, null=True, verbose_name="Priority")),
                ("latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name="Latitude")),
                ("longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name="Longitude")),
                ("address", models.CharField(blank=True, max_length=200, null=True, verbose_name="Address")),
                ("is_public", models.BooleanField(default=True, verbose_name="Publicly Visible")),
                ("resolved_at", models.DateTimeField(blank=True, null=True, verbose_name="Resolved At")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name="complaints", to="complaints.incidentcategory", verbose_name="Category")),
                ("reporter", models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name="complaints", to=settings.AUTH_USER_MODEL, verbose_name="Reporter")),
                ("zone", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="complaints", to="complaints.zone", verbose_name="Zone")),
            ],
            options={
                "verbose_name": "Complaint",
                "verbose_name_plural": "Complaints",
                "db_table": "complaints",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_complaints_status"),
                    models.Index(fields=["-created_at"], name="idx_complaints_created_at"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ComplaintEvidence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("url", models.TextField(verbose_name="URL")),
                ("type", models.CharField(choices=[("image", "Image"), ("video", "Video"), ("document", "Document")], default="image", max_length=10, verbose_name="Evidence Type")),
                ("metadata", models.JSONField(blank=True, null=True, verbose_name="Metadata")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="evidence", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Complaint Evidence",
                "verbose_name_plural": "Complaint Evidence",
                "db_table": "complaint_evidence",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="ComplaintStatusLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=20, null=True, verbose_name="Previous Status")),
                ("to_status", models.CharField(choices=STATUS_CHOICES, max_length=20, verbose_name="New Status")),
                ("comment", models.TextField(blank=True, null=True, verbose_name="Comment")),
                ("changed_at", models.DateTimeField(auto_now_add=True, verbose_name="Changed At")),
                ("changed_by", models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name="complaint_status_changes", to=settings.AUTH_USER_MODEL, verbose_name="Changed By")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_logs", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Complaint Status Log",
                "verbose_name_plural": "Complaint Status Logs",
                "db_table": "complaint_status_log",
                "ordering": ["changed_at", "id"],
                "indexes": [
                    models.Index(fields=["complaint", "-changed_at"], name="idx_statuslog_complaint_at"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ComplaintAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("assigned_at", models.DateTimeField(auto_now_add=True, verbose_name="Assigned At")),
                ("unassigned_at", models.DateTimeField(blank=True, null=True, verbose_name="Unassigned At")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("authority", models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name="complaint_assignments", to=settings.AUTH_USER_MODEL, verbose_name="Authority")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Complaint Assignment",
                "verbose_name_plural": "Complaint Assignments",
                "db_table": "complaint_assignments",
                "ordering": ["assigned_at", "id"],
                "indexes": [
                    models.Index(condition=models.Q(("is_active", True)), fields=["authority"], name="idx_assignment_authority"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("is_active", True)), fields=("complaint",), name="uq_assignment_active"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ComplaintComment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("body", models.TextField(verbose_name="Body")),
                ("is_internal", models.BooleanField(default=False, verbose_name="Internal")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Created At")),
                ("author", models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name="complaint_comments", to=settings.AUTH_USER_MODEL, verbose_name="Author")),
                ("complaint", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="comments", to="complaints.complaint", verbose_name="Complaint")),
            ],
            options={
                "verbose_name": "Complaint Comment",
                "verbose_name_plural": "Complaint Comments",
                "db_table": "complaint_comments",
                "ordering": ["created_at", "id"],
            },
        ),
    ]
