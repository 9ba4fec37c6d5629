"""
Creates the read-only dashboard views ``vw_complaints_by_status`` and
``vw_resolved_durations`` and registers the unmanaged models that read
them.  The duration expression is dialect-specific.
"""

from django.db import migrations, models

BY_STATUS_SQL = """
CREATE VIEW vw_complaints_by_status AS
SELECT status, COUNT(*) AS total
FROM complaints
GROUP BY status
"""

HOURS_EXPR = {
    "postgresql": (
        "CAST(EXTRACT(EPOCH FROM (resolved_at - created_at)) / 3600.0 "
        "AS double precision)"
    ),
    "sqlite": "(julianday(resolved_at) - julianday(created_at)) * 24.0",
    "mysql": "TIMESTAMPDIFF(MICROSECOND, created_at, resolved_at) / 3600000000.0",
}

RESOLVED_DURATIONS_SQL = """
CREATE VIEW vw_resolved_durations AS
SELECT id AS complaint_id,
       {hours} AS hours_to_resolve
FROM complaints
WHERE status = 'resolved' AND resolved_at IS NOT NULL
"""


def create_views(apps, schema_editor):
    vendor = schema_editor.connection.vendor
    if vendor not in HOURS_EXPR:
        raise RuntimeError(f"Reporting views are not defined for database vendor {vendor!r}.")

    schema_editor.execute(BY_STATUS_SQL)
    schema_editor.execute(RESOLVED_DURATIONS_SQL.format(hours=HOURS_EXPR[vendor]))


def drop_views(apps, schema_editor):
    schema_editor.execute("DROP VIEW IF EXISTS vw_resolved_durations")
    schema_editor.execute("DROP VIEW IF EXISTS vw_complaints_by_status")


class Migration(migrations.Migration):

    dependencies = [
        ("complaints", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_views, drop_views),
        migrations.CreateModel(
            name="ComplaintStatusTotal",
            fields=[
                ("status", models.CharField(choices=[("created", "Created"), ("validated", "Validated"), ("in_review", "In Review"), ("in_execution", "In Execution"), ("resolved", "Resolved"), ("rejected", "Rejected"), ("archived", "Archived")], max_length=20, primary_key=True, serialize=False)),
                ("total", models.IntegerField()),
            ],
            options={
                "db_table": "vw_complaints_by_status",
                "ordering": ["status"],
                "managed": False,
            },
        ),
        migrations.CreateModel(
            name="ResolvedDuration",
            fields=[
                ("complaint_id", models.BigIntegerField(primary_key=True, serialize=False)),
                ("hours_to_resolve", models.FloatField()),
            ],
            options={
                "db_table": "vw_resolved_durations",
                "ordering": ["complaint_id"],
                "managed": False,
            },
        ),
    ]
