from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StoredDocument",
            fields=[
                (
                    "path",
                    models.CharField(
                        help_text="Slash-separated address, e.g. Active/Hospital/H1/payments/H1-2.",
                        max_length=512,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "parent_path",
                    models.CharField(
                        db_index=True,
                        help_text="Path of the enclosing collection.",
                        max_length=512,
                    ),
                ),
                ("fields", models.JSONField(default=dict)),
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Optimistic-concurrency token; incremented on every write.",
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "ros_documents",
                "ordering": ["path"],
            },
        ),
    ]
