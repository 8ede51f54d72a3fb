import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AppSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("field_latitude", models.FloatField(blank=True, null=True)),
                ("field_longitude", models.FloatField(blank=True, null=True)),
                ("qr_secret_key", models.CharField(blank=True, max_length=255)),
                ("rules_content", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "App settings",
                "verbose_name_plural": "App settings",
            },
        ),
        migrations.CreateModel(
            name="Game",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField()),
                ("kickoff_time", models.DateTimeField()),
                ("deadline_time", models.DateTimeField(help_text="Registration/check-in cutoff, typically near kickoff")),
                ("wave1_opens_at", models.DateTimeField(blank=True, help_text="Residents may register from here", null=True)),
                ("wave2_opens_at", models.DateTimeField(blank=True, help_text="Everyone may register from here", null=True)),
                ("candle_lighting", models.DateTimeField(blank=True, null=True)),
                ("shabbat_end", models.DateTimeField(blank=True, null=True)),
                ("max_players", models.PositiveIntegerField(default=15)),
                ("max_standby", models.PositiveIntegerField(default=10)),
                ("status", models.CharField(choices=[("scheduled", "Scheduled"), ("open_for_residents", "Open for residents"), ("open_for_all", "Open for all"), ("closed", "Closed"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="scheduled", max_length=32)),
                ("is_auto_generated", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["date", "kickoff_time"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("max_players__gt", 0)), name="game_max_players_positive"),
                    models.CheckConstraint(condition=models.Q(("max_standby__gte", 0)), name="game_max_standby_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("active", "Active"), ("standby", "Standby"), ("cancelled", "Cancelled"), ("no_show", "No show")], default="active", max_length=20)),
                ("check_in_status", models.CharField(choices=[("pending", "Pending"), ("checked_in", "Checked in"), ("no_show", "No show")], default="pending", max_length=20)),
                ("queue_position", models.PositiveIntegerField(blank=True, null=True)),
                ("eta_minutes", models.PositiveIntegerField(blank=True, help_text="Self-reported lateness", null=True)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("game", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="games.game")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["game", "status"], name="registration_game_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "cancelled"), _negated=True), fields=("user", "game"), name="registration_one_live_per_user_game"),
                    models.UniqueConstraint(condition=models.Q(("status", "standby")), fields=("game", "queue_position"), name="registration_unique_standby_position"),
                ],
            },
        ),
    ]
