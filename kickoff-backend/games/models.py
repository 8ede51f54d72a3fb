from django.conf import settings
from django.db import models
from django.db.models import Q


class Game(models.Model):
    STATUS_SCHEDULED = "scheduled"
    STATUS_OPEN_FOR_RESIDENTS = "open_for_residents"
    STATUS_OPEN_FOR_ALL = "open_for_all"
    STATUS_CLOSED = "closed"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_SCHEDULED, "Scheduled"),
        (STATUS_OPEN_FOR_RESIDENTS, "Open for residents"),
        (STATUS_OPEN_FOR_ALL, "Open for all"),
        (STATUS_CLOSED, "Closed"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    UPCOMING_STATUSES = (STATUS_SCHEDULED, STATUS_OPEN_FOR_RESIDENTS, STATUS_OPEN_FOR_ALL)
    OPEN_STATUSES = (STATUS_OPEN_FOR_RESIDENTS, STATUS_OPEN_FOR_ALL)
    FINAL_STATUSES = (STATUS_CLOSED, STATUS_COMPLETED, STATUS_CANCELLED)

    date = models.DateField()
    kickoff_time = models.DateTimeField()
    deadline_time = models.DateTimeField(help_text="Registration/check-in cutoff, typically near kickoff")
    wave1_opens_at = models.DateTimeField(null=True, blank=True, help_text="Residents may register from here")
    wave2_opens_at = models.DateTimeField(null=True, blank=True, help_text="Everyone may register from here")
    candle_lighting = models.DateTimeField(null=True, blank=True)
    shabbat_end = models.DateTimeField(null=True, blank=True)
    max_players = models.PositiveIntegerField(default=15)
    max_standby = models.PositiveIntegerField(default=10)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_SCHEDULED)
    is_auto_generated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "kickoff_time"]
        constraints = [
            models.CheckConstraint(condition=Q(max_players__gt=0), name="game_max_players_positive"),
            models.CheckConstraint(condition=Q(max_standby__gte=0), name="game_max_standby_non_negative"),
        ]

    def __str__(self):
        return f"Game {self.date} ({self.status})"


class Registration(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_STANDBY = "standby"
    STATUS_CANCELLED = "cancelled"
    STATUS_NO_SHOW = "no_show"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_STANDBY, "Standby"),
        (STATUS_CANCELLED, "Cancelled"),
        (STATUS_NO_SHOW, "No show"),
    ]

    LIVE_STATUSES = (STATUS_ACTIVE, STATUS_STANDBY)

    CHECK_IN_PENDING = "pending"
    CHECK_IN_CHECKED_IN = "checked_in"
    CHECK_IN_NO_SHOW = "no_show"

    CHECK_IN_CHOICES = [
        (CHECK_IN_PENDING, "Pending"),
        (CHECK_IN_CHECKED_IN, "Checked in"),
        (CHECK_IN_NO_SHOW, "No show"),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="registrations", on_delete=models.CASCADE)
    game = models.ForeignKey(Game, related_name="registrations", on_delete=models.CASCADE)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    check_in_status = models.CharField(max_length=20, choices=CHECK_IN_CHOICES, default=CHECK_IN_PENDING)
    queue_position = models.PositiveIntegerField(null=True, blank=True)
    eta_minutes = models.PositiveIntegerField(null=True, blank=True, help_text="Self-reported lateness")
    checked_in_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "game"],
                condition=~Q(status="cancelled"),
                name="registration_one_live_per_user_game",
            ),
            models.UniqueConstraint(
                fields=["game", "queue_position"],
                condition=Q(status="standby"),
                name="registration_unique_standby_position",
            ),
        ]
        indexes = [
            models.Index(fields=["game", "status"], name="registration_game_status_idx"),
        ]

    @property
    def is_live(self) -> bool:
        return self.status in self.LIVE_STATUSES

    @property
    def is_checked_in(self) -> bool:
        return self.check_in_status == self.CHECK_IN_CHECKED_IN

    def __str__(self):
        return f"{self.user_id} in game {self.game_id} ({self.status})"


class AppSettings(models.Model):
    """Singleton row holding venue coordinates and the check-in QR secret."""

    SINGLETON_ID = 1

    field_latitude = models.FloatField(null=True, blank=True)
    field_longitude = models.FloatField(null=True, blank=True)
    qr_secret_key = models.CharField(max_length=255, blank=True)
    rules_content = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "App settings"
        verbose_name_plural = "App settings"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> "AppSettings":
        obj, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return obj

    @property
    def venue_configured(self) -> bool:
        return self.field_latitude is not None and self.field_longitude is not None

    def __str__(self):
        return "App settings"
