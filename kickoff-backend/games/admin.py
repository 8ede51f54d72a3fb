from django.contrib import admin

from .models import AppSettings, Game, Registration


class RegistrationInline(admin.TabularInline):
    model = Registration
    extra = 0
    fields = ("user", "status", "check_in_status", "queue_position", "eta_minutes", "checked_in_at")
    readonly_fields = ("checked_in_at",)
    ordering = ("status", "queue_position", "created_at")


@admin.register(Game)
class GameAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "date",
        "kickoff_time",
        "status",
        "max_players",
        "max_standby",
        "is_auto_generated",
    )
    list_filter = ("status", "is_auto_generated")
    date_hierarchy = "date"
    inlines = [RegistrationInline]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ("id", "game", "user", "status", "check_in_status", "queue_position", "eta_minutes", "created_at")
    list_filter = ("status", "check_in_status")
    search_fields = ("user__email", "user__username", "user__full_name")
    raw_id_fields = ("user", "game")


@admin.register(AppSettings)
class AppSettingsAdmin(admin.ModelAdmin):
    list_display = ("id", "field_latitude", "field_longitude", "updated_at")

    def has_add_permission(self, request):
        return not AppSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
