from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from games.models import Registration
from .models import User


class PlayerCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ("email", "username", "full_name", "is_resident")


class PlayerChangeForm(UserChangeForm):
    class Meta(UserChangeForm.Meta):
        model = User
        fields = "__all__"


class PlayerRegistrationInline(admin.TabularInline):
    model = Registration
    fk_name = "user"
    extra = 0
    fields = ("game", "status", "check_in_status", "queue_position", "eta_minutes")
    readonly_fields = fields
    can_delete = False
    ordering = ("-created_at",)

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    add_form = PlayerCreationForm
    form = PlayerChangeForm
    model = User
    list_display = ("email", "username", "full_name", "is_resident", "phone_verified", "is_staff")
    list_filter = ("is_resident", "phone_verified", "is_active", "is_staff")
    ordering = ("-date_joined",)
    search_fields = ("email", "username", "full_name", "phone_number")
    inlines = [PlayerRegistrationInline]

    fieldsets = (
        (None, {"fields": ("email", "username", "password")}),
        ("Profile", {"fields": ("full_name", "phone_number", "avatar_url")}),
        ("Eligibility", {"fields": ("is_resident", "phone_verified")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "username", "full_name", "is_resident", "password1", "password2"),
        }),
    )
