from django.contrib import admin
from .models import User, UserPreferences, UserSettings


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        'email',
        'name',
        'phone',
        'role',
        'is_active',
        'created_at',
    )

    list_filter = ('role', 'is_active')
    search_fields = ('email', 'name', 'phone')
    exclude = ('password',)


@admin.register(UserPreferences)
class UserPreferencesAdmin(admin.ModelAdmin):
    list_display = ('user', 'email_notifications', 'currency', 'updated_at')
    search_fields = ('user__email',)


@admin.register(UserSettings)
class UserSettingsAdmin(admin.ModelAdmin):
    list_display = ('user', 'theme', 'two_factor_enabled', 'last_login', 'last_logout')
    search_fields = ('user__email',)
    exclude = ('refresh_token',)
