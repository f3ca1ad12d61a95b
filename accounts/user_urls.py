from django.urls import path
from .views import PreferencesView, SettingsView

urlpatterns = [
    path("preferences/", PreferencesView.as_view(), name="user-preferences"),
    path("settings/", SettingsView.as_view(), name="user-settings"),
]
