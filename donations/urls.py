from django.urls import path
from .views import DonationListView, DonationStatsView

urlpatterns = [
    path("", DonationListView.as_view(), name="donations"),
    path("stats/", DonationStatsView.as_view(), name="donation-stats"),
]
