import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Q, Sum

from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOnly, IsDonorOrAdmin
from causes.models import Cause
from .models import Donation
from .serializers import AdminDonationSerializer, DonationSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


# =========================
# Donation History
# =========================
class DonationListView(APIView):
    permission_classes = [IsDonorOrAdmin]

    def get(self, request):
        user = request.user
        queryset = Donation.objects.select_related("cause", "user").prefetch_related("payments")

        if user.is_admin:
            serializer_class = AdminDonationSerializer
        else:
            queryset = queryset.filter(user=user)
            serializer_class = DonationSerializer

        donation_status = request.query_params.get("status")
        if donation_status:
            queryset = queryset.filter(status=donation_status.upper())

        return Response(
            {
                "donations": serializer_class(queryset, many=True).data,
                "count": queryset.count(),
            }
        )


# =========================
# Admin Dashboard Stats
# =========================
class DonationStatsView(APIView):
    """
    Headline numbers for the admin dashboard.
    """
    permission_classes = [IsAdminOnly]

    def get(self, request):
        from payments.models import Payment

        completed = Donation.objects.filter(status="COMPLETED")
        totals = completed.aggregate(total=Sum("amount"), count=Count("id"))

        by_status = {
            row["status"]: row["count"]
            for row in Donation.objects.values("status").annotate(count=Count("id"))
        }

        pending_by_method = {
            row["payment_method"]: row["count"]
            for row in Payment.objects.filter(status="PENDING")
            .values("payment_method")
            .annotate(count=Count("id"))
        }

        stats = {
            "totalRaised": totals["total"] or 0,
            "completedDonations": totals["count"],
            "donationsByStatus": {
                key: by_status.get(key, 0) for key, _ in Donation.STATUS_CHOICES
            },
            "totalDonors": User.objects.filter(
                Q(role="DONOR"), donations__status="COMPLETED"
            ).distinct().count(),
            "registeredDonors": User.objects.filter(role="DONOR").count(),
            "activeCauses": Cause.objects.filter(status="ACTIVE").count(),
            "pendingPayments": pending_by_method,
        }

        logger.info(f"Donation stats requested by {request.user.email}")
        return Response({"stats": stats})
