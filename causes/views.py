import logging

from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from accounts.permissions import IsAdminOrReadOnly
from accounts.utils.responses import validation_error_response
from .models import Cause
from .serializers import CauseSerializer

logger = logging.getLogger(__name__)


class CausePagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        return Response(
            {
                "causes": data,
                "pagination": {
                    "page": self.page.number,
                    "limit": paginator.per_page,
                    "totalCauses": paginator.count,
                    "totalPages": paginator.num_pages,
                    "hasNextPage": self.page.has_next(),
                    "hasPrevPage": self.page.has_previous(),
                },
            }
        )


class CauseViewSet(viewsets.ModelViewSet):
    serializer_class = CauseSerializer
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = CausePagination

    def get_queryset(self):
        user = self.request.user
        queryset = Cause.objects.all()

        # Drafts stay hidden from the public
        if not (user.is_authenticated and user.is_admin):
            queryset = queryset.exclude(status="DRAFT")

        return queryset

    def filter_queryset(self, queryset):
        params = self.request.query_params

        category = params.get("category")
        if category and category != "All":
            queryset = queryset.filter(category=category)

        if params.get("featured") == "true":
            queryset = queryset.filter(featured=True)

        cause_status = params.get("status")
        if cause_status:
            queryset = queryset.filter(status=cause_status)

        search = params.get("search")
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search)
                | Q(description__icontains=search)
                | Q(category__icontains=search)
            )

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer)
        cause = serializer.save()
        logger.info(f"Cause created: {cause.id} '{cause.title}' by {request.user.email}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], permission_classes=[IsAdminOrReadOnly])
    def donations(self, request, pk=None):
        from donations.serializers import PublicDonationSerializer

        cause = self.get_object()
        recent = (
            cause.donations.filter(status="COMPLETED")
            .select_related("user")
            .order_by("-donated_at")[:20]
        )
        return Response(
            {
                "cause": {"id": cause.id, "title": cause.title},
                "donations": PublicDonationSerializer(recent, many=True).data,
            }
        )
