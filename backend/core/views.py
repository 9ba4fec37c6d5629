"""
Core app views — **Thin Views**.

Each view delegates to the corresponding service in ``core.services``
and only handles request parsing and response serialisation.
"""

from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from .serializers import (
    ComplaintsByStatusSerializer,
    NotificationSerializer,
    ResolvedDurationsSerializer,
    SystemConstantsSerializer,
)
from .services import (
    ComplaintReportingService,
    NotificationService,
    SystemConstantsService,
)


class ComplaintsByStatusReportView(APIView):
    """
    **GET /api/core/reports/complaints-by-status/**

    Complaint totals per status, read from ``vw_complaints_by_status``.
    Authorities and admins only.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Complaints by status",
        description="Totals per complaint status. Authorities and admins only.",
        responses={
            200: OpenApiResponse(response=ComplaintsByStatusSerializer(many=True), description="Status totals."),
            403: OpenApiResponse(description="Caller is not an authority or admin."),
        },
        tags=["Reports"],
    )
    def get(self, request: Request) -> Response:
        rows = ComplaintReportingService(request.user).complaints_by_status()
        return Response(
            ComplaintsByStatusSerializer(rows, many=True).data,
            status=status.HTTP_200_OK,
        )


class ResolvedDurationsReportView(APIView):
    """
    **GET /api/core/reports/resolved-durations/**

    Hours-to-resolve for every resolved complaint, read from
    ``vw_resolved_durations``.  Authorities and admins only.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Resolution durations",
        description="Hours from filing to resolution for resolved complaints.",
        responses={
            200: OpenApiResponse(response=ResolvedDurationsSerializer, description="Durations and summary."),
            403: OpenApiResponse(description="Caller is not an authority or admin."),
        },
        tags=["Reports"],
    )
    def get(self, request: Request) -> Response:
        data = ComplaintReportingService(request.user).resolved_durations()
        return Response(ResolvedDurationsSerializer(data).data, status=status.HTTP_200_OK)


class SystemConstantsView(APIView):
    """
    **GET /api/core/constants/**

    All enumerated value domains so clients can build dropdowns and
    labels without hardcoding values.  Public.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="System constants",
        description="Return every enum used by the API with display labels.",
        responses={200: OpenApiResponse(response=SystemConstantsSerializer, description="System constants.")},
        tags=["System"],
    )
    def get(self, request: Request) -> Response:
        data = SystemConstantsService.get_constants()
        serializer = SystemConstantsSerializer(data)
        return Response(serializer.data, status=status.HTTP_200_OK)


class NotificationViewSet(viewsets.ViewSet):
    """
    **Notification API** for the authenticated user.

    Endpoints
    ---------
    GET  /api/core/notifications/                   → list own notifications
    POST /api/core/notifications/{id}/delivered/    → stamp delivered_at
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="List notifications",
        description="Return the caller's notifications, most recent first.",
        parameters=[
            OpenApiParameter(
                name="undelivered",
                type=bool,
                required=False,
                description="Only return notifications not yet delivered.",
            ),
        ],
        responses={200: OpenApiResponse(response=NotificationSerializer(many=True), description="Notification list.")},
        tags=["Notifications"],
    )
    def list(self, request: Request) -> Response:
        undelivered_only = request.query_params.get("undelivered", "").lower() in ("1", "true", "yes")
        service = NotificationService(user=request.user)
        notifications = service.list_notifications(undelivered_only=undelivered_only)
        serializer = NotificationSerializer(notifications, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Mark notification delivered",
        description="Stamp delivered_at on one of the caller's notifications. Idempotent.",
        request=None,
        responses={
            200: OpenApiResponse(response=NotificationSerializer, description="Updated notification."),
            404: OpenApiResponse(description="Notification not found."),
        },
        tags=["Notifications"],
    )
    @action(detail=True, methods=["post"], url_path="delivered")
    def mark_delivered(self, request: Request, pk: str = None) -> Response:
        service = NotificationService(user=request.user)
        notification = service.mark_as_delivered(notification_id=int(pk))
        serializer = NotificationSerializer(notification)
        return Response(serializer.data, status=status.HTTP_200_OK)
