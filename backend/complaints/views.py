"""
Complaints app ViewSets.

Architecture: Views are intentionally thin.
Every view follows the strict three-step pattern:

    1. Parse / validate input via a serializer.
    2. Delegate all business logic to the appropriate service class.
    3. Serialize the result and return a DRF ``Response``.

Domain exceptions raised by services are translated to HTTP responses by
``core.domain.exception_handler.domain_exception_handler``.

ViewSets
--------
- ``ComplaintViewSet`` — complaints plus the status / assign workflow
  actions and the status-log, assignments, evidence and comments
  sub-resources.
- ``ZoneViewSet``      — zone catalog.
- ``CategoryViewSet``  — incident category catalog.
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .serializers import (
    AssignAuthoritySerializer,
    ComplaintAssignmentSerializer,
    ComplaintCommentSerializer,
    ComplaintCreateSerializer,
    ComplaintDetailSerializer,
    ComplaintEvidenceSerializer,
    ComplaintFilterSerializer,
    ComplaintListSerializer,
    ComplaintStatusLogSerializer,
    IncidentCategorySerializer,
    StatusChangeSerializer,
    ZoneSerializer,
)
from .services import (
    CatalogService,
    ComplaintAssignmentService,
    ComplaintCommentService,
    ComplaintCreationService,
    ComplaintDeletionService,
    ComplaintEvidenceService,
    ComplaintNotificationService,
    ComplaintQueryService,
    ComplaintStatusService,
)


class ComplaintViewSet(viewsets.ViewSet):
    """
    Central ViewSet for the complaints app.

    Uses ``viewsets.ViewSet`` (not ``ModelViewSet``) so every action is
    explicitly defined, preventing accidental exposure of unintended
    CRUD operations (complaints are never edited in place).

    Permission Strategy
    -------------------
    The base permission is ``IsAuthenticated``.  Role and ownership
    checks are enforced exclusively inside the service layer.
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    # ── Standard CRUD ────────────────────────────────────────────────

    @extend_schema(
        summary="List complaints",
        description=(
            "Citizens see public complaints and their own; authorities and "
            "admins see all complaints."
        ),
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Filter by complaint status."),
            OpenApiParameter(name="priority", type=str, location=OpenApiParameter.QUERY, description="Filter by priority (low, medium, high)."),
            OpenApiParameter(name="category", type=int, location=OpenApiParameter.QUERY, description="Filter by incident category PK."),
            OpenApiParameter(name="zone", type=int, location=OpenApiParameter.QUERY, description="Filter by zone PK."),
            OpenApiParameter(name="reporter", type=int, location=OpenApiParameter.QUERY, description="Filter by reporter PK."),
            OpenApiParameter(name="assigned_to_me", type=bool, location=OpenApiParameter.QUERY, description="Only complaints actively assigned to the caller."),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Free-text search on title, description and address."),
        ],
        responses={200: ComplaintListSerializer(many=True)},
        tags=["Complaints"],
    )
    def list(self, request: Request) -> Response:
        filter_serializer = ComplaintFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        qs = ComplaintQueryService.get_filtered_queryset(
            request.user, filter_serializer.validated_data,
        )
        return Response(ComplaintListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="File a complaint",
        request=ComplaintCreateSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintDetailSerializer, description="Complaint created."),
            400: OpenApiResponse(description="Validation error."),
        },
        tags=["Complaints"],
    )
    def create(self, request: Request) -> Response:
        serializer = ComplaintCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        complaint = ComplaintCreationService.create_complaint(
            serializer.validated_data, request.user,
        )
        return Response(ComplaintDetailSerializer(complaint).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Retrieve a complaint",
        responses={200: ComplaintDetailSerializer, 404: OpenApiResponse(description="Not found.")},
        tags=["Complaints"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        complaint = ComplaintQueryService.get_visible_complaint(request.user, int(pk))
        return Response(ComplaintDetailSerializer(complaint).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Delete a complaint (admin)",
        description="Removes the complaint with its evidence, comments, status log and assignments.",
        responses={204: OpenApiResponse(description="Deleted."), 403: OpenApiResponse(description="Not an admin.")},
        tags=["Complaints"],
    )
    def destroy(self, request: Request, pk: str = None) -> Response:
        ComplaintDeletionService.delete_complaint(request.user, int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ── Workflow actions ─────────────────────────────────────────────

    @extend_schema(
        summary="Change complaint status",
        description=(
            "Authority or admin only.  Records a status-log entry and, on the "
            "first move to 'resolved', stamps resolved_at.  The reporter is "
            "notified afterwards."
        ),
        request=StatusChangeSerializer,
        responses={
            200: OpenApiResponse(response=ComplaintDetailSerializer, description="Status changed."),
            403: OpenApiResponse(description="Actor is not an authority or admin."),
            404: OpenApiResponse(description="Complaint not found."),
        },
        tags=["Complaints – Workflow"],
    )
    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request: Request, pk: str = None) -> Response:
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        entry = ComplaintStatusService.record_transition(
            int(pk),
            request.user.pk,
            data["status"],
            data.get("comment"),
        )
        ComplaintNotificationService.status_changed(entry, request.user)
        complaint = entry.complaint
        return Response(ComplaintDetailSerializer(complaint).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Assign an authority",
        description=(
            "Authority or admin only.  Closes the current active assignment "
            "(if any) and makes the given authority the single active handler."
        ),
        request=AssignAuthoritySerializer,
        responses={
            201: OpenApiResponse(response=ComplaintAssignmentSerializer, description="Assignment created."),
            400: OpenApiResponse(description="Assignee is not an authority."),
            403: OpenApiResponse(description="Actor is not an authority or admin."),
            404: OpenApiResponse(description="Complaint not found."),
            409: OpenApiResponse(description="Concurrent reassignment; retry."),
        },
        tags=["Complaints – Workflow"],
    )
    @action(detail=True, methods=["post"], url_path="assign")
    def assign(self, request: Request, pk: str = None) -> Response:
        serializer = AssignAuthoritySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        assignment = ComplaintAssignmentService.assign_authority(
            int(pk),
            serializer.validated_data["authority_id"],
            request.user.pk,
        )
        ComplaintNotificationService.assigned(assignment, request.user)
        return Response(ComplaintAssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)

    # ── Sub-resources ────────────────────────────────────────────────

    @extend_schema(
        summary="Status history",
        responses={200: ComplaintStatusLogSerializer(many=True)},
        tags=["Complaints – History"],
    )
    @action(detail=True, methods=["get"], url_path="status-log")
    def status_log(self, request: Request, pk: str = None) -> Response:
        logs = ComplaintQueryService.get_status_history(request.user, int(pk))
        return Response(ComplaintStatusLogSerializer(logs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Assignment history",
        responses={200: ComplaintAssignmentSerializer(many=True)},
        tags=["Complaints – History"],
    )
    @action(detail=True, methods=["get"], url_path="assignments")
    def assignments(self, request: Request, pk: str = None) -> Response:
        rows = ComplaintQueryService.get_assignment_history(request.user, int(pk))
        return Response(ComplaintAssignmentSerializer(rows, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        methods=["get"],
        summary="List evidence",
        responses={200: ComplaintEvidenceSerializer(many=True)},
        tags=["Complaints – Evidence"],
    )
    @extend_schema(
        methods=["post"],
        summary="Attach evidence",
        request=ComplaintEvidenceSerializer,
        responses={201: ComplaintEvidenceSerializer},
        tags=["Complaints – Evidence"],
    )
    @action(detail=True, methods=["get", "post"], url_path="evidence")
    def evidence(self, request: Request, pk: str = None) -> Response:
        if request.method == "GET":
            rows = ComplaintEvidenceService.list_evidence(request.user, int(pk))
            return Response(ComplaintEvidenceSerializer(rows, many=True).data, status=status.HTTP_200_OK)

        serializer = ComplaintEvidenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        evidence = ComplaintEvidenceService.add_evidence(
            request.user, int(pk), serializer.validated_data,
        )
        return Response(ComplaintEvidenceSerializer(evidence).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        methods=["get"],
        summary="List comments",
        description="Internal comments are only returned to authorities and admins.",
        responses={200: ComplaintCommentSerializer(many=True)},
        tags=["Complaints – Comments"],
    )
    @extend_schema(
        methods=["post"],
        summary="Post a comment",
        request=ComplaintCommentSerializer,
        responses={201: ComplaintCommentSerializer},
        tags=["Complaints – Comments"],
    )
    @action(detail=True, methods=["get", "post"], url_path="comments")
    def comments(self, request: Request, pk: str = None) -> Response:
        if request.method == "GET":
            rows = ComplaintCommentService.list_comments(request.user, int(pk))
            return Response(ComplaintCommentSerializer(rows, many=True).data, status=status.HTTP_200_OK)

        serializer = ComplaintCommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = ComplaintCommentService.add_comment(
            request.user,
            int(pk),
            serializer.validated_data["body"],
            serializer.validated_data.get("is_internal", False),
        )
        return Response(ComplaintCommentSerializer(comment).data, status=status.HTTP_201_CREATED)


# ═══════════════════════════════════════════════════════════════════
#  Catalog ViewSets
# ═══════════════════════════════════════════════════════════════════


class ZoneViewSet(viewsets.ViewSet):
    """Zones: readable by any authenticated user, writable by admins."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(summary="List zones", responses={200: ZoneSerializer(many=True)}, tags=["Catalog"])
    def list(self, request: Request) -> Response:
        return Response(ZoneSerializer(CatalogService.list_zones(), many=True).data)

    @extend_schema(summary="Create a zone", request=ZoneSerializer, responses={201: ZoneSerializer}, tags=["Catalog"])
    def create(self, request: Request) -> Response:
        serializer = ZoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        zone = CatalogService.create_zone(request.user, serializer.validated_data)
        return Response(ZoneSerializer(zone).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Retrieve a zone", responses={200: ZoneSerializer}, tags=["Catalog"])
    def retrieve(self, request: Request, pk: str = None) -> Response:
        return Response(ZoneSerializer(CatalogService.get_zone(int(pk))).data)

    @extend_schema(summary="Update a zone", request=ZoneSerializer, responses={200: ZoneSerializer}, tags=["Catalog"])
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = ZoneSerializer(CatalogService.get_zone(int(pk)), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        zone = CatalogService.update_zone(request.user, int(pk), serializer.validated_data)
        return Response(ZoneSerializer(zone).data)

    @extend_schema(summary="Delete a zone", responses={204: None}, tags=["Catalog"])
    def destroy(self, request: Request, pk: str = None) -> Response:
        CatalogService.delete_zone(request.user, int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryViewSet(viewsets.ViewSet):
    """Incident categories: readable by any authenticated user, writable by admins."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(summary="List incident categories", responses={200: IncidentCategorySerializer(many=True)}, tags=["Catalog"])
    def list(self, request: Request) -> Response:
        return Response(IncidentCategorySerializer(CatalogService.list_categories(), many=True).data)

    @extend_schema(summary="Create an incident category", request=IncidentCategorySerializer, responses={201: IncidentCategorySerializer}, tags=["Catalog"])
    def create(self, request: Request) -> Response:
        serializer = IncidentCategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = CatalogService.create_category(request.user, serializer.validated_data)
        return Response(IncidentCategorySerializer(category).data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Retrieve an incident category", responses={200: IncidentCategorySerializer}, tags=["Catalog"])
    def retrieve(self, request: Request, pk: str = None) -> Response:
        return Response(IncidentCategorySerializer(CatalogService.get_category(int(pk))).data)

    @extend_schema(summary="Update an incident category", request=IncidentCategorySerializer, responses={200: IncidentCategorySerializer}, tags=["Catalog"])
    def partial_update(self, request: Request, pk: str = None) -> Response:
        serializer = IncidentCategorySerializer(
            CatalogService.get_category(int(pk)), data=request.data, partial=True,
        )
        serializer.is_valid(raise_exception=True)
        category = CatalogService.update_category(request.user, int(pk), serializer.validated_data)
        return Response(IncidentCategorySerializer(category).data)

    @extend_schema(summary="Delete an incident category", responses={204: None, 409: OpenApiResponse(description="Category in use.")}, tags=["Catalog"])
    def destroy(self, request: Request, pk: str = None) -> Response:
        CatalogService.delete_category(request.user, int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)
