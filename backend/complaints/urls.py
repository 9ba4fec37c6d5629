"""
Complaints app URL configuration.

All routes are registered under the ``/api/`` prefix.

Route Hierarchy
---------------
  /api/complaints/                         → list / create
  /api/complaints/{id}/                    → retrieve / destroy

  ── Workflow @actions ───────────────────────────────────────────
  POST /api/complaints/{id}/status/         → change status (+ audit log)
  POST /api/complaints/{id}/assign/         → assign an authority

  ── Sub-resource @actions ───────────────────────────────────────
  GET  /api/complaints/{id}/status-log/
  GET  /api/complaints/{id}/assignments/
  GET  /api/complaints/{id}/evidence/
  POST /api/complaints/{id}/evidence/
  GET  /api/complaints/{id}/comments/
  POST /api/complaints/{id}/comments/

  ── Catalog ─────────────────────────────────────────────────────
  /api/zones/        /api/zones/{id}/
  /api/categories/   /api/categories/{id}/
"""

from rest_framework.routers import DefaultRouter

from .views import CategoryViewSet, ComplaintViewSet, ZoneViewSet

router = DefaultRouter()
router.register(prefix=r"complaints", viewset=ComplaintViewSet, basename="complaint")
router.register(prefix=r"zones", viewset=ZoneViewSet, basename="zone")
router.register(prefix=r"categories", viewset=CategoryViewSet, basename="category")

urlpatterns = router.urls
