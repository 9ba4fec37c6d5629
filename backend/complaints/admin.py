from django.contrib import admin

from .models import (
    Complaint,
    ComplaintAssignment,
    ComplaintComment,
    ComplaintEvidence,
    ComplaintStatusLog,
    IncidentCategory,
    Zone,
)


class ComplaintEvidenceInline(admin.TabularInline):
    model = ComplaintEvidence
    extra = 0


class ComplaintAssignmentInline(admin.TabularInline):
    model = ComplaintAssignment
    extra = 0
    readonly_fields = ("authority", "assigned_at", "unassigned_at", "is_active")
    can_delete = False


class ComplaintStatusLogInline(admin.TabularInline):
    model = ComplaintStatusLog
    extra = 0
    readonly_fields = ("from_status", "to_status", "changed_by",
                       "comment", "changed_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "status", "priority", "category",
                    "zone", "reporter", "created_at", "resolved_at")
    list_filter = ("status", "priority", "category", "is_public")
    search_fields = ("title", "description", "address")
    readonly_fields = ("status", "resolved_at", "created_at", "updated_at")
    inlines = [ComplaintEvidenceInline, ComplaintAssignmentInline,
               ComplaintStatusLogInline]


@admin.register(ComplaintStatusLog)
class ComplaintStatusLogAdmin(admin.ModelAdmin):
    list_display = ("complaint", "from_status", "to_status",
                    "changed_by", "changed_at")
    list_filter = ("to_status",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ComplaintComment)
class ComplaintCommentAdmin(admin.ModelAdmin):
    list_display = ("complaint", "author", "is_internal", "created_at")
    list_filter = ("is_internal",)


@admin.register(Zone)
class ZoneAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "parent")
    search_fields = ("name", "code")


@admin.register(IncidentCategory)
class IncidentCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name",)
