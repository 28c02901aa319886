"""Base admin classes for all apps."""
from django.contrib import admin


class BaseModelAdmin(admin.ModelAdmin):
    """Base admin for models with common audit fields."""
    list_display = ['id', 'created_at', 'updated_at', 'is_active']
    list_filter = ['is_active', 'created_at']
    search_fields = ['id']
    readonly_fields = ['id', 'created_at', 'updated_at']
    ordering = ['-created_at']

    def get_queryset(self, request):
        """Include inactive objects in admin."""
        return self.model.all_objects.all()


class AppendOnlyModelAdmin(BaseModelAdmin):
    """Admin for audit/log tables: rows are viewable, never edited."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
