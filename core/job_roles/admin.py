from django.contrib import admin

from .models import ActivityLog, Page, Role, RolePage, UserRole
from .services import RolePageOrderService


class RolePageInline(admin.TabularInline):
    """A role's menu rows. Saving the role renumbers them per menu level."""
    model = RolePage
    fk_name = 'role'
    extra = 0
    fields = ['page', 'parent_page', 'display_order']
    autocomplete_fields = ['page', 'parent_page']
    ordering = ['parent_page_id', 'display_order']


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'page_count', 'user_count', 'updated_at']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at', 'created_by', 'updated_by']
    inlines = [RolePageInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'description')
        }),
        ('Audit', {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(description='Pages')
    def page_count(self, obj):
        return obj.role_pages.count()

    @admin.display(description='Users')
    def user_count(self, obj):
        return obj.user_memberships.count()

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        # inline edits can leave gaps in display_order; normalize through the service
        service = RolePageOrderService(form.instance, max_depth=None)
        service.save_page_order(service.get_page_order())


@admin.register(Page)
class PageAdmin(admin.ModelAdmin):
    list_display = ['name', 'url', 'icon', 'is_external', 'status', 'role_count']
    list_filter = ['status', 'is_external']
    search_fields = ['name', 'url']
    readonly_fields = ['created_at', 'updated_at', 'created_by', 'updated_by']
    actions = ['deactivate_pages']

    @admin.display(description='Roles')
    def role_count(self, obj):
        return obj.role_pages.count()

    @admin.action(description='Deactivate selected pages (hidden from every menu)')
    def deactivate_pages(self, request, queryset):
        for page in queryset:
            page.deactivate()
        self.message_user(request, f"{queryset.count()} page(s) deactivated.")


@admin.register(UserRole)
class UserRoleAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'is_primary', 'assigned_at']
    list_filter = ['is_primary', 'role']
    search_fields = ['user__email', 'user__name', 'role__name']
    autocomplete_fields = ['role']
    raw_id_fields = ['user']


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    """Read-only view of the activity log."""
    list_display = ['created_at', 'username', 'action', 'resource', 'resource_id', 'ip_address']
    list_filter = ['action', 'resource']
    search_fields = ['username']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
