from django.contrib import admin

from core.job_roles.models import UserRole
from .models import CustomUser, UserType


class UserRoleInline(admin.TabularInline):
    """Roles of a user; the primary role's menu wins when menus are merged."""
    model = UserRole
    extra = 0
    fields = ['role', 'is_primary', 'assigned_at']
    readonly_fields = ['assigned_at']
    autocomplete_fields = ['role']


@admin.register(UserType)
class UserTypeAdmin(admin.ModelAdmin):
    list_display = ['type_name', 'description', 'user_count']
    search_fields = ['type_name']

    @admin.display(description='Users')
    def user_count(self, obj):
        return obj.users.count()


@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    """Users with their role memberships edited inline."""
    list_display = ['email', 'name', 'user_type', 'role_names', 'last_login']
    list_filter = ['user_type', 'role_memberships__role']
    search_fields = ['email', 'name', 'phone_number']
    readonly_fields = ['last_login']
    inlines = [UserRoleInline]

    fieldsets = (
        ('User Information', {
            'fields': ('email', 'name', 'phone_number')
        }),
        ('Access', {
            'fields': ('user_type',),
            'description': 'Admins bypass page checks; other users see the pages of their roles.'
        }),
        ('Authentication', {
            'fields': ('password', 'last_login'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user_type').prefetch_related(
            'role_memberships__role'
        )

    @admin.display(description='Roles')
    def role_names(self, obj):
        memberships = sorted(
            obj.role_memberships.all(),
            key=lambda membership: (not membership.is_primary, membership.assigned_at, membership.pk)
        )
        return ', '.join(membership.role.name for membership in memberships)

    def get_readonly_fields(self, request, obj=None):
        """The super admin's type and email can't be changed."""
        readonly = list(self.readonly_fields)
        if obj and obj.is_super_admin():
            readonly.extend(['user_type', 'email'])
        return readonly
