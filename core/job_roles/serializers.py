"""
Serializers for Roles, Pages and role page hierarchies.
Handles serialization/deserialization for API endpoints.
"""
import re

from rest_framework import serializers

from .editor import HierarchyEditor
from .hierarchy import Assignment
from .models import ActivityLog, Page, Role, UserRole

PAGE_URL_PATTERN = re.compile(r'^(/[a-zA-Z0-9_\-/]*|https?://.+)$')


class PageSerializer(serializers.ModelSerializer):
    """Serializer for Page model."""
    is_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = Page
        fields = [
            'id', 'name', 'url', 'icon', 'is_external', 'status', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_url(self, value):
        """Internal route ('/users') or absolute http(s) URL."""
        value = value.strip()
        if not PAGE_URL_PATTERN.match(value):
            raise serializers.ValidationError(
                "URL must be a route starting with '/' or an absolute http(s) URL."
            )
        return value

    def validate(self, attrs):
        url = attrs.get('url')
        if url and 'is_external' not in attrs:
            attrs['is_external'] = url.startswith(('http://', 'https://'))
        return attrs


class PageListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for page lists."""

    class Meta:
        model = Page
        fields = ['id', 'name', 'url', 'icon', 'is_external', 'status']
        read_only_fields = ['id']


class PageOrderItemSerializer(serializers.Serializer):
    """
    One row of a role's page order.
    On output, name/url/icon are filled from the 'pages' context ({page_id: PageInfo}).
    """
    page_id = serializers.IntegerField()
    parent_page_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    display_order = serializers.IntegerField(required=False, min_value=0, default=0)
    name = serializers.SerializerMethodField()
    url = serializers.SerializerMethodField()
    icon = serializers.SerializerMethodField()

    def _page(self, obj):
        return self.context.get('pages', {}).get(obj.page_id)

    def get_name(self, obj):
        page = self._page(obj)
        return page.name if page else None

    def get_url(self, obj):
        page = self._page(obj)
        return page.url if page else None

    def get_icon(self, obj):
        page = self._page(obj)
        return page.icon if page else None


class PageOrderUpdateSerializer(serializers.Serializer):
    """
    Body of PUT /roles/{id}/page-order/:
        {"pages_with_order": [{"page_id": 1, "parent_page_id": null, "display_order": 0}, ...]}
    """
    pages_with_order = PageOrderItemSerializer(many=True, allow_empty=True)

    def to_assignments(self, role_id):
        return [
            Assignment(
                role_id=role_id,
                page_id=item['page_id'],
                parent_page_id=item.get('parent_page_id'),
                display_order=item.get('display_order') or 0,
            )
            for item in self.validated_data['pages_with_order']
        ]


class EditorOperationSerializer(serializers.Serializer):
    op = serializers.ChoiceField(choices=HierarchyEditor.OPERATIONS)
    page_id = serializers.IntegerField()
    parent_page_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class PageOrderOperationsSerializer(serializers.Serializer):
    """
    Body of POST /roles/{id}/page-order/operations/:
        {"operations": [{"op": "move_up", "page_id": 3}], "commit": true}
    """
    operations = EditorOperationSerializer(many=True, allow_empty=False)
    commit = serializers.BooleanField(required=False, default=False)


class PageTreeNodeSerializer(serializers.Serializer):
    """Nested navigation node (PageTreeNode)."""
    page_id = serializers.IntegerField()
    name = serializers.CharField(source='page.name')
    url = serializers.CharField(source='page.url')
    icon = serializers.CharField(source='page.icon', allow_null=True)
    is_external = serializers.BooleanField(source='page.is_external')
    parent_page_id = serializers.IntegerField(allow_null=True)
    display_order = serializers.IntegerField()
    children = serializers.SerializerMethodField()

    def get_children(self, obj):
        return PageTreeNodeSerializer(obj.children, many=True, context=self.context).data


class AvailablePageSerializer(serializers.Serializer):
    """PageInfo of a page that can still be added to a role."""
    id = serializers.IntegerField()
    name = serializers.CharField()
    url = serializers.CharField()
    icon = serializers.CharField(allow_null=True)
    is_external = serializers.BooleanField()


class RoleSerializer(serializers.ModelSerializer):
    """
    Serializer for Role model.
    pages_with_order is accepted on create and update so a role can be saved with its
    navigation in a single request; it is saved by the view through
    RolePageOrderService.
    """
    page_count = serializers.IntegerField(source='role_pages.count', read_only=True)
    user_count = serializers.IntegerField(source='user_memberships.count', read_only=True)
    pages_with_order = PageOrderItemSerializer(many=True, write_only=True, required=False)

    class Meta:
        model = Role
        fields = [
            'id', 'name', 'description', 'page_count', 'user_count',
            'pages_with_order', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def create(self, validated_data):
        validated_data.pop('pages_with_order', None)
        return super().create(validated_data)

    def update(self, instance, validated_data):
        validated_data.pop('pages_with_order', None)
        return super().update(instance, validated_data)


class RoleListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for role lists."""

    class Meta:
        model = Role
        fields = ['id', 'name', 'description']
        read_only_fields = ['id']


class UserRoleSerializer(serializers.ModelSerializer):
    role_name = serializers.CharField(source='role.name', read_only=True)

    class Meta:
        model = UserRole
        fields = ['id', 'role', 'role_name', 'is_primary', 'assigned_at']
        read_only_fields = ['id', 'role', 'is_primary', 'assigned_at']


class AssignRolesSerializer(serializers.Serializer):
    """
    Body of POST /users/{id}/assign-roles/:
        {"role_ids": [1, 2], "primary_role_id": 2}
    """
    role_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    primary_role_id = serializers.IntegerField(required=False, allow_null=True, default=None)

    def validate_role_ids(self, value):
        value = list(dict.fromkeys(value))
        existing = set(Role.objects.filter(pk__in=value).values_list('id', flat=True))
        missing = set(value) - existing
        if missing:
            raise serializers.ValidationError(
                f"The following role IDs do not exist: {sorted(missing)}"
            )
        return value

    def validate(self, attrs):
        primary = attrs.get('primary_role_id')
        if primary is not None and primary not in attrs['role_ids']:
            raise serializers.ValidationError(
                {'primary_role_id': 'The primary role must be one of role_ids.'}
            )
        return attrs


class ActivityLogSerializer(serializers.ModelSerializer):
    action_display = serializers.CharField(source='get_action_display', read_only=True)

    class Meta:
        model = ActivityLog
        fields = [
            'id', 'user', 'username', 'action', 'action_display', 'resource',
            'resource_id', 'details', 'ip_address', 'user_agent', 'created_at'
        ]
        read_only_fields = [
            'id', 'user', 'username', 'action', 'resource', 'resource_id',
            'details', 'ip_address', 'user_agent', 'created_at'
        ]
