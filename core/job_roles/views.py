"""
API Views for Roles, Pages and role page hierarchies.
Provides REST API endpoints for managing role-based navigation.
"""
import logging

from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from django.shortcuts import get_object_or_404
from django.core.exceptions import ValidationError
from django.contrib.auth import get_user_model
from django.db import transaction

from rbac_project.pagination import auto_paginate

from .activity import record_activity, rows_to_details
from .decorators import require_page_access, require_self_or_admin
from .hierarchy import index_pages
from .models import ActivityLog, Role, Page, UserRole
from .serializers import (
    RoleSerializer,
    RoleListSerializer,
    PageSerializer,
    PageListSerializer,
    PageOrderItemSerializer,
    PageOrderUpdateSerializer,
    PageOrderOperationsSerializer,
    PageTreeNodeSerializer,
    AvailablePageSerializer,
    UserRoleSerializer,
    AssignRolesSerializer,
    ActivityLogSerializer,
)
from .services import ResolutionService, RolePageOrderService
from .stores import PageCatalog, RoleMembership

logger = logging.getLogger(__name__)

User = get_user_model()


def _error_message(exc):
    return '; '.join(exc.messages)


def _page_order_response(rows, message='', status_code=status.HTTP_200_OK):
    """Flat page order rows, enriched with page name/url/icon."""
    pages = index_pages(PageCatalog().get_pages(row.page_id for row in rows))
    serializer = PageOrderItemSerializer(rows, many=True, context={'pages': pages})
    return Response(
        {
            'message': message,
            'pages_with_order': serializer.data,
        },
        status=status_code
    )


# ============================================================================
# Role API Views
# ============================================================================

@api_view(['GET', 'POST'])
@require_page_access('/roles')
@auto_paginate
def role_list(request):
    """
    List all roles or create a new role.

    GET /roles/
    - Query params:
        - name: Filter by name (case-insensitive contains)
        - search: Search across name and description

    POST /roles/
    - Request body: { "name", "description", "pages_with_order"? }
    - pages_with_order is validated and saved like PUT /roles/{id}/page-order/
    """
    if request.method == 'GET':
        roles = Role.objects.filter_by_search_params(request.query_params)
        serializer = RoleListSerializer(roles, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = RoleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    order = PageOrderUpdateSerializer(
        data={'pages_with_order': request.data.get('pages_with_order') or []}
    )
    order.is_valid(raise_exception=True)

    try:
        with transaction.atomic():
            role = serializer.save(created_by=request.user, updated_by=request.user)
            rows = order.to_assignments(role.pk)
            if rows:
                rows = RolePageOrderService(role).save_page_order(rows)
            record_activity(
                request, ActivityLog.ACTION_CREATE, ActivityLog.RESOURCE_ROLE, role.pk,
                {'name': role.name, 'pages_with_order': rows_to_details(rows)}
            )
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(RoleSerializer(role).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@require_page_access('/roles')
def role_detail(request, pk):
    """
    Retrieve, update, or delete a specific role.

    PUT/PATCH /roles/{id}/
    - When pages_with_order is present the role's page order is replaced too

    DELETE /roles/{id}/
    - Delete a role (if not assigned to users)
    """
    role = get_object_or_404(Role, pk=pk)

    if request.method == 'GET':
        serializer = RoleSerializer(role)
        return Response(serializer.data, status=status.HTTP_200_OK)

    elif request.method in ['PUT', 'PATCH']:
        partial = request.method == 'PATCH'
        serializer = RoleSerializer(role, data=request.data, partial=partial)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        order = None
        if 'pages_with_order' in request.data:
            order = PageOrderUpdateSerializer(
                data={'pages_with_order': request.data.get('pages_with_order') or []}
            )
            order.is_valid(raise_exception=True)

        try:
            with transaction.atomic():
                role = serializer.save(updated_by=request.user)
                details = {'name': role.name}
                if order is not None:
                    rows = RolePageOrderService(role).save_page_order(order.to_assignments(role.pk))
                    details['pages_with_order'] = rows_to_details(rows)
                record_activity(
                    request, ActivityLog.ACTION_UPDATE, ActivityLog.RESOURCE_ROLE, role.pk, details
                )
        except ValidationError as e:
            return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(RoleSerializer(role).data, status=status.HTTP_200_OK)

    role_id, role_name = role.pk, role.name
    try:
        with transaction.atomic():
            role.delete()
            record_activity(
                request, ActivityLog.ACTION_DELETE, ActivityLog.RESOURCE_ROLE, role_id,
                {'name': role_name}
            )
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(
        {'message': 'Role deleted successfully'},
        status=status.HTTP_204_NO_CONTENT
    )


@api_view(['GET', 'PUT'])
@require_page_access('/roles')
def role_page_order(request, pk):
    """
    Read or replace the page order of a role.

    GET /roles/{id}/page-order/
    - Returns: normalized rows with page name, url and icon

    PUT /roles/{id}/page-order/
    - Request body: { "pages_with_order": [
          {"page_id": 1, "parent_page_id": null, "display_order": 0},
          {"page_id": 2, "parent_page_id": 1, "display_order": 0}
      ] }
    - Duplicates, unknown pages, unassigned parents and cycles are rejected;
      display orders are renumbered 0..n-1 per sibling group
    """
    role = get_object_or_404(Role, pk=pk)
    service = RolePageOrderService(role)

    if request.method == 'GET':
        return _page_order_response(service.get_page_order())

    serializer = PageOrderUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        rows = service.save_page_order(serializer.to_assignments(role.pk))
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

    record_activity(
        request, ActivityLog.ACTION_PAGE_ORDER, ActivityLog.RESOURCE_ROLE, role.pk,
        {'pages_with_order': rows_to_details(rows)}
    )
    return _page_order_response(rows, message='Page order saved successfully')


@api_view(['POST'])
@require_page_access('/roles')
def role_page_order_operations(request, pk):
    """
    Run a batch of editor operations on a role's page order.

    POST /roles/{id}/page-order/operations/
    - Request body: {
          "operations": [
              {"op": "add_page", "page_id": 4, "parent_page_id": 1},
              {"op": "move_up", "page_id": 4}
          ],
          "commit": true
      }
    - op: add_page, remove_page, move_up, move_down, set_parent, to_root
    - All or nothing; nothing is saved unless commit is true
    """
    role = get_object_or_404(Role, pk=pk)
    serializer = PageOrderOperationsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    commit = serializer.validated_data['commit']
    operations = [dict(operation) for operation in serializer.validated_data['operations']]
    try:
        rows = RolePageOrderService(role).apply_operations(operations, commit=commit)
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

    if commit:
        record_activity(
            request, ActivityLog.ACTION_PAGE_ORDER, ActivityLog.RESOURCE_ROLE, role.pk,
            {'operations': operations, 'pages_with_order': rows_to_details(rows)}
        )
    return _page_order_response(
        rows,
        message='Page order saved successfully' if commit else 'Preview only, nothing saved'
    )


@api_view(['GET'])
@require_page_access('/roles')
def role_page_hierarchy(request, pk):
    """
    GET /roles/{id}/page-hierarchy/
    - Returns: the role's navigation tree, inactive pages hidden
    """
    role = get_object_or_404(Role, pk=pk)
    tree = ResolutionService().resolve_for_role(role.pk)
    serializer = PageTreeNodeSerializer(tree, many=True)
    return Response(
        {
            'role_id': role.pk,
            'role_name': role.name,
            'pages': serializer.data,
        },
        status=status.HTTP_200_OK
    )


@api_view(['GET'])
@require_page_access('/roles')
def role_available_pages(request, pk):
    """
    GET /roles/{id}/available-pages/
    - Returns: active pages not yet assigned to the role, by name
    """
    role = get_object_or_404(Role, pk=pk)
    pages = RolePageOrderService(role).create_editor().available_pages()
    serializer = AvailablePageSerializer(pages, many=True)
    return Response(serializer.data, status=status.HTTP_200_OK)


@api_view(['POST'])
@require_page_access('/roles')
def role_assign_page(request, pk):
    """
    Assign a page to a role, as the last entry of its menu level.

    POST /roles/{id}/assign-page/
    - Request body: { "page_id": 1, "parent_page_id": null }
    """
    role = get_object_or_404(Role, pk=pk)
    page_id = request.data.get('page_id')
    parent_page_id = request.data.get('parent_page_id')

    if not page_id:
        return Response(
            {'error': 'page_id is required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        page_id = int(page_id)
        parent_page_id = int(parent_page_id) if parent_page_id not in (None, '') else None
    except (TypeError, ValueError):
        return Response(
            {'error': 'page_id and parent_page_id must be integers'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        rows = RolePageOrderService(role).assign_page(page_id, parent_page_id)
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

    record_activity(
        request, ActivityLog.ACTION_PAGE_ASSIGN, ActivityLog.RESOURCE_ROLE, role.pk,
        {'page_id': page_id, 'parent_page_id': parent_page_id}
    )
    return _page_order_response(
        rows,
        message='Page assigned successfully',
        status_code=status.HTTP_201_CREATED
    )


@api_view(['POST'])
@require_page_access('/roles')
def role_remove_page(request, pk):
    """
    Remove a page from a role together with its sub-pages.

    POST /roles/{id}/remove-page/
    - Request body: { "page_id": 1 }
    """
    role = get_object_or_404(Role, pk=pk)
    page_id = request.data.get('page_id')

    if not page_id:
        return Response(
            {'error': 'page_id is required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        rows = RolePageOrderService(role).remove_page(int(page_id))
    except (TypeError, ValueError):
        return Response({'error': 'page_id must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)

    record_activity(
        request, ActivityLog.ACTION_PAGE_REMOVE, ActivityLog.RESOURCE_ROLE, role.pk,
        {'page_id': int(page_id)}
    )
    return _page_order_response(rows, message='Page removed successfully')


# ============================================================================
# Page API Views
# ============================================================================

@api_view(['GET', 'POST'])
@require_page_access('/pages')
@auto_paginate
def page_list(request):
    """
    List all pages or create a new page.

    GET /pages/
    - Query params:
        - name: Filter by name (case-insensitive contains)
        - search: Search across name and url
        - status: 'active' or 'inactive'

    POST /pages/
    - Request body: { "name", "url", "icon"?, "is_external"? }
    """
    if request.method == 'GET':
        pages = (
            Page.objects
            .filter_by_search_params(request.query_params)
            .filter_by_status(request.query_params.get('status'))
        )
        serializer = PageListSerializer(pages, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    serializer = PageSerializer(data=request.data)
    if serializer.is_valid():
        page = serializer.save(created_by=request.user, updated_by=request.user)
        record_activity(
            request, ActivityLog.ACTION_CREATE, ActivityLog.RESOURCE_PAGE, page.pk,
            {'name': page.name, 'url': page.url}
        )
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@require_page_access('/pages')
def page_detail(request, pk):
    """
    Retrieve, update, or delete a specific page.

    PATCH /pages/{id}/ with { "status": "inactive" } hides the page (and its
    sub-pages) from every role's navigation without unassigning it.

    DELETE /pages/{id}/
    - Delete a page (if not assigned to any role)
    """
    page = get_object_or_404(Page, pk=pk)

    if request.method == 'GET':
        serializer = PageSerializer(page)
        return Response(serializer.data, status=status.HTTP_200_OK)

    elif request.method in ['PUT', 'PATCH']:
        partial = request.method == 'PATCH'
        serializer = PageSerializer(page, data=request.data, partial=partial)
        if serializer.is_valid():
            page = serializer.save(updated_by=request.user)
            record_activity(
                request, ActivityLog.ACTION_UPDATE, ActivityLog.RESOURCE_PAGE, page.pk,
                {'changes': sorted(serializer.validated_data), 'status': page.status}
            )
            return Response(serializer.data, status=status.HTTP_200_OK)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    page_id, page_name = page.pk, page.name
    try:
        with transaction.atomic():
            page.delete()
            record_activity(
                request, ActivityLog.ACTION_DELETE, ActivityLog.RESOURCE_PAGE, page_id,
                {'name': page_name}
            )
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(
        {'message': 'Page deleted successfully'},
        status=status.HTTP_204_NO_CONTENT
    )


@api_view(['GET'])
def my_pages_hierarchy(request):
    """
    GET /pages/my-pages-hierarchy/
    - Returns: the merged navigation tree of the current user's roles
    """
    tree = ResolutionService().resolve_for_user(request.user.pk)
    serializer = PageTreeNodeSerializer(tree, many=True)
    return Response(serializer.data, status=status.HTTP_200_OK)


@api_view(['GET'])
def page_access(request):
    """
    GET /pages/access/?url=/users
    - Returns: { "url": "/users", "has_access": true }
    """
    url = request.query_params.get('url')
    if not url:
        return Response(
            {'error': 'url query parameter is required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    has_access = ResolutionService().has_page_access(request.user.pk, url)
    return Response({'url': url, 'has_access': has_access}, status=status.HTTP_200_OK)


# ============================================================================
# User role membership
# ============================================================================

@api_view(['GET'])
@require_self_or_admin('pk', page_url='/users')
def user_roles(request, pk):
    """
    GET /users/{id}/roles/
    - Returns: the user's roles, primary role first
    - Users can always read their own roles
    """
    user = get_object_or_404(User, pk=pk)
    memberships = UserRole.objects.filter(user=user).select_related('role').order_by(
        '-is_primary', 'assigned_at', 'id'
    )
    serializer = UserRoleSerializer(memberships, many=True)
    return Response(serializer.data, status=status.HTTP_200_OK)


@api_view(['POST'])
@require_page_access('/users')
def user_assign_roles(request, pk):
    """
    Replace the roles of a user.

    POST /users/{id}/assign-roles/
    - Request body: { "role_ids": [1, 2], "primary_role_id": 2 }
    - primary_role_id defaults to the first role in role_ids
    """
    user = get_object_or_404(User, pk=pk)
    serializer = AssignRolesSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    RoleMembership().replace_for_user(
        user.pk,
        serializer.validated_data['role_ids'],
        serializer.validated_data['primary_role_id'],
    )
    logger.info(f"Roles of user {user.pk} set to {serializer.validated_data['role_ids']}")
    record_activity(
        request, ActivityLog.ACTION_ROLE_ASSIGN, ActivityLog.RESOURCE_USER, user.pk,
        {
            'role_ids': serializer.validated_data['role_ids'],
            'primary_role_id': serializer.validated_data['primary_role_id'],
        }
    )

    memberships = UserRole.objects.filter(user=user).select_related('role').order_by(
        '-is_primary', 'assigned_at', 'id'
    )
    return Response(
        {
            'message': 'Roles assigned successfully',
            'roles': UserRoleSerializer(memberships, many=True).data,
        },
        status=status.HTTP_200_OK
    )


# ============================================================================
# Activity log
# ============================================================================

@api_view(['GET'])
@require_page_access('/activity')
@auto_paginate
def activity_log_list(request):
    """
    List activity log entries, newest first.

    GET /activity/
    - Query params:
        - user_id, action, resource, resource_id: Exact match
        - start_date, end_date: ISO date or datetime (end_date includes the whole day)
        - page, page_size (or limit)
    """
    try:
        logs = ActivityLog.objects.select_related('user').filter_by_query_params(
            request.query_params
        )
    except ValidationError as e:
        return Response({'error': _error_message(e)}, status=status.HTTP_400_BAD_REQUEST)
    serializer = ActivityLogSerializer(logs, many=True)
    return Response(serializer.data, status=status.HTTP_200_OK)


@api_view(['GET'])
@require_page_access('/activity')
def activity_log_detail(request, pk):
    """
    GET /activity/{id}/
    """
    entry = get_object_or_404(ActivityLog, pk=pk)
    return Response(ActivityLogSerializer(entry).data, status=status.HTTP_200_OK)
