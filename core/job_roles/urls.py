"""
URL Configuration for Roles and navigation Pages app.
Handles role-based access control and per-role page ordering.
"""
from django.urls import path
from . import views

app_name = 'job_roles'

urlpatterns = [
    # Role endpoints
    path('roles/', views.role_list, name='role-list'),
    path('roles/<int:pk>/', views.role_detail, name='role-detail'),
    path('roles/<int:pk>/page-order/', views.role_page_order, name='role-page-order'),
    path(
        'roles/<int:pk>/page-order/operations/',
        views.role_page_order_operations,
        name='role-page-order-operations'
    ),
    path('roles/<int:pk>/page-hierarchy/', views.role_page_hierarchy, name='role-page-hierarchy'),
    path('roles/<int:pk>/available-pages/', views.role_available_pages, name='role-available-pages'),
    path('roles/<int:pk>/assign-page/', views.role_assign_page, name='role-assign-page'),
    path('roles/<int:pk>/remove-page/', views.role_remove_page, name='role-remove-page'),

    # Page endpoints
    path('pages/', views.page_list, name='page-list'),
    path('pages/my-pages-hierarchy/', views.my_pages_hierarchy, name='my-pages-hierarchy'),
    path('pages/access/', views.page_access, name='page-access'),
    path('pages/<int:pk>/', views.page_detail, name='page-detail'),

    # User role membership
    path('users/<int:pk>/roles/', views.user_roles, name='user-roles'),
    path('users/<int:pk>/assign-roles/', views.user_assign_roles, name='user-assign-roles'),

    # Activity log
    path('activity/', views.activity_log_list, name='activity-log-list'),
    path('activity/<int:pk>/', views.activity_log_detail, name='activity-log-detail'),
]
