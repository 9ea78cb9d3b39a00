"""
URL Configuration for Core module.
This module handles core functionality: user accounts, roles and navigation pages.
"""
from django.urls import path, include

app_name = 'core'

urlpatterns = [
    # User accounts sub-app URLs
    path('user_accounts/', include('core.user_accounts.urls')),

    # Roles and navigation pages sub-app URLs
    path('job_roles/', include('core.job_roles.urls')),
]
