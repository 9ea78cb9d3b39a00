"""
URL configuration for rbac_project project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('core/', include('core.urls')),

    # Authentication endpoints (login, tokens)
    path('auth/', include('core.user_accounts.auth_urls')),

    # Account management endpoints (profile)
    path('accounts/', include('core.user_accounts.urls')),
]
