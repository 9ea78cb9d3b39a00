"""
URL Configuration for Accounts app.
Handles user account self-service (not authentication).
Authentication endpoints are in auth_urls.py
"""
from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # User profile management
    path('profile/', views.user_profile, name='user_profile'),
]
