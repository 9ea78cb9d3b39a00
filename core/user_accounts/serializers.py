from rest_framework import serializers
from django.core.validators import RegexValidator
from .models import CustomUser


class UserProfileSerializer(serializers.ModelSerializer):
    """Serializer for user profile (users viewing/updating their own profile)"""
    user_type = serializers.CharField(source='user_type.type_name', read_only=True)
    roles = serializers.SerializerMethodField()

    class Meta:
        model = CustomUser
        fields = ['id', 'email', 'name', 'phone_number', 'user_type', 'roles']
        read_only_fields = ['id', 'user_type', 'email', 'roles']

    def get_roles(self, obj):
        """Role names in resolution order (primary role first)."""
        memberships = obj.role_memberships.select_related('role').order_by(
            '-is_primary', 'assigned_at', 'id'
        )
        return [membership.role.name for membership in memberships]

    def validate_phone_number(self, value):
        """Validate phone number format"""
        if not value:
            return value
        phone_regex = RegexValidator(
            regex=r'^(\+?\d{1,3})?[-.\s]?\(?\d{1,4}\)?[-.\s]?\d{1,4}[-.\s]?\d{1,9}$',
            message="Enter a valid phone number"
        )
        phone_regex(value)
        return value
