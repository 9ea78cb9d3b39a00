"""
Activity logging for changes made through the API.

Views call record_activity() once a change has been saved:

    record_activity(request, ActivityLog.ACTION_CREATE, ActivityLog.RESOURCE_ROLE,
                    role.pk, {'name': role.name})
"""
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address

from .models import ActivityLog

logger = logging.getLogger(__name__)

USER_AGENT_MAX_LENGTH = 500


def get_client_ip(request):
    """First address of X-Forwarded-For, else REMOTE_ADDR. None if neither is a valid IP."""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    address = forwarded.split(',')[0].strip() if forwarded else request.META.get('REMOTE_ADDR')
    if not address:
        return None
    try:
        validate_ipv46_address(address)
    except ValidationError:
        return None
    return address


def record_activity(request, action, resource, resource_id=None, details=None):
    """Create an ActivityLog entry for the request's user."""
    user = request.user if request.user.is_authenticated else None
    entry = ActivityLog.objects.create(
        user=user,
        username=user.email if user else '',
        action=action,
        resource=resource,
        resource_id=resource_id,
        details=details or {},
        ip_address=get_client_ip(request),
        user_agent=request.META.get('HTTP_USER_AGENT', '')[:USER_AGENT_MAX_LENGTH],
    )
    logger.info(f"Activity: {entry}")
    return entry


def rows_to_details(rows):
    """Page order rows as stored in details['pages_with_order']."""
    return [row.to_wire() for row in rows]
