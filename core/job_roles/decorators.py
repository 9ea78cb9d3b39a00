"""
Permission decorators for function-based views.
"""
from functools import wraps

from rest_framework import status
from rest_framework.response import Response

from core.job_roles.services import ResolutionService


def require_page_access(page_url):
    """
    Decorator restricting a view to users whose navigation contains page_url.
    Admin users always pass.

    Place it below @api_view so the request is already authenticated by DRF:

        @api_view(['GET', 'POST'])
        @require_page_access('/roles')
        def role_list(request):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return Response(
                    {'error': 'Authentication required'},
                    status=status.HTTP_401_UNAUTHORIZED
                )

            if request.user.is_admin():
                return view_func(request, *args, **kwargs)

            if not ResolutionService().has_page_access(request.user.pk, page_url):
                return Response(
                    {
                        'error': 'Permission denied',
                        'detail': f"Your roles do not give access to '{page_url}'",
                    },
                    status=status.HTTP_403_FORBIDDEN
                )

            return view_func(request, *args, **kwargs)

        wrapper.page_url = page_url
        return wrapper
    return decorator


def require_self_or_admin(user_id_param='user_id', page_url=None):
    """
    Decorator for endpoints where users can access their own data,
    but admins can access anyone's data. When page_url is given, users whose
    navigation contains that page can access anyone's data too.

        @api_view(['GET'])
        @require_self_or_admin('pk', page_url='/users')
        def user_roles(request, pk):
            ...
    """
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if not request.user.is_authenticated:
                return Response(
                    {'error': 'Authentication required'},
                    status=status.HTTP_401_UNAUTHORIZED
                )

            target_user_id = kwargs.get(user_id_param)
            if target_user_id is not None and str(request.user.pk) == str(target_user_id):
                return view_func(request, *args, **kwargs)

            if request.user.is_admin():
                return view_func(request, *args, **kwargs)

            if page_url and ResolutionService().has_page_access(request.user.pk, page_url):
                return view_func(request, *args, **kwargs)

            return Response(
                {
                    'error': 'Permission denied',
                    'detail': 'You can only access your own data'
                },
                status=status.HTTP_403_FORBIDDEN
            )
        return wrapper
    return decorator
