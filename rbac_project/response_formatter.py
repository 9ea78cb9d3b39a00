"""
Standardized API responses for the dashboard.

Every response body has the shape:
{
    "status": "success" | "error",
    "message": "string message or empty",
    "data": {...} | [] | null
}

Views keep returning plain dicts ({'error': ...}, {'message': ..., ...}) and
serializer data; StandardizedJSONRenderer wraps them on the way out.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status as http_status
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Format DRF errors, and Django ValidationErrors escaping a view (such as
    the page hierarchy errors), as error envelopes.
    """
    if isinstance(exc, DjangoValidationError):
        return Response(
            {
                'status': 'error',
                'message': '; '.join(exc.messages),
                'data': {'code': getattr(exc, 'code', None)},
            },
            status=http_status.HTTP_400_BAD_REQUEST
        )

    response = exception_handler(exc, context)
    if response is not None:
        response.data = format_error_response(response.data)
    else:
        view = context.get('view')
        logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}")
    return response


def format_error_response(errors):
    """
    Flatten the error payload into a single message:
    - {"error": "message"} -> "message"
    - {"detail": "message"} -> "message"
    - {"field": ["error1", "error2"]} -> "field: error1, error2"
    - ["error1", "error2"] -> "error1, error2"
    Keys other than error/detail are kept under data.
    """
    message = ""
    data = None

    if isinstance(errors, dict):
        if 'error' in errors or 'detail' in errors:
            message = str(errors.get('error') or errors.get('detail'))
            extra = {k: v for k, v in errors.items() if k not in ('error', 'detail')}
            data = extra or None
        else:
            message = "; ".join(
                f"{field}: {format_field_errors(field_errors)}"
                for field, field_errors in errors.items()
            )
    elif isinstance(errors, list):
        message = ", ".join(str(e) for e in errors)
    else:
        message = str(errors)

    return {
        "status": "error",
        "message": message,
        "data": data
    }


def format_field_errors(errors):
    if isinstance(errors, list):
        return ", ".join(
            format_field_errors(e) if isinstance(e, (dict, list)) else str(e)
            for e in errors
        )
    if isinstance(errors, dict):
        return "; ".join(f"{key}: {format_field_errors(value)}" for key, value in errors.items())
    return str(errors)


class StandardizedJSONRenderer(JSONRenderer):
    """
    JSON renderer that wraps every response in the standard envelope.
    Responses already in the envelope are rendered untouched.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = renderer_context.get('response') if renderer_context else None
        # 204 No Content has no body
        if response is not None and response.status_code == 204:
            return b''
        if response is not None and not self.is_already_formatted(data):
            if response.status_code >= 400:
                data = format_error_response(data)
            else:
                data = self.format_success_response(data)
        return super().render(data, accepted_media_type, renderer_context)

    def is_already_formatted(self, data):
        return isinstance(data, dict) and {'status', 'message', 'data'} <= set(data)

    def format_success_response(self, data):
        """
        {'message': 'Saved', 'pages_with_order': [...]} becomes
        {'status': 'success', 'message': 'Saved', 'data': {'pages_with_order': [...]}}
        """
        message = ""
        if isinstance(data, dict) and ('message' in data or 'detail' in data):
            data = dict(data)
            message = str(data.pop('message', None) or data.pop('detail', None) or "")
            data.pop('detail', None)
        if data is None or (isinstance(data, dict) and not data):
            data = None

        return {
            "status": "success",
            "message": message,
            "data": data
        }
