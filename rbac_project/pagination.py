"""
Pagination for function-based list views.

List endpoints return plain lists; auto_paginate slices them into pages and
wraps the page in the standard envelope:
{
    "status": "success",
    "message": "",
    "data": {
        "count": 42, "page": 2, "pages": 3, "page_size": 20,
        "next": "...", "previous": "...",
        "results": [...]
    }
}
"""
from functools import wraps

from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """
    Query Parameters:
    - page: Page number (default: 1)
    - page_size, or its alias limit: Items per page (default: 20, max: 100)
    """
    page_size = 20
    page_size_query_param = 'page_size'
    page_size_aliases = ('limit',)
    max_page_size = 100

    def get_page_size(self, request):
        for param in (self.page_size_query_param,) + self.page_size_aliases:
            raw = request.query_params.get(param)
            if not raw:
                continue
            try:
                size = int(raw)
            except ValueError:
                continue
            if size > 0:
                return min(size, self.max_page_size)
        return self.page_size

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        return Response({
            'status': 'success',
            'message': '',
            'data': {
                'count': paginator.count,
                'page': self.page.number,
                'pages': paginator.num_pages,
                'page_size': paginator.per_page,
                'next': self.get_next_link(),
                'previous': self.get_previous_link(),
                'results': data,
            }
        })


def paginate_list(request, items):
    """Return the enveloped page of items selected by the request's query params."""
    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(items, request)
    return paginator.get_paginated_response(page)


def auto_paginate(view_func):
    """
    Paginate successful GET responses whose data is a list.
    Errors, detail objects and other methods pass through unchanged.

    Goes below @api_view (and any access check):
        @api_view(['GET', 'POST'])
        @require_page_access('/pages')
        @auto_paginate
        def page_list(request):
            ...
            return Response(serializer.data)
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        response = view_func(request, *args, **kwargs)
        if request.method != 'GET' or not isinstance(response, Response):
            return response
        if response.status_code != status.HTTP_200_OK or not isinstance(response.data, list):
            return response
        return paginate_list(request, response.data)

    return wrapper
