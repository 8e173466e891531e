"""
List helpers shared by the Wallet views.
"""

from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response

TRUTHY = ('1', 'true', 'yes', 'on')


class SkipLimitPagination(LimitOffsetPagination):
    """
    ``?skip=&limit=`` pagination answering ``{"total": n, "data": [...]}``.

    A missing, zero or negative ``limit`` returns every row after ``skip``.
    """

    offset_query_param = 'skip'
    limit_query_param = 'limit'
    default_limit = None

    def paginate_queryset(self, queryset, request, view=None):
        self.request = request
        self.count = self.get_count(queryset)
        self.limit = self.get_limit(request)
        self.offset = self.get_offset(request)
        if self.limit is None:
            return list(queryset[self.offset:])
        return list(queryset[self.offset:self.offset + self.limit])

    def get_paginated_response(self, data):
        return Response({'total': self.count, 'data': data})


def include_deleted(request) -> bool:
    """Read the ``includeDeleted`` query flag."""
    return request.query_params.get('includeDeleted', '').strip().lower() in TRUTHY
