from __future__ import annotations

from rest_framework.pagination import PageNumberPagination

from modules.core.responses import envelope


class StandardResultsSetPagination(PageNumberPagination):
    """Page-number pagination rendered inside the API envelope."""

    page_size_query_param = "page_size"
    max_page_size = 100

    def get_paginated_response(self, data):
        return envelope(
            {
                "count": self.page.paginator.count,
                "next": self.get_next_link(),
                "previous": self.get_previous_link(),
                "results": data,
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "data": super().get_paginated_response_schema(schema),
            },
        }
