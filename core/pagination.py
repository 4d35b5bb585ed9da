from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """
    Paginación de los listados de la API.
    Uso: ?page=2&page_size=50
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data):
        pagina = self.page
        return Response({
            'count': pagina.paginator.count,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'total_pages': pagina.paginator.num_pages,
            'current_page': pagina.number,
            'page_size': self.get_page_size(self.request),
            'results': data,
        })
