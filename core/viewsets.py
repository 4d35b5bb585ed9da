from rest_framework.permissions import IsAuthenticated

from .pagination import StandardResultsSetPagination
from .permissions import TieneEmpresa


class EmpresaScopedMixin:
    """
    Restringe los querysets a la empresa del usuario autenticado.

    La empresa se resuelve una vez por request y se pasa explícitamente
    a los servicios (``self.empresa_id``).
    """
    permission_classes = [IsAuthenticated, TieneEmpresa]
    pagination_class = StandardResultsSetPagination
    empresa_field = 'empresa_id'

    @property
    def empresa_id(self):
        return self.request.user.empresa_id

    def get_queryset(self):
        queryset = super().get_queryset()
        return queryset.filter(**{self.empresa_field: self.empresa_id})
