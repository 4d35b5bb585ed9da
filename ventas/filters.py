import django_filters

from ventas.models import Venta


class VentaFilter(django_filters.FilterSet):
    """Filtros para el listado de ventas"""

    cliente = django_filters.UUIDFilter(field_name='cliente_id')
    estado_entrega = django_filters.NumberFilter(field_name='estado_entrega')
    metodo_pago = django_filters.NumberFilter(field_name='metodo_pago')
    usuario_asignado = django_filters.CharFilter(field_name='usuario_asignado_id')
    fecha_desde = django_filters.DateFilter(field_name='fecha', lookup_expr='date__gte')
    fecha_hasta = django_filters.DateFilter(field_name='fecha', lookup_expr='date__lte')

    class Meta:
        model = Venta
        fields = [
            'cliente',
            'estado_entrega',
            'metodo_pago',
            'usuario_asignado',
        ]
