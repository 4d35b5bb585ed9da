"""
Vistas API REST para el módulo de Productos
"""
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import SearchFilter, OrderingFilter

from core.viewsets import EmpresaScopedMixin
from distribucion.choices import EstadoEntidades
from productos.models import Producto
from productos.serializers import ProductoSerializer, ProductoListSerializer
from productos.services import normalizar_descuento


class ProductoViewSet(EmpresaScopedMixin, viewsets.ModelViewSet):
    """
    ViewSet para Productos

    Endpoints:
    - GET /api/productos/ - Listar productos
    - POST /api/productos/ - Crear producto (con packs)
    - GET /api/productos/{id}/ - Obtener detalle (normaliza el descuento vencido)
    - PUT/PATCH /api/productos/{id}/ - Actualizar producto
    - DELETE /api/productos/{id}/ - Soft delete (cambia estado a DE_BAJA)

    Filtros:
    - ?estado=1 (1=ACTIVO, 0=DE_BAJA)
    - ?search=yerba (busca en nombre y codigo)
    """
    queryset = Producto.objects.prefetch_related('precios_cantidad')
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ['estado', 'descuento_indefinido']
    search_fields = ['nombre', 'codigo']
    ordering_fields = ['nombre', 'codigo', 'precio']
    ordering = ['nombre']

    def get_serializer_class(self):
        if self.action == 'list':
            return ProductoListSerializer
        return ProductoSerializer

    def perform_create(self, serializer):
        serializer.save(empresa_id=self.empresa_id)

    def retrieve(self, request, *args, **kwargs):
        """Obtener detalle de un producto"""
        instance = self.get_object()
        normalizar_descuento(instance, timezone.now())
        serializer = self.get_serializer(instance)
        return Response({
            'success': True,
            'data': serializer.data
        }, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        """
        Soft delete: cambia el estado a DE_BAJA en lugar de eliminar
        """
        instance = self.get_object()
        instance.estado = EstadoEntidades.DE_BAJA
        instance.save(update_fields=['estado', 'fecha_modificacion'])

        return Response({
            'success': True,
            'message': 'Producto desactivado exitosamente',
            'data': {
                'producto_id': str(instance.producto_id),
                'nombre': instance.nombre,
                'estado': instance.estado
            }
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='activos')
    def activos(self, request):
        """Listar solo productos activos"""
        productos = self.get_queryset().filter(estado=EstadoEntidades.ACTIVO)
        serializer = ProductoListSerializer(productos, many=True)
        return Response({
            'success': True,
            'count': productos.count(),
            'data': serializer.data
        }, status=status.HTTP_200_OK)
