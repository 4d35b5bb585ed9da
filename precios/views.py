from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from clientes.services import obtener_cliente
from core.permissions import TieneEmpresa
from core.utils import CERO, a_decimal, redondear
from precios.engine import calcular_precio
from precios.models import PrecioEspecial
from precios.serializers import PrecioEspecialSerializer, CalcularPrecioSerializer
from precios.services import obtener_precio_especial
from productos.services import evaluar_descuento, obtener_producto


class PrecioEspecialViewSet(viewsets.ModelViewSet):
    """
    - GET    /api/clientes/{cliente_pk}/precios-especiales/
    - POST   /api/clientes/{cliente_pk}/precios-especiales/
    - GET    /api/clientes/{cliente_pk}/precios-especiales/{id}/
    - PUT    /api/clientes/{cliente_pk}/precios-especiales/{id}/
    - DELETE /api/clientes/{cliente_pk}/precios-especiales/{id}/
    """
    serializer_class = PrecioEspecialSerializer
    permission_classes = [IsAuthenticated, TieneEmpresa]

    @property
    def empresa_id(self):
        return self.request.user.empresa_id

    def get_queryset(self):
        # Precios sólo del cliente de la URL
        cliente = obtener_cliente(self.empresa_id, self.kwargs['cliente_pk'])
        return PrecioEspecial.objects.filter(
            empresa_id=self.empresa_id, cliente=cliente
        ).select_related('producto')

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['empresa_id'] = self.empresa_id
        context['cliente_id'] = self.kwargs.get('cliente_pk')
        return context

    def perform_create(self, serializer):
        cliente = obtener_cliente(self.empresa_id, self.kwargs['cliente_pk'])
        serializer.save(empresa_id=self.empresa_id, cliente=cliente)


class CalcularPrecioAPIView(APIView):
    """
    POST /api/precios/calcular/

    Precio óptimo por packs de un producto para una cantidad, con el precio
    especial del cliente y el descuento vigente del producto. El descuento
    global del cliente se informa aparte en ``total_con_descuento_global``.
    """
    permission_classes = [IsAuthenticated, TieneEmpresa]

    def post(self, request, *args, **kwargs):
        serializer = CalcularPrecioSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        datos = serializer.validated_data
        empresa_id = request.user.empresa_id

        producto = obtener_producto(empresa_id, datos['producto_id'])
        precio_especial = None
        porcentaje_global = CERO
        if datos['cliente_id']:
            cliente = obtener_cliente(empresa_id, datos['cliente_id'])
            precio_especial = obtener_precio_especial(empresa_id, cliente.cliente_id, producto.producto_id)
            porcentaje_global = a_decimal(cliente.descuento_global)

        descuento = evaluar_descuento(producto, timezone.now())
        resultado = calcular_precio(
            producto,
            datos['cantidad'],
            precio_especial=precio_especial,
            descuento_global=porcentaje_global,
            descuento_producto=descuento.porcentaje if descuento.activo else None,
        )

        return Response({
            'producto_id': str(producto.producto_id),
            'nombre': producto.nombre,
            'cantidad': datos['cantidad'],
            'precio_unitario': producto.precio,
            'precio_especial': precio_especial,
            'precio_optimizado': redondear(resultado.total),
            'descuento_producto': descuento.porcentaje,
            'total': resultado.precio_con_descuento,
            'porcentaje_descuento_global': porcentaje_global,
            'descuento_global': resultado.descuento_global,
            'total_con_descuento_global': resultado.precio_final,
            'desglose': resultado.desglose_dict(),
        }, status=status.HTTP_200_OK)
