import logging

from django.db import transaction
from django.db.models import Prefetch
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from clientes.services import obtener_cliente
from core.permissions import TieneEmpresa, TienePermiso
from core.viewsets import EmpresaScopedMixin
from distribucion.choices import MetodoPago, TipoVendedor
from entregas.asignacion import AsignacionService
from entregas.services import EntregaService
from ventas.filters import VentaFilter
from ventas.models import Venta, VentaProducto
from ventas.serializers import (
    VentaReadSerializer, VentaListSerializer, VentaWriteSerializer, SimularVentaSerializer,
    EstadoItemSerializer, EstadoVentaSerializer, AsignarVentaSerializer, AsignarAutomaticamenteSerializer
)
from ventas.services import VentaService

logger = logging.getLogger(__name__)


class VentaViewSet(EmpresaScopedMixin, viewsets.ModelViewSet):
    """
    Ventas de la empresa del usuario.

    Además del CRUD:
    - POST /api/ventas/simular/                  -> cotizar sin guardar
    - PUT  /api/ventas/{id}/estado-entrega/      -> chequeo de entrega por línea
    - PUT  /api/ventas/{id}/estado/              -> estado de entrega de la venta
    - POST /api/ventas/asignar/                  -> asignación manual
    - POST /api/ventas/asignar-automaticamente/  -> asignación automática
    - GET  /api/ventas/cuenta-corriente/?cliente= -> ventas a cuenta corriente
    """
    queryset = Venta.objects.select_related(
        'cliente', 'usuario_creador', 'usuario_asignado'
    ).prefetch_related(
        Prefetch('items', queryset=VentaProducto.objects.select_related('producto')),
        'pagos',
    )
    filter_backends = [DjangoFilterBackend]
    filterset_class = VentaFilter
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action == 'destroy':
            return [IsAuthenticated(), TieneEmpresa(), TienePermiso.para('eliminar_ventas')()]
        if self.action in ('asignar', 'asignar_automaticamente'):
            return [IsAuthenticated(), TieneEmpresa(), TienePermiso.para('asignar_ventas')()]
        return super().get_permissions()

    def get_serializer_class(self):
        if self.action in ['create', 'update']:
            return VentaWriteSerializer
        if self.action == 'list':
            return VentaListSerializer
        return VentaReadSerializer

    def _asignar_al_crear(self, venta):
        """
        Un vendedor sólo vende: la venta se asigna automáticamente a otro
        repartidor. Un repartidor-vendedor o un administrador se la queda.
        """
        usuario = self.request.user
        asignacion = AsignacionService()
        if usuario.es_administrador or usuario.tipo_vendedor == TipoVendedor.REPARTIDOR_VENDEDOR:
            asignacion.asignar_venta(self.empresa_id, venta.venta_id, usuario.pk)
            return usuario
        if usuario.tipo_vendedor == TipoVendedor.VENDEDOR:
            return asignacion.asignar_automaticamente(self.empresa_id, venta.venta_id, excluir_usuario_id=usuario.pk)
        return None

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        datos = serializer.validated_data

        with transaction.atomic():
            venta = VentaService().crear_venta(
                empresa_id=self.empresa_id,
                cliente_id=datos['cliente_id'],
                items=datos['items'],
                metodo_pago=datos['metodo_pago'],
                pagos=datos.get('pagos'),
                usuario_creador_id=request.user.pk,
            )
            asignado = self._asignar_al_crear(venta)

        return Response({
            'venta_id': venta.venta_id,
            'message': 'Venta creada exitosamente',
            'asignada': asignado is not None,
            'usuario_asignado_id': asignado.pk if asignado else None,
            'usuario_asignado_nombre': asignado.nombre_completo if asignado else None,
        }, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        venta = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        datos = serializer.validated_data

        venta = VentaService().actualizar_venta(
            empresa_id=self.empresa_id,
            venta_id=venta.venta_id,
            items=datos['items'],
            metodo_pago=datos['metodo_pago'],
            pagos=datos.get('pagos'),
            cliente_id=datos['cliente_id'],
        )
        venta = self.get_queryset().get(pk=venta.pk)
        return Response({
            'success': True,
            'message': 'Venta actualizada exitosamente',
            'data': VentaReadSerializer(venta).data
        })

    def destroy(self, request, *args, **kwargs):
        venta = self.get_object()
        VentaService().eliminar_venta(self.empresa_id, venta.venta_id)
        return Response({
            'success': True,
            'message': 'Venta eliminada exitosamente'
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='simular')
    def simular(self, request):
        serializer = SimularVentaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        calculada = VentaService().simular_venta(
            self.empresa_id, serializer.validated_data['cliente_id'], serializer.validated_data['items']
        )
        return Response({
            'cliente_id': str(calculada.cliente.cliente_id),
            'subtotal': calculada.subtotal,
            'porcentaje_descuento_global': calculada.porcentaje_descuento_global,
            'descuento_global': calculada.descuento_global,
            'total': calculada.total,
            'items': [
                {
                    'producto_id': str(linea.producto.producto_id),
                    'nombre': linea.producto.nombre,
                    'cantidad': linea.cantidad,
                    'precio_optimizado': linea.precio_optimizado,
                    'descuento_producto': linea.descuento_producto,
                    'precio_final': linea.precio_final,
                    'desglose': linea.desglose,
                }
                for linea in calculada.lineas
            ],
        }, status=status.HTTP_200_OK)

    @action(detail=True, methods=['put'], url_path='estado-entrega')
    def estado_entrega(self, request, pk=None):
        venta = self.get_object()
        serializer = EstadoItemSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)
        if not serializer.validated_data:
            raise ValidationError({'detail': 'La lista de items no puede estar vacía.'})

        venta = EntregaService().actualizar_estado_items(
            self.empresa_id, venta.venta_id, serializer.validated_data, usuario_id=request.user.pk
        )
        return Response({
            'success': True,
            'message': 'Estado de entrega actualizado exitosamente.',
            'estado_entrega': venta.estado_entrega
        }, status=status.HTTP_200_OK)

    @action(detail=True, methods=['put'], url_path='estado')
    def estado(self, request, pk=None):
        venta = self.get_object()
        serializer = EstadoVentaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        EntregaService().actualizar_estado_venta(
            self.empresa_id, venta.venta_id, serializer.validated_data['estado']
        )
        return Response({
            'success': True,
            'message': 'Estado de entrega actualizado exitosamente'
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='asignar')
    def asignar(self, request):
        serializer = AsignarVentaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        AsignacionService().asignar_venta(
            self.empresa_id, serializer.validated_data['venta_id'], serializer.validated_data['usuario_id']
        )
        return Response({
            'success': True,
            'message': 'Venta asignada exitosamente.'
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], url_path='asignar-automaticamente')
    def asignar_automaticamente(self, request):
        serializer = AsignarAutomaticamenteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        elegido = AsignacionService().asignar_automaticamente(
            self.empresa_id,
            serializer.validated_data['venta_id'],
            excluir_usuario_id=serializer.validated_data['excluir_usuario_id'],
        )
        if elegido is None:
            return Response({
                'asignada': False,
                'message': 'No hay repartidores disponibles para asignar la venta.',
                'usuario_asignado_id': None,
                'usuario_asignado_nombre': None,
            }, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            'asignada': True,
            'message': 'Venta asignada automáticamente.',
            'usuario_asignado_id': elegido.pk,
            'usuario_asignado_nombre': elegido.nombre_completo,
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='cuenta-corriente')
    def cuenta_corriente(self, request):
        cliente_id = request.query_params.get('cliente')
        if not cliente_id:
            raise ValidationError({'cliente': 'Debe indicar el cliente.'})
        cliente = obtener_cliente(self.empresa_id, cliente_id)

        ventas = self.get_queryset().filter(
            cliente=cliente, pagos__metodo=MetodoPago.CUENTA_CORRIENTE
        ).distinct()
        page = self.paginate_queryset(ventas)
        if page is not None:
            return self.get_paginated_response(VentaListSerializer(page, many=True).data)
        return Response(VentaListSerializer(ventas, many=True).data)
