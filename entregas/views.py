from django.utils import timezone
from rest_framework import viewsets, mixins, status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import TieneEmpresa, TienePermiso, tiene_permiso
from core.viewsets import EmpresaScopedMixin
from entregas.agenda import AgendaService
from entregas.models import ProductoAFavor, RecorridoProgramado
from entregas.serializers import (
    EntradaAgendaSerializer, ProductoAFavorSerializer, RecorridoProgramadoSerializer,
    RecorridoCrearSerializer, RecorridoActualizarSerializer
)
from entregas.services import EntregaService, RecorridoProgramadoService


class EntregaViewSet(viewsets.ViewSet):
    """
    Lista de trabajo del día del usuario autenticado.

    - GET /api/entregas/mis-entregas/
    - GET /api/entregas/mis-recorridos/
    """
    permission_classes = [IsAuthenticated, TieneEmpresa]

    @action(detail=False, methods=['get'], url_path='mis-entregas')
    def mis_entregas(self, request):
        entradas = AgendaService().entregas_del_dia(
            request.user.empresa_id, request.user, timezone.localdate()
        )
        return Response(EntradaAgendaSerializer(entradas, many=True).data)

    @action(detail=False, methods=['get'], url_path='mis-recorridos')
    def mis_recorridos(self, request):
        entradas = AgendaService().visitas_del_dia(
            request.user.empresa_id, request.user, timezone.localdate()
        )
        return Response(EntradaAgendaSerializer(entradas, many=True).data)


class RecorridoProgramadoViewSet(EmpresaScopedMixin, viewsets.ModelViewSet):
    """
    Recorridos semanales.

    Filtros: ?vendedor=<username>&dia_semana=<0..6>. Sin vendedor se listan
    los del usuario autenticado.
    """
    queryset = RecorridoProgramado.objects.select_related('cliente')
    serializer_class = RecorridoProgramadoSerializer
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action in ('create', 'partial_update', 'destroy'):
            return [IsAuthenticated(), TieneEmpresa(), TienePermiso.para('gestionar_recorridos')()]
        return super().get_permissions()

    def list(self, request, *args, **kwargs):
        vendedor_id = request.query_params.get('vendedor') or request.user.pk
        if vendedor_id != request.user.pk and not tiene_permiso(request.user, 'gestionar_recorridos'):
            vendedor_id = request.user.pk

        dia_semana = request.query_params.get('dia_semana')
        if dia_semana is not None:
            try:
                dia_semana = int(dia_semana)
            except ValueError:
                raise ValidationError({'dia_semana': 'Debe ser un número entre 0 y 6.'})

        recorridos = RecorridoProgramadoService().listar_por_vendedor(self.empresa_id, vendedor_id, dia_semana)
        page = self.paginate_queryset(recorridos)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(recorridos, many=True).data)

    def create(self, request, *args, **kwargs):
        serializer = RecorridoCrearSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        recorrido = RecorridoProgramadoService().crear(self.empresa_id, **serializer.validated_data)
        return Response(self.get_serializer(recorrido).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        recorrido = self.get_object()
        serializer = RecorridoActualizarSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        recorrido = RecorridoProgramadoService().actualizar(
            self.empresa_id, recorrido.recorrido_id, **serializer.validated_data
        )
        return Response(self.get_serializer(recorrido).data)

    def destroy(self, request, *args, **kwargs):
        recorrido = self.get_object()
        RecorridoProgramadoService().eliminar(self.empresa_id, recorrido.recorrido_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductoAFavorViewSet(EmpresaScopedMixin, mixins.ListModelMixin, mixins.RetrieveModelMixin,
                            viewsets.GenericViewSet):
    """
    Productos adeudados a clientes.

    Filtros: ?cliente=<id>&venta=<id>&pendientes=true
    """
    queryset = ProductoAFavor.objects.select_related('producto', 'cliente')
    serializer_class = ProductoAFavorSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        params = self.request.query_params
        if params.get('cliente'):
            queryset = queryset.filter(cliente_id=params['cliente'])
        if params.get('venta'):
            queryset = queryset.filter(venta_id=params['venta'])
        if params.get('pendientes', '').lower() in ('1', 'true'):
            queryset = queryset.filter(entregado=False)
        return queryset

    @action(detail=True, methods=['post'], url_path='marcar-entregado')
    def marcar_entregado(self, request, pk=None):
        credito = self.get_object()
        credito = EntregaService().marcar_producto_a_favor_entregado(
            self.empresa_id, credito.producto_a_favor_id, usuario_id=request.user.pk
        )
        return Response({
            'success': True,
            'message': 'Producto a favor marcado como entregado',
            'data': ProductoAFavorSerializer(credito).data
        }, status=status.HTTP_200_OK)
