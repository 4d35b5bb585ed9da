from rest_framework import viewsets, filters, mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clientes.models import Cliente
from clientes.serializers import ClienteSerializer, AbonoSerializer, AbonoCrearSerializer
from clientes.services import CuentaCorrienteService, obtener_cliente
from core.exceptions import DependenciasExistentesError
from core.permissions import TieneEmpresa, TienePermiso
from core.viewsets import EmpresaScopedMixin
from distribucion.choices import EstadoEntidades


class ClienteViewSet(EmpresaScopedMixin, viewsets.ModelViewSet):
    """
    API para gestionar clientes:
    - Listar, crear, actualizar, dar de baja
    - Buscar clientes por nombre o dirección
    - Listar clientes con deuda
    """
    queryset = Cliente.objects.all().order_by('nombre')
    serializer_class = ClienteSerializer

    filter_backends = [filters.SearchFilter]
    search_fields = ['nombre', 'direccion', 'telefono']

    def perform_create(self, serializer):
        serializer.save(empresa_id=self.empresa_id)

    @action(detail=False, methods=['get'], url_path='con-deuda')
    def con_deuda(self, request):
        clientes = self.filter_queryset(self.get_queryset()).filter(deuda__gt=0).order_by('-deuda')
        page = self.paginate_queryset(clientes)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(clientes, many=True).data)

    def destroy(self, request, *args, **kwargs):
        instancia = self.get_object()
        if instancia.ventas.exists() or instancia.abonos.exists():
            raise DependenciasExistentesError(
                'No se puede eliminar el cliente: tiene ventas o abonos registrados.'
            )
        instancia.estado = EstadoEntidades.DE_BAJA
        instancia.save(update_fields=['estado', 'fecha_modificacion'])

        return Response(
            {'message': 'Cliente desactivado correctamente.'},
            status=status.HTTP_200_OK
        )


class AbonoViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, mixins.DestroyModelMixin,
                   viewsets.GenericViewSet):
    """
    - GET    /api/clientes/{cliente_pk}/abonos/
    - POST   /api/clientes/{cliente_pk}/abonos/
    - DELETE /api/clientes/{cliente_pk}/abonos/{id}/
    """
    serializer_class = AbonoSerializer
    permission_classes = [IsAuthenticated, TieneEmpresa]

    def get_permissions(self):
        if self.action in ('create', 'destroy'):
            return [IsAuthenticated(), TieneEmpresa(), TienePermiso.para('registrar_abonos')()]
        return super().get_permissions()

    @property
    def empresa_id(self):
        return self.request.user.empresa_id

    def get_queryset(self):
        return CuentaCorrienteService().listar_abonos(self.empresa_id, self.kwargs['cliente_pk'])

    def create(self, request, *args, **kwargs):
        serializer = AbonoCrearSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        abono = CuentaCorrienteService().registrar_abono(
            self.empresa_id,
            self.kwargs['cliente_pk'],
            serializer.validated_data['monto'],
            nota=serializer.validated_data['nota'],
            usuario_id=request.user.pk,
        )
        cliente = obtener_cliente(self.empresa_id, abono.cliente_id)
        return Response({
            'success': True,
            'message': 'Abono registrado exitosamente',
            'data': AbonoSerializer(abono).data,
            'deuda_actual': cliente.deuda,
        }, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        abono = self.get_object()
        CuentaCorrienteService().eliminar_abono(self.empresa_id, abono.abono_id)
        return Response({
            'success': True,
            'message': 'Abono eliminado exitosamente'
        }, status=status.HTTP_200_OK)
