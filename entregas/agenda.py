"""
Lista de trabajo diaria de cada usuario de calle.

Las ventas asignadas son entregas reales; los recorridos programados del día
aparecen como visitas pendientes (venta_id = 0) sólo para los clientes que
no tienen ya una venta asignada.
"""
import dataclasses
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from django.db.models import Q
from django.utils import timezone

from distribucion.choices import DiaSemana, EstadoAgenda, EstadoEntrega, TipoVendedor
from entregas.models import RecorridoProgramado
from ventas.models import Venta


@dataclasses.dataclass
class EntradaAgenda:
    venta_id: int
    cliente_id: str
    cliente_nombre: str
    cliente_direccion: str
    latitud: Optional[Decimal]
    longitud: Optional[Decimal]
    estado: int
    fecha_asignacion: Optional[datetime]
    fecha_entrega: Optional[datetime]
    repartidor_id: Optional[str]
    orden: int = 0
    notas: str = ''


def _entrada_desde_venta(venta, usuario_id) -> EntradaAgenda:
    cliente = venta.cliente
    return EntradaAgenda(
        venta_id=venta.venta_id,
        cliente_id=str(cliente.cliente_id),
        cliente_nombre=cliente.nombre,
        cliente_direccion=cliente.direccion or '',
        latitud=cliente.latitud,
        longitud=cliente.longitud,
        estado=int(venta.estado_entrega),
        fecha_asignacion=venta.fecha_asignacion or venta.fecha,
        fecha_entrega=venta.fecha_entrega if venta.estado_entrega == EstadoEntrega.ENTREGADA else None,
        repartidor_id=usuario_id,
    )


def _entrada_desde_recorrido(recorrido, hoy) -> EntradaAgenda:
    cliente = recorrido.cliente
    return EntradaAgenda(
        venta_id=0,
        cliente_id=str(cliente.cliente_id),
        cliente_nombre=cliente.nombre,
        cliente_direccion=cliente.direccion or '',
        latitud=cliente.latitud,
        longitud=cliente.longitud,
        estado=int(EstadoAgenda.PENDIENTE),
        fecha_asignacion=timezone.make_aware(datetime.combine(hoy, datetime.min.time())),
        fecha_entrega=None,
        repartidor_id=recorrido.vendedor_id,
        orden=recorrido.orden,
    )


class AgendaService:

    def ventas_asignadas_del_dia(self, empresa_id, usuario, hoy: date):
        """
        Ventas asignadas al usuario para hoy, más las entregadas hoy aunque
        se hayan asignado antes.
        """
        return (
            Venta.objects
            .filter(empresa_id=empresa_id, usuario_asignado=usuario)
            .filter(
                Q(fecha_asignacion__date=hoy) |
                Q(fecha__date=hoy) |
                Q(estado_entrega=EstadoEntrega.ENTREGADA, fecha_entrega__date=hoy)
            )
            .select_related('cliente')
        )

    def recorridos_del_dia(self, empresa_id, usuario, hoy: date):
        return (
            RecorridoProgramado.objects
            .filter(
                empresa_id=empresa_id,
                vendedor=usuario,
                dia_semana=DiaSemana.desde_fecha(hoy),
                activo=True,
            )
            .select_related('cliente')
            .order_by('orden')
        )

    def entregas_del_dia(self, empresa_id, usuario, hoy: date) -> List[EntradaAgenda]:
        """
        Lista diaria según el tipo de usuario:

        - administrador o repartidor-vendedor: ventas asignadas y, a continuación,
          recorridos del día de clientes sin venta asignada.
        - vendedor: sólo recorridos del día.
        - repartidor: sólo ventas asignadas, ordenadas por cliente.
        - cualquier otro: lista vacía.
        """
        if usuario.es_administrador or usuario.tipo_vendedor == TipoVendedor.REPARTIDOR_VENDEDOR:
            entregas = [
                _entrada_desde_venta(v, usuario.pk)
                for v in self.ventas_asignadas_del_dia(empresa_id, usuario, hoy)
            ]
            con_venta = {e.cliente_id for e in entregas}
            visitas = [
                _entrada_desde_recorrido(r, hoy)
                for r in self.recorridos_del_dia(empresa_id, usuario, hoy)
                if str(r.cliente_id) not in con_venta
            ]
            return entregas + visitas

        if usuario.tipo_vendedor == TipoVendedor.VENDEDOR:
            return [_entrada_desde_recorrido(r, hoy) for r in self.recorridos_del_dia(empresa_id, usuario, hoy)]

        if usuario.tipo_vendedor == TipoVendedor.REPARTIDOR:
            entregas = [
                _entrada_desde_venta(v, usuario.pk)
                for v in self.ventas_asignadas_del_dia(empresa_id, usuario, hoy)
            ]
            return sorted(entregas, key=lambda e: e.cliente_nombre)

        return []

    def visitas_del_dia(self, empresa_id, usuario, hoy: date) -> List[EntradaAgenda]:
        """Ventas creadas hoy por un vendedor; vacío para administradores y repartidor-vendedores."""
        if usuario.es_administrador or usuario.tipo_vendedor == TipoVendedor.REPARTIDOR_VENDEDOR:
            return []
        ventas = (
            Venta.objects
            .filter(empresa_id=empresa_id, usuario_creador=usuario, fecha__date=hoy)
            .select_related('cliente')
        )
        visitas = [_entrada_desde_venta(v, usuario.pk) for v in ventas]
        return sorted(visitas, key=lambda e: e.cliente_nombre)
