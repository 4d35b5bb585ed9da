"""
Estado de entrega de las ventas y productos a favor.

Cada línea de venta pasa por: sin chequear -> entregada / no entregada.
Marcar una línea como no entregada deja registrado un producto a favor del
cliente; volver a marcarla como entregada lo elimina. Se admite a lo sumo un
producto a favor abierto por (venta, producto).
"""
import logging
from typing import Iterable, Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from accounts.services import obtener_usuario
from clientes.services import obtener_cliente
from core.exceptions import ItemVentaNotFoundError, RecursoNoEncontradoError, InvalidStateTransitionError
from distribucion.choices import EstadoEntrega
from entregas.models import ProductoAFavor, RecorridoProgramado
from ventas.services import obtener_venta

logger = logging.getLogger(__name__)


def calcular_estado_venta(items: Iterable) -> EstadoEntrega:
    """
    Estado de la venta según las líneas entregadas:
    ninguna -> NO_ENTREGADA, todas -> ENTREGADA, algunas -> PARCIAL.
    """
    entregas = [bool(item.entregado) for item in items]
    if not entregas or not any(entregas):
        return EstadoEntrega.NO_ENTREGADA
    if all(entregas):
        return EstadoEntrega.ENTREGADA
    return EstadoEntrega.PARCIAL


def _aplicar_estado(venta, estado, ahora):
    venta.estado_entrega = estado
    if estado == EstadoEntrega.ENTREGADA:
        venta.fecha_entrega = venta.fecha_entrega or ahora
    else:
        venta.fecha_entrega = None
    venta.save(update_fields=['estado_entrega', 'fecha_entrega'])


class EntregaService:

    def _abrir_producto_a_favor(self, venta, linea, motivo, nota, usuario_id, ahora):
        abierto = ProductoAFavor.objects.filter(venta=venta, producto_id=linea.producto_id, entregado=False)
        if abierto.exists():
            return None
        credito = ProductoAFavor.objects.create(
            empresa_id=venta.empresa_id,
            cliente_id=venta.cliente_id,
            producto_id=linea.producto_id,
            cantidad=linea.cantidad,
            fecha_registro=ahora,
            motivo=motivo,
            nota=nota,
            venta=venta,
            venta_producto=linea,
            usuario_registro_id=usuario_id,
        )
        logger.info(
            "Producto a favor %s registrado: %s x %s para el cliente %s (venta %s)",
            credito.producto_a_favor_id, linea.cantidad, linea.producto_id, venta.cliente_id, venta.venta_id,
        )
        return credito

    def _cerrar_producto_a_favor(self, venta, linea):
        eliminados, _ = ProductoAFavor.objects.filter(
            venta=venta, producto_id=linea.producto_id, entregado=False
        ).delete()
        if eliminados:
            logger.info(
                "Producto a favor de %s eliminado: la línea de la venta %s fue entregada",
                linea.producto_id, venta.venta_id,
            )

    @transaction.atomic
    def actualizar_estado_items(self, empresa_id, venta_id, items: list, usuario_id=None, ahora=None):
        """
        Registra el chequeo de entrega de un lote de líneas y recalcula la venta.

        Args:
            items: Lista de diccionarios con
                {'producto_id', 'entregado', 'motivo', 'nota'}.
        """
        ahora = ahora or timezone.now()
        venta = obtener_venta(empresa_id, venta_id, bloquear=True)
        lineas = {str(linea.producto_id): linea for linea in venta.items.select_for_update()}

        for item in items:
            linea = lineas.get(str(item['producto_id']))
            if linea is None:
                raise ItemVentaNotFoundError(
                    f"El producto {item['producto_id']} no forma parte de la venta {venta_id}"
                )

            entregado = bool(item['entregado'])
            motivo = (item.get('motivo') or '').strip()
            nota = item.get('nota') or ''
            if not entregado and not motivo:
                raise ValidationError({'motivo': 'Debe indicar el motivo de la no entrega.'})

            if not entregado and (linea.entregado or not linea.chequeado):
                self._abrir_producto_a_favor(venta, linea, motivo, nota, usuario_id, ahora)
            elif entregado and not linea.entregado:
                self._cerrar_producto_a_favor(venta, linea)

            linea.entregado = entregado
            linea.motivo = '' if entregado else motivo
            linea.nota = nota
            linea.usuario_chequeo_id = usuario_id
            linea.fecha_chequeo = ahora
            linea.save(update_fields=['entregado', 'motivo', 'nota', 'usuario_chequeo', 'fecha_chequeo'])

        _aplicar_estado(venta, calcular_estado_venta(lineas.values()), ahora)
        logger.info("Venta %s: estado de entrega %s", venta.venta_id, venta.get_estado_entrega_display())
        return venta

    @transaction.atomic
    def actualizar_estado_venta(self, empresa_id, venta_id, estado, ahora=None):
        """Fija el estado de entrega de la venta sin tocar sus líneas."""
        if estado not in EstadoEntrega.values:
            raise InvalidStateTransitionError(f'Estado de entrega inválido: {estado}')
        venta = obtener_venta(empresa_id, venta_id, bloquear=True)
        _aplicar_estado(venta, EstadoEntrega(estado), ahora or timezone.now())
        logger.info("Venta %s: estado de entrega fijado en %s", venta.venta_id, venta.get_estado_entrega_display())
        return venta

    @transaction.atomic
    def marcar_producto_a_favor_entregado(self, empresa_id, producto_a_favor_id, usuario_id=None, ahora=None):
        try:
            credito = ProductoAFavor.objects.select_for_update().get(
                empresa_id=empresa_id, producto_a_favor_id=producto_a_favor_id
            )
        except ProductoAFavor.DoesNotExist:
            raise RecursoNoEncontradoError(f'Producto a favor {producto_a_favor_id} no encontrado')

        credito.entregado = True
        credito.fecha_entrega = ahora or timezone.now()
        credito.usuario_entrega_id = usuario_id
        credito.save(update_fields=['entregado', 'fecha_entrega', 'usuario_entrega'])
        logger.info("Producto a favor %s entregado al cliente %s", credito.producto_a_favor_id, credito.cliente_id)
        return credito

    def productos_a_favor_cliente(self, empresa_id, cliente_id, solo_pendientes: bool = False):
        queryset = ProductoAFavor.objects.filter(empresa_id=empresa_id, cliente_id=cliente_id)
        if solo_pendientes:
            queryset = queryset.filter(entregado=False)
        return queryset.select_related('producto', 'cliente')


class RecorridoProgramadoService:
    """
    Alta, baja y consulta de recorridos semanales de los vendedores.
    """

    CAMPOS_EDITABLES = ('cliente_id', 'dia_semana', 'orden', 'activo')

    def _obtener(self, empresa_id, recorrido_id):
        try:
            return RecorridoProgramado.objects.get(empresa_id=empresa_id, recorrido_id=recorrido_id)
        except RecorridoProgramado.DoesNotExist:
            raise RecursoNoEncontradoError(f'Recorrido {recorrido_id} no encontrado')

    def _validar_dia(self, dia_semana):
        if dia_semana not in range(0, 7):
            raise ValidationError({'dia_semana': 'El día de la semana debe estar entre 0 (domingo) y 6 (sábado).'})

    def listar_por_vendedor(self, empresa_id, vendedor_id, dia_semana: Optional[int] = None):
        queryset = RecorridoProgramado.objects.filter(empresa_id=empresa_id, vendedor_id=vendedor_id)
        if dia_semana is not None:
            self._validar_dia(dia_semana)
            queryset = queryset.filter(dia_semana=dia_semana)
        return queryset.select_related('cliente').order_by('dia_semana', 'orden')

    def crear(self, empresa_id, vendedor_id, cliente_id, dia_semana: int, orden: int = 0, activo: bool = True):
        self._validar_dia(dia_semana)
        vendedor = obtener_usuario(empresa_id, vendedor_id)
        cliente = obtener_cliente(empresa_id, cliente_id)
        recorrido = RecorridoProgramado.objects.create(
            empresa_id=empresa_id,
            vendedor=vendedor,
            cliente=cliente,
            dia_semana=dia_semana,
            orden=orden,
            activo=activo,
        )
        logger.info("Recorrido %s creado para %s", recorrido.recorrido_id, vendedor_id)
        return recorrido

    def actualizar(self, empresa_id, recorrido_id, **cambios):
        recorrido = self._obtener(empresa_id, recorrido_id)
        if cambios.get('dia_semana') is not None:
            self._validar_dia(cambios['dia_semana'])
        if cambios.get('cliente_id') is not None:
            cambios['cliente_id'] = obtener_cliente(empresa_id, cambios['cliente_id']).cliente_id
        for campo in self.CAMPOS_EDITABLES:
            if cambios.get(campo) is not None:
                setattr(recorrido, campo, cambios[campo])
        recorrido.save()
        return recorrido

    def eliminar(self, empresa_id, recorrido_id):
        self._obtener(empresa_id, recorrido_id).delete()
        logger.info("Recorrido %s eliminado", recorrido_id)
