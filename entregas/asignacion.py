"""
Asignación de ventas a repartidores.

La asignación automática delega la elección en una estrategia; la estrategia
por defecto toma el primer repartidor activo distinto del excluido, en el
orden en que los devuelve el directorio de usuarios.
"""
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from accounts.services import listar_repartidores_activos, obtener_usuario
from ventas.services import obtener_venta

logger = logging.getLogger(__name__)


class EstrategiaAsignacion:
    """Elige un repartidor entre los candidatos, o None si no hay."""

    def elegir(self, candidatos, excluir_usuario_id=None):
        raise NotImplementedError


class PrimerRepartidorDisponible(EstrategiaAsignacion):

    def elegir(self, candidatos, excluir_usuario_id=None):
        for usuario in candidatos:
            if usuario.pk != excluir_usuario_id:
                return usuario
        return None


class AsignacionService:

    def __init__(self, estrategia: Optional[EstrategiaAsignacion] = None):
        self.estrategia = estrategia or PrimerRepartidorDisponible()

    @transaction.atomic
    def asignar_venta(self, empresa_id, venta_id, usuario_id, ahora=None):
        """
        Asigna la venta al usuario indicado, sin verificar si puede repartir.
        Repetir la asignación deja la venta igual.
        """
        venta = obtener_venta(empresa_id, venta_id, bloquear=True)
        usuario = obtener_usuario(empresa_id, usuario_id)
        venta.usuario_asignado = usuario
        venta.fecha_asignacion = ahora or timezone.now()
        venta.save(update_fields=['usuario_asignado', 'fecha_asignacion'])
        logger.info("Venta %s asignada a %s", venta.venta_id, usuario.username)
        return venta

    @transaction.atomic
    def asignar_automaticamente(self, empresa_id, venta_id, excluir_usuario_id=None, ahora=None):
        """Asigna la venta según la estrategia; devuelve el usuario o None."""
        venta = obtener_venta(empresa_id, venta_id, bloquear=True)
        candidatos = listar_repartidores_activos(empresa_id)
        elegido = self.estrategia.elegir(candidatos, excluir_usuario_id)
        if elegido is None:
            logger.warning("No hay repartidores disponibles para la venta %s", venta.venta_id)
            return None

        venta.usuario_asignado = elegido
        venta.fecha_asignacion = ahora or timezone.now()
        venta.save(update_fields=['usuario_asignado', 'fecha_asignacion'])
        logger.info("Venta %s asignada automáticamente a %s", venta.venta_id, elegido.username)
        return elegido
