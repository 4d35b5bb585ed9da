"""
Cuenta corriente de clientes.

La deuda se ajusta siempre leyendo la fila del cliente con
``select_for_update`` dentro de la transacción que la modifica, de modo que
dos ventas o abonos simultáneos del mismo cliente no pisen el saldo.
"""
import logging
from decimal import Decimal
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from clientes.models import Cliente, Abono
from core.exceptions import ClienteNotFoundError, MontoAbonoInvalidoError, RecursoNoEncontradoError
from core.utils import CERO, a_decimal, redondear

logger = logging.getLogger(__name__)


def obtener_cliente(empresa_id, cliente_id, bloquear=False):
    queryset = Cliente.objects.all()
    if bloquear:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(empresa_id=empresa_id, cliente_id=cliente_id)
    except (Cliente.DoesNotExist, ValueError, DjangoValidationError):
        raise ClienteNotFoundError(f'Cliente {cliente_id} no encontrado')


class CuentaCorrienteService:
    """
    Saldo deudor de los clientes y abonos que lo reducen.
    """

    @transaction.atomic
    def agregar_deuda(self, empresa_id, cliente_id, monto) -> Decimal:
        cliente = obtener_cliente(empresa_id, cliente_id, bloquear=True)
        monto = a_decimal(monto)
        cliente.deuda = redondear(a_decimal(cliente.deuda) + monto)
        if cliente.deuda < 0:
            cliente.deuda = CERO
        cliente.save(update_fields=['deuda', 'fecha_modificacion'])
        logger.info("Deuda del cliente %s incrementada en %s (saldo %s)", cliente_id, monto, cliente.deuda)
        return cliente.deuda

    @transaction.atomic
    def reducir_deuda(self, empresa_id, cliente_id, monto) -> Decimal:
        """Reduce la deuda; el saldo nunca queda negativo."""
        cliente = obtener_cliente(empresa_id, cliente_id, bloquear=True)
        monto = a_decimal(monto)
        nueva = redondear(a_decimal(cliente.deuda) - monto)
        cliente.deuda = nueva if nueva > 0 else CERO
        cliente.save(update_fields=['deuda', 'fecha_modificacion'])
        logger.info("Deuda del cliente %s reducida en %s (saldo %s)", cliente_id, monto, cliente.deuda)
        return cliente.deuda

    def validar_monto_abono(self, empresa_id, cliente_id, monto) -> bool:
        """True si 0 < monto <= deuda actual."""
        cliente = obtener_cliente(empresa_id, cliente_id)
        monto = a_decimal(monto)
        return CERO < monto <= a_decimal(cliente.deuda)

    @transaction.atomic
    def registrar_abono(self, empresa_id, cliente_id, monto, nota: str = '',
                        usuario_id: Optional[str] = None, fecha=None) -> Abono:
        # Bloquear antes de validar para que la validación vea el saldo vigente
        obtener_cliente(empresa_id, cliente_id, bloquear=True)
        monto = a_decimal(monto)
        if monto <= 0:
            raise MontoAbonoInvalidoError('El monto del abono debe ser mayor a cero')
        if not self.validar_monto_abono(empresa_id, cliente_id, monto):
            raise MontoAbonoInvalidoError()

        abono = Abono.objects.create(
            empresa_id=empresa_id,
            cliente_id=cliente_id,
            monto=redondear(monto),
            fecha=fecha or timezone.now(),
            nota=nota or '',
            usuario_id=usuario_id,
        )
        self.reducir_deuda(empresa_id, cliente_id, abono.monto)
        logger.info("Abono %s registrado para el cliente %s por %s", abono.abono_id, cliente_id, abono.monto)
        return abono

    @transaction.atomic
    def eliminar_abono(self, empresa_id, abono_id) -> None:
        """Elimina el abono y devuelve su monto a la deuda del cliente."""
        try:
            abono = Abono.objects.select_for_update().get(empresa_id=empresa_id, abono_id=abono_id)
        except Abono.DoesNotExist:
            raise RecursoNoEncontradoError(f'Abono {abono_id} no encontrado')

        cliente_id, monto = abono.cliente_id, abono.monto
        abono.delete()
        self.agregar_deuda(empresa_id, cliente_id, monto)
        logger.info("Abono %s eliminado; se restituyen %s al cliente %s", abono_id, monto, cliente_id)

    def listar_abonos(self, empresa_id, cliente_id):
        obtener_cliente(empresa_id, cliente_id)
        return Abono.objects.filter(empresa_id=empresa_id, cliente_id=cliente_id).select_related('usuario')
