import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone

from core.exceptions import ProductoNotFoundError
from core.utils import CERO
from productos.models import Producto

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EstadoDescuento:
    """Descuento vigente de un producto en un instante dado."""
    porcentaje: Decimal
    activo: bool
    # True cuando el descuento venció y debe persistirse en cero
    expirado: bool


def obtener_producto(empresa_id, producto_id):
    try:
        return (
            Producto.objects
            .prefetch_related('precios_cantidad')
            .get(empresa_id=empresa_id, producto_id=producto_id)
        )
    except (Producto.DoesNotExist, ValueError, DjangoValidationError):
        raise ProductoNotFoundError(f'Producto {producto_id} no encontrado')


def evaluar_descuento(producto, ahora):
    """
    Evalúa el descuento del producto sin modificarlo.

    Activo: descuento > 0 y (indefinido o con vencimiento futuro).
    Expirado: descuento > 0, no indefinido y vencimiento ya pasado.
    """
    descuento = producto.descuento or CERO
    if descuento <= 0:
        return EstadoDescuento(porcentaje=CERO, activo=False, expirado=False)

    if producto.descuento_indefinido:
        return EstadoDescuento(porcentaje=descuento, activo=True, expirado=False)

    vencimiento = producto.fecha_expiracion_descuento
    if vencimiento is None:
        return EstadoDescuento(porcentaje=CERO, activo=False, expirado=False)
    if vencimiento > ahora:
        return EstadoDescuento(porcentaje=descuento, activo=True, expirado=False)
    return EstadoDescuento(porcentaje=CERO, activo=False, expirado=True)


def expirar_descuento(producto):
    producto.descuento = CERO
    producto.fecha_expiracion_descuento = None
    producto.save(update_fields=['descuento', 'fecha_expiracion_descuento', 'fecha_modificacion'])
    logger.info("Descuento vencido del producto %s puesto en cero", producto.producto_id)


def normalizar_descuento(producto, ahora=None):
    """Evalúa el descuento y persiste el vencimiento si corresponde."""
    estado = evaluar_descuento(producto, ahora or timezone.now())
    if estado.expirado:
        expirar_descuento(producto)
    return estado
