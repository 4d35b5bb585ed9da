"""
Servicios para la lógica de negocio de Ventas.

Arma una venta a partir de las líneas pedidas: precio óptimo por packs,
descuento del producto, descuento global del cliente repartido entre las
líneas, pagos por método y ajuste de la cuenta corriente.
"""
import dataclasses
import logging
from decimal import Decimal, ROUND_DOWN
from typing import List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clientes.models import Cliente
from clientes.services import CuentaCorrienteService, obtener_cliente
from core.exceptions import VentaNotFoundError
from core.utils import CENTAVO, CERO, CIEN, a_decimal, redondear
from distribucion.choices import MetodoPago, EstadoEntrega
from entregas.models import ProductoAFavor
from precios.engine import calcular_precio
from precios.services import obtener_precio_especial
from productos.models import Producto
from productos.services import evaluar_descuento, normalizar_descuento, obtener_producto
from ventas.models import Venta, VentaProducto, VentaPago

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class LineaCalculada:
    """Representa una línea de venta con precios calculados."""
    producto: Producto
    cantidad: int
    precio_optimizado: Decimal
    descuento_producto: Decimal
    precio_con_descuento: Decimal
    precio_final: Decimal
    desglose: list = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class VentaCalculada:
    """Representa una venta completa con sus totales calculados."""
    cliente: Cliente
    lineas: List[LineaCalculada]
    subtotal: Decimal
    porcentaje_descuento_global: Decimal
    descuento_global: Decimal
    total: Decimal


def redistribuir_descuento(importes, monto_descuento):
    """
    Reparte ``monto_descuento`` entre ``importes`` en proporción a cada uno.

    Cada porción se trunca a centavos y los centavos que faltan se asignan de
    a uno a las líneas con mayor fracción descartada (a igual fracción, la de
    mayor importe y luego la primera). La suma de los importes resultantes es
    exactamente ``sum(importes) - monto_descuento`` y ninguna línea queda
    negativa ni por encima de su importe original.
    """
    subtotal = sum(importes, CERO)
    if subtotal <= 0 or monto_descuento <= 0:
        return list(importes)

    exactas = [importe * monto_descuento / subtotal for importe in importes]
    porciones = [p.quantize(CENTAVO, rounding=ROUND_DOWN) for p in exactas]
    faltan = int((monto_descuento - sum(porciones, CERO)) / CENTAVO)

    prioridad = sorted(
        range(len(importes)),
        key=lambda i: (-(exactas[i] - porciones[i]), -importes[i], i),
    )
    for i in prioridad[:faltan]:
        porciones[i] += CENTAVO
    return [importe - porcion for importe, porcion in zip(importes, porciones)]


def monto_cuenta_corriente(venta):
    return sum(
        (p.monto for p in venta.pagos.all() if p.metodo == MetodoPago.CUENTA_CORRIENTE),
        CERO,
    )


def obtener_venta(empresa_id, venta_id, bloquear=False):
    queryset = Venta.objects.all()
    if bloquear:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(empresa_id=empresa_id, venta_id=venta_id)
    except (Venta.DoesNotExist, ValueError):
        raise VentaNotFoundError(f'Venta {venta_id} no encontrada')


class VentaService:
    """
    Servicio para gestionar la lógica de negocio de ventas.
    """

    def __init__(self, cuenta_corriente: Optional[CuentaCorrienteService] = None):
        self.cuenta_corriente = cuenta_corriente or CuentaCorrienteService()

    # ------------------------------------------------------------------
    # Cálculo
    # ------------------------------------------------------------------

    def calcular_linea(self, empresa_id, cliente_id, producto_id, cantidad: int, ahora,
                       persistir_vencimientos: bool = True) -> LineaCalculada:
        """
        Calcula el precio de una línea antes del descuento global.
        """
        producto = obtener_producto(empresa_id, producto_id)
        if persistir_vencimientos:
            descuento = normalizar_descuento(producto, ahora)
        else:
            descuento = evaluar_descuento(producto, ahora)

        precio_especial = obtener_precio_especial(empresa_id, cliente_id, producto.producto_id)
        descuento_producto = descuento.porcentaje if descuento.activo else CERO
        resultado = calcular_precio(
            producto, cantidad, precio_especial=precio_especial, descuento_producto=descuento_producto
        )

        return LineaCalculada(
            producto=producto,
            cantidad=cantidad,
            precio_optimizado=redondear(resultado.total),
            descuento_producto=descuento_producto,
            precio_con_descuento=resultado.precio_con_descuento,
            precio_final=resultado.precio_con_descuento,
            desglose=resultado.desglose_dict(),
        )

    def calcular_venta(self, empresa_id, cliente_id, items: list, ahora=None,
                       persistir_vencimientos: bool = True) -> VentaCalculada:
        """
        Calcula precios, descuentos y totales de una venta completa.

        Args:
            items: Lista de diccionarios con {'producto_id': id, 'cantidad': cant}.
        """
        if not items:
            raise ValidationError({'items': 'La venta debe tener al menos un producto.'})

        vistos = set()
        for item in items:
            clave = str(item['producto_id'])
            if clave in vistos:
                raise ValidationError({'items': f'El producto {clave} está repetido en la venta.'})
            vistos.add(clave)
            if int(item['cantidad']) < 1:
                raise ValidationError({'items': 'La cantidad de cada producto debe ser mayor a cero.'})

        ahora = ahora or timezone.now()
        cliente = obtener_cliente(empresa_id, cliente_id)

        lineas = [
            self.calcular_linea(
                empresa_id, cliente.cliente_id, item['producto_id'], int(item['cantidad']), ahora,
                persistir_vencimientos=persistir_vencimientos,
            )
            for item in items
        ]
        subtotal = sum((linea.precio_con_descuento for linea in lineas), CERO)

        porcentaje = a_decimal(cliente.descuento_global)
        descuento_global = CERO
        if porcentaje > 0:
            descuento_global = min(redondear(subtotal * porcentaje / CIEN), subtotal)
            finales = redistribuir_descuento([l.precio_con_descuento for l in lineas], descuento_global)
            for linea, final in zip(lineas, finales):
                linea.precio_final = final

        total = subtotal - descuento_global
        if total <= 0:
            raise ValidationError({'total': 'El total de la venta debe ser mayor a cero.'})

        return VentaCalculada(
            cliente=cliente,
            lineas=lineas,
            subtotal=subtotal,
            porcentaje_descuento_global=porcentaje if porcentaje > 0 else CERO,
            descuento_global=descuento_global,
            total=total,
        )

    def simular_venta(self, empresa_id, cliente_id, items: list, ahora=None) -> VentaCalculada:
        """Cotiza una venta sin guardar nada."""
        return self.calcular_venta(empresa_id, cliente_id, items, ahora, persistir_vencimientos=False)

    # ------------------------------------------------------------------
    # Persistencia
    # ------------------------------------------------------------------

    def _guardar_lineas(self, venta, calculada: VentaCalculada):
        VentaProducto.objects.bulk_create([
            VentaProducto(
                venta=venta,
                producto=linea.producto,
                cantidad=linea.cantidad,
                precio_optimizado=linea.precio_optimizado,
                descuento_producto=linea.descuento_producto,
                precio_final_calculado=linea.precio_final,
                desglose=linea.desglose,
            )
            for linea in calculada.lineas
        ])

    def _guardar_pagos(self, venta, pagos, metodo_pago) -> Decimal:
        """Guarda los pagos y devuelve el monto imputado a cuenta corriente."""
        if not pagos:
            pagos = [{'metodo': metodo_pago, 'monto': venta.total}]

        registros = []
        for pago in pagos:
            monto = redondear(a_decimal(pago['monto']))
            if monto <= 0:
                raise ValidationError({'pagos': 'El monto de cada pago debe ser mayor a cero.'})
            registros.append(VentaPago(venta=venta, metodo=pago['metodo'], monto=monto))
        VentaPago.objects.bulk_create(registros)

        suma = sum((r.monto for r in registros), CERO)
        tolerancia = a_decimal(getattr(settings, 'VENTAS_TOLERANCIA_REDONDEO', '0.01'))
        if abs(suma - venta.total) > tolerancia:
            logger.warning(
                "Los pagos de la venta %s suman %s y el total es %s", venta.venta_id, suma, venta.total
            )

        return sum(
            (r.monto for r in registros if r.metodo == MetodoPago.CUENTA_CORRIENTE),
            CERO,
        )

    def _eliminar_productos_a_favor_abiertos(self, venta):
        eliminados, _ = ProductoAFavor.objects.filter(venta=venta, entregado=False).delete()
        if eliminados:
            logger.info("Se eliminaron %s productos a favor abiertos de la venta %s", eliminados, venta.venta_id)

    @transaction.atomic
    def crear_venta(self, empresa_id, cliente_id, items: list, metodo_pago: int,
                    pagos: Optional[list] = None, usuario_creador_id=None, fecha=None) -> Venta:
        calculada = self.calcular_venta(empresa_id, cliente_id, items, ahora=fecha)

        venta = Venta.objects.create(
            empresa_id=empresa_id,
            cliente=calculada.cliente,
            fecha=fecha or timezone.now(),
            metodo_pago=metodo_pago,
            usuario_creador_id=usuario_creador_id,
            subtotal=calculada.subtotal,
            descuento_global=calculada.descuento_global,
            total=calculada.total,
            estado_entrega=EstadoEntrega.NO_ENTREGADA,
        )
        self._guardar_lineas(venta, calculada)
        monto_cc = self._guardar_pagos(venta, pagos, metodo_pago)

        if monto_cc > 0:
            self.cuenta_corriente.agregar_deuda(empresa_id, venta.cliente_id, monto_cc)

        logger.info(
            "Venta %s creada para el cliente %s por %s (cuenta corriente %s)",
            venta.venta_id, venta.cliente_id, venta.total, monto_cc,
        )
        return venta

    @transaction.atomic
    def actualizar_venta(self, empresa_id, venta_id, items: list, metodo_pago: int,
                         pagos: Optional[list] = None, cliente_id=None) -> Venta:
        """
        Recalcula la venta y reemplaza líneas y pagos.
        La cuenta corriente se ajusta por la diferencia con lo imputado antes.
        """
        venta = obtener_venta(empresa_id, venta_id, bloquear=True)
        cliente_anterior_id = venta.cliente_id
        monto_cc_anterior = monto_cuenta_corriente(venta)

        calculada = self.calcular_venta(empresa_id, cliente_id or venta.cliente_id, items)

        self._eliminar_productos_a_favor_abiertos(venta)
        venta.items.all().delete()
        venta.pagos.all().delete()

        venta.cliente = calculada.cliente
        venta.metodo_pago = metodo_pago
        venta.subtotal = calculada.subtotal
        venta.descuento_global = calculada.descuento_global
        venta.total = calculada.total
        venta.estado_entrega = EstadoEntrega.NO_ENTREGADA
        venta.fecha_entrega = None
        venta.save()

        self._guardar_lineas(venta, calculada)
        monto_cc_nuevo = self._guardar_pagos(venta, pagos, metodo_pago)

        if venta.cliente_id != cliente_anterior_id:
            if monto_cc_anterior > 0:
                self.cuenta_corriente.reducir_deuda(empresa_id, cliente_anterior_id, monto_cc_anterior)
            if monto_cc_nuevo > 0:
                self.cuenta_corriente.agregar_deuda(empresa_id, venta.cliente_id, monto_cc_nuevo)
        else:
            diferencia = monto_cc_nuevo - monto_cc_anterior
            if diferencia > 0:
                self.cuenta_corriente.agregar_deuda(empresa_id, venta.cliente_id, diferencia)
            elif diferencia < 0:
                self.cuenta_corriente.reducir_deuda(empresa_id, venta.cliente_id, -diferencia)

        logger.info("Venta %s actualizada, nuevo total %s", venta.venta_id, venta.total)
        return venta

    @transaction.atomic
    def eliminar_venta(self, empresa_id, venta_id) -> None:
        venta = obtener_venta(empresa_id, venta_id, bloquear=True)
        cliente_id = venta.cliente_id
        monto_cc = monto_cuenta_corriente(venta)

        venta.pagos.all().delete()
        self._eliminar_productos_a_favor_abiertos(venta)
        venta.delete()

        if monto_cc > 0:
            self.cuenta_corriente.reducir_deuda(empresa_id, cliente_id, monto_cc)
        logger.info("Venta %s eliminada (cuenta corriente revertida %s)", venta_id, monto_cc)
