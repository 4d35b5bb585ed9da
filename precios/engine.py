"""
Motor de precios por cantidad.

Combina los packs configurados de un producto (``cantidad`` unidades por un
precio total fijo) para cubrir la cantidad pedida al menor costo posible,
usando programación dinámica sobre las cantidades 0..N (mochila no acotada).
La unidad suelta siempre participa como pack de cantidad 1.
"""
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from core.exceptions import PreciosCantidadInvalidosError
from core.utils import CERO, CIEN, CENTAVO, aplicar_porcentaje, redondear


@dataclass(frozen=True)
class Pack:
    cantidad: int
    precio_total: Decimal


@dataclass
class LineaDesglose:
    cantidad: int
    precio_unitario: Decimal
    precio_total: Decimal
    veces: int

    def como_dict(self):
        return {
            'cantidad': self.cantidad,
            'precio_unitario': str(self.precio_unitario),
            'precio_total': str(self.precio_total),
            'veces': self.veces,
        }


@dataclass
class ResultadoPrecio:
    total: Decimal
    desglose: List[LineaDesglose] = field(default_factory=list)
    precio_especial: Optional[Decimal] = None
    precio_con_descuento: Optional[Decimal] = None
    descuento_global: Decimal = CERO
    precio_final: Optional[Decimal] = None

    def desglose_dict(self):
        return [linea.como_dict() for linea in self.desglose]


def _como_pack(pack):
    if isinstance(pack, Pack):
        return pack
    if isinstance(pack, dict):
        return Pack(int(pack['cantidad']), Decimal(pack['precio_total']))
    return Pack(int(pack.cantidad), Decimal(pack.precio_total))


def validar_precios_cantidad(packs):
    """
    Valida la configuración de packs de un producto.
    Cada pack debe tener cantidad >= 2, precio > 0 y cantidades no repetidas.
    """
    if not packs:
        return
    packs = [_como_pack(p) for p in packs]

    repetidas = [c for c, n in Counter(p.cantidad for p in packs).items() if n > 1]
    if repetidas:
        raise PreciosCantidadInvalidosError(
            f'Cantidades de pack repetidas: {", ".join(str(c) for c in sorted(repetidas))}'
        )
    for pack in packs:
        if pack.cantidad < 2:
            raise PreciosCantidadInvalidosError('La cantidad de un pack debe ser al menos 2')
        if pack.precio_total <= 0:
            raise PreciosCantidadInvalidosError('El precio de un pack debe ser mayor a cero')


def _precio_por_unidades(precio_unitario, cantidad):
    total = precio_unitario * cantidad
    return ResultadoPrecio(
        total=total,
        desglose=[LineaDesglose(1, precio_unitario, total, cantidad)],
    )


def calcular_precio_optimo(precio_unitario, packs, cantidad):
    """
    Devuelve el costo mínimo para ``cantidad`` unidades y su desglose por pack.

    Los packs se evalúan en orden ascendente de cantidad y sólo una mejora
    estricta reemplaza al mínimo vigente, así que ante empates gana el primero.
    """
    if cantidad < 1:
        raise ValueError('La cantidad debe ser un entero positivo')

    precio_unitario = Decimal(precio_unitario)
    disponibles = sorted(
        (p for p in (_como_pack(p) for p in packs or []) if p.cantidad > 1),
        key=lambda p: p.cantidad,
    )
    if not disponibles:
        return _precio_por_unidades(precio_unitario, cantidad)

    disponibles.insert(0, Pack(1, precio_unitario))
    precios = {p.cantidad: p.precio_total for p in disponibles}

    dp = [None] * (cantidad + 1)
    padre = [0] * (cantidad + 1)
    dp[0] = CERO

    for i in range(1, cantidad + 1):
        for pack in disponibles:
            if pack.cantidad > i:
                break
            previo = dp[i - pack.cantidad]
            if previo is None:
                continue
            costo = previo + pack.precio_total
            if dp[i] is None or costo < dp[i]:
                dp[i] = costo
                padre[i] = pack.cantidad

    if dp[cantidad] is None:
        return _precio_por_unidades(precio_unitario, cantidad)

    usados = Counter()
    restante = cantidad
    while restante > 0:
        usados[padre[restante]] += 1
        restante -= padre[restante]

    desglose = [
        LineaDesglose(
            cantidad=c,
            precio_unitario=(precios[c] / c).quantize(CENTAVO),
            precio_total=precios[c] * veces,
            veces=veces,
        )
        for c, veces in sorted(usados.items())
    ]
    return ResultadoPrecio(total=dp[cantidad], desglose=desglose)


def calcular_precio(producto, cantidad, precio_especial=None, descuento_global=None, descuento_producto=None):
    """
    Precio optimizado de ``cantidad`` unidades de ``producto``.

    ``precio_especial`` reemplaza el precio de la unidad suelta; los packs no
    se ven afectados. ``descuento_producto`` se aplica sobre el total
    optimizado y da ``precio_con_descuento``; ``descuento_global`` se aplica
    después y da ``precio_final``. Ambos son porcentajes.
    """
    unitario = precio_especial if precio_especial is not None else producto.precio
    resultado = calcular_precio_optimo(unitario, producto.precios_cantidad.all(), cantidad)
    resultado.precio_especial = precio_especial

    if descuento_producto and descuento_producto > 0:
        resultado.precio_con_descuento = redondear(aplicar_porcentaje(resultado.total, descuento_producto))
    else:
        resultado.precio_con_descuento = redondear(resultado.total)

    if descuento_global and descuento_global > 0:
        monto = redondear(resultado.precio_con_descuento * Decimal(descuento_global) / CIEN)
        resultado.descuento_global = min(monto, resultado.precio_con_descuento)
    resultado.precio_final = resultado.precio_con_descuento - resultado.descuento_global
    return resultado
