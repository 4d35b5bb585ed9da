from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENTAVO = Decimal('0.01')
CERO = Decimal('0')
CIEN = Decimal('100')


def a_decimal(valor):
    """
    Convierte un monto (texto, número o Decimal) a Decimal.
    Los valores vacíos o no interpretables se consideran cero.
    """
    if valor is None:
        return CERO
    if isinstance(valor, Decimal):
        return valor if valor.is_finite() else CERO
    try:
        resultado = Decimal(str(valor).strip())
    except (InvalidOperation, ValueError):
        return CERO
    return resultado if resultado.is_finite() else CERO


def redondear(monto):
    """Redondeo monetario a centavos (ROUND_HALF_UP)."""
    return Decimal(monto).quantize(CENTAVO, rounding=ROUND_HALF_UP)


def aplicar_porcentaje(monto, porcentaje):
    """Devuelve ``monto`` reducido en ``porcentaje`` por ciento, sin redondear."""
    return monto * (CIEN - Decimal(porcentaje)) / CIEN
