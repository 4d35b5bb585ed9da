from precios.models import PrecioEspecial


def obtener_precio_especial(empresa_id, cliente_id, producto_id):
    """Precio especial del cliente para el producto, o None."""
    return (
        PrecioEspecial.objects
        .filter(empresa_id=empresa_id, cliente_id=cliente_id, producto_id=producto_id)
        .values_list('precio', flat=True)
        .first()
    )
