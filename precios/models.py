from django.db import models


class PrecioEspecial(models.Model):
    """Precio unitario pactado con un cliente para un producto."""
    precio_especial_id = models.BigAutoField(primary_key=True)
    empresa = models.ForeignKey('core.Empresa', on_delete=models.RESTRICT, null=False, related_name='precios_especiales')
    cliente = models.ForeignKey('clientes.Cliente', on_delete=models.CASCADE, null=False, related_name='precios_especiales')
    producto = models.ForeignKey('productos.Producto', on_delete=models.CASCADE, null=False, related_name='precios_especiales')
    precio = models.DecimalField(max_digits=12, decimal_places=2, null=False)
    fecha_creacion = models.DateTimeField(auto_now_add=True)
    fecha_modificacion = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.cliente.nombre} - {self.producto.nombre}: {self.precio}"

    class Meta:
        db_table = 'precios_especiales'
        ordering = ['producto__nombre']
        constraints = [
            models.UniqueConstraint(fields=['cliente', 'producto'], name='uq_precio_especial_cliente_producto'),
        ]
