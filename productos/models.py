import uuid
from django.db import models

from core.models import Empresa
from distribucion.choices import EstadoEntidades


class Producto(models.Model):
    producto_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    empresa = models.ForeignKey(Empresa, on_delete=models.RESTRICT, related_name='productos')
    codigo = models.CharField(max_length=20, null=False, blank=False)
    nombre = models.CharField(max_length=200, null=False)
    precio = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    descuento = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    descuento_indefinido = models.BooleanField(default=False)
    fecha_expiracion_descuento = models.DateTimeField(null=True, blank=True)
    estado = models.IntegerField(choices=EstadoEntidades, default=EstadoEntidades.ACTIVO)
    fecha_creacion = models.DateTimeField(auto_now_add=True, null=False)
    fecha_modificacion = models.DateTimeField(auto_now=True, null=False)

    def __str__(self):
        return self.nombre

    class Meta:
        db_table = 'productos'
        ordering = ["nombre"]
        constraints = [
            models.UniqueConstraint(fields=['empresa', 'codigo'], name='uq_producto_empresa_codigo'),
        ]


class PrecioCantidad(models.Model):
    """Pack: ``cantidad`` unidades por un ``precio_total`` fijo."""
    precio_cantidad_id = models.BigAutoField(primary_key=True)
    producto = models.ForeignKey(Producto, on_delete=models.CASCADE, related_name='precios_cantidad')
    cantidad = models.PositiveIntegerField()
    precio_total = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self):
        return f"{self.producto.nombre} x{self.cantidad}"

    class Meta:
        db_table = 'precios_cantidad'
        ordering = ["cantidad"]
        constraints = [
            models.UniqueConstraint(fields=['producto', 'cantidad'], name='uq_precio_cantidad_producto'),
        ]
