from django.db import models
from django.db.models import Q
from django.utils import timezone

from distribucion.choices import DiaSemana


class ProductoAFavor(models.Model):
    """Unidades de un producto que se le deben al cliente por una entrega incompleta."""
    producto_a_favor_id = models.BigAutoField(primary_key=True)
    empresa = models.ForeignKey('core.Empresa', on_delete=models.RESTRICT, null=False, related_name='productos_a_favor')
    cliente = models.ForeignKey('clientes.Cliente', on_delete=models.RESTRICT, null=False, related_name='productos_a_favor')
    producto = models.ForeignKey('productos.Producto', on_delete=models.RESTRICT, null=False,
                                 related_name='productos_a_favor')
    cantidad = models.PositiveIntegerField(null=False)
    fecha_registro = models.DateTimeField(default=timezone.now, null=False)
    motivo = models.CharField(max_length=200, blank=True, default='')
    nota = models.CharField(max_length=500, blank=True, default='')
    venta = models.ForeignKey('ventas.Venta', on_delete=models.SET_NULL, null=True, blank=True,
                              related_name='productos_a_favor')
    venta_producto = models.ForeignKey('ventas.VentaProducto', on_delete=models.SET_NULL, null=True, blank=True,
                                       related_name='productos_a_favor')
    usuario_registro = models.ForeignKey('accounts.Usuario', on_delete=models.SET_NULL, null=True, blank=True,
                                         related_name='productos_a_favor_registrados')
    entregado = models.BooleanField(default=False)
    fecha_entrega = models.DateTimeField(null=True, blank=True)
    usuario_entrega = models.ForeignKey('accounts.Usuario', on_delete=models.SET_NULL, null=True, blank=True,
                                        related_name='productos_a_favor_entregados')

    def __str__(self):
        return f"{self.cantidad} x {self.producto.nombre} a favor de {self.cliente.nombre}"

    class Meta:
        db_table = 'productos_a_favor'
        ordering = ['-fecha_registro']
        constraints = [
            models.UniqueConstraint(
                fields=['venta', 'producto'],
                condition=Q(entregado=False),
                name='uq_producto_a_favor_abierto',
            ),
        ]


class RecorridoProgramado(models.Model):
    """Visita semanal de un vendedor a un cliente."""
    recorrido_id = models.BigAutoField(primary_key=True)
    empresa = models.ForeignKey('core.Empresa', on_delete=models.RESTRICT, null=False, related_name='recorridos')
    vendedor = models.ForeignKey('accounts.Usuario', on_delete=models.CASCADE, null=False, related_name='recorridos')
    cliente = models.ForeignKey('clientes.Cliente', on_delete=models.CASCADE, null=False, related_name='recorridos')
    dia_semana = models.IntegerField(choices=DiaSemana, null=False)
    orden = models.PositiveIntegerField(default=0)
    activo = models.BooleanField(default=True)
    fecha_creacion = models.DateTimeField(auto_now_add=True)
    fecha_modificacion = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.vendedor_id} -> {self.cliente.nombre} ({self.get_dia_semana_display()})"

    class Meta:
        db_table = 'recorridos_programados'
        ordering = ['vendedor', 'dia_semana', 'orden']
