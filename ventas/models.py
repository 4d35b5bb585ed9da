from django.db import models
from django.utils import timezone

from distribucion.choices import MetodoPago, EstadoEntrega


class Venta(models.Model):
    venta_id = models.BigAutoField(primary_key=True)
    empresa = models.ForeignKey('core.Empresa', on_delete=models.RESTRICT, null=False, related_name='ventas')
    cliente = models.ForeignKey('clientes.Cliente', on_delete=models.RESTRICT, null=False, related_name='ventas')
    fecha = models.DateTimeField(default=timezone.now, null=False)
    metodo_pago = models.IntegerField(choices=MetodoPago, null=False)
    usuario_creador = models.ForeignKey('accounts.Usuario', on_delete=models.SET_NULL, null=True, blank=True,
                                        related_name='ventas_creadas')
    usuario_asignado = models.ForeignKey('accounts.Usuario', on_delete=models.SET_NULL, null=True, blank=True,
                                         related_name='ventas_asignadas')
    fecha_asignacion = models.DateTimeField(null=True, blank=True)
    fecha_entrega = models.DateTimeField(null=True, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, null=False, default=0)
    descuento_global = models.DecimalField(max_digits=12, decimal_places=2, null=False, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, null=False, default=0)
    estado_entrega = models.IntegerField(choices=EstadoEntrega, default=EstadoEntrega.NO_ENTREGADA, null=False)

    def __str__(self):
        return f"Venta {self.venta_id} - Cliente: {self.cliente.nombre}"

    class Meta:
        db_table = 'ventas'
        ordering = ['-fecha']


class VentaProducto(models.Model):
    venta_producto_id = models.BigAutoField(primary_key=True)
    venta = models.ForeignKey(Venta, on_delete=models.CASCADE, null=False, related_name='items')
    producto = models.ForeignKey('productos.Producto', on_delete=models.RESTRICT, null=False,
                                 related_name='items_venta')
    cantidad = models.PositiveIntegerField(null=False)
    precio_optimizado = models.DecimalField(max_digits=12, decimal_places=2, null=False)
    descuento_producto = models.DecimalField(max_digits=5, decimal_places=2, null=False, default=0)
    precio_final_calculado = models.DecimalField(max_digits=12, decimal_places=2, null=False)
    desglose = models.JSONField(default=list, blank=True)
    entregado = models.BooleanField(default=False)
    motivo = models.CharField(max_length=200, blank=True, default='')
    nota = models.CharField(max_length=500, blank=True, default='')
    usuario_chequeo = models.ForeignKey('accounts.Usuario', on_delete=models.SET_NULL, null=True, blank=True,
                                        related_name='items_chequeados')
    fecha_chequeo = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.cantidad} x {self.producto.nombre}"

    @property
    def chequeado(self):
        return self.fecha_chequeo is not None

    class Meta:
        db_table = 'ventas_productos'
        ordering = ['venta_producto_id']
        constraints = [
            models.UniqueConstraint(fields=['venta', 'producto'], name='uq_venta_producto'),
        ]


class VentaPago(models.Model):
    venta_pago_id = models.BigAutoField(primary_key=True)
    venta = models.ForeignKey(Venta, on_delete=models.CASCADE, null=False, related_name='pagos')
    metodo = models.IntegerField(choices=MetodoPago, null=False)
    monto = models.DecimalField(max_digits=12, decimal_places=2, null=False)

    def __str__(self):
        return f"{self.get_metodo_display()}: {self.monto}"

    class Meta:
        db_table = 'ventas_pagos'
        ordering = ['venta_pago_id']
