import uuid
from django.db import models

from core.models import Empresa
from distribucion.choices import EstadoEntidades


class Cliente(models.Model):
    cliente_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    empresa = models.ForeignKey(Empresa, on_delete=models.RESTRICT, related_name='clientes')
    nombre = models.CharField(max_length=200, null=False)
    direccion = models.CharField(max_length=300, null=True, blank=True)
    telefono = models.CharField(max_length=20, null=True, blank=True)
    latitud = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitud = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    deuda = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    descuento_global = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    estado = models.IntegerField(choices=EstadoEntidades, default=EstadoEntidades.ACTIVO)
    fecha_creacion = models.DateTimeField(auto_now_add=True, null=False)
    fecha_modificacion = models.DateTimeField(auto_now=True, null=False)

    def __str__(self):
        return self.nombre

    class Meta:
        db_table = 'clientes'
        ordering = ["nombre"]


class Abono(models.Model):
    """Pago a cuenta de la deuda de un cliente."""
    abono_id = models.BigAutoField(primary_key=True)
    empresa = models.ForeignKey(Empresa, on_delete=models.RESTRICT, related_name='abonos')
    cliente = models.ForeignKey(Cliente, on_delete=models.RESTRICT, related_name='abonos')
    monto = models.DecimalField(max_digits=12, decimal_places=2)
    fecha = models.DateTimeField()
    nota = models.CharField(max_length=500, blank=True, default='')
    usuario = models.ForeignKey('accounts.Usuario', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='abonos_registrados')

    def __str__(self):
        return f"Abono {self.abono_id} - {self.cliente.nombre}: {self.monto}"

    class Meta:
        db_table = 'abonos'
        ordering = ['-fecha']
