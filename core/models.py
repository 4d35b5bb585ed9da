from django.db import models
from distribucion.choices import EstadoEntidades


class Empresa(models.Model):
    """
    Distribuidora que opera el sistema.
    Clientes, productos, ventas y usuarios pertenecen a una empresa.
    """
    empresa_id = models.AutoField(primary_key=True)
    cuit = models.CharField(max_length=11, unique=True)
    razon_social = models.CharField(max_length=200)
    nombre_fantasia = models.CharField(max_length=200, blank=True, default='')
    direccion = models.CharField(max_length=300, null=True, blank=True)
    telefono = models.CharField(max_length=20, null=True, blank=True)
    email = models.EmailField(max_length=100, null=True, blank=True)
    estado = models.IntegerField(choices=EstadoEntidades, default=EstadoEntidades.ACTIVO)
    fecha_alta = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.nombre_fantasia or self.razon_social

    class Meta:
        db_table = 'empresas'
        ordering = ["razon_social"]
