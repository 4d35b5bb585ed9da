from django.contrib.auth.models import AbstractUser
from django.db import models

from accounts.managers import UserManager
from core.models import Empresa
from distribucion.choices import AccesoSistema, TipoVendedor


class Usuario(AbstractUser):
    username = models.CharField(max_length=25, blank=False, null=False,
                                unique=True, primary_key=True)
    first_name = models.CharField(max_length=50, blank=False, null=False)
    last_name = models.CharField(max_length=50, blank=False, null=False)
    email = models.EmailField(unique=True, null=False)
    celular = models.CharField(max_length=15, blank=True, default='')
    empresa = models.ForeignKey(Empresa, on_delete=models.RESTRICT, null=True, blank=True,
                                related_name='usuarios')
    perfil = models.IntegerField(choices=AccesoSistema, null=False, default=AccesoSistema.EMPLEADO)
    # Tipo de trabajo en calle; nulo para usuarios de oficina
    tipo_vendedor = models.IntegerField(choices=TipoVendedor, null=True, blank=True)
    zona = models.CharField(max_length=100, blank=True, default='')
    puede_eliminar_ventas = models.BooleanField(default=False)
    puede_asignar_ventas = models.BooleanField(default=False)
    puede_registrar_abonos = models.BooleanField(default=False)
    puede_gestionar_recorridos = models.BooleanField(default=False)
    fecha_creacion = models.DateTimeField(auto_now_add=True, null=False)
    ultimo_acceso = models.DateTimeField(auto_now=True, null=False)

    objects = UserManager()
    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = ['first_name', 'last_name', 'email']

    class Meta:
        db_table = 'usuarios'
        ordering = ['username']

    def __str__(self):
        return self.username

    @property
    def nombre_completo(self):
        return f"{self.first_name} {self.last_name}".strip() or self.username

    @property
    def es_administrador(self):
        return self.is_superuser or self.perfil == AccesoSistema.ADMINISTRADOR
