from django.contrib import admin
from .models import Cliente, Abono


@admin.register(Cliente)
class ClienteAdmin(admin.ModelAdmin):
    list_display = ('nombre', 'direccion', 'telefono', 'deuda', 'descuento_global', 'estado')
    search_fields = ('nombre', 'direccion')
    list_filter = ('estado', 'empresa')
    readonly_fields = ('deuda',)


@admin.register(Abono)
class AbonoAdmin(admin.ModelAdmin):
    list_display = ('cliente', 'fecha', 'monto', 'usuario')
    list_filter = ('fecha',)
