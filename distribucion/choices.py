from django.db import models

class EstadoEntidades(models.IntegerChoices):
    ACTIVO = 1, "Activo"
    DE_BAJA = 0, "De baja"

class AccesoSistema(models.IntegerChoices):
    ADMINISTRADOR = 1, "Administrador"
    EMPLEADO = 2, "Empleado"

class TipoVendedor(models.IntegerChoices):
    VENDEDOR = 0, "Vendedor"
    REPARTIDOR = 1, "Repartidor"
    REPARTIDOR_VENDEDOR = 2, "Repartidor-Vendedor"

class MetodoPago(models.IntegerChoices):
    EFECTIVO = 0, "Efectivo"
    TRANSFERENCIA = 1, "Transferencia"
    TARJETA = 2, "Tarjeta"
    CUENTA_CORRIENTE = 3, "Cuenta corriente"

class EstadoEntrega(models.IntegerChoices):
    NO_ENTREGADA = 0, "No entregada"
    PARCIAL = 1, "Parcial"
    ENTREGADA = 2, "Entregada"

class EstadoAgenda(models.IntegerChoices):
    PENDIENTE = 0, "Pendiente"
    PARCIAL = 1, "Parcial"
    ENTREGADA = 2, "Entregada"

class DiaSemana(models.IntegerChoices):
    DOMINGO = 0, "Domingo"
    LUNES = 1, "Lunes"
    MARTES = 2, "Martes"
    MIERCOLES = 3, "Miércoles"
    JUEVES = 4, "Jueves"
    VIERNES = 5, "Viernes"
    SABADO = 6, "Sábado"

    @classmethod
    def desde_fecha(cls, fecha):
        # isoweekday: lunes=1 ... domingo=7
        return cls(fecha.isoweekday() % 7)
