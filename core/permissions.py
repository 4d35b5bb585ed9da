from rest_framework import permissions

from distribucion.choices import AccesoSistema


# Acción -> flag del usuario que la habilita
PERMISOS_EMPLEADO = {
    'eliminar_ventas': 'puede_eliminar_ventas',
    'asignar_ventas': 'puede_asignar_ventas',
    'registrar_abonos': 'puede_registrar_abonos',
    'gestionar_recorridos': 'puede_gestionar_recorridos',
}


def es_administrador(usuario):
    return bool(usuario and (usuario.is_superuser or usuario.perfil == AccesoSistema.ADMINISTRADOR))


def tiene_permiso(usuario, accion):
    """
    Indica si el usuario puede ejecutar la acción.
    Los administradores tienen acceso total; los empleados dependen de su flag.
    """
    if usuario is None or not usuario.is_active:
        return False
    if es_administrador(usuario):
        return True
    flag = PERMISOS_EMPLEADO.get(accion)
    if flag is None:
        return False
    return bool(getattr(usuario, flag, False))


class TieneEmpresa(permissions.BasePermission):
    """
    El usuario debe pertenecer a una empresa para operar con datos de negocio.
    """
    message = 'El usuario no tiene una empresa asignada.'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            getattr(request.user, 'empresa_id', None)
        )


class TienePermiso(permissions.BasePermission):
    """
    Verifica una acción concreta con tiene_permiso.

    Uso:
        permission_classes = [IsAuthenticated, TienePermiso.para('eliminar_ventas')]
    """
    accion = None
    message = 'No tiene permiso para realizar esta acción.'

    @classmethod
    def para(cls, accion):
        return type(f'TienePermiso_{accion}', (cls,), {'accion': accion})

    def has_permission(self, request, view):
        return tiene_permiso(request.user, self.accion)
