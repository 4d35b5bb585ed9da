from accounts.models import Usuario
from core.exceptions import UsuarioNotFoundError
from distribucion.choices import TipoVendedor

TIPOS_REPARTO = (TipoVendedor.REPARTIDOR, TipoVendedor.REPARTIDOR_VENDEDOR)


def obtener_usuario(empresa_id, username):
    try:
        return Usuario.objects.get(empresa_id=empresa_id, username=username)
    except Usuario.DoesNotExist:
        raise UsuarioNotFoundError(f'Usuario {username} no encontrado')


def listar_repartidores_activos(empresa_id):
    """Empleados activos de la empresa con capacidad de reparto, por username."""
    return (
        Usuario.objects
        .filter(empresa_id=empresa_id, is_active=True, tipo_vendedor__in=TIPOS_REPARTO)
        .order_by('username')
    )
