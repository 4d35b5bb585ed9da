import logging

from rest_framework.views import exception_handler
from rest_framework.exceptions import APIException
from rest_framework import status
from django.core.exceptions import ObjectDoesNotExist, ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Handler personalizado para excepciones.
    Proporciona respuestas consistentes y detalladas.
    """
    # Llamar al handler por defecto primero
    response = exception_handler(exc, context)

    # Si es una excepción de Django no manejada por DRF
    if response is None:
        if isinstance(exc, DjangoValidationError):
            return Response(
                {
                    'success': False,
                    'error': 'Validation Error',
                    'detail': exc.messages if hasattr(exc, 'messages') else str(exc),
                    'status_code': status.HTTP_400_BAD_REQUEST
                },
                status=status.HTTP_400_BAD_REQUEST
            )
        if isinstance(exc, (Http404, ObjectDoesNotExist)):
            return Response(
                {
                    'success': False,
                    'error': 'Not Found',
                    'detail': 'El recurso solicitado no existe',
                    'status_code': status.HTTP_404_NOT_FOUND
                },
                status=status.HTTP_404_NOT_FOUND
            )

        # Error no controlado: se registra y se responde de forma genérica
        vista = context.get('view') if context else None
        logger.exception("Error no controlado en %s", type(vista).__name__ if vista else 'vista desconocida')
        return Response(
            {
                'success': False,
                'error': 'Internal Server Error',
                'detail': 'Ha ocurrido un error inesperado',
                'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    # Estructura personalizada
    data = response.data
    custom_response_data = {
        'success': False,
        'status_code': response.status_code
    }

    if isinstance(data, dict) and 'detail' in data:
        custom_response_data['error'] = data['detail']
        custom_response_data['detail'] = data['detail']
    else:
        # Errores de validación por campo o lista de mensajes
        custom_response_data['error'] = 'Validation Error'
        custom_response_data['errors'] = data

    response.data = custom_response_data
    return response


# ==================== EXCEPCIONES PERSONALIZADAS ====================

class RecursoNoEncontradoError(APIException):
    """Excepción genérica cuando un recurso referenciado no existe"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Recurso no encontrado'
    default_code = 'not_found'


class VentaNotFoundError(RecursoNoEncontradoError):
    default_detail = 'Venta no encontrada'
    default_code = 'venta_not_found'


class ClienteNotFoundError(RecursoNoEncontradoError):
    default_detail = 'Cliente no encontrado'
    default_code = 'cliente_not_found'


class ProductoNotFoundError(RecursoNoEncontradoError):
    default_detail = 'Producto no encontrado'
    default_code = 'producto_not_found'


class UsuarioNotFoundError(RecursoNoEncontradoError):
    default_detail = 'Usuario no encontrado'
    default_code = 'usuario_not_found'


class ItemVentaNotFoundError(RecursoNoEncontradoError):
    default_detail = 'El producto no forma parte de la venta'
    default_code = 'item_venta_not_found'


class BusinessRuleViolationError(APIException):
    """Excepción genérica para violaciones de reglas de negocio"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Violación de regla de negocio'
    default_code = 'business_rule_violation'


class MontoAbonoInvalidoError(BusinessRuleViolationError):
    """El abono es no positivo o supera la deuda del cliente"""
    default_detail = 'El monto del abono no puede ser mayor a la deuda del cliente'
    default_code = 'monto_abono_invalido'


class PreciosCantidadInvalidosError(BusinessRuleViolationError):
    """Configuración de packs inválida"""
    default_detail = 'Los precios por cantidad son inválidos'
    default_code = 'precios_cantidad_invalidos'


class DependenciasExistentesError(BusinessRuleViolationError):
    """No se puede eliminar un registro con dependencias"""
    default_detail = 'No se puede eliminar: existen registros asociados'
    default_code = 'dependencias_existentes'


class InvalidStateTransitionError(BusinessRuleViolationError):
    """Excepción para transiciones de estado inválidas"""
    default_detail = 'Transición de estado no permitida'
    default_code = 'invalid_state_transition'
