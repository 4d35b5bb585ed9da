from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Usuario
from core.models import Empresa
from core.permissions import tiene_permiso
from core.utils import a_decimal, aplicar_porcentaje, redondear
from distribucion.choices import AccesoSistema, DiaSemana


class UtilsTestCase(SimpleTestCase):

    def test_a_decimal_valores_invalidos_son_cero(self):
        self.assertEqual(a_decimal(None), Decimal('0'))
        self.assertEqual(a_decimal(''), Decimal('0'))
        self.assertEqual(a_decimal('abc'), Decimal('0'))
        self.assertEqual(a_decimal(Decimal('NaN')), Decimal('0'))
        self.assertEqual(a_decimal('Infinity'), Decimal('0'))

    def test_a_decimal_convierte_texto_y_numeros(self):
        self.assertEqual(a_decimal('12.50'), Decimal('12.50'))
        self.assertEqual(a_decimal(' 3 '), Decimal('3'))
        self.assertEqual(a_decimal(7), Decimal('7'))

    def test_redondear_mitad_hacia_arriba(self):
        self.assertEqual(redondear(Decimal('2.345')), Decimal('2.35'))
        self.assertEqual(redondear(Decimal('2.344')), Decimal('2.34'))
        self.assertEqual(redondear(Decimal('8.3333')), Decimal('8.33'))

    def test_aplicar_porcentaje(self):
        self.assertEqual(aplicar_porcentaje(Decimal('30'), Decimal('20')), Decimal('24'))
        self.assertEqual(aplicar_porcentaje(Decimal('30'), 0), Decimal('30'))

    def test_dia_semana_desde_fecha(self):
        self.assertEqual(DiaSemana.desde_fecha(date(2026, 10, 18)), DiaSemana.DOMINGO)
        self.assertEqual(DiaSemana.desde_fecha(date(2026, 10, 19)), DiaSemana.LUNES)
        self.assertEqual(DiaSemana.desde_fecha(date(2026, 10, 24)), DiaSemana.SABADO)


class PermisosTestCase(SimpleTestCase):

    def test_administrador_puede_todo(self):
        admin = Usuario(username='admin', perfil=AccesoSistema.ADMINISTRADOR, is_active=True)
        self.assertTrue(tiene_permiso(admin, 'eliminar_ventas'))
        self.assertTrue(tiene_permiso(admin, 'gestionar_recorridos'))

    def test_empleado_depende_de_su_flag(self):
        empleado = Usuario(username='emp', perfil=AccesoSistema.EMPLEADO, is_active=True,
                           puede_registrar_abonos=True)
        self.assertTrue(tiene_permiso(empleado, 'registrar_abonos'))
        self.assertFalse(tiene_permiso(empleado, 'eliminar_ventas'))
        self.assertFalse(tiene_permiso(empleado, 'accion_desconocida'))

    def test_usuario_inactivo_no_tiene_permisos(self):
        admin = Usuario(username='admin', perfil=AccesoSistema.ADMINISTRADOR, is_active=False)
        self.assertFalse(tiene_permiso(admin, 'eliminar_ventas'))
        self.assertFalse(tiene_permiso(None, 'eliminar_ventas'))


class ExceptionHandlerTestCase(APITestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.usuario = Usuario.objects.create_user(
            username='admin',
            password='password123',
            first_name='Admin',
            last_name='User',
            email='admin@example.com',
            perfil=AccesoSistema.ADMINISTRADOR,
            empresa=self.empresa,
        )
        self.client.force_authenticate(user=self.usuario)

    def test_recurso_inexistente_responde_404_con_formato_estandar(self):
        url = reverse('venta-detail', kwargs={'pk': 999})
        response = self.client.get(url, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['status_code'], 404)

    def test_errores_de_validacion_se_agrupan(self):
        url = reverse('venta-list')
        response = self.client.post(url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertIn('errors', response.data)
        self.assertIn('items', response.data['errors'])

    def test_usuario_sin_empresa_no_accede(self):
        sin_empresa = Usuario.objects.create_user(
            username='suelto',
            password='password123',
            first_name='Sin',
            last_name='Empresa',
            email='suelto@example.com',
        )
        self.client.force_authenticate(user=sin_empresa)
        response = self.client.get(reverse('venta-list'), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
