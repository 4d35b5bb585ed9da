from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Usuario
from clientes.models import Cliente, Abono
from clientes.services import CuentaCorrienteService, obtener_cliente
from core.exceptions import ClienteNotFoundError, MontoAbonoInvalidoError
from core.models import Empresa
from distribucion.choices import AccesoSistema, EstadoEntidades, MetodoPago
from productos.models import Producto
from ventas.services import VentaService


class CuentaCorrienteServiceTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        self.servicio = CuentaCorrienteService()
        self.empresa_id = self.empresa.empresa_id
        self.cliente_id = self.cliente.cliente_id

    def _deuda(self):
        self.cliente.refresh_from_db()
        return self.cliente.deuda

    def test_agregar_y_abonar(self):
        self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal('50'))
        self.assertEqual(self._deuda(), Decimal('50.00'))

        abono = self.servicio.registrar_abono(self.empresa_id, self.cliente_id, Decimal('30'), nota='Pago parcial')
        self.assertEqual(abono.monto, Decimal('30.00'))
        self.assertEqual(self._deuda(), Decimal('20.00'))

    def test_abono_mayor_a_la_deuda(self):
        self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal('20'))
        with self.assertRaises(MontoAbonoInvalidoError):
            self.servicio.registrar_abono(self.empresa_id, self.cliente_id, Decimal('25'))
        self.assertEqual(self._deuda(), Decimal('20.00'))
        self.assertFalse(Abono.objects.exists())

    def test_abono_no_positivo(self):
        self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal('20'))
        for monto in (Decimal('0'), Decimal('-5')):
            with self.assertRaises(MontoAbonoInvalidoError):
                self.servicio.registrar_abono(self.empresa_id, self.cliente_id, monto)
        self.assertEqual(self._deuda(), Decimal('20.00'))

    def test_abono_por_el_total_deja_deuda_en_cero(self):
        self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal('20'))
        self.servicio.registrar_abono(self.empresa_id, self.cliente_id, Decimal('20'))
        self.assertEqual(self._deuda(), Decimal('0.00'))

    def test_reducir_nunca_deja_saldo_negativo(self):
        self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal('10'))
        self.servicio.reducir_deuda(self.empresa_id, self.cliente_id, Decimal('15'))
        self.assertEqual(self._deuda(), Decimal('0.00'))

    def test_secuencia_de_movimientos_mantiene_saldo_no_negativo(self):
        movimientos = [
            ('agregar', '43.00'), ('abono', '13.00'), ('reducir', '50.00'),
            ('agregar', '7.10'), ('abono', '7.10'), ('agregar', '0.01'), ('reducir', '0.02'),
        ]
        for tipo, monto in movimientos:
            if tipo == 'agregar':
                self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal(monto))
            elif tipo == 'reducir':
                self.servicio.reducir_deuda(self.empresa_id, self.cliente_id, Decimal(monto))
            else:
                self.servicio.registrar_abono(self.empresa_id, self.cliente_id, Decimal(monto))
            self.assertGreaterEqual(self._deuda(), Decimal('0'))
        self.assertEqual(self._deuda(), Decimal('0.00'))

    def test_eliminar_abono_restituye_la_deuda(self):
        self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal('50'))
        abono = self.servicio.registrar_abono(self.empresa_id, self.cliente_id, Decimal('30'))
        self.servicio.eliminar_abono(self.empresa_id, abono.abono_id)
        self.assertEqual(self._deuda(), Decimal('50.00'))
        self.assertFalse(Abono.objects.exists())

    def test_validar_monto_abono(self):
        self.servicio.agregar_deuda(self.empresa_id, self.cliente_id, Decimal('20'))
        self.assertTrue(self.servicio.validar_monto_abono(self.empresa_id, self.cliente_id, '20'))
        self.assertFalse(self.servicio.validar_monto_abono(self.empresa_id, self.cliente_id, '20.01'))
        self.assertFalse(self.servicio.validar_monto_abono(self.empresa_id, self.cliente_id, '0'))

    def test_cliente_de_otra_empresa(self):
        otra = Empresa.objects.create(cuit='20999999999', razon_social='Otra')
        with self.assertRaises(ClienteNotFoundError):
            obtener_cliente(otra.empresa_id, self.cliente_id)


class ClienteAPITestCase(APITestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.admin_user = Usuario.objects.create_user(
            username='admin',
            password='password123',
            first_name='Admin',
            last_name='User',
            email='admin@example.com',
            perfil=AccesoSistema.ADMINISTRADOR,
            empresa=self.empresa,
        )
        self.empleado = Usuario.objects.create_user(
            username='empleado',
            password='password123',
            first_name='Empleado',
            last_name='User',
            email='empleado@example.com',
            perfil=AccesoSistema.EMPLEADO,
            empresa=self.empresa,
        )
        self.client.force_authenticate(user=self.admin_user)
        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        CuentaCorrienteService().agregar_deuda(self.empresa.empresa_id, self.cliente.cliente_id, Decimal('50'))
        self.abonos_url = reverse('cliente-abonos-list', kwargs={'cliente_pk': str(self.cliente.cliente_id)})

    def test_crear_cliente_ignora_deuda(self):
        data = {'nombre': 'Kiosco Central', 'direccion': 'San Martín 123', 'deuda': '999.00'}
        response = self.client.post(reverse('cliente-list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        cliente = Cliente.objects.get(nombre='Kiosco Central')
        self.assertEqual(cliente.deuda, Decimal('0.00'))
        self.assertEqual(cliente.empresa, self.empresa)

    def test_registrar_abono(self):
        response = self.client.post(self.abonos_url, {'monto': '30.00', 'nota': 'Efectivo'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['deuda_actual'], Decimal('20.00'))

        response = self.client.get(self.abonos_url, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_abono_mayor_a_la_deuda(self):
        response = self.client.post(self.abonos_url, {'monto': '75.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_abono_sin_permiso(self):
        self.client.force_authenticate(user=self.empleado)
        response = self.client.post(self.abonos_url, {'monto': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.empleado.puede_registrar_abonos = True
        self.empleado.save()
        response = self.client.post(self.abonos_url, {'monto': '10.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_eliminar_abono(self):
        abono = CuentaCorrienteService().registrar_abono(self.empresa.empresa_id, self.cliente.cliente_id, Decimal('30'))
        url = reverse('cliente-abonos-detail', kwargs={
            'cliente_pk': str(self.cliente.cliente_id), 'pk': abono.abono_id
        })
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.cliente.refresh_from_db()
        self.assertEqual(self.cliente.deuda, Decimal('50.00'))

    def test_clientes_con_deuda(self):
        Cliente.objects.create(empresa=self.empresa, nombre='Sin deuda')
        response = self.client.get(reverse('cliente-con-deuda'), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['nombre'] for c in response.data['results']], ['Almacén Don José'])

    def test_no_se_elimina_cliente_con_movimientos(self):
        CuentaCorrienteService().registrar_abono(self.empresa.empresa_id, self.cliente.cliente_id, Decimal('10'))
        url = reverse('cliente-detail', kwargs={'pk': str(self.cliente.cliente_id)})
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.cliente.refresh_from_db()
        self.assertEqual(self.cliente.estado, EstadoEntidades.ACTIVO)

    def test_no_se_elimina_cliente_con_ventas(self):
        producto = Producto.objects.create(empresa=self.empresa, codigo='A1', nombre='Arroz', precio=Decimal('5.00'))
        VentaService().crear_venta(
            self.empresa.empresa_id, self.cliente.cliente_id,
            [{'producto_id': producto.producto_id, 'cantidad': 1}], MetodoPago.EFECTIVO,
        )
        url = reverse('cliente-detail', kwargs={'pk': str(self.cliente.cliente_id)})
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_eliminar_cliente_sin_movimientos(self):
        cliente = Cliente.objects.create(empresa=self.empresa, nombre='Nuevo')
        url = reverse('cliente-detail', kwargs={'pk': str(cliente.cliente_id)})
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        cliente.refresh_from_db()
        self.assertEqual(cliente.estado, EstadoEntidades.DE_BAJA)
