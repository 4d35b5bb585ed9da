from datetime import timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Usuario
from core.exceptions import ProductoNotFoundError
from core.models import Empresa
from distribucion.choices import AccesoSistema, EstadoEntidades
from productos.models import Producto, PrecioCantidad
from productos.services import evaluar_descuento, normalizar_descuento, obtener_producto


class EvaluarDescuentoTestCase(SimpleTestCase):

    def setUp(self):
        self.ahora = timezone.now()

    def test_sin_descuento(self):
        estado = evaluar_descuento(Producto(descuento=Decimal('0')), self.ahora)
        self.assertFalse(estado.activo)
        self.assertFalse(estado.expirado)
        self.assertEqual(estado.porcentaje, Decimal('0'))

    def test_descuento_indefinido(self):
        producto = Producto(descuento=Decimal('20'), descuento_indefinido=True)
        estado = evaluar_descuento(producto, self.ahora)
        self.assertTrue(estado.activo)
        self.assertEqual(estado.porcentaje, Decimal('20'))

    def test_descuento_con_vencimiento_futuro(self):
        producto = Producto(descuento=Decimal('15'), fecha_expiracion_descuento=self.ahora + timedelta(days=1))
        estado = evaluar_descuento(producto, self.ahora)
        self.assertTrue(estado.activo)
        self.assertFalse(estado.expirado)

    def test_descuento_vencido(self):
        producto = Producto(descuento=Decimal('15'), fecha_expiracion_descuento=self.ahora - timedelta(minutes=1))
        estado = evaluar_descuento(producto, self.ahora)
        self.assertFalse(estado.activo)
        self.assertTrue(estado.expirado)

    def test_descuento_sin_vencimiento_no_indefinido_no_aplica(self):
        estado = evaluar_descuento(Producto(descuento=Decimal('15')), self.ahora)
        self.assertFalse(estado.activo)
        self.assertFalse(estado.expirado)


class NormalizarDescuentoTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.producto = Producto.objects.create(
            empresa=self.empresa,
            codigo='YER01',
            nombre='Yerba 1kg',
            precio=Decimal('10.00'),
            descuento=Decimal('15.00'),
            fecha_expiracion_descuento=timezone.now() - timedelta(days=1),
        )

    def test_descuento_vencido_se_persiste_en_cero(self):
        estado = normalizar_descuento(self.producto)
        self.assertTrue(estado.expirado)
        self.producto.refresh_from_db()
        self.assertEqual(self.producto.descuento, Decimal('0'))
        self.assertIsNone(self.producto.fecha_expiracion_descuento)

    def test_normalizar_dos_veces_no_cambia_nada(self):
        normalizar_descuento(self.producto)
        estado = normalizar_descuento(self.producto)
        self.assertFalse(estado.expirado)
        self.assertFalse(estado.activo)
        self.producto.refresh_from_db()
        self.assertEqual(self.producto.descuento, Decimal('0'))

    def test_obtener_producto_de_otra_empresa(self):
        otra = Empresa.objects.create(cuit='20999999999', razon_social='Otra')
        with self.assertRaises(ProductoNotFoundError):
            obtener_producto(otra.empresa_id, self.producto.producto_id)
        with self.assertRaises(ProductoNotFoundError):
            obtener_producto(self.empresa.empresa_id, 'no-es-un-uuid')


class ProductoAPITestCase(APITestCase):

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
        self.data = {
            'codigo': 'GAL01',
            'nombre': 'Galletitas',
            'precio': '10.00',
            'precios_cantidad': [
                {'cantidad': 2, 'precio_total': '18.00'},
                {'cantidad': 3, 'precio_total': '25.00'},
            ]
        }

    def test_crear_producto_con_packs(self):
        response = self.client.post(reverse('producto-list'), self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        producto = Producto.objects.get(codigo='GAL01')
        self.assertEqual(producto.empresa, self.empresa)
        self.assertEqual(list(producto.precios_cantidad.values_list('cantidad', flat=True)), [2, 3])

    def test_packs_con_cantidad_repetida(self):
        self.data['precios_cantidad'][1]['cantidad'] = 2
        response = self.client.post(reverse('producto-list'), self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Producto.objects.exists())

    def test_pack_de_una_unidad(self):
        self.data['precios_cantidad'] = [{'cantidad': 1, 'precio_total': '9.00'}]
        response = self.client.post(reverse('producto-list'), self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_codigo_repetido_en_la_empresa(self):
        self.client.post(reverse('producto-list'), self.data, format='json')
        response = self.client.post(reverse('producto-list'), self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_actualizar_reemplaza_packs(self):
        self.client.post(reverse('producto-list'), self.data, format='json')
        producto = Producto.objects.get(codigo='GAL01')
        url = reverse('producto-detail', kwargs={'pk': str(producto.producto_id)})
        response = self.client.patch(url, {'precios_cantidad': [{'cantidad': 6, 'precio_total': '48.00'}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(list(PrecioCantidad.objects.filter(producto=producto).values_list('cantidad', flat=True)), [6])

    def test_detalle_normaliza_descuento_vencido(self):
        producto = Producto.objects.create(
            empresa=self.empresa, codigo='YER01', nombre='Yerba', precio=Decimal('10.00'),
            descuento=Decimal('15.00'), fecha_expiracion_descuento=timezone.now() - timedelta(hours=1),
        )
        url = reverse('producto-detail', kwargs={'pk': str(producto.producto_id)})
        response = self.client.get(url, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['data']['descuento']), Decimal('0'))

    def test_eliminar_es_baja_logica(self):
        self.client.post(reverse('producto-list'), self.data, format='json')
        producto = Producto.objects.get(codigo='GAL01')
        url = reverse('producto-detail', kwargs={'pk': str(producto.producto_id)})
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        producto.refresh_from_db()
        self.assertEqual(producto.estado, EstadoEntidades.DE_BAJA)

    def test_listado_informa_el_descuento_vigente(self):
        ahora = timezone.now()
        Producto.objects.create(
            empresa=self.empresa, codigo='YER01', nombre='Yerba', precio=Decimal('10.00'),
            descuento=Decimal('15.00'), fecha_expiracion_descuento=ahora - timedelta(hours=1),
        )
        Producto.objects.create(
            empresa=self.empresa, codigo='ARR01', nombre='Arroz', precio=Decimal('20.00'),
            descuento=Decimal('10.00'), fecha_expiracion_descuento=ahora + timedelta(days=1),
        )

        response = self.client.get(reverse('producto-list'), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        descuentos = {p['codigo']: Decimal(p['descuento']) for p in response.data['results']}
        self.assertEqual(descuentos, {'YER01': Decimal('0'), 'ARR01': Decimal('10')})

        response = self.client.get(reverse('producto-activos'), format='json')
        descuentos = {p['codigo']: Decimal(p['descuento']) for p in response.data['data']}
        self.assertEqual(descuentos['YER01'], Decimal('0'))
