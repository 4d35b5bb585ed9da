from decimal import Decimal
from functools import lru_cache

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import Usuario
from clientes.models import Cliente
from core.exceptions import PreciosCantidadInvalidosError
from core.models import Empresa
from distribucion.choices import AccesoSistema
from precios.engine import Pack, calcular_precio, calcular_precio_optimo, validar_precios_cantidad
from precios.models import PrecioEspecial
from productos.models import Producto, PrecioCantidad


def _desglose(resultado):
    return [(l.cantidad, l.precio_unitario, l.precio_total, l.veces) for l in resultado.desglose]


class CalcularPrecioOptimoTestCase(SimpleTestCase):

    def test_combina_packs_al_menor_costo(self):
        packs = [Pack(2, Decimal('18')), Pack(3, Decimal('25'))]
        resultado = calcular_precio_optimo(Decimal('10'), packs, 5)
        self.assertEqual(resultado.total, Decimal('43'))
        self.assertEqual(_desglose(resultado), [
            (2, Decimal('9.00'), Decimal('18'), 1),
            (3, Decimal('8.33'), Decimal('25'), 1),
        ])

    def test_completa_con_unidades_sueltas(self):
        resultado = calcular_precio_optimo(Decimal('10'), [Pack(3, Decimal('25'))], 4)
        self.assertEqual(resultado.total, Decimal('35'))
        self.assertEqual(_desglose(resultado), [
            (1, Decimal('10.00'), Decimal('10'), 1),
            (3, Decimal('8.33'), Decimal('25'), 1),
        ])

    def test_empate_prefiere_unidades(self):
        resultado = calcular_precio_optimo(Decimal('10'), [Pack(2, Decimal('20'))], 2)
        self.assertEqual(resultado.total, Decimal('20'))
        self.assertEqual(_desglose(resultado), [(1, Decimal('10.00'), Decimal('20'), 2)])

    def test_sin_packs_precio_por_unidad(self):
        resultado = calcular_precio_optimo(Decimal('10'), [], 3)
        self.assertEqual(resultado.total, Decimal('30'))
        self.assertEqual(len(resultado.desglose), 1)
        self.assertEqual(resultado.desglose[0].cantidad, 1)
        self.assertEqual(resultado.desglose[0].veces, 3)

    def test_pack_mas_caro_que_unidades_se_ignora(self):
        resultado = calcular_precio_optimo(Decimal('10'), [Pack(2, Decimal('25'))], 4)
        self.assertEqual(resultado.total, Decimal('40'))

    def test_acepta_diccionarios(self):
        packs = [{'cantidad': 3, 'precio_total': '25.00'}]
        resultado = calcular_precio_optimo('10', packs, 6)
        self.assertEqual(resultado.total, Decimal('50'))

    def test_cantidad_no_positiva(self):
        with self.assertRaises(ValueError):
            calcular_precio_optimo(Decimal('10'), [], 0)

    def test_coincide_con_busqueda_exhaustiva(self):
        unitario = Decimal('10')
        packs = [Pack(2, Decimal('18')), Pack(3, Decimal('25')), Pack(5, Decimal('41')), Pack(7, Decimal('58'))]
        opciones = [Pack(1, unitario)] + packs

        @lru_cache(maxsize=None)
        def minimo(n):
            if n == 0:
                return Decimal('0')
            return min(minimo(n - p.cantidad) + p.precio_total for p in opciones if p.cantidad <= n)

        for cantidad in range(1, 30):
            resultado = calcular_precio_optimo(unitario, packs, cantidad)
            self.assertEqual(resultado.total, minimo(cantidad), cantidad)
            self.assertEqual(sum(l.cantidad * l.veces for l in resultado.desglose), cantidad)
            self.assertEqual(sum(l.precio_total for l in resultado.desglose), resultado.total)


class ValidarPreciosCantidadTestCase(SimpleTestCase):

    def test_configuracion_valida(self):
        validar_precios_cantidad([Pack(2, Decimal('18')), Pack(3, Decimal('25'))])
        validar_precios_cantidad([])
        validar_precios_cantidad(None)

    def test_cantidades_repetidas(self):
        with self.assertRaises(PreciosCantidadInvalidosError):
            validar_precios_cantidad([Pack(3, Decimal('25')), Pack(3, Decimal('24'))])

    def test_cantidad_menor_a_dos(self):
        with self.assertRaises(PreciosCantidadInvalidosError):
            validar_precios_cantidad([{'cantidad': 1, 'precio_total': '9'}])

    def test_precio_no_positivo(self):
        with self.assertRaises(PreciosCantidadInvalidosError):
            validar_precios_cantidad([{'cantidad': 2, 'precio_total': '0'}])


class CalcularPrecioProductoTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.producto = Producto.objects.create(
            empresa=self.empresa, codigo='GAL01', nombre='Galletitas', precio=Decimal('10.00')
        )
        PrecioCantidad.objects.create(producto=self.producto, cantidad=3, precio_total=Decimal('25.00'))

    def test_precio_especial_reemplaza_la_unidad(self):
        resultado = calcular_precio(self.producto, 4, precio_especial=Decimal('7.00'))
        self.assertEqual(resultado.total, Decimal('28.00'))
        self.assertEqual(resultado.precio_especial, Decimal('7.00'))
        self.assertEqual(_desglose(resultado), [(1, Decimal('7.00'), Decimal('28.00'), 4)])

    def test_descuento_global_sobre_precio_especial(self):
        resultado = calcular_precio(self.producto, 4, precio_especial=Decimal('7.00'), descuento_global=Decimal('10'))
        self.assertEqual(resultado.total, Decimal('28.00'))
        self.assertEqual(resultado.descuento_global, Decimal('2.80'))
        self.assertEqual(resultado.precio_final, Decimal('25.20'))

    def test_descuento_de_producto_y_global_se_acumulan(self):
        resultado = calcular_precio(
            self.producto, 4, descuento_global=Decimal('10'), descuento_producto=Decimal('20')
        )
        self.assertEqual(resultado.total, Decimal('35.00'))
        self.assertEqual(resultado.precio_con_descuento, Decimal('28.00'))
        self.assertEqual(resultado.precio_final, Decimal('25.20'))

    def test_sin_descuentos_el_precio_final_es_el_optimizado(self):
        resultado = calcular_precio(self.producto, 3)
        self.assertEqual(resultado.precio_con_descuento, Decimal('25.00'))
        self.assertEqual(resultado.descuento_global, Decimal('0'))
        self.assertEqual(resultado.precio_final, Decimal('25.00'))


class PreciosAPITestCase(APITestCase):

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

        self.producto = Producto.objects.create(
            empresa=self.empresa, codigo='GAL01', nombre='Galletitas', precio=Decimal('10.00')
        )
        PrecioCantidad.objects.create(producto=self.producto, cantidad=2, precio_total=Decimal('18.00'))
        PrecioCantidad.objects.create(producto=self.producto, cantidad=3, precio_total=Decimal('25.00'))
        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')

    def test_calcular_precio(self):
        url = reverse('calcular_precio')
        response = self.client.post(url, {'producto_id': str(self.producto.producto_id), 'cantidad': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['precio_optimizado'], Decimal('43.00'))
        self.assertEqual(response.data['total'], Decimal('43.00'))
        self.assertEqual(len(response.data['desglose']), 2)

    def test_calcular_precio_con_precio_especial_del_cliente(self):
        PrecioEspecial.objects.create(
            empresa=self.empresa, cliente=self.cliente, producto=self.producto, precio=Decimal('7.00')
        )
        url = reverse('calcular_precio')
        data = {'producto_id': str(self.producto.producto_id), 'cantidad': 2, 'cliente_id': str(self.cliente.cliente_id)}
        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['precio_especial'], Decimal('7.00'))
        self.assertEqual(response.data['total'], Decimal('14.00'))

    def test_calcular_precio_con_descuento_global_del_cliente(self):
        self.producto.descuento = Decimal('20.00')
        self.producto.descuento_indefinido = True
        self.producto.save()
        self.cliente.descuento_global = Decimal('10.00')
        self.cliente.save()
        url = reverse('calcular_precio')
        data = {'producto_id': str(self.producto.producto_id), 'cantidad': 5, 'cliente_id': str(self.cliente.cliente_id)}
        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['precio_optimizado'], Decimal('43.00'))
        self.assertEqual(response.data['total'], Decimal('34.40'))
        self.assertEqual(response.data['descuento_global'], Decimal('3.44'))
        self.assertEqual(response.data['total_con_descuento_global'], Decimal('30.96'))

    def test_calcular_precio_sin_cliente_no_aplica_descuento_global(self):
        url = reverse('calcular_precio')
        response = self.client.post(url, {'producto_id': str(self.producto.producto_id), 'cantidad': 5}, format='json')
        self.assertEqual(response.data['descuento_global'], Decimal('0'))
        self.assertEqual(response.data['total_con_descuento_global'], response.data['total'])

    def test_calcular_precio_producto_inexistente(self):
        url = reverse('calcular_precio')
        data = {'producto_id': '00000000-0000-0000-0000-000000000000', 'cantidad': 1}
        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_calcular_precio_cantidad_invalida(self):
        url = reverse('calcular_precio')
        response = self.client.post(url, {'producto_id': str(self.producto.producto_id), 'cantidad': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_crear_precio_especial(self):
        url = reverse('cliente-precios-especiales-list', kwargs={'cliente_pk': str(self.cliente.cliente_id)})
        data = {'producto': str(self.producto.producto_id), 'precio': '8.50'}
        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PrecioEspecial.objects.filter(cliente=self.cliente).count(), 1)

        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_precio_especial_debe_ser_positivo(self):
        url = reverse('cliente-precios-especiales-list', kwargs={'cliente_pk': str(self.cliente.cliente_id)})
        data = {'producto': str(self.producto.producto_id), 'precio': '0'}
        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(PrecioEspecial.objects.exists())
