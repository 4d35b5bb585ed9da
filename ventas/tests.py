from datetime import timedelta
from decimal import Decimal
from itertools import product as combinaciones
from unittest.mock import patch

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from accounts.models import Usuario
from clientes.models import Cliente
from core.exceptions import UsuarioNotFoundError
from core.models import Empresa
from distribucion.choices import AccesoSistema, EstadoEntrega, MetodoPago, TipoVendedor
from entregas.asignacion import AsignacionService
from entregas.models import ProductoAFavor
from entregas.services import EntregaService
from precios.models import PrecioEspecial
from productos.models import Producto, PrecioCantidad
from ventas.models import Venta, VentaProducto, VentaPago
from ventas.services import VentaService, redistribuir_descuento


class RedistribuirDescuentoTestCase(SimpleTestCase):

    def test_reparto_proporcional_exacto(self):
        finales = redistribuir_descuento([Decimal('20.00'), Decimal('80.00')], Decimal('10.00'))
        self.assertEqual(finales, [Decimal('18.00'), Decimal('72.00')])

    def test_centavos_sobrantes(self):
        finales = redistribuir_descuento([Decimal('10.00')] * 3, Decimal('1.00'))
        self.assertEqual(sum(finales), Decimal('29.00'))
        self.assertEqual(finales, [Decimal('9.66'), Decimal('9.67'), Decimal('9.67')])

    def test_sin_descuento_devuelve_los_importes(self):
        importes = [Decimal('5.00'), Decimal('7.50')]
        self.assertEqual(redistribuir_descuento(importes, Decimal('0')), importes)

    def test_suma_exacta_y_lineas_acotadas(self):
        valores = [Decimal('0.01'), Decimal('0.05'), Decimal('1.00'), Decimal('3.33'), Decimal('99.99')]
        for importes in combinaciones(valores, repeat=3):
            subtotal = sum(importes)
            for monto in (Decimal('0.01'), Decimal('0.02'), subtotal / 3, subtotal - Decimal('0.01'), subtotal):
                monto = monto.quantize(Decimal('0.01'))
                if monto <= 0 or monto > subtotal:
                    continue
                finales = redistribuir_descuento(list(importes), monto)
                self.assertEqual(sum(finales), subtotal - monto, (importes, monto))
                for original, final in zip(importes, finales):
                    self.assertGreaterEqual(final, Decimal('0'))
                    self.assertLessEqual(final, original)


class VentaServiceTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.empresa_id = self.empresa.empresa_id
        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        self.cliente_descuento = Cliente.objects.create(
            empresa=self.empresa, nombre='Supermercado Norte', descuento_global=Decimal('10.00')
        )
        self.galletitas = Producto.objects.create(
            empresa=self.empresa, codigo='GAL01', nombre='Galletitas', precio=Decimal('10.00')
        )
        PrecioCantidad.objects.create(producto=self.galletitas, cantidad=2, precio_total=Decimal('18.00'))
        PrecioCantidad.objects.create(producto=self.galletitas, cantidad=3, precio_total=Decimal('25.00'))
        self.arroz = Producto.objects.create(empresa=self.empresa, codigo='ARR01', nombre='Arroz', precio=Decimal('20.00'))
        self.aceite = Producto.objects.create(empresa=self.empresa, codigo='ACE01', nombre='Aceite', precio=Decimal('80.00'))
        self.servicio = VentaService()

    def _deuda(self, cliente):
        cliente.refresh_from_db()
        return cliente.deuda

    def _items(self, *pares):
        return [{'producto_id': p.producto_id, 'cantidad': c} for p, c in pares]

    def test_venta_a_cuenta_corriente_con_packs(self):
        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 5)), MetodoPago.CUENTA_CORRIENTE
        )
        self.assertEqual(venta.total, Decimal('43.00'))
        self.assertEqual(venta.estado_entrega, EstadoEntrega.NO_ENTREGADA)

        linea = VentaProducto.objects.get(venta=venta)
        self.assertEqual(linea.precio_optimizado, Decimal('43.00'))
        self.assertEqual(linea.precio_final_calculado, Decimal('43.00'))
        self.assertEqual([d['cantidad'] for d in linea.desglose], [2, 3])

        pago = VentaPago.objects.get(venta=venta)
        self.assertEqual(pago.metodo, MetodoPago.CUENTA_CORRIENTE)
        self.assertEqual(pago.monto, Decimal('43.00'))
        self.assertEqual(self._deuda(self.cliente), Decimal('43.00'))

    def test_venta_en_efectivo_no_genera_deuda(self):
        self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 5)), MetodoPago.EFECTIVO
        )
        self.assertEqual(self._deuda(self.cliente), Decimal('0.00'))

    def test_descuento_global_se_reparte_entre_lineas(self):
        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente_descuento.cliente_id,
            self._items((self.arroz, 1), (self.aceite, 1)), MetodoPago.EFECTIVO,
        )
        self.assertEqual(venta.subtotal, Decimal('100.00'))
        self.assertEqual(venta.descuento_global, Decimal('10.00'))
        self.assertEqual(venta.total, Decimal('90.00'))
        finales = dict(venta.items.values_list('producto_id', 'precio_final_calculado'))
        self.assertEqual(finales[self.arroz.producto_id], Decimal('18.00'))
        self.assertEqual(finales[self.aceite.producto_id], Decimal('72.00'))

    def test_descuento_del_producto(self):
        self.galletitas.descuento = Decimal('20.00')
        self.galletitas.descuento_indefinido = True
        self.galletitas.save()
        PrecioCantidad.objects.filter(producto=self.galletitas).delete()

        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 3)), MetodoPago.EFECTIVO
        )
        linea = venta.items.get()
        self.assertEqual(linea.precio_optimizado, Decimal('30.00'))
        self.assertEqual(linea.descuento_producto, Decimal('20.00'))
        self.assertEqual(linea.precio_final_calculado, Decimal('24.00'))
        self.assertEqual(venta.total, Decimal('24.00'))

    def test_precio_especial_del_cliente(self):
        PrecioEspecial.objects.create(
            empresa=self.empresa, cliente=self.cliente, producto=self.galletitas, precio=Decimal('7.00')
        )
        calculada = self.servicio.simular_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 4))
        )
        self.assertEqual(calculada.total, Decimal('28.00'))

    def test_descuento_vencido_se_persiste_al_vender_pero_no_al_simular(self):
        self.arroz.descuento = Decimal('50.00')
        self.arroz.fecha_expiracion_descuento = timezone.now() - timedelta(days=1)
        self.arroz.save()

        calculada = self.servicio.simular_venta(self.empresa_id, self.cliente.cliente_id, self._items((self.arroz, 1)))
        self.assertEqual(calculada.total, Decimal('20.00'))
        self.arroz.refresh_from_db()
        self.assertEqual(self.arroz.descuento, Decimal('50.00'))

        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.arroz, 1)), MetodoPago.EFECTIVO
        )
        self.assertEqual(venta.total, Decimal('20.00'))
        self.arroz.refresh_from_db()
        self.assertEqual(self.arroz.descuento, Decimal('0.00'))
        self.assertIsNone(self.arroz.fecha_expiracion_descuento)

    def test_pagos_mixtos(self):
        pagos = [
            {'metodo': MetodoPago.CUENTA_CORRIENTE, 'monto': Decimal('20.00')},
            {'metodo': MetodoPago.EFECTIVO, 'monto': Decimal('23.00')},
        ]
        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 5)),
            MetodoPago.CUENTA_CORRIENTE, pagos=pagos,
        )
        self.assertEqual(venta.pagos.count(), 2)
        self.assertEqual(self._deuda(self.cliente), Decimal('20.00'))

    def test_pagos_que_no_suman_el_total_se_registran_con_advertencia(self):
        pagos = [{'metodo': MetodoPago.CUENTA_CORRIENTE, 'monto': Decimal('40.00')}]
        with self.assertLogs('ventas.services', level='WARNING'):
            self.servicio.crear_venta(
                self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 5)),
                MetodoPago.CUENTA_CORRIENTE, pagos=pagos,
            )
        self.assertEqual(self._deuda(self.cliente), Decimal('40.00'))

    def test_validaciones_de_items(self):
        with self.assertRaises(ValidationError):
            self.servicio.crear_venta(self.empresa_id, self.cliente.cliente_id, [], MetodoPago.EFECTIVO)
        with self.assertRaises(ValidationError):
            self.servicio.crear_venta(
                self.empresa_id, self.cliente.cliente_id,
                self._items((self.arroz, 1), (self.arroz, 2)), MetodoPago.EFECTIVO,
            )
        with self.assertRaises(ValidationError):
            self.servicio.crear_venta(
                self.empresa_id, self.cliente.cliente_id, self._items((self.arroz, 0)), MetodoPago.EFECTIVO
            )
        self.assertFalse(Venta.objects.exists())

    def test_total_no_positivo(self):
        self.cliente.descuento_global = Decimal('100.00')
        self.cliente.save()
        with self.assertRaises(ValidationError):
            self.servicio.crear_venta(
                self.empresa_id, self.cliente.cliente_id, self._items((self.arroz, 1)), MetodoPago.EFECTIVO
            )
        self.assertFalse(Venta.objects.exists())

    def test_actualizar_ajusta_la_cuenta_corriente_por_diferencia(self):
        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 5)), MetodoPago.CUENTA_CORRIENTE
        )
        self.servicio.actualizar_venta(
            self.empresa_id, venta.venta_id, self._items((self.galletitas, 2)), MetodoPago.CUENTA_CORRIENTE
        )
        self.assertEqual(self._deuda(self.cliente), Decimal('18.00'))

        venta = self.servicio.actualizar_venta(
            self.empresa_id, venta.venta_id, self._items((self.galletitas, 2)), MetodoPago.EFECTIVO
        )
        self.assertEqual(self._deuda(self.cliente), Decimal('0.00'))
        self.assertEqual(venta.total, Decimal('18.00'))
        self.assertEqual(venta.items.count(), 1)

    def test_actualizar_con_cambio_de_cliente(self):
        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.galletitas, 5)), MetodoPago.CUENTA_CORRIENTE
        )
        self.servicio.actualizar_venta(
            self.empresa_id, venta.venta_id, self._items((self.galletitas, 5)), MetodoPago.CUENTA_CORRIENTE,
            cliente_id=self.cliente_descuento.cliente_id,
        )
        self.assertEqual(self._deuda(self.cliente), Decimal('0.00'))
        self.assertEqual(self._deuda(self.cliente_descuento), Decimal('38.70'))

    def test_actualizar_reinicia_entrega_y_borra_productos_a_favor_abiertos(self):
        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id, self._items((self.arroz, 2)), MetodoPago.EFECTIVO
        )
        EntregaService().actualizar_estado_items(
            self.empresa_id, venta.venta_id,
            [{'producto_id': self.arroz.producto_id, 'entregado': False, 'motivo': 'Sin stock'}],
        )
        self.assertEqual(ProductoAFavor.objects.filter(venta=venta).count(), 1)

        venta = self.servicio.actualizar_venta(
            self.empresa_id, venta.venta_id, self._items((self.arroz, 1)), MetodoPago.EFECTIVO
        )
        self.assertEqual(venta.estado_entrega, EstadoEntrega.NO_ENTREGADA)
        self.assertFalse(ProductoAFavor.objects.exists())

    def test_eliminar_revierte_deuda_y_productos_a_favor_abiertos(self):
        venta = self.servicio.crear_venta(
            self.empresa_id, self.cliente.cliente_id,
            self._items((self.arroz, 1), (self.aceite, 1)), MetodoPago.CUENTA_CORRIENTE,
        )
        entregas = EntregaService()
        entregas.actualizar_estado_items(self.empresa_id, venta.venta_id, [
            {'producto_id': self.arroz.producto_id, 'entregado': False, 'motivo': 'Sin stock'},
            {'producto_id': self.aceite.producto_id, 'entregado': False, 'motivo': 'Cerrado'},
        ])
        entregado = ProductoAFavor.objects.get(venta=venta, producto=self.aceite)
        entregas.marcar_producto_a_favor_entregado(self.empresa_id, entregado.producto_a_favor_id)

        self.servicio.eliminar_venta(self.empresa_id, venta.venta_id)

        self.assertFalse(Venta.objects.exists())
        self.assertEqual(self._deuda(self.cliente), Decimal('0.00'))
        restantes = ProductoAFavor.objects.all()
        self.assertEqual(len(restantes), 1)
        self.assertTrue(restantes[0].entregado)
        self.assertIsNone(restantes[0].venta_id)


class VentaAPITestCase(APITestCase):

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
        self.vendedor_user = Usuario.objects.create_user(
            username='vendedor',
            password='password123',
            first_name='Vendedor',
            last_name='User',
            email='vendedor@example.com',
            empresa=self.empresa,
            tipo_vendedor=TipoVendedor.VENDEDOR,
        )
        self.repartidor_user = Usuario.objects.create_user(
            username='repartidor',
            password='password123',
            first_name='Repartidor',
            last_name='User',
            email='repartidor@example.com',
            empresa=self.empresa,
            tipo_vendedor=TipoVendedor.REPARTIDOR,
        )
        self.client.force_authenticate(user=self.vendedor_user)

        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        self.galletitas = Producto.objects.create(
            empresa=self.empresa, codigo='GAL01', nombre='Galletitas', precio=Decimal('10.00')
        )
        PrecioCantidad.objects.create(producto=self.galletitas, cantidad=2, precio_total=Decimal('18.00'))
        PrecioCantidad.objects.create(producto=self.galletitas, cantidad=3, precio_total=Decimal('25.00'))
        self.arroz = Producto.objects.create(empresa=self.empresa, codigo='ARR01', nombre='Arroz', precio=Decimal('20.00'))

        self.venta_data = {
            'cliente_id': str(self.cliente.cliente_id),
            'metodo_pago': MetodoPago.CUENTA_CORRIENTE,
            'items': [
                {'producto_id': str(self.galletitas.producto_id), 'cantidad': 5},
                {'producto_id': str(self.arroz.producto_id), 'cantidad': 1},
            ]
        }

    def _crear_venta(self):
        response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return Venta.objects.get(venta_id=response.data['venta_id'])

    def test_vendedor_crea_venta_y_se_asigna_a_un_repartidor(self):
        response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['asignada'])
        self.assertEqual(response.data['usuario_asignado_id'], 'repartidor')
        self.assertEqual(response.data['usuario_asignado_nombre'], 'Repartidor User')

        venta = Venta.objects.get(venta_id=response.data['venta_id'])
        self.assertEqual(venta.total, Decimal('63.00'))
        self.assertEqual(venta.usuario_creador, self.vendedor_user)
        self.assertIsNotNone(venta.fecha_asignacion)
        self.cliente.refresh_from_db()
        self.assertEqual(self.cliente.deuda, Decimal('63.00'))

    def test_vendedor_sin_repartidores_la_venta_queda_sin_asignar(self):
        self.repartidor_user.is_active = False
        self.repartidor_user.save()
        response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['asignada'])
        self.assertIsNone(Venta.objects.get().usuario_asignado)

    def test_falla_en_la_asignacion_revierte_la_venta(self):
        error = UsuarioNotFoundError('Usuario repartidor no encontrado')
        with patch.object(AsignacionService, 'asignar_automaticamente', side_effect=error):
            response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Venta.objects.exists())
        self.assertFalse(VentaPago.objects.exists())
        self.cliente.refresh_from_db()
        self.assertEqual(self.cliente.deuda, Decimal('0'))

    def test_administrador_se_asigna_su_venta(self):
        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['usuario_asignado_id'], 'admin')

    def test_repartidor_no_asigna_al_crear(self):
        self.client.force_authenticate(user=self.repartidor_user)
        response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['asignada'])

    def test_crear_venta_sin_items(self):
        self.venta_data['items'] = []
        response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_crear_venta_con_producto_repetido(self):
        self.venta_data['items'].append({'producto_id': str(self.arroz.producto_id), 'cantidad': 2})
        response = self.client.post(reverse('venta-list'), self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Venta.objects.exists())

    def test_listar_y_detalle(self):
        venta = self._crear_venta()
        response = self.client.get(reverse('venta-list'), {'cliente': str(self.cliente.cliente_id)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(reverse('venta-detail', kwargs={'pk': venta.venta_id}), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['items']), 2)
        self.assertEqual(len(response.data['pagos']), 1)

    def test_simular_no_guarda(self):
        data = {'cliente_id': self.venta_data['cliente_id'], 'items': self.venta_data['items']}
        response = self.client.post(reverse('venta-simular'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], Decimal('63.00'))
        self.assertEqual(len(response.data['items']), 2)
        self.assertFalse(Venta.objects.exists())

    def test_actualizar_venta(self):
        venta = self._crear_venta()
        self.venta_data['items'] = [{'producto_id': str(self.arroz.producto_id), 'cantidad': 2}]
        url = reverse('venta-detail', kwargs={'pk': venta.venta_id})
        response = self.client.put(url, self.venta_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.cliente.refresh_from_db()
        self.assertEqual(self.cliente.deuda, Decimal('40.00'))

    def test_eliminar_requiere_permiso(self):
        venta = self._crear_venta()
        url = reverse('venta-detail', kwargs={'pk': venta.venta_id})
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.vendedor_user.puede_eliminar_ventas = True
        self.vendedor_user.save()
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Venta.objects.exists())
        self.cliente.refresh_from_db()
        self.assertEqual(self.cliente.deuda, Decimal('0.00'))

    def test_estado_entrega_por_linea(self):
        venta = self._crear_venta()
        url = reverse('venta-estado-entrega', kwargs={'pk': venta.venta_id})
        data = [
            {'producto_id': str(self.galletitas.producto_id), 'entregado': True},
            {'producto_id': str(self.arroz.producto_id), 'entregado': False, 'motivo': 'Sin stock'},
        ]
        response = self.client.put(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['estado_entrega'], EstadoEntrega.PARCIAL)
        self.assertEqual(ProductoAFavor.objects.filter(venta=venta, producto=self.arroz).count(), 1)

    def test_estado_entrega_sin_motivo(self):
        venta = self._crear_venta()
        url = reverse('venta-estado-entrega', kwargs={'pk': venta.venta_id})
        data = [{'producto_id': str(self.arroz.producto_id), 'entregado': False}]
        response = self.client.put(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(ProductoAFavor.objects.exists())

    def test_estado_de_la_venta(self):
        venta = self._crear_venta()
        url = reverse('venta-estado', kwargs={'pk': venta.venta_id})
        response = self.client.put(url, {'estado': EstadoEntrega.ENTREGADA}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        venta.refresh_from_db()
        self.assertEqual(venta.estado_entrega, EstadoEntrega.ENTREGADA)
        self.assertIsNotNone(venta.fecha_entrega)

        response = self.client.put(url, {'estado': 9}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_asignar_manual(self):
        venta = self._crear_venta()
        url = reverse('venta-asignar')
        response = self.client.post(url, {'venta_id': venta.venta_id, 'usuario_id': 'admin'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin_user)
        response = self.client.post(url, {'venta_id': venta.venta_id, 'usuario_id': 'vendedor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        venta.refresh_from_db()
        self.assertEqual(venta.usuario_asignado, self.vendedor_user)

        response = self.client.post(url, {'venta_id': venta.venta_id, 'usuario_id': 'nadie'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_asignar_automaticamente_sin_candidatos(self):
        venta = self._crear_venta()
        self.client.force_authenticate(user=self.admin_user)
        url = reverse('venta-asignar-automaticamente')
        data = {'venta_id': venta.venta_id, 'excluir_usuario_id': 'repartidor'}
        response = self.client.post(url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['asignada'])

    def test_ventas_a_cuenta_corriente_del_cliente(self):
        self._crear_venta()
        self.venta_data['metodo_pago'] = MetodoPago.EFECTIVO
        self._crear_venta()
        url = reverse('venta-cuenta-corriente')
        response = self.client.get(url, {'cliente': str(self.cliente.cliente_id)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self.client.get(url, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_ventas_de_otra_empresa_no_son_visibles(self):
        venta = self._crear_venta()
        otra = Empresa.objects.create(cuit='20999999999', razon_social='Otra')
        ajeno = Usuario.objects.create_user(
            username='ajeno',
            password='password123',
            first_name='Ajeno',
            last_name='User',
            email='ajeno@example.com',
            perfil=AccesoSistema.ADMINISTRADOR,
            empresa=otra,
        )
        self.client.force_authenticate(user=ajeno)
        response = self.client.get(reverse('venta-detail', kwargs={'pk': venta.venta_id}), format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
