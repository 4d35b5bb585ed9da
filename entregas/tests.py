from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.test import APITestCase

from accounts.models import Usuario
from clientes.models import Cliente
from core.exceptions import InvalidStateTransitionError, ItemVentaNotFoundError, UsuarioNotFoundError
from core.models import Empresa
from distribucion.choices import AccesoSistema, DiaSemana, EstadoAgenda, EstadoEntrega, MetodoPago, TipoVendedor
from entregas.agenda import AgendaService
from entregas.asignacion import AsignacionService, EstrategiaAsignacion
from entregas.models import ProductoAFavor, RecorridoProgramado
from entregas.services import EntregaService, RecorridoProgramadoService, calcular_estado_venta
from productos.models import Producto
from ventas.models import VentaProducto
from ventas.services import VentaService


def crear_usuario(username, empresa, **extra):
    return Usuario.objects.create_user(
        username=username,
        password='password123',
        first_name=username.capitalize(),
        last_name='User',
        email=f'{username}@example.com',
        empresa=empresa,
        **extra
    )


class CalcularEstadoVentaTestCase(SimpleTestCase):

    def _items(self, *entregas):
        return [SimpleNamespace(entregado=e) for e in entregas]

    def test_estados(self):
        self.assertEqual(calcular_estado_venta(self._items()), EstadoEntrega.NO_ENTREGADA)
        self.assertEqual(calcular_estado_venta(self._items(False, False)), EstadoEntrega.NO_ENTREGADA)
        self.assertEqual(calcular_estado_venta(self._items(True, False)), EstadoEntrega.PARCIAL)
        self.assertEqual(calcular_estado_venta(self._items(True, True)), EstadoEntrega.ENTREGADA)


class EntregaServiceTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.empresa_id = self.empresa.empresa_id
        self.repartidor = crear_usuario('repartidor', self.empresa, tipo_vendedor=TipoVendedor.REPARTIDOR)
        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        self.arroz = Producto.objects.create(empresa=self.empresa, codigo='ARR01', nombre='Arroz', precio=Decimal('20.00'))
        self.aceite = Producto.objects.create(empresa=self.empresa, codigo='ACE01', nombre='Aceite', precio=Decimal('80.00'))
        self.venta = VentaService().crear_venta(
            self.empresa_id, self.cliente.cliente_id,
            [
                {'producto_id': self.arroz.producto_id, 'cantidad': 4},
                {'producto_id': self.aceite.producto_id, 'cantidad': 2},
            ],
            MetodoPago.EFECTIVO,
        )
        self.servicio = EntregaService()
        self.ahora = timezone.now()

    def _marcar(self, producto, entregado, motivo=''):
        return self.servicio.actualizar_estado_items(
            self.empresa_id, self.venta.venta_id,
            [{'producto_id': producto.producto_id, 'entregado': entregado, 'motivo': motivo, 'nota': ''}],
            usuario_id=self.repartidor.pk, ahora=self.ahora,
        )

    def _abiertos(self, producto):
        return ProductoAFavor.objects.filter(venta=self.venta, producto=producto, entregado=False).count()

    def test_entrega_parcial_registra_producto_a_favor(self):
        venta = self.servicio.actualizar_estado_items(self.empresa_id, self.venta.venta_id, [
            {'producto_id': self.arroz.producto_id, 'entregado': True},
            {'producto_id': self.aceite.producto_id, 'entregado': False, 'motivo': 'Sin stock'},
        ], usuario_id=self.repartidor.pk, ahora=self.ahora)

        self.assertEqual(venta.estado_entrega, EstadoEntrega.PARCIAL)
        self.assertIsNone(venta.fecha_entrega)
        credito = ProductoAFavor.objects.get(venta=self.venta)
        self.assertEqual(credito.producto, self.aceite)
        self.assertEqual(credito.cantidad, 2)
        self.assertEqual(credito.cliente, self.cliente)
        self.assertEqual(credito.motivo, 'Sin stock')
        self.assertEqual(credito.venta_producto, VentaProducto.objects.get(venta=self.venta, producto=self.aceite))

        linea = VentaProducto.objects.get(venta=self.venta, producto=self.arroz)
        self.assertTrue(linea.entregado)
        self.assertEqual(linea.usuario_chequeo, self.repartidor)
        self.assertEqual(linea.fecha_chequeo, self.ahora)

    def test_a_lo_sumo_un_producto_a_favor_abierto_por_linea(self):
        self._marcar(self.arroz, False, 'Sin stock')
        self.assertEqual(self._abiertos(self.arroz), 1)

        self._marcar(self.arroz, False, 'Sigue sin stock')
        self.assertEqual(self._abiertos(self.arroz), 1)

        self._marcar(self.arroz, True)
        self.assertEqual(self._abiertos(self.arroz), 0)

        self._marcar(self.arroz, False, 'Rechazado')
        self.assertEqual(self._abiertos(self.arroz), 1)
        self.assertEqual(ProductoAFavor.objects.get(venta=self.venta, producto=self.arroz).motivo, 'Rechazado')

    def test_entregar_linea_sin_chequear_no_genera_producto_a_favor(self):
        self._marcar(self.arroz, True)
        self.assertFalse(ProductoAFavor.objects.exists())

    def test_todas_entregadas(self):
        self._marcar(self.arroz, True)
        venta = self._marcar(self.aceite, True)
        self.assertEqual(venta.estado_entrega, EstadoEntrega.ENTREGADA)
        self.assertEqual(venta.fecha_entrega, self.ahora)

        venta = self._marcar(self.aceite, False, 'Devuelto')
        self.assertEqual(venta.estado_entrega, EstadoEntrega.PARCIAL)
        self.assertIsNone(venta.fecha_entrega)

    def test_no_entregado_requiere_motivo(self):
        with self.assertRaises(ValidationError):
            self._marcar(self.arroz, False, '  ')
        self.assertFalse(ProductoAFavor.objects.exists())
        self.assertFalse(VentaProducto.objects.get(venta=self.venta, producto=self.arroz).chequeado)

    def test_producto_ajeno_a_la_venta(self):
        otro = Producto.objects.create(empresa=self.empresa, codigo='FID01', nombre='Fideos', precio=Decimal('5.00'))
        with self.assertRaises(ItemVentaNotFoundError):
            self._marcar(otro, True)

    def test_estado_de_venta_fijado_manualmente(self):
        venta = self.servicio.actualizar_estado_venta(
            self.empresa_id, self.venta.venta_id, EstadoEntrega.ENTREGADA, ahora=self.ahora
        )
        self.assertEqual(venta.estado_entrega, EstadoEntrega.ENTREGADA)
        self.assertEqual(venta.fecha_entrega, self.ahora)
        self.assertFalse(VentaProducto.objects.filter(venta=self.venta, entregado=True).exists())

        with self.assertRaises(InvalidStateTransitionError):
            self.servicio.actualizar_estado_venta(self.empresa_id, self.venta.venta_id, 7)

    def test_marcar_producto_a_favor_entregado(self):
        self._marcar(self.arroz, False, 'Sin stock')
        credito = ProductoAFavor.objects.get()
        credito = self.servicio.marcar_producto_a_favor_entregado(
            self.empresa_id, credito.producto_a_favor_id, usuario_id=self.repartidor.pk, ahora=self.ahora
        )
        self.assertTrue(credito.entregado)
        self.assertEqual(credito.fecha_entrega, self.ahora)
        self.assertEqual(credito.usuario_entrega, self.repartidor)

        pendientes = self.servicio.productos_a_favor_cliente(self.empresa_id, self.cliente.cliente_id, solo_pendientes=True)
        self.assertEqual(pendientes.count(), 0)
        todos = self.servicio.productos_a_favor_cliente(self.empresa_id, self.cliente.cliente_id)
        self.assertEqual(todos.count(), 1)


class AsignacionServiceTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.empresa_id = self.empresa.empresa_id
        self.vendedor = crear_usuario('vendedor', self.empresa, tipo_vendedor=TipoVendedor.VENDEDOR)
        self.repartidor = crear_usuario('repartidor', self.empresa, tipo_vendedor=TipoVendedor.REPARTIDOR)
        self.mixto = crear_usuario('rv', self.empresa, tipo_vendedor=TipoVendedor.REPARTIDOR_VENDEDOR)
        cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        arroz = Producto.objects.create(empresa=self.empresa, codigo='ARR01', nombre='Arroz', precio=Decimal('20.00'))
        self.venta = VentaService().crear_venta(
            self.empresa_id, cliente.cliente_id, [{'producto_id': arroz.producto_id, 'cantidad': 1}], MetodoPago.EFECTIVO
        )

    def test_elige_el_primer_repartidor_activo(self):
        elegido = AsignacionService().asignar_automaticamente(self.empresa_id, self.venta.venta_id)
        self.assertEqual(elegido, self.repartidor)
        self.venta.refresh_from_db()
        self.assertEqual(self.venta.usuario_asignado, self.repartidor)
        self.assertIsNotNone(self.venta.fecha_asignacion)

    def test_excluye_al_usuario_indicado(self):
        elegido = AsignacionService().asignar_automaticamente(
            self.empresa_id, self.venta.venta_id, excluir_usuario_id='repartidor'
        )
        self.assertEqual(elegido, self.mixto)

    def test_sin_candidatos(self):
        Usuario.objects.filter(username__in=['repartidor', 'rv']).update(is_active=False)
        with self.assertLogs('entregas.asignacion', level='WARNING'):
            elegido = AsignacionService().asignar_automaticamente(self.empresa_id, self.venta.venta_id)
        self.assertIsNone(elegido)
        self.venta.refresh_from_db()
        self.assertIsNone(self.venta.usuario_asignado)

    def test_estrategia_configurable(self):
        class UltimoDisponible(EstrategiaAsignacion):
            def elegir(self, candidatos, excluir_usuario_id=None):
                disponibles = [u for u in candidatos if u.pk != excluir_usuario_id]
                return disponibles[-1] if disponibles else None

        elegido = AsignacionService(UltimoDisponible()).asignar_automaticamente(self.empresa_id, self.venta.venta_id)
        self.assertEqual(elegido, self.mixto)

    def test_asignacion_manual(self):
        ahora = timezone.now()
        servicio = AsignacionService()
        servicio.asignar_venta(self.empresa_id, self.venta.venta_id, 'vendedor', ahora=ahora)
        servicio.asignar_venta(self.empresa_id, self.venta.venta_id, 'vendedor', ahora=ahora)
        self.venta.refresh_from_db()
        self.assertEqual(self.venta.usuario_asignado, self.vendedor)
        self.assertEqual(self.venta.fecha_asignacion, ahora)

        with self.assertRaises(UsuarioNotFoundError):
            servicio.asignar_venta(self.empresa_id, self.venta.venta_id, 'nadie')


class AgendaServiceTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.empresa_id = self.empresa.empresa_id
        self.admin = crear_usuario('admin', self.empresa, perfil=AccesoSistema.ADMINISTRADOR)
        self.vendedor = crear_usuario('vendedor', self.empresa, tipo_vendedor=TipoVendedor.VENDEDOR)
        self.repartidor = crear_usuario('repartidor', self.empresa, tipo_vendedor=TipoVendedor.REPARTIDOR)
        self.mixto = crear_usuario('rv', self.empresa, tipo_vendedor=TipoVendedor.REPARTIDOR_VENDEDOR)
        self.oficina = crear_usuario('oficina', self.empresa)

        self.zapateria = Cliente.objects.create(empresa=self.empresa, nombre='Zapatería Sur', direccion='Mitre 10')
        self.almacen = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Centro')
        self.kiosco = Cliente.objects.create(empresa=self.empresa, nombre='Kiosco Plaza')
        self.arroz = Producto.objects.create(empresa=self.empresa, codigo='ARR01', nombre='Arroz', precio=Decimal('20.00'))

        self.ahora = timezone.make_aware(datetime(2026, 10, 19, 10, 0))
        self.hoy = date(2026, 10, 19)
        self.ayer = self.ahora - timedelta(days=1)
        self.dia = DiaSemana.desde_fecha(self.hoy)
        self.otro_dia = (self.dia + 1) % 7

    def _venta(self, cliente, creador=None, asignado=None, fecha=None):
        fecha = fecha or self.ahora
        venta = VentaService().crear_venta(
            self.empresa_id, cliente.cliente_id, [{'producto_id': self.arroz.producto_id, 'cantidad': 1}],
            MetodoPago.EFECTIVO, usuario_creador_id=creador.pk if creador else None, fecha=fecha,
        )
        if asignado is not None:
            AsignacionService().asignar_venta(self.empresa_id, venta.venta_id, asignado.pk, ahora=fecha)
        return venta

    def _recorrido(self, vendedor, cliente, dia, orden=0, activo=True):
        return RecorridoProgramado.objects.create(
            empresa=self.empresa, vendedor=vendedor, cliente=cliente, dia_semana=dia, orden=orden, activo=activo
        )

    def test_repartidor_ve_sus_ventas_del_dia_por_cliente(self):
        self._venta(self.zapateria, asignado=self.repartidor)
        self._venta(self.almacen, asignado=self.repartidor)
        self._venta(self.kiosco, asignado=self.mixto)
        vieja = self._venta(self.kiosco, asignado=self.repartidor, fecha=self.ayer)
        self._recorrido(self.repartidor, self.kiosco, self.dia)

        entradas = AgendaService().entregas_del_dia(self.empresa_id, self.repartidor, self.hoy)
        self.assertEqual([e.cliente_nombre for e in entradas], ['Almacén Centro', 'Zapatería Sur'])
        self.assertTrue(all(e.repartidor_id == 'repartidor' for e in entradas))

        EntregaService().actualizar_estado_venta(self.empresa_id, vieja.venta_id, EstadoEntrega.ENTREGADA, ahora=self.ahora)
        entradas = AgendaService().entregas_del_dia(self.empresa_id, self.repartidor, self.hoy)
        self.assertEqual(len(entradas), 3)
        entregada = next(e for e in entradas if e.venta_id == vieja.venta_id)
        self.assertEqual(entregada.estado, EstadoEntrega.ENTREGADA)
        self.assertEqual(entregada.fecha_entrega, self.ahora)

    def test_vendedor_ve_solo_sus_recorridos_del_dia(self):
        self._recorrido(self.vendedor, self.kiosco, self.dia, orden=2)
        self._recorrido(self.vendedor, self.zapateria, self.dia, orden=1)
        self._recorrido(self.vendedor, self.almacen, self.otro_dia)
        self._recorrido(self.vendedor, self.almacen, self.dia, activo=False)
        self._venta(self.almacen, asignado=self.vendedor)

        entradas = AgendaService().entregas_del_dia(self.empresa_id, self.vendedor, self.hoy)
        self.assertEqual([e.cliente_nombre for e in entradas], ['Zapatería Sur', 'Kiosco Plaza'])
        for entrada in entradas:
            self.assertEqual(entrada.venta_id, 0)
            self.assertEqual(entrada.estado, EstadoAgenda.PENDIENTE)
            self.assertEqual(entrada.fecha_asignacion.date(), self.hoy)
            self.assertIsNone(entrada.fecha_entrega)
        self.assertEqual(entradas[0].cliente_direccion, 'Mitre 10')

    def test_repartidor_vendedor_combina_ventas_y_recorridos_sin_duplicar(self):
        venta = self._venta(self.zapateria, asignado=self.mixto)
        self._recorrido(self.mixto, self.zapateria, self.dia, orden=1)
        self._recorrido(self.mixto, self.almacen, self.dia, orden=2)
        self._recorrido(self.mixto, self.kiosco, self.otro_dia)

        entradas = AgendaService().entregas_del_dia(self.empresa_id, self.mixto, self.hoy)
        self.assertEqual([(e.venta_id, e.cliente_nombre) for e in entradas], [
            (venta.venta_id, 'Zapatería Sur'),
            (0, 'Almacén Centro'),
        ])
        self.assertEqual(entradas[1].orden, 2)

    def test_administrador_se_trata_como_repartidor_vendedor(self):
        self._venta(self.zapateria, asignado=self.admin)
        self._recorrido(self.admin, self.almacen, self.dia)
        entradas = AgendaService().entregas_del_dia(self.empresa_id, self.admin, self.hoy)
        self.assertEqual(len(entradas), 2)

    def test_usuario_sin_tipo_no_tiene_lista(self):
        self._venta(self.zapateria, asignado=self.oficina)
        self.assertEqual(AgendaService().entregas_del_dia(self.empresa_id, self.oficina, self.hoy), [])

    def test_visitas_del_dia(self):
        self._venta(self.zapateria, creador=self.vendedor)
        self._venta(self.almacen, creador=self.vendedor)
        self._venta(self.kiosco, creador=self.vendedor, fecha=self.ayer)
        self._venta(self.kiosco, creador=self.mixto)

        visitas = AgendaService().visitas_del_dia(self.empresa_id, self.vendedor, self.hoy)
        self.assertEqual([v.cliente_nombre for v in visitas], ['Almacén Centro', 'Zapatería Sur'])
        self.assertEqual(AgendaService().visitas_del_dia(self.empresa_id, self.mixto, self.hoy), [])


class RecorridoProgramadoServiceTestCase(TestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.empresa_id = self.empresa.empresa_id
        self.vendedor = crear_usuario('vendedor', self.empresa, tipo_vendedor=TipoVendedor.VENDEDOR)
        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        self.servicio = RecorridoProgramadoService()

    def test_crear_actualizar_y_eliminar(self):
        recorrido = self.servicio.crear(self.empresa_id, 'vendedor', self.cliente.cliente_id, DiaSemana.LUNES, orden=3)
        self.assertEqual(recorrido.vendedor, self.vendedor)

        recorrido = self.servicio.actualizar(self.empresa_id, recorrido.recorrido_id, dia_semana=DiaSemana.VIERNES)
        self.assertEqual(recorrido.dia_semana, DiaSemana.VIERNES)
        self.assertEqual(recorrido.orden, 3)

        self.assertEqual(self.servicio.listar_por_vendedor(self.empresa_id, 'vendedor', DiaSemana.LUNES).count(), 0)
        self.assertEqual(self.servicio.listar_por_vendedor(self.empresa_id, 'vendedor', DiaSemana.VIERNES).count(), 1)

        self.servicio.eliminar(self.empresa_id, recorrido.recorrido_id)
        self.assertFalse(RecorridoProgramado.objects.exists())

    def test_dia_invalido(self):
        with self.assertRaises(ValidationError):
            self.servicio.crear(self.empresa_id, 'vendedor', self.cliente.cliente_id, 7)
        with self.assertRaises(ValidationError):
            self.servicio.listar_por_vendedor(self.empresa_id, 'vendedor', -1)

    def test_vendedor_inexistente(self):
        with self.assertRaises(UsuarioNotFoundError):
            self.servicio.crear(self.empresa_id, 'nadie', self.cliente.cliente_id, DiaSemana.LUNES)


class EntregasAPITestCase(APITestCase):

    def setUp(self):
        self.empresa = Empresa.objects.create(cuit='20123456789', razon_social='Distribuidora Test')
        self.admin = crear_usuario('admin', self.empresa, perfil=AccesoSistema.ADMINISTRADOR)
        self.vendedor = crear_usuario('vendedor', self.empresa, tipo_vendedor=TipoVendedor.VENDEDOR)
        self.repartidor = crear_usuario('repartidor', self.empresa, tipo_vendedor=TipoVendedor.REPARTIDOR)
        self.cliente = Cliente.objects.create(empresa=self.empresa, nombre='Almacén Don José')
        self.arroz = Producto.objects.create(empresa=self.empresa, codigo='ARR01', nombre='Arroz', precio=Decimal('20.00'))

    def test_mis_entregas(self):
        venta = VentaService().crear_venta(
            self.empresa.empresa_id, self.cliente.cliente_id,
            [{'producto_id': self.arroz.producto_id, 'cantidad': 1}], MetodoPago.EFECTIVO,
        )
        AsignacionService().asignar_venta(self.empresa.empresa_id, venta.venta_id, 'repartidor')

        self.client.force_authenticate(user=self.repartidor)
        response = self.client.get(reverse('entrega-mis-entregas'), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['venta_id'], venta.venta_id)
        self.assertEqual(response.data[0]['cliente_nombre'], 'Almacén Don José')

    def test_crear_recorrido_requiere_permiso(self):
        data = {
            'vendedor_id': 'vendedor',
            'cliente_id': str(self.cliente.cliente_id),
            'dia_semana': DiaSemana.MARTES,
            'orden': 1,
        }
        self.client.force_authenticate(user=self.vendedor)
        response = self.client.post(reverse('recorrido-list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('recorrido-list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['dia_semana'], DiaSemana.MARTES)

        data['dia_semana'] = 7
        response = self.client.post(reverse('recorrido-list'), data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_listar_recorridos_propios(self):
        RecorridoProgramado.objects.create(
            empresa=self.empresa, vendedor=self.vendedor, cliente=self.cliente, dia_semana=DiaSemana.LUNES
        )
        RecorridoProgramado.objects.create(
            empresa=self.empresa, vendedor=self.repartidor, cliente=self.cliente, dia_semana=DiaSemana.LUNES
        )
        self.client.force_authenticate(user=self.vendedor)
        response = self.client.get(reverse('recorrido-list'), {'vendedor': 'repartidor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['vendedor'], 'vendedor')

        response = self.client.get(reverse('recorrido-list'), {'dia_semana': 'lunes'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_marcar_producto_a_favor_entregado(self):
        venta = VentaService().crear_venta(
            self.empresa.empresa_id, self.cliente.cliente_id,
            [{'producto_id': self.arroz.producto_id, 'cantidad': 3}], MetodoPago.EFECTIVO,
        )
        EntregaService().actualizar_estado_items(self.empresa.empresa_id, venta.venta_id, [
            {'producto_id': self.arroz.producto_id, 'entregado': False, 'motivo': 'Sin stock'},
        ])
        credito = ProductoAFavor.objects.get()

        self.client.force_authenticate(user=self.repartidor)
        response = self.client.get(reverse('producto-a-favor-list'), {'pendientes': 'true'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        url = reverse('producto-a-favor-marcar-entregado', kwargs={'pk': credito.producto_a_favor_id})
        response = self.client.post(url, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        credito.refresh_from_db()
        self.assertTrue(credito.entregado)
        self.assertEqual(credito.usuario_entrega, self.repartidor)
