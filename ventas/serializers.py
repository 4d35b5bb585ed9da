from rest_framework import serializers

from accounts.models import Usuario
from clientes.models import Cliente
from distribucion.choices import MetodoPago, EstadoEntrega
from productos.models import Producto
from ventas.models import Venta, VentaProducto, VentaPago


class ProductoSerializer(serializers.ModelSerializer):
    class Meta:
        model = Producto
        fields = ['producto_id', 'codigo', 'nombre']


class ClienteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cliente
        fields = ['cliente_id', 'nombre', 'direccion']


class UsuarioSerializer(serializers.ModelSerializer):
    class Meta:
        model = Usuario
        fields = ['username', 'first_name', 'last_name']


class VentaProductoReadSerializer(serializers.ModelSerializer):
    producto = ProductoSerializer(read_only=True)

    class Meta:
        model = VentaProducto
        fields = [
            'venta_producto_id', 'producto', 'cantidad', 'precio_optimizado',
            'descuento_producto', 'precio_final_calculado', 'desglose',
            'entregado', 'motivo', 'nota', 'usuario_chequeo', 'fecha_chequeo'
        ]


class VentaPagoSerializer(serializers.ModelSerializer):
    metodo_display = serializers.CharField(source='get_metodo_display', read_only=True)

    class Meta:
        model = VentaPago
        fields = ['venta_pago_id', 'metodo', 'metodo_display', 'monto']


class VentaReadSerializer(serializers.ModelSerializer):
    cliente = ClienteSerializer(read_only=True)
    usuario_creador = UsuarioSerializer(read_only=True)
    usuario_asignado = UsuarioSerializer(read_only=True)
    items = VentaProductoReadSerializer(many=True, read_only=True)
    pagos = VentaPagoSerializer(many=True, read_only=True)
    metodo_pago_display = serializers.CharField(source='get_metodo_pago_display', read_only=True)
    estado_entrega_display = serializers.CharField(source='get_estado_entrega_display', read_only=True)

    class Meta:
        model = Venta
        fields = [
            'venta_id', 'fecha', 'cliente', 'metodo_pago', 'metodo_pago_display',
            'usuario_creador', 'usuario_asignado', 'fecha_asignacion', 'fecha_entrega',
            'subtotal', 'descuento_global', 'total', 'estado_entrega', 'estado_entrega_display',
            'items', 'pagos'
        ]


class VentaListSerializer(serializers.ModelSerializer):
    cliente_nombre = serializers.CharField(source='cliente.nombre', read_only=True)
    estado_entrega_display = serializers.CharField(source='get_estado_entrega_display', read_only=True)

    class Meta:
        model = Venta
        fields = [
            'venta_id', 'fecha', 'cliente', 'cliente_nombre', 'metodo_pago', 'total',
            'usuario_asignado', 'estado_entrega', 'estado_entrega_display'
        ]


class ItemVentaWriteSerializer(serializers.Serializer):
    producto_id = serializers.UUIDField()
    cantidad = serializers.IntegerField(min_value=1)


class PagoWriteSerializer(serializers.Serializer):
    metodo = serializers.ChoiceField(choices=MetodoPago.choices)
    monto = serializers.DecimalField(max_digits=12, decimal_places=2)


class VentaWriteSerializer(serializers.Serializer):
    cliente_id = serializers.UUIDField()
    metodo_pago = serializers.ChoiceField(choices=MetodoPago.choices)
    items = ItemVentaWriteSerializer(many=True, allow_empty=False)
    pagos = PagoWriteSerializer(many=True, required=False)

    def validate_items(self, value):
        ids = [str(item['producto_id']) for item in value]
        if len(ids) != len(set(ids)):
            raise serializers.ValidationError("No se puede repetir un producto en la misma venta.")
        return value


class SimularVentaSerializer(serializers.Serializer):
    cliente_id = serializers.UUIDField()
    items = ItemVentaWriteSerializer(many=True, allow_empty=False)


class EstadoItemSerializer(serializers.Serializer):
    producto_id = serializers.UUIDField()
    entregado = serializers.BooleanField()
    motivo = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    nota = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')


class EstadoVentaSerializer(serializers.Serializer):
    estado = serializers.ChoiceField(choices=EstadoEntrega.choices)


class AsignarVentaSerializer(serializers.Serializer):
    venta_id = serializers.IntegerField(min_value=1)
    usuario_id = serializers.CharField(max_length=25)


class AsignarAutomaticamenteSerializer(serializers.Serializer):
    venta_id = serializers.IntegerField(min_value=1)
    excluir_usuario_id = serializers.CharField(max_length=25, required=False, allow_null=True, default=None)
