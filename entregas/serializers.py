from rest_framework import serializers

from distribucion.choices import DiaSemana
from entregas.models import ProductoAFavor, RecorridoProgramado


class EntradaAgendaSerializer(serializers.Serializer):
    venta_id = serializers.IntegerField()
    cliente_id = serializers.CharField()
    cliente_nombre = serializers.CharField()
    cliente_direccion = serializers.CharField(allow_blank=True)
    latitud = serializers.DecimalField(max_digits=9, decimal_places=6, allow_null=True)
    longitud = serializers.DecimalField(max_digits=9, decimal_places=6, allow_null=True)
    estado = serializers.IntegerField()
    fecha_asignacion = serializers.DateTimeField(allow_null=True)
    fecha_entrega = serializers.DateTimeField(allow_null=True)
    repartidor_id = serializers.CharField(allow_null=True)
    orden = serializers.IntegerField()
    notas = serializers.CharField(allow_blank=True)


class ProductoAFavorSerializer(serializers.ModelSerializer):
    producto_nombre = serializers.CharField(source='producto.nombre', read_only=True)
    cliente_nombre = serializers.CharField(source='cliente.nombre', read_only=True)

    class Meta:
        model = ProductoAFavor
        fields = [
            'producto_a_favor_id', 'cliente', 'cliente_nombre', 'producto', 'producto_nombre',
            'cantidad', 'fecha_registro', 'motivo', 'nota', 'venta', 'venta_producto',
            'usuario_registro', 'entregado', 'fecha_entrega', 'usuario_entrega'
        ]
        read_only_fields = fields


class RecorridoProgramadoSerializer(serializers.ModelSerializer):
    cliente_nombre = serializers.CharField(source='cliente.nombre', read_only=True)
    dia_semana_display = serializers.CharField(source='get_dia_semana_display', read_only=True)

    class Meta:
        model = RecorridoProgramado
        fields = [
            'recorrido_id', 'vendedor', 'cliente', 'cliente_nombre', 'dia_semana',
            'dia_semana_display', 'orden', 'activo', 'fecha_creacion', 'fecha_modificacion'
        ]
        read_only_fields = ['recorrido_id', 'vendedor', 'cliente', 'fecha_creacion', 'fecha_modificacion']


class RecorridoCrearSerializer(serializers.Serializer):
    vendedor_id = serializers.CharField(max_length=25)
    cliente_id = serializers.UUIDField()
    dia_semana = serializers.ChoiceField(choices=DiaSemana.choices)
    orden = serializers.IntegerField(min_value=0, default=0)
    activo = serializers.BooleanField(default=True)


class RecorridoActualizarSerializer(serializers.Serializer):
    cliente_id = serializers.UUIDField(required=False)
    dia_semana = serializers.ChoiceField(choices=DiaSemana.choices, required=False)
    orden = serializers.IntegerField(min_value=0, required=False)
    activo = serializers.BooleanField(required=False)
