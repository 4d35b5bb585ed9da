"""
Serializadores para el módulo de Productos
"""
from django.db import transaction
from django.utils import timezone
from rest_framework import serializers

from precios.engine import validar_precios_cantidad
from productos.models import Producto, PrecioCantidad
from productos.services import evaluar_descuento


class PrecioCantidadSerializer(serializers.ModelSerializer):
    class Meta:
        model = PrecioCantidad
        fields = ['precio_cantidad_id', 'cantidad', 'precio_total']
        read_only_fields = ['precio_cantidad_id']


class ProductoSerializer(serializers.ModelSerializer):
    """
    Serializador para Producto con sus packs anidados.
    Al escribir, los packs enviados reemplazan a los existentes.
    """
    precios_cantidad = PrecioCantidadSerializer(many=True, required=False)
    estado_display = serializers.CharField(source='get_estado_display', read_only=True)

    class Meta:
        model = Producto
        fields = [
            'producto_id',
            'codigo',
            'nombre',
            'precio',
            'descuento',
            'descuento_indefinido',
            'fecha_expiracion_descuento',
            'precios_cantidad',
            'estado',
            'estado_display',
            'fecha_creacion',
            'fecha_modificacion'
        ]
        read_only_fields = ['producto_id', 'fecha_creacion', 'fecha_modificacion']

    def validate_codigo(self, value):
        request = self.context.get('request')
        if request is None:
            return value
        existentes = Producto.objects.filter(empresa_id=request.user.empresa_id, codigo=value)
        if self.instance is not None:
            existentes = existentes.exclude(pk=self.instance.pk)
        if existentes.exists():
            raise serializers.ValidationError("Ya existe un producto con este código.")
        return value

    def validate_precio(self, value):
        if value <= 0:
            raise serializers.ValidationError("El precio debe ser mayor a cero.")
        return value

    def validate_descuento(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError("El descuento debe estar entre 0 y 100.")
        return value

    def validate_precios_cantidad(self, value):
        validar_precios_cantidad(value)
        return value

    def _reemplazar_packs(self, producto, packs):
        producto.precios_cantidad.all().delete()
        PrecioCantidad.objects.bulk_create([
            PrecioCantidad(producto=producto, cantidad=p['cantidad'], precio_total=p['precio_total'])
            for p in packs
        ])

    @transaction.atomic
    def create(self, validated_data):
        packs = validated_data.pop('precios_cantidad', [])
        producto = super().create(validated_data)
        self._reemplazar_packs(producto, packs)
        return producto

    @transaction.atomic
    def update(self, instance, validated_data):
        packs = validated_data.pop('precios_cantidad', None)
        producto = super().update(instance, validated_data)
        if packs is not None:
            self._reemplazar_packs(producto, packs)
        return producto


class ProductoListSerializer(serializers.ModelSerializer):
    """
    Serializador simplificado para listar productos.
    ``descuento`` es el vigente: un descuento vencido se informa en cero.
    """
    descuento = serializers.SerializerMethodField()

    class Meta:
        model = Producto
        fields = ['producto_id', 'codigo', 'nombre', 'precio', 'descuento', 'estado']

    def get_descuento(self, obj):
        return str(evaluar_descuento(obj, timezone.now()).porcentaje)
