from rest_framework import serializers

from precios.models import PrecioEspecial
from productos.models import Producto


class PrecioEspecialSerializer(serializers.ModelSerializer):
    producto_nombre = serializers.CharField(source='producto.nombre', read_only=True)
    precio_base = serializers.DecimalField(source='producto.precio', max_digits=12, decimal_places=2,
                                           read_only=True)

    class Meta:
        model = PrecioEspecial
        fields = [
            'precio_especial_id', 'cliente', 'producto', 'producto_nombre', 'precio_base',
            'precio', 'fecha_creacion', 'fecha_modificacion'
        ]
        read_only_fields = ['precio_especial_id', 'cliente', 'fecha_creacion', 'fecha_modificacion']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        empresa_id = self.context.get('empresa_id')
        if empresa_id is not None:
            self.fields['producto'].queryset = Producto.objects.filter(empresa_id=empresa_id)

    def validate_precio(self, value):
        if value <= 0:
            raise serializers.ValidationError("El precio especial debe ser mayor a cero.")
        return value

    def validate_producto(self, value):
        cliente_id = self.context.get('cliente_id')
        existentes = PrecioEspecial.objects.filter(cliente_id=cliente_id, producto=value)
        if self.instance is not None:
            existentes = existentes.exclude(pk=self.instance.pk)
        if existentes.exists():
            raise serializers.ValidationError("El cliente ya tiene un precio especial para este producto.")
        return value


class CalcularPrecioSerializer(serializers.Serializer):
    producto_id = serializers.UUIDField()
    cantidad = serializers.IntegerField(min_value=1)
    cliente_id = serializers.UUIDField(required=False, allow_null=True, default=None)
