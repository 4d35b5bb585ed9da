from rest_framework import serializers

from clientes.models import Cliente, Abono


class ClienteSerializer(serializers.ModelSerializer):
    estado_display = serializers.CharField(source='get_estado_display', read_only=True)

    class Meta:
        model = Cliente
        fields = [
            'cliente_id', 'nombre', 'direccion', 'telefono', 'latitud', 'longitud',
            'deuda', 'descuento_global', 'estado', 'estado_display',
            'fecha_creacion', 'fecha_modificacion'
        ]
        # La deuda sólo se modifica a través de ventas y abonos
        read_only_fields = ['cliente_id', 'deuda', 'fecha_creacion', 'fecha_modificacion']

    def validate_descuento_global(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError("El descuento global debe estar entre 0 y 100.")
        return value


class AbonoSerializer(serializers.ModelSerializer):
    usuario_nombre = serializers.CharField(source='usuario.username', read_only=True, default=None)

    class Meta:
        model = Abono
        fields = ['abono_id', 'cliente', 'monto', 'fecha', 'nota', 'usuario', 'usuario_nombre']
        read_only_fields = ['abono_id', 'cliente', 'fecha', 'usuario']


class AbonoCrearSerializer(serializers.Serializer):
    monto = serializers.DecimalField(max_digits=12, decimal_places=2)
    nota = serializers.CharField(max_length=500, required=False, allow_blank=True, default='')
