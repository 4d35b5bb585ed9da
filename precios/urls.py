from django.urls import path

from precios.views import CalcularPrecioAPIView

# Los precios especiales cuelgan de /api/clientes/{cliente_pk}/precios-especiales/
urlpatterns = [
    path('precios/calcular/', CalcularPrecioAPIView.as_view(), name='calcular_precio'),
]
