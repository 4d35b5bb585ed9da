from django.urls import path, include
from rest_framework.routers import DefaultRouter

from entregas.views import EntregaViewSet, RecorridoProgramadoViewSet, ProductoAFavorViewSet

router = DefaultRouter()
router.register(r'entregas', EntregaViewSet, basename='entrega')
router.register(r'recorridos', RecorridoProgramadoViewSet, basename='recorrido')
router.register(r'productos-a-favor', ProductoAFavorViewSet, basename='producto-a-favor')

urlpatterns = [
    path('', include(router.urls)),
]
