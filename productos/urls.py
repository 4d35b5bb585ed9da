"""
URLs para la API REST del módulo de Productos
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from productos.views import ProductoViewSet

router = DefaultRouter()
router.register(r'productos', ProductoViewSet, basename='producto')

urlpatterns = [
    path('', include(router.urls)),
]
