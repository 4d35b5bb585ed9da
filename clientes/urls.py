from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_nested import routers

from clientes.views import ClienteViewSet, AbonoViewSet
from precios.views import PrecioEspecialViewSet

router = DefaultRouter()
router.register(r'clientes', ClienteViewSet, basename='cliente')

# Router anidado: /api/clientes/{cliente_pk}/...
clientes_router = routers.NestedDefaultRouter(router, r'clientes', lookup='cliente')
clientes_router.register(r'abonos', AbonoViewSet, basename='cliente-abonos')
clientes_router.register(r'precios-especiales', PrecioEspecialViewSet, basename='cliente-precios-especiales')

urlpatterns = [
    path('', include(router.urls)),
    path('', include(clientes_router.urls)),
]
