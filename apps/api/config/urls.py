"""
URL configuration for the Blood Donor Registry project.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from apps.core.observability.health import HealthzView, ReadyzView

urlpatterns = [
    # Health checks (no auth required)
    path('healthz', HealthzView.as_view(), name='healthz'),
    path('readyz', ReadyzView.as_view(), name='readyz'),

    # Admin
    path('admin/', admin.site.urls),

    # API
    path('api/', include('apps.core.urls')),  # API index
    path('api/auth/', include('apps.authz.urls')),  # Admin login, token refresh, me
    path('api/', include('apps.donors.urls')),  # Donors + donation ledger

    # API Schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]
