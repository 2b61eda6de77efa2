# quikprint/urls.py
"""
Root URL configuration of the QuikPrint project.

1. Storefront and back-office API (quikprint.presentation)
2. Django admin
3. API documentation (Swagger/Redoc)
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


urlpatterns = [
    path('api/', include('quikprint.presentation.urls')),

    path('admin/', admin.site.urls),

    # ====================================================================
    # API DOCUMENTATION (DRF SPECTACULAR)
    # ====================================================================
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]

# Uploaded artwork is served by Django only in development
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
