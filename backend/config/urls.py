"""
URL configuration for backend project.

Every app mounts its routes under `api/`; paths carry no trailing slash.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Atelier Management Admin Panel"
admin.site.site_title = "Atelier Admin Portal"
admin.site.index_title = "Welcome to the Atelier Admin Panel"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('backend.core.urls')),
    path('api/', include('backend.galleries.urls')),
    path('api/', include('backend.catalog.urls')),
    path('api/', include('backend.inventory.urls')),
    path('api/', include('backend.orders.urls')),
    path('api/', include('backend.events.urls')),
]
