"""URL configuration for the ResourceDesk project.

The `urlpatterns` list routes URLs to views. It includes both Django admin
and application‑level routers provided by Django Rest Framework and each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/reservations/', include('apps.bookings.urls')),
    path('api/v1/organizations/', include('apps.organizations.urls')),
]
