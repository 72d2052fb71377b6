"""
URL configuration for usmed_web project.
"""
from django.urls import path, include

urlpatterns = [
    path('api/', include('medtools.api_urls')),
]
