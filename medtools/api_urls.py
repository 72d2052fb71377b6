"""
URL configuration for API endpoints.
"""
from django.urls import path
from . import api_views

urlpatterns = [
    path('lookup/', api_views.medication_lookup, name='lookup'),
    path('alternatives/', api_views.alternative_brands, name='alternatives'),
    path('safety/', api_views.safety_check, name='safety'),
]
