"""
Events URLs - API routing.

URL Namespace:
- API: api:v1:events:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api

api_router = DefaultRouter()
api_router.register(r'templates', views_api.EventTemplateViewSet, basename='event-template')
api_router.register(r'', views_api.EventViewSet, basename='event')

api_urlpatterns = [path('', include(api_router.urls))]
