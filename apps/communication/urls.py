"""
Communication URLs - API routing.

URL Namespace:
- API: api:v1:communication:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api

api_router = DefaultRouter()
api_router.register(r'templates', views_api.NotificationTemplateViewSet, basename='template')
api_router.register(r'logs', views_api.NotificationLogViewSet, basename='log')

api_urlpatterns = [
    path('email/bulk/', views_api.BulkEmailView.as_view(), name='email-bulk'),
    path('email/quick/', views_api.QuickEmailView.as_view(), name='email-quick'),
    path('sms/quick/', views_api.QuickSmsView.as_view(), name='sms-quick'),
    path('', include(api_router.urls)),
]
