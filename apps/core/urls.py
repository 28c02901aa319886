"""Core URLs - admin authentication."""
from django.urls import path

from . import views_api

api_urlpatterns = [
    path('login/', views_api.AdminLoginView.as_view(), name='login'),
]
