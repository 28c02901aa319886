"""E tū Events URL configuration with namespaced routing."""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

from apps.core.urls import api_urlpatterns as auth_api
from apps.members.urls import api_urlpatterns as members_api
from apps.events.urls import api_urlpatterns as events_api
from apps.bmm.urls import api_urlpatterns as bmm_api
from apps.communication.urls import api_urlpatterns as communication_api
from apps.reports.urls import api_urlpatterns as reports_api


api_v1_patterns = [
    path('auth/', include((auth_api, 'auth'))),
    path('members/', include((members_api, 'members'))),
    path('events/', include((events_api, 'events'))),
    path('bmm/', include((bmm_api, 'bmm'))),
    path('communication/', include((communication_api, 'communication'))),
    path('reports/', include((reports_api, 'reports'))),
]


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include((api_v1_patterns, 'api'), namespace='v1')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    path('accounts/', include('allauth.urls')),
]
