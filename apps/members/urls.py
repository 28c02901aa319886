"""
Members URLs - API routing.

URL Namespace:
- API: api:v1:members:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


# =============================================================================
# API ROUTER (DRF ViewSets)
# =============================================================================

api_router = DefaultRouter()

api_router.register(
    r'imports/history',
    views_api.ImportHistoryViewSet,
    basename='import-history'
)

api_router.register(
    r'',
    views_api.MemberViewSet,
    basename='member'
)


# =============================================================================
# API URLPATTERNS
# =============================================================================

api_urlpatterns = [
    # Self-service
    path('verify/', views_api.MemberVerifyView.as_view(), name='member-verify'),
    path('token/<str:token>/', views_api.MemberByTokenView.as_view(), name='member-by-token'),
    path(
        'token/<str:token>/financial-form/',
        views_api.FinancialFormView.as_view(),
        name='member-financial-form'
    ),
    path(
        'token/<str:token>/attendance/',
        views_api.AttendanceChoiceView.as_view(),
        name='member-attendance'
    ),

    # Imports
    path('imports/csv/', views_api.CsvImportView.as_view(), name='import-csv'),
    path('imports/informer/', views_api.InformerImportView.as_view(), name='import-informer'),

    # Must stay last: the member detail route matches any single segment
    path('', include(api_router.urls)),
]
