"""
Reports URLs - API routing.

URL Namespace:
- API: api:v1:reports:name
"""
from django.urls import path

from . import views_api

api_urlpatterns = [
    path('members/overview/', views_api.MembersOverviewView.as_view(), name='members-overview'),
    path('events/overview/', views_api.EventsOverviewView.as_view(), name='events-overview'),
    path('data-quality/', views_api.DataQualityView.as_view(), name='data-quality'),
    path('export/members/', views_api.MemberExportView.as_view(), name='export-members'),
    path(
        'export/events/<uuid:event_id>/members/',
        views_api.EventMemberExportView.as_view(), name='export-event-members',
    ),
    path(
        'export/events/<uuid:event_id>/check-ins/',
        views_api.CheckInExportView.as_view(), name='export-check-ins',
    ),
    path(
        'export/notification-logs/',
        views_api.NotificationLogExportView.as_view(), name='export-notification-logs',
    ),
]
