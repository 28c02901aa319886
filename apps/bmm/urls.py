"""
BMM URLs - API routing.

URL Namespace:
- API: api:v1:bmm:action-name
"""
from django.urls import path

from . import views_api


# =============================================================================
# API URLPATTERNS
# =============================================================================

api_urlpatterns = [
    # Member actions
    path('preferences/', views_api.PreferenceView.as_view(), name='preferences'),
    path(
        'confirm-attendance/',
        views_api.ConfirmAttendanceView.as_view(),
        name='confirm-attendance'
    ),
    path('non-attendance/', views_api.NonAttendanceView.as_view(), name='non-attendance'),

    # Admin workflow
    path('<uuid:pk>/ticket/', views_api.TicketView.as_view(), name='ticket'),
    path('<uuid:pk>/set-stage/', views_api.SetStageView.as_view(), name='set-stage'),
    path('assign-venues/', views_api.AssignVenuesView.as_view(), name='assign-venues'),
    path('check-in/', views_api.CheckInView.as_view(), name='check-in'),
    path(
        'special-vote/<uuid:pk>/decision/',
        views_api.SpecialVoteDecisionView.as_view(),
        name='special-vote-decision'
    ),
    path('statistics/', views_api.StatisticsView.as_view(), name='statistics'),

    # Campaigns
    path(
        'campaigns/invitations/',
        views_api.InvitationCampaignView.as_view(),
        name='campaign-invitations'
    ),
    path(
        'campaigns/confirmations/',
        views_api.ConfirmationCampaignView.as_view(),
        name='campaign-confirmations'
    ),
    path(
        'campaigns/special-vote-links/',
        views_api.SpecialVoteLinkCampaignView.as_view(),
        name='campaign-special-vote-links'
    ),
    path('campaigns/tickets/', views_api.TicketCampaignView.as_view(), name='campaign-tickets'),
]
