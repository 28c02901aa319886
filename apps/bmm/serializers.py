"""
BMM serializers.

Input serializers validate the workflow actions; EventMemberBmmSerializer
renders the resulting registration.
"""
from rest_framework import serializers

from apps.core.constants import BmmStage, CheckInMethod


# =============================================================================
# OUTPUT
# =============================================================================

class EventMemberBmmSerializer(serializers.Serializer):
    """Workflow view of an event member."""

    id = serializers.UUIDField(read_only=True)
    event = serializers.UUIDField(source='event_id', read_only=True)
    membership_number = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    region_desc = serializers.CharField(read_only=True)
    bmm_stage = serializers.CharField(read_only=True)
    preferred_venues = serializers.ListField(read_only=True)
    preferred_dates = serializers.ListField(read_only=True)
    preferred_times = serializers.ListField(read_only=True)
    assigned_venue_final = serializers.CharField(read_only=True)
    assigned_datetime_final = serializers.DateTimeField(read_only=True)
    is_attending = serializers.BooleanField(read_only=True)
    attendance_confirmed = serializers.BooleanField(read_only=True, allow_null=True)
    special_vote_requested = serializers.BooleanField(read_only=True)
    special_vote_status = serializers.CharField(read_only=True)
    ticket_status = serializers.CharField(read_only=True)
    ticket_token = serializers.UUIDField(read_only=True)
    checked_in = serializers.BooleanField(read_only=True)
    check_in_time = serializers.DateTimeField(read_only=True)
    last_activity_at = serializers.DateTimeField(read_only=True)


# =============================================================================
# MEMBER ACTIONS (token authorised)
# =============================================================================

class PreferenceSerializer(serializers.Serializer):
    token = serializers.CharField()
    venues = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    dates = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    times = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    intend_to_attend = serializers.BooleanField(required=False, allow_null=True, default=None)
    comments = serializers.CharField(required=False, allow_blank=True, default='')
    workplace_info = serializers.CharField(required=False, allow_blank=True, default='')
    suggested_venue = serializers.CharField(required=False, allow_blank=True, default='')
    preference_special_vote = serializers.BooleanField(
        required=False, allow_null=True, default=None,
    )


class TokenSerializer(serializers.Serializer):
    token = serializers.CharField()


class NonAttendanceSerializer(serializers.Serializer):
    token = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    request_special_vote = serializers.BooleanField(required=False, default=False)
    eligibility_reason = serializers.CharField(required=False, allow_blank=True, default='')
    distance_from_venue = serializers.CharField(required=False, allow_blank=True, default='')
    employer_work_requirement = serializers.BooleanField(required=False, default=False)
    medical_certificate_provided = serializers.BooleanField(required=False, default=False)
    additional_details = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# ADMIN ACTIONS
# =============================================================================

class EventIdSerializer(serializers.Serializer):
    event_id = serializers.UUIDField()


class RegionInvitationSerializer(EventIdSerializer):
    region_desc = serializers.CharField()


class SpecialVoteDecisionSerializer(serializers.Serializer):
    approved = serializers.BooleanField()


class CheckInSerializer(serializers.Serializer):
    token = serializers.CharField()
    venue = serializers.CharField(required=False, allow_blank=True, default='')
    method = serializers.ChoiceField(
        choices=CheckInMethod.CHOICES, required=False, default=CheckInMethod.QR_SCAN,
    )


class SetStageSerializer(serializers.Serializer):
    stage = serializers.ChoiceField(choices=BmmStage.choices)

