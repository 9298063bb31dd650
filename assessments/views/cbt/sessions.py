from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from assessments.exceptions import NotFound
from assessments.models import CBTSession
from assessments.permissions import IsStudent
from assessments.serializers.cbt import CBTSessionSerializer, RecordAnswerSerializer, ScoredOutcomeSerializer
from assessments.services.cbt_session import CBTSessionService
from assessments.services.roster import RosterLookup


def _check_owner(request, session_id):
    # Sessions of other students look exactly like missing ones
    student = RosterLookup.student_for_user(request.user)
    owner_id = CBTSession.objects.filter(id=session_id).values_list('student_id', flat=True).first()
    if owner_id != student.id:
        raise NotFound(f"Session {session_id} not found")


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStudent])
def get_cbt_session(request, session_id):
    _check_owner(request, session_id)
    session = CBTSessionService.get_session(session_id)
    return Response(CBTSessionSerializer(session).data, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def record_cbt_answer(request, session_id):
    serializer = RecordAnswerSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    _check_owner(request, session_id)
    answer = CBTSessionService.record_answer(
        session_id,
        serializer.validated_data['questionId'],
        serializer.validated_data['optionIndex'],
    )
    return Response({
        'sessionId': session_id,
        'questionId': answer.question_id,
        'optionIndex': answer.selected_option,
        'recorded': True,
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def submit_cbt_session(request, session_id):
    _check_owner(request, session_id)
    outcome = CBTSessionService.submit(session_id)
    return Response(ScoredOutcomeSerializer(outcome).data, status=status.HTTP_200_OK)
