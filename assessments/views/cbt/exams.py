from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from assessments.permissions import IsAdminOrStaff, IsStudent
from assessments.serializers.cbt import (
    CBTSessionSerializer,
    ClassResultsSerializer,
    QuestionPayloadSerializer,
    ScoredOutcomeSerializer,
)
from assessments.services.cbt_session import CBTSessionService
from assessments.services.roster import RosterLookup


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def start_cbt_exam(request, exam_id):
    student = RosterLookup.student_for_user(request.user)
    session, questions = CBTSessionService.start_session(exam_id, student.id)
    return Response({
        'session': CBTSessionSerializer(session).data,
        'questions': QuestionPayloadSerializer(questions, many=True).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def submit_cbt_exam(request, exam_id):
    # Answers in the body are advisory; only answers recorded through the answer endpoint count
    student = RosterLookup.student_for_user(request.user)
    outcome = CBTSessionService.submit_for_exam(exam_id, student.id)
    return Response(ScoredOutcomeSerializer(outcome).data, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStudent])
def get_student_exam_result(request, exam_id):
    student = RosterLookup.student_for_user(request.user)
    outcome = CBTSessionService.outcome_for_student(exam_id, student.id)
    return Response(ScoredOutcomeSerializer(outcome).data, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def get_class_exam_results(request, exam_id):
    summary = CBTSessionService.class_results(exam_id)
    return Response(ClassResultsSerializer(summary).data, status=status.HTTP_200_OK)
