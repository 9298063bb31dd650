from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from assessments.permissions import IsAdminOrStaff, IsSchoolAdmin
from assessments.serializers.results import TermResultPublishSerializer, TermResultSerializer
from assessments.services.roster import RosterLookup
from assessments.services.term_results import TermResultService


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def aggregate_term_result(request):
    """Aggregate a student's term and optionally publish it in the same call"""
    serializer = TermResultPublishSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = TermResultService.aggregate_and_publish(
        student_id=data['studentId'],
        class_id=data.get('classId'),
        term=data['term'],
        academic_year=data['academicYear'],
        publish=data['publish'],
        user=request.user,
    )
    return Response(TermResultSerializer(result).data, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def publish_term_result(request, result_id):
    result = TermResultService.publish(result_id, user=request.user)
    return Response(TermResultSerializer(result).data, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSchoolAdmin])
def unpublish_term_result(request, result_id):
    result = TermResultService.unpublish(result_id)
    return Response(TermResultSerializer(result).data, status=status.HTTP_200_OK)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsSchoolAdmin])
def delete_term_result(request, result_id):
    TermResultService.delete(result_id)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_student_term_results(request, student_id):
    """
    A student's term results.

    Students may only read their own published results ('me' resolves to the
    caller). Staff see every result, published or not.
    """
    user = request.user
    is_student = getattr(user, 'user_type', None) == 'student'
    if is_student or student_id == 'me':
        own = RosterLookup.student_for_user(user)
        if is_student and student_id not in ('me', own.id, own.admission_number):
            return Response(
                {'error': 'Students may only view their own results', 'code': 'permission_denied'},
                status=status.HTTP_403_FORBIDDEN
            )
        student_id = own.id

    results = TermResultService.results_for_student(
        student_id,
        term=request.query_params.get('term'),
        academic_year=request.query_params.get('academicYear'),
        published_only=is_student,
    )
    return Response(TermResultSerializer(results, many=True).data, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def get_class_term_results(request, class_id):
    results = TermResultService.results_for_class(
        class_id,
        term=request.query_params.get('term'),
        academic_year=request.query_params.get('academicYear'),
        published_only=request.query_params.get('published', '').lower() in ['true', '1', 'yes'],
    )
    return Response(TermResultSerializer(results, many=True).data, status=status.HTTP_200_OK)
