from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from assessments.permissions import IsAdminOrStaff, is_school_admin
from assessments.serializers.grades import (
    BulkGradeUploadSerializer,
    GradeRecordSerializer,
    GradeUploadSerializer,
)
from assessments.services.grade_records import GradeRecordService


def _override_forbidden(request, override):
    if override and not is_school_admin(request.user):
        return Response(
            {'error': 'Only admins may change grades of published results', 'code': 'permission_denied'},
            status=status.HTTP_403_FORBIDDEN
        )
    return None


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def upload_grade(request):
    serializer = GradeUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    forbidden = _override_forbidden(request, data['override'])
    if forbidden:
        return forbidden

    record, created = GradeRecordService.upsert(
        student_id=data['studentId'],
        subject_id=data['subjectId'],
        term=data['term'],
        academic_year=data['academicYear'],
        marks=data.get('marks'),
        max_marks=data.get('maxMarks'),
        class_id=data.get('classId'),
        teacher=request.user,
        remarks=data.get('remarks', ''),
        override=data['override'],
    )
    return Response(
        GradeRecordSerializer(record).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def bulk_upload_grades(request):
    serializer = BulkGradeUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    forbidden = _override_forbidden(request, data['override'])
    if forbidden:
        return forbidden

    results = GradeRecordService.bulk_upsert(
        subject_id=data['subjectId'],
        term=data['term'],
        academic_year=data['academicYear'],
        entries=serializer.entries(),
        class_id=data.get('classId'),
        teacher=request.user,
        override=data['override'],
    )
    records = [record for record, _ in results]
    return Response({
        'created': sum(1 for _, created in results if created),
        'updated': sum(1 for _, created in results if not created),
        'records': GradeRecordSerializer(records, many=True).data,
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def list_grades(request):
    params = request.query_params
    records = GradeRecordService.list_records(
        student_id=params.get('student'),
        subject_id=params.get('subject'),
        class_id=params.get('classId'),
        term=params.get('term'),
        academic_year=params.get('academicYear'),
    )
    return Response(GradeRecordSerializer(records, many=True).data, status=status.HTTP_200_OK)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def delete_grade(request, record_id):
    override = str(request.query_params.get('override', '')).lower() in ['true', '1', 'yes']
    forbidden = _override_forbidden(request, override)
    if forbidden:
        return forbidden
    GradeRecordService.delete(record_id, override=override)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def publish_grade(request, record_id):
    """Seal one grade record before its term result is published"""
    record = GradeRecordService.publish(record_id)
    return Response(GradeRecordSerializer(record).data, status=status.HTTP_200_OK)
