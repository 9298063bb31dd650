from rest_framework import serializers

from assessments.models import TermResult
from assessments.utils.grading import TERM_CHOICES, validate_academic_year


class TermResultSerializer(serializers.ModelSerializer):
    studentId = serializers.CharField(source='student_id', read_only=True)
    studentName = serializers.CharField(source='student.full_name', read_only=True)
    classId = serializers.CharField(source='class_model_id', read_only=True)
    className = serializers.CharField(source='class_model.name', read_only=True)
    academicYear = serializers.CharField(source='academic_year', read_only=True)
    totalMarks = serializers.DecimalField(source='total_marks', max_digits=10, decimal_places=2, read_only=True)
    totalMaxMarks = serializers.DecimalField(source='total_max_marks', max_digits=10, decimal_places=2, read_only=True)
    averagePercentage = serializers.DecimalField(source='average_percentage', max_digits=5, decimal_places=2, read_only=True)
    overallGrade = serializers.CharField(source='overall_grade', read_only=True)
    overallRemarks = serializers.CharField(source='overall_remarks', read_only=True)
    isPublished = serializers.BooleanField(source='is_published', read_only=True)
    publishedAt = serializers.DateTimeField(source='published_at', read_only=True)
    publishedBy = serializers.CharField(source='published_by.email', read_only=True, allow_null=True)
    aggregatedAt = serializers.DateTimeField(source='aggregated_at', read_only=True)

    class Meta:
        model = TermResult
        fields = [
            'id', 'studentId', 'studentName', 'classId', 'className', 'term', 'academicYear',
            'subjects', 'totalMarks', 'totalMaxMarks', 'averagePercentage',
            'overallGrade', 'overallRemarks', 'isPublished', 'publishedAt', 'publishedBy',
            'aggregatedAt',
        ]
        read_only_fields = fields


class TermResultPublishSerializer(serializers.Serializer):
    studentId = serializers.CharField()
    classId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    term = serializers.ChoiceField(choices=TERM_CHOICES)
    academicYear = serializers.CharField(validators=[validate_academic_year])
    publish = serializers.BooleanField(required=False, default=False)
