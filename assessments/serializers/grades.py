from rest_framework import serializers

from assessments.models import GradeRecord
from assessments.utils.grading import TERM_CHOICES, validate_academic_year


class GradeRecordSerializer(serializers.ModelSerializer):
    studentId = serializers.CharField(source='student_id', read_only=True)
    studentName = serializers.CharField(source='student.full_name', read_only=True)
    subjectId = serializers.CharField(source='subject_id', read_only=True)
    subjectName = serializers.CharField(source='subject.name', read_only=True)
    classId = serializers.CharField(source='class_model_id', read_only=True)
    teacherId = serializers.IntegerField(source='teacher_id', read_only=True, allow_null=True)
    academicYear = serializers.CharField(source='academic_year', read_only=True)
    maxMarks = serializers.DecimalField(source='max_marks', max_digits=7, decimal_places=2, read_only=True)
    letterGrade = serializers.CharField(source='letter_grade', read_only=True)
    isPublished = serializers.BooleanField(source='is_published', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = GradeRecord
        fields = [
            'id', 'studentId', 'studentName', 'subjectId', 'subjectName', 'classId',
            'teacherId', 'source', 'term', 'academicYear', 'marks', 'maxMarks',
            'percentage', 'letterGrade', 'remarks', 'isPublished', 'createdAt', 'updatedAt',
        ]
        read_only_fields = fields


class GradeEntrySerializer(serializers.Serializer):
    """One row of a bulk upload. Marks are range-checked by the grade record service."""
    studentId = serializers.CharField()
    marks = serializers.DecimalField(max_digits=7, decimal_places=2, required=False, allow_null=True)
    maxMarks = serializers.DecimalField(max_digits=7, decimal_places=2, required=False, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')


class GradeUploadSerializer(GradeEntrySerializer):
    subjectId = serializers.CharField()
    classId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    term = serializers.ChoiceField(choices=TERM_CHOICES)
    academicYear = serializers.CharField(validators=[validate_academic_year])
    override = serializers.BooleanField(required=False, default=False)


class BulkGradeUploadSerializer(serializers.Serializer):
    subjectId = serializers.CharField()
    classId = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    term = serializers.ChoiceField(choices=TERM_CHOICES)
    academicYear = serializers.CharField(validators=[validate_academic_year])
    override = serializers.BooleanField(required=False, default=False)
    records = GradeEntrySerializer(many=True, allow_empty=False)

    def entries(self):
        return [
            {
                'student_id': row['studentId'],
                'marks': row.get('marks'),
                'max_marks': row.get('maxMarks'),
                'remarks': row.get('remarks', ''),
            }
            for row in self.validated_data['records']
        ]
