from rest_framework import serializers

from assessments.models import CBTSession, ScoredOutcome
from assessments.services.cbt_session import CBTSessionService


class CBTSessionSerializer(serializers.ModelSerializer):
    """Session state as seen by the student taking it. Never includes the answer key."""
    sessionId = serializers.CharField(source='id', read_only=True)
    examId = serializers.CharField(source='exam_id', read_only=True)
    examTitle = serializers.CharField(source='exam.title', read_only=True)
    studentId = serializers.CharField(source='student_id', read_only=True)
    startedAt = serializers.DateTimeField(source='started_at', read_only=True)
    submittedAt = serializers.DateTimeField(source='submitted_at', read_only=True)
    secondsRemaining = serializers.SerializerMethodField(method_name='get_seconds_remaining')
    answers = serializers.SerializerMethodField()

    class Meta:
        model = CBTSession
        fields = [
            'sessionId', 'examId', 'examTitle', 'studentId', 'state',
            'startedAt', 'deadline', 'submittedAt', 'secondsRemaining', 'answers',
        ]
        read_only_fields = fields

    def get_seconds_remaining(self, obj):
        return CBTSessionService.time_remaining(obj)

    def get_answers(self, obj):
        return [
            {'questionId': question_id, 'selectedOption': option}
            for question_id, option in obj.answers.order_by('question__ordinal').values_list('question_id', 'selected_option')
        ]


class ScoredOutcomeSerializer(serializers.ModelSerializer):
    sessionId = serializers.CharField(source='session_id', read_only=True)
    examId = serializers.CharField(source='exam_id', read_only=True)
    studentId = serializers.CharField(source='student_id', read_only=True)
    studentName = serializers.CharField(source='student.full_name', read_only=True)
    state = serializers.CharField(source='session.state', read_only=True)
    rawCorrectCount = serializers.IntegerField(source='raw_correct_count', read_only=True)
    totalQuestions = serializers.IntegerField(source='total_questions', read_only=True)
    passThreshold = serializers.DecimalField(source='pass_threshold', max_digits=5, decimal_places=2, read_only=True)
    autoSubmitted = serializers.BooleanField(source='auto_submitted', read_only=True)
    gradeRecordId = serializers.CharField(source='grade_record_id', read_only=True, allow_null=True)
    computedAt = serializers.DateTimeField(source='computed_at', read_only=True)

    class Meta:
        model = ScoredOutcome
        fields = [
            'sessionId', 'examId', 'studentId', 'studentName', 'state',
            'rawCorrectCount', 'totalQuestions', 'percentage', 'passThreshold',
            'passed', 'autoSubmitted', 'gradeRecordId', 'computedAt',
        ]
        read_only_fields = fields


class QuestionPayloadSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    ordinal = serializers.IntegerField()
    text = serializers.CharField()
    options = serializers.ListField(child=serializers.CharField())


class RecordAnswerSerializer(serializers.Serializer):
    questionId = serializers.IntegerField()
    optionIndex = serializers.IntegerField()


class ClassResultsSerializer(serializers.Serializer):
    examId = serializers.CharField()
    count = serializers.IntegerField()
    averageScore = serializers.DecimalField(max_digits=5, decimal_places=2)
    passCount = serializers.IntegerField()
    failCount = serializers.IntegerField()
    distribution = serializers.DictField(child=serializers.IntegerField())
    results = ScoredOutcomeSerializer(many=True)
