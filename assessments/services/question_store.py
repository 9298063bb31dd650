"""
Question Reference Store - read-only view of the question bank.

Answer keys are only returned by get_answer_key and are never part of the
question payloads handed to sessions.
"""
from assessments.exceptions import NotFound
from assessments.models import Exam
from assessments.utils.grading import to_decimal


class QuestionReferenceStore:

    @classmethod
    def get_exam(cls, exam_id: str, active_only: bool = True) -> Exam:
        queryset = Exam.objects.select_related('subject', 'exam_class')
        if active_only:
            queryset = queryset.filter(status='active')
        try:
            return queryset.get(id=exam_id)
        except Exam.DoesNotExist:
            raise NotFound(f"Exam {exam_id} not found")

    @classmethod
    def get_exam_definition(cls, exam_id: str) -> dict:
        exam = cls.get_exam(exam_id, active_only=False)
        question_ids = list(exam.questions.order_by('ordinal').values_list('id', flat=True))
        return {
            'id': exam.id,
            'subject_id': exam.subject_id,
            'duration_minutes': exam.duration_minutes,
            'pass_threshold': to_decimal(exam.pass_mark),
            'question_ids': question_ids,
            'total_questions': len(question_ids),
        }

    @classmethod
    def get_questions(cls, exam_id: str) -> list:
        exam = cls.get_exam(exam_id, active_only=False)
        return [
            {
                'id': question.id,
                'ordinal': question.ordinal,
                'text': question.question_text,
                'options': list(question.options or []),
            }
            for question in exam.questions.order_by('ordinal')
        ]

    @classmethod
    def get_answer_key(cls, exam_id: str) -> dict:
        """Server-side only: question id -> correct option index"""
        exam = cls.get_exam(exam_id, active_only=False)
        return dict(exam.questions.values_list('id', 'correct_option'))
