"""
CBT Session Service - server-authoritative exam attempts.

The server stamps the deadline when a session starts and holds the only
answer map that counts. Expiry is derived from the clock alone: a session is
overdue once now > deadline + grace, whether that is noticed by the periodic
sweep or lazily by the next read, and both paths end in the same expired
state with a best-effort score of the last recorded answers.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from assessments.exceptions import (
    AlreadyActive,
    AlreadySubmitted,
    DeadlineExceeded,
    InvalidOption,
    NotFound,
    SessionNotActive,
    UnknownQuestion,
    translate_storage_errors,
)
from assessments.models import CBTSession, Question, ScoredOutcome, SessionAnswer
from assessments.services.grade_records import GradeRecordService
from assessments.services.question_store import QuestionReferenceStore
from assessments.services.roster import RosterLookup
from assessments.services.scoring import score_answers, summarize_percentages

logger = logging.getLogger(__name__)


class CBTSessionService:
    """Service for starting, answering, submitting and expiring CBT sessions"""

    @classmethod
    def grace_period(cls) -> timedelta:
        return timedelta(seconds=getattr(settings, 'CBT_SUBMISSION_GRACE_SECONDS', 0))

    @classmethod
    def is_overdue(cls, session, now) -> bool:
        return session.is_active and now > session.deadline + cls.grace_period()

    @classmethod
    @translate_storage_errors
    def start_session(cls, exam_id: str, student_id: str):
        """
        Start a timed attempt.

        Returns:
            tuple: (CBTSession, list of question dicts without the answer key)

        Raises:
            NotFound: unknown or inactive exam, unknown student
            AlreadyActive: the student has an unexpired active session for the exam
            AlreadySubmitted: the exam was already taken and does not allow retakes
        """
        exam = QuestionReferenceStore.get_exam(exam_id)
        student = RosterLookup.get_student(student_id)
        definition = QuestionReferenceStore.get_exam_definition(exam.id)
        questions = QuestionReferenceStore.get_questions(exam.id)

        now = timezone.now()
        session = error = None
        with transaction.atomic():
            existing = CBTSession.objects.select_for_update().filter(
                exam=exam, student=student, state=CBTSession.STATE_ACTIVE
            ).first()
            if existing is not None and not cls.is_overdue(existing, now):
                error = AlreadyActive(f"Session {existing.id} is already in progress for exam {exam.id}")
            else:
                if existing is not None:
                    cls._finalize(existing, CBTSession.STATE_EXPIRED, now)
                previous = None
                if not exam.allow_retake:
                    previous = ScoredOutcome.objects.filter(exam=exam, student=student).order_by('-computed_at').first()
                if previous is not None:
                    error = AlreadySubmitted(f"Exam {exam.id} has already been taken", outcome=previous)
                else:
                    try:
                        with transaction.atomic():
                            session = CBTSession.objects.create(
                                exam=exam,
                                student=student,
                                started_at=now,
                                deadline=now + timedelta(minutes=definition['duration_minutes']),
                                state=CBTSession.STATE_ACTIVE,
                            )
                    except IntegrityError:
                        error = AlreadyActive(f"A session is already in progress for exam {exam.id}")

        if error is not None:
            raise error
        logger.info(f"CBT session {session.id} started: student={student.id} exam={exam.id} deadline={session.deadline.isoformat()}")
        return session, questions

    @classmethod
    @translate_storage_errors
    def record_answer(cls, session_id: str, question_id: int, option_index: int) -> SessionAnswer:
        """
        Authoritative answer write. Overwrites any earlier answer to the same question.

        Raises:
            NotFound, SessionNotActive, UnknownQuestion, InvalidOption
        """
        now = timezone.now()
        answer = None
        with transaction.atomic():
            session = cls._lock(session_id)
            accepting = session.is_active and not session.is_past_deadline(now)
            if accepting:
                question = Question.objects.filter(id=question_id, exam_id=session.exam_id).first()
                if question is None:
                    raise UnknownQuestion(f"Question {question_id} is not part of exam {session.exam_id}")
                if option_index < 0 or option_index >= question.option_count:
                    raise InvalidOption(f"Option {option_index} does not exist for question {question_id}")
                answer, _ = SessionAnswer.objects.update_or_create(
                    session=session,
                    question=question,
                    defaults={'selected_option': option_index},
                )
            elif cls.is_overdue(session, now):
                cls._finalize(session, CBTSession.STATE_EXPIRED, now)

        if answer is None:
            raise SessionNotActive(f"Session {session_id} is no longer accepting answers")
        return answer

    @classmethod
    @translate_storage_errors
    def submit(cls, session_id: str) -> ScoredOutcome:
        """
        Submit a session and score it. Exactly once per session.

        Raises:
            NotFound
            AlreadySubmitted: the session is terminal; carries the existing outcome
            DeadlineExceeded: submitted after deadline + grace; the session is
                expired and the best-effort outcome is attached
        """
        now = timezone.now()
        error = None
        with transaction.atomic():
            session = cls._lock(session_id)
            if session.is_terminal:
                outcome = ScoredOutcome.objects.filter(session=session).first()
                error = AlreadySubmitted(f"Session {session_id} was already {session.state}", outcome=outcome)
            elif cls.is_overdue(session, now):
                outcome = cls._finalize(session, CBTSession.STATE_EXPIRED, now)
                error = DeadlineExceeded(
                    f"Session {session_id} passed its deadline at {session.deadline.isoformat()}; "
                    f"it was scored from the last recorded answers",
                    outcome=outcome,
                )
            else:
                outcome = cls._finalize(session, CBTSession.STATE_SUBMITTED, now)

        if error is not None:
            raise error
        return outcome

    @classmethod
    @translate_storage_errors
    def submit_for_exam(cls, exam_id: str, student_id: str) -> ScoredOutcome:
        """Submit the student's latest session for an exam"""
        session = cls._latest_session(exam_id, student_id)
        return cls.submit(session.id)

    @classmethod
    @translate_storage_errors
    def get_session(cls, session_id: str) -> CBTSession:
        try:
            session = CBTSession.objects.select_related('exam', 'student').get(id=session_id)
        except CBTSession.DoesNotExist:
            raise NotFound(f"Session {session_id} not found")
        return cls._expire_if_overdue(session)

    @classmethod
    @translate_storage_errors
    def get_session_for_exam(cls, exam_id: str, student_id: str) -> CBTSession:
        return cls._expire_if_overdue(cls._latest_session(exam_id, student_id))

    @classmethod
    def time_remaining(cls, session, now=None) -> int:
        """Whole seconds until the deadline; 0 once the session is terminal or overdue"""
        return session.seconds_remaining(now or timezone.now())

    @classmethod
    def answer_map(cls, session) -> dict:
        return dict(session.answers.values_list('question_id', 'selected_option'))

    @classmethod
    @translate_storage_errors
    def outcome_for_student(cls, exam_id: str, student_id: str) -> ScoredOutcome:
        session = CBTSession.objects.filter(exam_id=exam_id, student_id=student_id).order_by('-started_at').first()
        if session is not None:
            cls._expire_if_overdue(session)
        outcome = ScoredOutcome.objects.select_related('session').filter(
            exam_id=exam_id, student_id=student_id
        ).order_by('-computed_at').first()
        if outcome is None:
            raise NotFound(f"No result for exam {exam_id} yet")
        return outcome

    @classmethod
    @translate_storage_errors
    def class_results(cls, exam_id: str) -> dict:
        """All outcomes of an exam with the distribution and average precomputed"""
        exam = QuestionReferenceStore.get_exam(exam_id, active_only=False)
        cls.expire_overdue(exam_id=exam.id)
        outcomes = list(
            ScoredOutcome.objects.select_related('student', 'session').filter(exam=exam).order_by('-percentage', 'student__last_name')
        )
        summary = summarize_percentages([outcome.percentage for outcome in outcomes])
        passed = sum(1 for outcome in outcomes if outcome.passed)
        summary.update({
            'examId': exam.id,
            'passCount': passed,
            'failCount': len(outcomes) - passed,
            'results': outcomes,
        })
        return summary

    @classmethod
    @translate_storage_errors
    def expire_overdue(cls, now=None, exam_id=None) -> list:
        """
        Sweep: expire every active session past deadline + grace and score it.

        Returns:
            list: ScoredOutcome objects created by this sweep
        """
        now = now or timezone.now()
        cutoff = now - cls.grace_period()
        candidates = CBTSession.objects.filter(state=CBTSession.STATE_ACTIVE, deadline__lt=cutoff)
        if exam_id:
            candidates = candidates.filter(exam_id=exam_id)

        outcomes = []
        for session_id in list(candidates.values_list('id', flat=True)):
            with transaction.atomic():
                session = cls._lock(session_id)
                if cls.is_overdue(session, now):
                    outcomes.append(cls._finalize(session, CBTSession.STATE_EXPIRED, now))
        if outcomes:
            logger.info(f"Expiry sweep expired {len(outcomes)} CBT session(s)")
        return outcomes

    @classmethod
    def _lock(cls, session_id) -> CBTSession:
        try:
            return CBTSession.objects.select_for_update().get(id=session_id)
        except CBTSession.DoesNotExist:
            raise NotFound(f"Session {session_id} not found")

    @classmethod
    def _latest_session(cls, exam_id, student_id) -> CBTSession:
        session = CBTSession.objects.select_related('exam', 'student').filter(
            exam_id=exam_id, student_id=student_id
        ).order_by('-started_at').first()
        if session is None:
            raise NotFound(f"No session found for exam {exam_id}")
        return session

    @classmethod
    def _expire_if_overdue(cls, session) -> CBTSession:
        now = timezone.now()
        if not cls.is_overdue(session, now):
            return session
        with transaction.atomic():
            locked = cls._lock(session.id)
            if cls.is_overdue(locked, now):
                cls._finalize(locked, CBTSession.STATE_EXPIRED, now)
        session.refresh_from_db()
        return session

    @classmethod
    def _finalize(cls, session, state, now) -> ScoredOutcome:
        """
        Move a locked active session to a terminal state, score it and write the
        grade record. Must run inside the transaction holding the session lock.
        """
        exam = session.exam
        answers = cls.answer_map(session)
        answer_key = QuestionReferenceStore.get_answer_key(exam.id)
        breakdown = score_answers(answers, answer_key, exam.pass_mark)

        session.state = state
        session.submitted_at = now if state == CBTSession.STATE_SUBMITTED else None
        session.save(update_fields=['state', 'submitted_at', 'updated_at'])

        grade_record = GradeRecordService.record_from_outcome(session, breakdown)
        outcome = ScoredOutcome.objects.create(
            session=session,
            exam=exam,
            student_id=session.student_id,
            raw_correct_count=breakdown.correct,
            total_questions=breakdown.total,
            percentage=breakdown.percentage,
            pass_threshold=breakdown.pass_threshold,
            passed=breakdown.passed,
            auto_submitted=state == CBTSession.STATE_EXPIRED,
            grade_record=grade_record,
            computed_at=now,
        )
        logger.info(
            f"CBT session {session.id} {state}: {breakdown.correct}/{breakdown.total} "
            f"({breakdown.percentage}%) passed={breakdown.passed}"
        )
        return outcome
