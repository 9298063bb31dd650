from io import StringIO

import pytest
from django.core.management import call_command

from assessments.models import CBTSession, Exam, Question, ScoredOutcome, Student
from assessments.services.cbt_session import CBTSessionService


@pytest.mark.django_db
@pytest.mark.cbt
class TestExpireCommand:

    def test_expires_overdue_sessions(self, exam, student, clock):
        session, _ = CBTSessionService.start_session(exam.id, student.id)
        clock.advance(minutes=30)
        out = StringIO()

        call_command('expire_cbt_sessions', stdout=out)

        session.refresh_from_db()
        assert session.state == CBTSession.STATE_EXPIRED
        assert 'Expired 1 CBT session(s)' in out.getvalue()

    def test_dry_run_changes_nothing(self, exam, student, clock):
        session, _ = CBTSessionService.start_session(exam.id, student.id)
        clock.advance(minutes=30)
        out = StringIO()

        call_command('expire_cbt_sessions', '--dry-run', stdout=out)

        session.refresh_from_db()
        assert session.state == CBTSession.STATE_ACTIVE
        assert not ScoredOutcome.objects.exists()
        assert session.id in out.getvalue()


@pytest.mark.django_db
def test_create_sample_exams():
    call_command('create_sample_exams', '--students', '2', stdout=StringIO())

    exam = Exam.objects.get()
    assert exam.status == 'active'
    assert Question.objects.filter(exam=exam).count() == 5
    assert Student.objects.filter(user__isnull=False).count() == 2
