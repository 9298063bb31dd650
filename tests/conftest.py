from datetime import timedelta
from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from assessments.models import Class, Exam, Question, Student, Subject

User = get_user_model()


@pytest.fixture
def api_client():
    """API client for making requests"""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def create_user():
    """Factory fixture for creating users"""
    def _create_user(email="test@example.com", password="testpass123", user_type="student", **kwargs):
        return User.objects.create_user(
            email=email,
            password=password,
            user_type=user_type,
            **kwargs
        )
    return _create_user


@pytest.fixture
def admin_user(create_user):
    """Create an admin user"""
    return create_user(
        email="admin@example.com",
        password="adminpass123",
        user_type="admin",
        is_staff=True,
        is_superuser=True
    )


@pytest.fixture
def staff_user(create_user):
    """Create a staff user"""
    return create_user(
        email="staff@example.com",
        password="staffpass123",
        user_type="staff",
        is_staff=True
    )


@pytest.fixture
def school_class():
    return Class.objects.create(name='JSS 1A', class_code='JSS1A', grade_level='JSS 1')


@pytest.fixture
def subject(school_class):
    return Subject.objects.create(name='Mathematics', code='MTH-JSS1A', class_model=school_class, order=1)


@pytest.fixture
def english(school_class):
    return Subject.objects.create(name='English Language', code='ENG-JSS1A', class_model=school_class, order=2)


@pytest.fixture
def create_student(school_class, create_user):
    """Factory fixture for students, each with their own login"""
    def _create_student(admission_number='JSS1A/001', first_name='Ada', last_name='Obi', with_user=True):
        user = None
        if with_user:
            user = create_user(email=f"{admission_number.replace('/', '.').lower()}@example.com")
        return Student.objects.create(
            admission_number=admission_number,
            first_name=first_name,
            last_name=last_name,
            user=user,
            class_model=school_class,
        )
    return _create_student


@pytest.fixture
def student(create_student):
    return create_student()


@pytest.fixture
def create_exam(subject, school_class):
    """
    Factory fixture for active exams. Question n (1-based) has four options and
    its correct option index is (n - 1) % 4.
    """
    def _create_exam(questions=10, duration_minutes=20, pass_mark=50, status='active', allow_retake=False,
                     term='term1', academic_year='2024-2025'):
        exam = Exam.objects.create(
            title='Mathematics CBT',
            subject=subject,
            exam_class=school_class,
            term=term,
            academic_year=academic_year,
            duration_minutes=duration_minutes,
            total_questions=questions,
            pass_mark=pass_mark,
            allow_retake=allow_retake,
            status=status,
        )
        for ordinal in range(1, questions + 1):
            Question.objects.create(
                exam=exam,
                ordinal=ordinal,
                question_text=f'Question {ordinal}',
                options=['A', 'B', 'C', 'D'],
                correct_option=(ordinal - 1) % 4,
            )
        return exam
    return _create_exam


@pytest.fixture
def exam(create_exam):
    """10 questions, 50% pass mark, 20 minutes"""
    return create_exam()


class FrozenClock:
    """Replacement for django.utils.timezone.now that only moves when told to"""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    frozen = FrozenClock(timezone.now())
    with mock.patch('django.utils.timezone.now', new=frozen):
        yield frozen


@pytest.fixture
def client_for():
    """Factory fixture for API clients authenticated as a given user"""
    from rest_framework.test import APIClient

    def _client_for(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client_for


@pytest.fixture
def student_client(client_for, student):
    """API client authenticated as the default student"""
    return client_for(student.user)


@pytest.fixture
def staff_client(client_for, staff_user):
    return client_for(staff_user)


@pytest.fixture
def admin_client(client_for, admin_user):
    return client_for(admin_user)
