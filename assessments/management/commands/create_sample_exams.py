from django.core.management.base import BaseCommand
from django.db import transaction

from assessments.models import Class, Exam, Question, Student, Subject, User

SAMPLE_QUESTIONS = [
    ('What is 7 x 8?', ['54', '56', '64', '48'], 1),
    ('Which of these is a prime number?', ['21', '27', '29', '33'], 2),
    ('What is 15% of 200?', ['15', '20', '30', '45'], 2),
    ('Simplify 3/4 + 1/8', ['7/8', '4/12', '1', '5/8'], 0),
    ('What is the square root of 144?', ['11', '12', '13', '14'], 1),
]


class Command(BaseCommand):
    help = 'Create a sample class, subject, students and an active CBT exam for local testing'

    def add_arguments(self, parser):
        parser.add_argument('--class-code', default='JSS1A')
        parser.add_argument('--term', default='term1')
        parser.add_argument('--academic-year', default='2024-2025')
        parser.add_argument('--students', type=int, default=3)
        parser.add_argument('--duration', type=int, default=20, help='Exam duration in minutes')

    @transaction.atomic
    def handle(self, *args, **options):
        class_code = options['class_code'].upper()
        class_model, created = Class.objects.get_or_create(
            class_code=class_code,
            defaults={'name': class_code, 'grade_level': class_code[:-1]},
        )
        self.stdout.write(f"{'Created' if created else 'Using'} class {class_model.name}")

        subject, created = Subject.objects.get_or_create(
            code=f'MTH-{class_code}',
            defaults={'name': 'Mathematics', 'class_model': class_model},
        )
        self.stdout.write(f"{'Created' if created else 'Using'} subject {subject.name} ({subject.id})")

        for index in range(1, options['students'] + 1):
            admission_number = f'{class_code}/{index:03d}'
            if Student.objects.filter(admission_number=admission_number).exists():
                continue
            email = f'{class_code.lower()}.{index:03d}@example.com'
            user = User.objects.create_user(email=email, password='password123', user_type='student')
            student = Student.objects.create(
                admission_number=admission_number,
                first_name='Student',
                last_name=f'{index:03d}',
                user=user,
                class_model=class_model,
            )
            self.stdout.write(f'  ✓ {student.id} {admission_number} (login {email})')

        exam = Exam.objects.create(
            title=f'{subject.name} CBT',
            subject=subject,
            exam_class=class_model,
            term=options['term'],
            academic_year=options['academic_year'],
            duration_minutes=options['duration'],
            total_questions=len(SAMPLE_QUESTIONS),
            status='active',
        )
        for ordinal, (text, choices, correct) in enumerate(SAMPLE_QUESTIONS, start=1):
            Question.objects.create(exam=exam, ordinal=ordinal, question_text=text, options=choices, correct_option=correct)

        self.stdout.write(self.style.SUCCESS(f'\n✓ Created exam {exam.id} with {len(SAMPLE_QUESTIONS)} questions'))
