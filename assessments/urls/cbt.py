from django.urls import path
from assessments.views.cbt import (
    start_cbt_exam,
    submit_cbt_exam,
    get_student_exam_result,
    get_class_exam_results,
    get_cbt_session,
    record_cbt_answer,
    submit_cbt_session,
)

urlpatterns = [
    # Exam-taking (students)
    path('exams/<str:exam_id>/start', start_cbt_exam, name='start-cbt-exam'),
    path('exams/<str:exam_id>/submit', submit_cbt_exam, name='submit-cbt-exam'),

    # Session access (students, own sessions only)
    path('sessions/<str:session_id>', get_cbt_session, name='get-cbt-session'),
    path('sessions/<str:session_id>/answer', record_cbt_answer, name='record-cbt-answer'),
    path('sessions/<str:session_id>/submit', submit_cbt_session, name='submit-cbt-session'),

    # Results
    path('results/student/<str:exam_id>', get_student_exam_result, name='cbt-student-result'),
    path('results/class/<str:exam_id>', get_class_exam_results, name='cbt-class-results'),
]
