from django.urls import path
from assessments.views.term_results import (
    aggregate_term_result,
    publish_term_result,
    unpublish_term_result,
    delete_term_result,
    get_student_term_results,
    get_class_term_results,
)

urlpatterns = [
    # Aggregate, optionally publishing in the same call
    path('publish', aggregate_term_result, name='aggregate-term-result'),

    # Publication gate
    path('<str:result_id>/publish', publish_term_result, name='publish-term-result'),
    path('<str:result_id>/unpublish', unpublish_term_result, name='unpublish-term-result'),

    # Reads
    path('student/<str:student_id>', get_student_term_results, name='student-term-results'),
    path('class/<str:class_id>', get_class_term_results, name='class-term-results'),

    path('<str:result_id>', delete_term_result, name='delete-term-result'),
]
