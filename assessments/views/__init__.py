from .cbt import (
    start_cbt_exam,
    submit_cbt_exam,
    get_student_exam_result,
    get_class_exam_results,
    get_cbt_session,
    record_cbt_answer,
    submit_cbt_session,
)
from .grades import upload_grade, bulk_upload_grades, list_grades, delete_grade
from .term_results import (
    aggregate_term_result,
    publish_term_result,
    unpublish_term_result,
    get_student_term_results,
    get_class_term_results,
)
