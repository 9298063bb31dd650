from .exams import start_cbt_exam, submit_cbt_exam, get_student_exam_result, get_class_exam_results
from .sessions import get_cbt_session, record_cbt_answer, submit_cbt_session
