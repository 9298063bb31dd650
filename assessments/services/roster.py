"""
Roster lookups used to stamp identifying fields on grade records and results
"""
from assessments.exceptions import NotFound
from assessments.models import Class, Student, Subject


class RosterLookup:
    """Read-only access to students, classes and subjects"""

    @classmethod
    def get_student(cls, student_id: str) -> Student:
        """Find a student by ID, falling back to admission number"""
        try:
            return Student.objects.select_related('class_model').get(id=student_id)
        except Student.DoesNotExist:
            try:
                return Student.objects.select_related('class_model').get(admission_number=student_id)
            except Student.DoesNotExist:
                raise NotFound(f"Student {student_id} not found")

    @classmethod
    def get_class(cls, class_id: str) -> Class:
        try:
            return Class.objects.get(id=class_id)
        except Class.DoesNotExist:
            raise NotFound(f"Class {class_id} not found")

    @classmethod
    def get_subject(cls, subject_id: str) -> Subject:
        try:
            return Subject.objects.get(id=subject_id)
        except Subject.DoesNotExist:
            try:
                return Subject.objects.get(code=subject_id)
            except Subject.DoesNotExist:
                raise NotFound(f"Subject {subject_id} not found")

    @classmethod
    def student_for_user(cls, user) -> Student:
        """Student profile of the requesting user"""
        student = getattr(user, 'student_profile', None) if user is not None else None
        if student is None:
            raise NotFound("No student profile is linked to this account")
        return student
