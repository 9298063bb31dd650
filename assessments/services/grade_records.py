"""
Grade Record Store - upserts keyed on (student, subject, term, academic year)
"""
import logging
from decimal import InvalidOperation

from django.db import IntegrityError, transaction

from assessments.exceptions import (
    AlreadyPublished,
    InvalidMarks,
    NotFound,
    ResultAlreadyPublished,
    translate_storage_errors,
)
from assessments.models import GradeRecord, TermResult
from assessments.services.roster import RosterLookup
from assessments.utils.grading import to_decimal

logger = logging.getLogger(__name__)


class GradeRecordService:
    """Writes grade records without letting them drift from sealed term results"""

    @classmethod
    def validate_marks(cls, marks, max_marks, label=''):
        prefix = f"{label}: " if label else ''
        if marks is None or max_marks is None:
            raise InvalidMarks(f"{prefix}marks and maxMarks must be provided together")
        try:
            marks, max_marks = to_decimal(marks), to_decimal(max_marks)
        except (InvalidOperation, ValueError):
            raise InvalidMarks(f"{prefix}marks and maxMarks must be numbers")
        if marks < 0 or max_marks < 0:
            raise InvalidMarks(f"{prefix}marks cannot be negative")
        if max_marks == 0:
            raise InvalidMarks(f"{prefix}maxMarks must be greater than zero")
        if marks > max_marks:
            raise InvalidMarks(f"{prefix}marks ({marks}) cannot exceed maxMarks ({max_marks})")
        return marks, max_marks

    @classmethod
    def is_sealed(cls, student_id, subject_id, term, academic_year) -> bool:
        """True when the owning term result, or the record itself, is published"""
        if TermResult.objects.filter(
            student_id=student_id, term=term, academic_year=academic_year, is_published=True
        ).exists():
            return True
        return GradeRecord.objects.filter(
            student_id=student_id, subject_id=subject_id, term=term,
            academic_year=academic_year, is_published=True
        ).exists()

    @classmethod
    @translate_storage_errors
    def upsert(cls, student_id, subject_id, term, academic_year, marks, max_marks,
               class_id=None, teacher=None, remarks='', override=False):
        """
        Create or update the grade record for the key.

        Returns:
            tuple: (GradeRecord, created)

        Raises:
            InvalidMarks: marks missing, negative, or above maxMarks
            ResultAlreadyPublished: the key is sealed and override is False
        """
        marks, max_marks = cls.validate_marks(marks, max_marks)
        student = RosterLookup.get_student(student_id)
        subject = RosterLookup.get_subject(subject_id)
        class_model = RosterLookup.get_class(class_id) if class_id else student.class_model

        with transaction.atomic():
            return cls._write(
                student=student, subject=subject, class_model=class_model,
                term=term, academic_year=academic_year,
                marks=marks, max_marks=max_marks,
                teacher=teacher, remarks=remarks or '',
                source=GradeRecord.SOURCE_MANUAL, override=override,
            )

    @classmethod
    @translate_storage_errors
    def bulk_upsert(cls, subject_id, term, academic_year, entries,
                    class_id=None, teacher=None, override=False):
        """
        Upsert many records for one subject and term. All or nothing.

        entries: iterable of dicts with student_id, marks, max_marks and optional remarks
        """
        entries = list(entries)
        for index, entry in enumerate(entries):
            cls.validate_marks(entry.get('marks'), entry.get('max_marks'), label=f"Row {index + 1}")

        subject = RosterLookup.get_subject(subject_id)
        class_model = RosterLookup.get_class(class_id) if class_id else None
        students = [RosterLookup.get_student(entry['student_id']) for entry in entries]

        results = []
        with transaction.atomic():
            for student, entry in zip(students, entries):
                marks, max_marks = cls.validate_marks(entry['marks'], entry['max_marks'])
                results.append(cls._write(
                    student=student, subject=subject,
                    class_model=class_model or student.class_model,
                    term=term, academic_year=academic_year,
                    marks=marks, max_marks=max_marks,
                    teacher=teacher, remarks=entry.get('remarks') or '',
                    source=GradeRecord.SOURCE_MANUAL, override=override,
                ))
        logger.info(f"Bulk upload wrote {len(results)} grade records for {subject.id} {term} {academic_year}")
        return results

    @classmethod
    def record_from_outcome(cls, session, breakdown):
        """
        System-scored write for a finished CBT session. Runs inside the caller's
        transaction. Returns None when the key is sealed or the exam had no questions.
        """
        exam = session.exam
        student = session.student
        if breakdown.total == 0:
            logger.warning(f"Exam {exam.id} has no questions; no grade record written for session {session.id}")
            return None
        if cls.is_sealed(student.id, exam.subject_id, exam.term, exam.academic_year):
            logger.warning(
                f"Term result for {student.id} {exam.term} {exam.academic_year} is published; "
                f"CBT score from session {session.id} not written to grade records"
            )
            return None
        record, _ = cls._write(
            student=student, subject=exam.subject, class_model=student.class_model,
            term=exam.term, academic_year=exam.academic_year,
            marks=to_decimal(breakdown.correct), max_marks=to_decimal(breakdown.total),
            teacher=None, remarks='', source=GradeRecord.SOURCE_CBT, override=False,
        )
        return record

    @classmethod
    def _write(cls, student, subject, class_model, term, academic_year, marks, max_marks,
               teacher, remarks, source, override):
        # Lock the owning term result first so publish and grade edits serialize on it
        sealed_result = TermResult.objects.select_for_update().filter(
            student=student, term=term, academic_year=academic_year, is_published=True
        ).first()
        lookup = {'student': student, 'subject': subject, 'term': term, 'academic_year': academic_year}
        record = GradeRecord.objects.select_for_update().filter(**lookup).first()

        sealed = sealed_result is not None or (record is not None and record.is_published)
        if sealed and not override:
            raise ResultAlreadyPublished(
                f"Results for {student.id} ({term} {academic_year}) are published; "
                f"{subject.name} can no longer be changed"
            )
        if sealed:
            logger.warning(f"Admin override: updating sealed grade for {student.id} {subject.id} {term} {academic_year}")

        values = {
            'class_model': class_model,
            'marks': marks,
            'max_marks': max_marks,
            'remarks': remarks,
            'source': source,
        }
        if teacher is not None and getattr(teacher, 'is_authenticated', False):
            values['teacher'] = teacher
        elif source == GradeRecord.SOURCE_CBT:
            values['teacher'] = None

        created = False
        if record is None:
            try:
                with transaction.atomic():
                    record = GradeRecord.objects.create(**lookup, **values)
                created = True
            except IntegrityError:
                # Another writer created the key first; fall through to update it
                record = GradeRecord.objects.select_for_update().get(**lookup)

        if not created:
            for field, value in values.items():
                setattr(record, field, value)
            record.save()

        logger.info(
            f"Grade record {record.id} {'created' if created else 'updated'}: "
            f"{student.id} {subject.id} {term} {academic_year} {marks}/{max_marks}"
        )
        return record, created

    @classmethod
    def list_records(cls, student_id=None, subject_id=None, class_id=None, term=None, academic_year=None):
        queryset = GradeRecord.objects.select_related('student', 'subject', 'class_model', 'teacher')
        if student_id:
            queryset = queryset.filter(student_id=student_id)
        if subject_id:
            queryset = queryset.filter(subject_id=subject_id)
        if class_id:
            queryset = queryset.filter(class_model_id=class_id)
        if term:
            queryset = queryset.filter(term=term)
        if academic_year:
            queryset = queryset.filter(academic_year=academic_year)
        return queryset

    @classmethod
    @translate_storage_errors
    def delete(cls, record_id, override=False):
        with transaction.atomic():
            try:
                record = GradeRecord.objects.select_for_update().get(id=record_id)
            except GradeRecord.DoesNotExist:
                raise NotFound(f"Grade record {record_id} not found")
            if not override and cls.is_sealed(record.student_id, record.subject_id, record.term, record.academic_year):
                raise ResultAlreadyPublished(f"Grade record {record_id} belongs to a published term result")
            record.delete()
        logger.info(f"Grade record {record_id} deleted")

    @classmethod
    @translate_storage_errors
    def publish(cls, record_id):
        """
        Seal a single grade record ahead of its term result.

        Raises:
            NotFound
            AlreadyPublished: the record is already sealed
        """
        with transaction.atomic():
            try:
                record = GradeRecord.objects.select_for_update().get(id=record_id)
            except GradeRecord.DoesNotExist:
                raise NotFound(f"Grade record {record_id} not found")
            if record.is_published:
                raise AlreadyPublished(f"Grade record {record_id} is already published")
            record.is_published = True
            record.save(update_fields=['is_published', 'updated_at'])
        logger.info(f"Grade record {record_id} published")
        return record
