"""
Term Result Aggregator - per-term rollup of a student's grade records.

Aggregation is re-runnable any number of times before publication and always
recomputes from the current grade records. Publication is a one-way gate:
once a result is published its stored snapshot is never touched again until
an admin explicitly unpublishes it.
"""
import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from assessments.exceptions import (
    AlreadyPublished,
    NoSubjects,
    NotFound,
    NotPublished,
    translate_storage_errors,
)
from assessments.models import GradeRecord, TermResult
from assessments.services.roster import RosterLookup
from assessments.utils.grading import ZERO, letter_grade_for, remarks_for_grade, round_percentage

logger = logging.getLogger(__name__)


def build_summary(records):
    """
    Totals and the ordered subject snapshot for a set of grade records.

    Returns:
        dict: subjects, total_marks, total_max_marks, average_percentage,
              overall_grade, overall_remarks
    """
    subjects = []
    total_marks = total_max_marks = ZERO
    for record in records:
        total_marks += record.marks
        total_max_marks += record.max_marks
        subjects.append({
            'gradeRecordId': record.id,
            'subjectId': record.subject_id,
            'subjectName': record.subject.name,
            'subjectCode': record.subject.code,
            'source': record.source,
            'marks': float(record.marks),
            'maxMarks': float(record.max_marks),
            'percentage': float(record.percentage),
            'letterGrade': record.letter_grade,
            'remarks': record.remarks,
        })

    average = round_percentage(total_marks, total_max_marks)
    overall_grade = letter_grade_for(average)
    return {
        'subjects': subjects,
        'total_marks': total_marks,
        'total_max_marks': total_max_marks,
        'average_percentage': average,
        'overall_grade': overall_grade,
        'overall_remarks': remarks_for_grade(overall_grade),
    }


class TermResultService:
    """Aggregate, publish and read term results"""

    @classmethod
    @translate_storage_errors
    def aggregate(cls, student_id, class_id, term, academic_year) -> TermResult:
        """
        Recompute the term result for (student, term, academic year) from its grade records.

        Raises:
            NotFound: unknown student or class
            NoSubjects: the student has no grade records for the term
            AlreadyPublished: the existing result is published and must be unpublished first
        """
        student = RosterLookup.get_student(student_id)
        class_model = RosterLookup.get_class(class_id) if class_id else student.class_model

        error = None
        with transaction.atomic():
            result = TermResult.objects.select_for_update().filter(
                student=student, term=term, academic_year=academic_year
            ).first()
            if result is not None and result.is_published:
                error = AlreadyPublished(
                    f"Term result {result.id} is published; unpublish it before aggregating again"
                )
            else:
                recomputed = cls._recompute(result, student, class_model, term, academic_year)
                if recomputed is None:
                    error = NoSubjects(f"No grade records for {student.id} in {term} {academic_year}")
                else:
                    result = recomputed

        if error is not None:
            raise error
        logger.info(
            f"Aggregated {result.id} for {student.id} {term} {academic_year}: "
            f"{result.total_marks}/{result.total_max_marks} ({result.average_percentage}%) {result.overall_grade}"
        )
        return result

    @classmethod
    def _recompute(cls, result, student, class_model, term, academic_year):
        """
        Rebuild the result for the key from its grade records, locking them.
        Must run inside a transaction. Returns None when there are no records.
        """
        records = list(
            GradeRecord.objects.select_for_update(of=('self',)).select_related('subject').filter(
                student=student, term=term, academic_year=academic_year
            ).order_by('subject__order', 'subject__name')
        )
        if not records:
            return None
        values = dict(build_summary(records), class_model=class_model, aggregated_at=timezone.now())
        return cls._save(result, student, term, academic_year, values)

    @classmethod
    def _save(cls, result, student, term, academic_year, values):
        if result is None:
            try:
                with transaction.atomic():
                    return TermResult.objects.create(
                        student=student, term=term, academic_year=academic_year, **values
                    )
            except IntegrityError:
                # Lost the create race to a concurrent aggregation of the same key
                result = TermResult.objects.select_for_update().get(
                    student=student, term=term, academic_year=academic_year
                )
                if result.is_published:
                    raise AlreadyPublished(f"Term result {result.id} was published concurrently")
        for field, value in values.items():
            setattr(result, field, value)
        result.save()
        return result

    @classmethod
    @translate_storage_errors
    def publish(cls, term_result_id, user=None) -> TermResult:
        """
        Publish a term result. Check-and-set under a row lock.

        The snapshot is recomputed from the grade records in the same
        transaction, so the published values are exactly the ones sealed.

        Raises:
            NotFound
            AlreadyPublished: a second publish never succeeds silently and
                never moves the original publishedAt
            NoSubjects: every grade record of the key was deleted since aggregation
        """
        error = None
        with transaction.atomic():
            result = cls._lock(term_result_id)
            if result.is_published:
                error = AlreadyPublished(
                    f"Term result {result.id} was already published at {result.published_at.isoformat()}"
                )
            else:
                previous = result.subjects
                recomputed = cls._recompute(
                    result, result.student, result.class_model, result.term, result.academic_year
                )
                if recomputed is None:
                    error = NoSubjects(
                        f"No grade records left for {result.student_id} in {result.term} {result.academic_year}"
                    )
                else:
                    if recomputed.subjects != previous:
                        logger.info(f"Term result {result.id} refreshed from changed grade records before publishing")
                    result = recomputed
                    result.is_published = True
                    result.published_at = timezone.now()
                    if user is not None and getattr(user, 'is_authenticated', False):
                        result.published_by = user
                    result.save(update_fields=['is_published', 'published_at', 'published_by', 'updated_at'])

                    record_ids = [entry['gradeRecordId'] for entry in result.subjects]
                    sealed = GradeRecord.objects.filter(id__in=record_ids).update(is_published=True)

        if error is not None:
            raise error
        logger.info(f"Published term result {result.id} ({sealed} grade records sealed)")
        return result

    @classmethod
    @translate_storage_errors
    def unpublish(cls, term_result_id) -> TermResult:
        """Admin correction path: reopen a published result and its grade records"""
        with transaction.atomic():
            result = cls._lock(term_result_id)
            if not result.is_published:
                raise NotPublished(f"Term result {result.id} is not published")
            result.is_published = False
            result.published_at = None
            result.published_by = None
            result.save(update_fields=['is_published', 'published_at', 'published_by', 'updated_at'])
            reopened = GradeRecord.objects.filter(
                student_id=result.student_id, term=result.term,
                academic_year=result.academic_year, is_published=True
            ).update(is_published=False)

        logger.warning(f"Unpublished term result {result.id} ({reopened} grade records reopened)")
        return result

    @classmethod
    @translate_storage_errors
    def aggregate_and_publish(cls, student_id, class_id, term, academic_year, publish=False, user=None):
        with transaction.atomic():
            result = cls.aggregate(student_id, class_id, term, academic_year)
            if publish:
                result = cls.publish(result.id, user=user)
        return result

    @classmethod
    @translate_storage_errors
    def delete(cls, term_result_id):
        """
        Remove an unpublished term result. Its grade records are kept.

        Raises:
            NotFound
            AlreadyPublished: published results must be unpublished first
        """
        with transaction.atomic():
            result = cls._lock(term_result_id)
            if result.is_published:
                raise AlreadyPublished(f"Term result {result.id} is published; unpublish it before deleting")
            result.delete()
        logger.info(f"Term result {term_result_id} deleted")

    @classmethod
    @translate_storage_errors
    def get(cls, term_result_id) -> TermResult:
        try:
            return TermResult.objects.select_related('student', 'class_model').get(id=term_result_id)
        except TermResult.DoesNotExist:
            raise NotFound(f"Term result {term_result_id} not found")

    @classmethod
    @translate_storage_errors
    def results_for_student(cls, student_id, term=None, academic_year=None, published_only=False):
        student = RosterLookup.get_student(student_id)
        queryset = TermResult.objects.select_related('student', 'class_model').filter(student=student)
        return cls._filter(queryset, term, academic_year, published_only)

    @classmethod
    @translate_storage_errors
    def results_for_class(cls, class_id, term=None, academic_year=None, published_only=False):
        class_model = RosterLookup.get_class(class_id)
        queryset = TermResult.objects.select_related('student', 'class_model').filter(class_model=class_model)
        return cls._filter(queryset, term, academic_year, published_only).order_by('-average_percentage')

    @classmethod
    def _filter(cls, queryset, term, academic_year, published_only):
        if term:
            queryset = queryset.filter(term=term)
        if academic_year:
            queryset = queryset.filter(academic_year=academic_year)
        if published_only:
            queryset = queryset.filter(is_published=True)
        return queryset

    @classmethod
    def _lock(cls, term_result_id) -> TermResult:
        try:
            return TermResult.objects.select_for_update().get(id=term_result_id)
        except TermResult.DoesNotExist:
            raise NotFound(f"Term result {term_result_id} not found")
