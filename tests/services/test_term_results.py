from decimal import Decimal
from unittest import mock

import pytest
from django.db import OperationalError

from assessments.exceptions import (
    AlreadyPublished,
    NoSubjects,
    NotFound,
    NotPublished,
    ResultAlreadyPublished,
    StorageUnavailable,
)
from assessments.models import GradeRecord, Subject, TermResult
from assessments.services.grade_records import GradeRecordService
from assessments.services.term_results import TermResultService

TERM = 'term1'
YEAR = '2024-2025'


@pytest.fixture
def graded_student(student, subject, english):
    """Mathematics 45/50 and English 30/50 in term1 2024-2025"""
    GradeRecordService.upsert(student.id, subject.id, TERM, YEAR, 45, 50)
    GradeRecordService.upsert(student.id, english.id, TERM, YEAR, 30, 50)
    return student


def aggregate(student):
    return TermResultService.aggregate(student.id, student.class_model_id, TERM, YEAR)


@pytest.mark.django_db
@pytest.mark.results
class TestAggregate:

    def test_totals_average_and_overall_grade(self, graded_student):
        result = aggregate(graded_student)

        assert result.total_marks == Decimal('75')
        assert result.total_max_marks == Decimal('100')
        assert result.average_percentage == Decimal('75.00')
        assert result.overall_grade == 'B'
        assert result.overall_remarks
        assert result.is_published is False
        assert result.published_at is None

    def test_subject_snapshot_is_ordered(self, graded_student, subject, english):
        result = aggregate(graded_student)
        result.refresh_from_db()

        assert [entry['subjectId'] for entry in result.subjects] == [subject.id, english.id]
        maths = result.subjects[0]
        assert maths['marks'] == 45.0
        assert maths['maxMarks'] == 50.0
        assert maths['percentage'] == 90.0
        assert maths['letterGrade'] == 'A'
        assert maths['gradeRecordId'] == GradeRecord.objects.get(subject=subject).id

    def test_snapshot_carries_subject_remarks(self, student, subject):
        GradeRecordService.upsert(student.id, subject.id, TERM, YEAR, 40, 50, remarks='Steady improvement')

        result = aggregate(student)
        result.refresh_from_db()

        assert result.subjects[0]['remarks'] == 'Steady improvement'

    def test_aggregation_is_idempotent(self, graded_student):
        first = aggregate(graded_student)
        second = aggregate(graded_student)

        assert second.id == first.id
        assert second.average_percentage == first.average_percentage
        assert TermResult.objects.filter(student=graded_student).count() == 1

    def test_reaggregation_picks_up_grade_changes(self, graded_student, english):
        aggregate(graded_student)
        GradeRecordService.upsert(graded_student.id, english.id, TERM, YEAR, 50, 50)

        result = aggregate(graded_student)

        assert result.total_marks == Decimal('95')
        assert result.average_percentage == Decimal('95.00')
        assert result.overall_grade == 'A'

    def test_no_grade_records(self, student):
        with pytest.raises(NoSubjects):
            aggregate(student)
        assert not TermResult.objects.exists()

    def test_records_of_other_terms_are_excluded(self, graded_student, subject):
        GradeRecordService.upsert(graded_student.id, subject.id, 'term2', YEAR, 0, 50)
        result = aggregate(graded_student)
        assert len(result.subjects) == 2

    def test_unknown_student(self):
        with pytest.raises(NotFound):
            TermResultService.aggregate('STU-MISSING', None, TERM, YEAR)


@pytest.mark.django_db
@pytest.mark.results
class TestPublish:

    def test_publish_sets_flag_and_timestamp(self, graded_student, staff_user):
        result = aggregate(graded_student)

        published = TermResultService.publish(result.id, user=staff_user)

        assert published.is_published is True
        assert published.published_at is not None
        assert published.published_by == staff_user

    def test_second_publish_is_rejected_and_keeps_timestamp(self, graded_student, clock):
        result = aggregate(graded_student)
        first = TermResultService.publish(result.id)
        published_at = first.published_at
        clock.advance(hours=1)

        with pytest.raises(AlreadyPublished):
            TermResultService.publish(result.id)

        result.refresh_from_db()
        assert result.published_at == published_at

    def test_publish_seals_grade_records(self, graded_student, subject):
        result = aggregate(graded_student)
        TermResultService.publish(result.id)

        assert GradeRecord.objects.filter(student=graded_student, is_published=True).count() == 2
        with pytest.raises(ResultAlreadyPublished):
            GradeRecordService.upsert(graded_student.id, subject.id, TERM, YEAR, 10, 50)

    def test_published_result_is_not_realtered(self, graded_student, subject):
        result = aggregate(graded_student)
        TermResultService.publish(result.id)
        GradeRecordService.upsert(graded_student.id, subject.id, TERM, YEAR, 10, 50, override=True)

        with pytest.raises(AlreadyPublished):
            aggregate(graded_student)

        result.refresh_from_db()
        assert result.total_marks == Decimal('75')
        assert result.average_percentage == Decimal('75.00')

    def test_publish_refreshes_snapshot_from_edited_grades(self, graded_student, english):
        result = aggregate(graded_student)
        GradeRecordService.upsert(graded_student.id, english.id, TERM, YEAR, 10, 50)

        published = TermResultService.publish(result.id)
        published.refresh_from_db()

        english_entry = next(entry for entry in published.subjects if entry['subjectId'] == english.id)
        sealed = GradeRecord.objects.get(student=graded_student, subject=english)
        assert english_entry['marks'] == float(sealed.marks) == 10.0
        assert published.total_marks == Decimal('55')
        assert published.average_percentage == Decimal('55.00')
        assert published.overall_grade == 'C'
        assert sealed.is_published is True

    def test_publish_includes_grades_added_after_aggregation(self, graded_student, school_class):
        result = aggregate(graded_student)
        science = Subject.objects.create(name='Basic Science', code='BSC-JSS1A', class_model=school_class, order=3)
        GradeRecordService.upsert(graded_student.id, science.id, TERM, YEAR, 25, 50)

        published = TermResultService.publish(result.id)

        assert len(published.subjects) == 3
        assert published.total_max_marks == Decimal('150')
        assert GradeRecord.objects.filter(student=graded_student, is_published=True).count() == 3

    def test_publish_without_remaining_grades(self, graded_student):
        result = aggregate(graded_student)
        for record in GradeRecord.objects.filter(student=graded_student):
            GradeRecordService.delete(record.id)

        with pytest.raises(NoSubjects):
            TermResultService.publish(result.id)

        result.refresh_from_db()
        assert result.is_published is False

    def test_publish_unknown_result(self):
        with pytest.raises(NotFound):
            TermResultService.publish('RST-MISSING')

    def test_aggregate_and_publish(self, graded_student):
        result = TermResultService.aggregate_and_publish(
            graded_student.id, None, TERM, YEAR, publish=True,
        )
        assert result.is_published is True

    def test_aggregate_and_publish_is_one_transaction(self, graded_student):
        with mock.patch.object(TermResultService, 'publish', side_effect=OperationalError('connection lost')):
            with pytest.raises(StorageUnavailable):
                TermResultService.aggregate_and_publish(graded_student.id, None, TERM, YEAR, publish=True)

        assert not TermResult.objects.filter(student=graded_student).exists()

    def test_aggregate_without_publish_flag(self, graded_student):
        result = TermResultService.aggregate_and_publish(graded_student.id, None, TERM, YEAR)
        assert result.is_published is False


@pytest.mark.django_db
@pytest.mark.results
class TestUnpublish:

    def test_unpublish_reopens_result_and_grades(self, graded_student, subject):
        result = aggregate(graded_student)
        TermResultService.publish(result.id)

        reopened = TermResultService.unpublish(result.id)

        assert reopened.is_published is False
        assert reopened.published_at is None
        assert not GradeRecord.objects.filter(student=graded_student, is_published=True).exists()
        GradeRecordService.upsert(graded_student.id, subject.id, TERM, YEAR, 50, 50)
        assert aggregate(graded_student).total_marks == Decimal('80')

    def test_unpublish_requires_published_result(self, graded_student):
        result = aggregate(graded_student)
        with pytest.raises(NotPublished):
            TermResultService.unpublish(result.id)


@pytest.mark.django_db
@pytest.mark.results
class TestReads:

    def test_results_for_student_published_only(self, graded_student):
        result = aggregate(graded_student)

        assert TermResultService.results_for_student(graded_student.id).count() == 1
        assert TermResultService.results_for_student(graded_student.id, published_only=True).count() == 0
        TermResultService.publish(result.id)
        assert TermResultService.results_for_student(graded_student.id, published_only=True).count() == 1

    def test_results_for_class_ranked_by_average(self, graded_student, create_student, subject, school_class):
        other = create_student(admission_number='JSS1A/002')
        GradeRecordService.upsert(other.id, subject.id, TERM, YEAR, 50, 50)
        aggregate(graded_student)
        aggregate(other)

        results = list(TermResultService.results_for_class(school_class.id, term=TERM, academic_year=YEAR))

        assert [r.student_id for r in results] == [other.id, graded_student.id]

    def test_unknown_class(self):
        with pytest.raises(NotFound):
            TermResultService.results_for_class('NOPE')


@pytest.mark.django_db
@pytest.mark.results
class TestDelete:

    def test_delete_unpublished_result_keeps_grades(self, graded_student):
        result = aggregate(graded_student)

        TermResultService.delete(result.id)

        assert not TermResult.objects.filter(id=result.id).exists()
        assert GradeRecord.objects.filter(student=graded_student).count() == 2

    def test_published_result_cannot_be_deleted(self, graded_student):
        result = aggregate(graded_student)
        TermResultService.publish(result.id)

        with pytest.raises(AlreadyPublished):
            TermResultService.delete(result.id)
        assert TermResult.objects.filter(id=result.id).exists()

    def test_delete_unknown_result(self):
        with pytest.raises(NotFound):
            TermResultService.delete('RST-MISSING')
