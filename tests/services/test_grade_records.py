from decimal import Decimal

import pytest

from assessments.exceptions import AlreadyPublished, InvalidMarks, NotFound, ResultAlreadyPublished
from assessments.models import GradeRecord, TermResult
from assessments.services.grade_records import GradeRecordService

TERM = 'term1'
YEAR = '2024-2025'


def upsert(student, subject, marks, max_marks, **kwargs):
    return GradeRecordService.upsert(student.id, subject.id, TERM, YEAR, marks, max_marks, **kwargs)


def seal(student, school_class):
    return TermResult.objects.create(
        student=student, class_model=school_class, term=TERM, academic_year=YEAR, is_published=True,
    )


@pytest.mark.django_db
@pytest.mark.grades
class TestUpsert:

    def test_first_write_creates_record(self, student, subject, staff_user):
        record, created = upsert(student, subject, 45, 50, teacher=staff_user, remarks='Good work')

        assert created is True
        assert record.percentage == Decimal('90.00')
        assert record.letter_grade == 'A'
        assert record.teacher == staff_user
        assert record.class_model_id == student.class_model_id
        assert record.source == GradeRecord.SOURCE_MANUAL
        assert record.is_published is False

    def test_second_write_updates_same_record(self, student, subject):
        first, _ = upsert(student, subject, 45, 50)
        second, created = upsert(student, subject, 30, 50)

        assert created is False
        assert second.id == first.id
        assert GradeRecord.objects.filter(student=student, subject=subject).count() == 1
        second.refresh_from_db()
        assert second.marks == Decimal('30')
        assert second.percentage == Decimal('60.00')
        assert second.letter_grade == 'C'

    def test_admission_number_and_subject_code_are_accepted(self, student, subject):
        record, _ = GradeRecordService.upsert(student.admission_number, subject.code, TERM, YEAR, 10, 20)
        assert record.student_id == student.id
        assert record.subject_id == subject.id

    @pytest.mark.parametrize('marks,max_marks', [
        (55, 50),
        (-1, 50),
        (10, -5),
        (10, 0),
        (None, 50),
        (10, None),
        ('ten', 50),
    ])
    def test_invalid_marks(self, student, subject, marks, max_marks):
        with pytest.raises(InvalidMarks):
            upsert(student, subject, marks, max_marks)
        assert not GradeRecord.objects.exists()

    def test_full_marks_are_valid(self, student, subject):
        record, _ = upsert(student, subject, 50, 50)
        assert record.percentage == Decimal('100.00')

    def test_unknown_student(self, subject):
        with pytest.raises(NotFound):
            GradeRecordService.upsert('STU-MISSING', subject.id, TERM, YEAR, 10, 20)

    def test_write_to_published_term_is_rejected(self, student, subject, school_class):
        upsert(student, subject, 45, 50)
        seal(student, school_class)

        with pytest.raises(ResultAlreadyPublished):
            upsert(student, subject, 20, 50)

        assert GradeRecord.objects.get(student=student).marks == Decimal('45')

    def test_new_subject_in_published_term_is_rejected(self, student, subject, school_class):
        seal(student, school_class)
        with pytest.raises(ResultAlreadyPublished):
            upsert(student, subject, 20, 50)

    def test_override_updates_published_record(self, student, subject, school_class):
        upsert(student, subject, 45, 50)
        seal(student, school_class)

        record, created = upsert(student, subject, 48, 50, override=True)

        assert created is False
        assert record.marks == Decimal('48')

    def test_other_term_is_unaffected_by_seal(self, student, subject, school_class):
        seal(student, school_class)
        record, created = GradeRecordService.upsert(student.id, subject.id, 'term2', YEAR, 20, 50)
        assert created is True


@pytest.mark.django_db
@pytest.mark.grades
class TestBulkUpsert:

    def test_writes_every_row(self, student, create_student, subject):
        other = create_student(admission_number='JSS1A/002')
        results = GradeRecordService.bulk_upsert(subject.id, TERM, YEAR, [
            {'student_id': student.id, 'marks': 40, 'max_marks': 50},
            {'student_id': other.id, 'marks': 25, 'max_marks': 50, 'remarks': 'Needs support'},
        ])

        assert [created for _, created in results] == [True, True]
        assert GradeRecord.objects.filter(subject=subject).count() == 2
        assert GradeRecord.objects.get(student=other).remarks == 'Needs support'

    def test_invalid_row_writes_nothing(self, student, create_student, subject):
        other = create_student(admission_number='JSS1A/002')

        with pytest.raises(InvalidMarks) as excinfo:
            GradeRecordService.bulk_upsert(subject.id, TERM, YEAR, [
                {'student_id': student.id, 'marks': 40, 'max_marks': 50},
                {'student_id': other.id, 'marks': 60, 'max_marks': 50},
            ])

        assert 'Row 2' in excinfo.value.message
        assert not GradeRecord.objects.exists()

    def test_sealed_row_rolls_back_earlier_rows(self, student, create_student, subject, school_class):
        other = create_student(admission_number='JSS1A/002')
        seal(other, school_class)

        with pytest.raises(ResultAlreadyPublished):
            GradeRecordService.bulk_upsert(subject.id, TERM, YEAR, [
                {'student_id': student.id, 'marks': 40, 'max_marks': 50},
                {'student_id': other.id, 'marks': 30, 'max_marks': 50},
            ])

        assert not GradeRecord.objects.exists()


@pytest.mark.django_db
@pytest.mark.grades
class TestListAndDelete:

    def test_filters(self, student, create_student, subject, english):
        other = create_student(admission_number='JSS1A/002')
        upsert(student, subject, 40, 50)
        upsert(student, english, 30, 50)
        upsert(other, subject, 20, 50)

        assert GradeRecordService.list_records(student_id=student.id).count() == 2
        assert GradeRecordService.list_records(subject_id=subject.id).count() == 2
        assert GradeRecordService.list_records(term='term2').count() == 0
        assert GradeRecordService.list_records(student_id=other.id, academic_year=YEAR).count() == 1

    def test_delete(self, student, subject):
        record, _ = upsert(student, subject, 40, 50)
        GradeRecordService.delete(record.id)
        assert not GradeRecord.objects.exists()

    def test_delete_sealed_record_is_rejected(self, student, subject, school_class):
        record, _ = upsert(student, subject, 40, 50)
        seal(student, school_class)

        with pytest.raises(ResultAlreadyPublished):
            GradeRecordService.delete(record.id)
        assert GradeRecord.objects.filter(id=record.id).exists()

    def test_delete_unknown_record(self):
        with pytest.raises(NotFound):
            GradeRecordService.delete('GRD-MISSING')


@pytest.mark.django_db
@pytest.mark.grades
class TestPublishGrade:

    def test_publish_seals_single_record(self, student, subject, english):
        record, _ = upsert(student, subject, 40, 50)
        upsert(student, english, 30, 50)

        published = GradeRecordService.publish(record.id)

        assert published.is_published is True
        with pytest.raises(ResultAlreadyPublished):
            upsert(student, subject, 45, 50)
        upsert(student, english, 35, 50)
        assert GradeRecord.objects.get(subject=english).marks == Decimal('35')

    def test_publish_twice_is_rejected(self, student, subject):
        record, _ = upsert(student, subject, 40, 50)
        GradeRecordService.publish(record.id)

        with pytest.raises(AlreadyPublished):
            GradeRecordService.publish(record.id)

    def test_publish_unknown_record(self):
        with pytest.raises(NotFound):
            GradeRecordService.publish('GRD-MISSING')
