import pytest
from django.urls import reverse

from assessments.models import GradeRecord, TermResult

TERM = 'term1'
YEAR = '2024-2025'


def upload_payload(student, subject, marks, max_marks, **extra):
    payload = {
        'studentId': student.id,
        'subjectId': subject.id,
        'term': TERM,
        'academicYear': YEAR,
        'marks': marks,
        'maxMarks': max_marks,
    }
    payload.update(extra)
    return payload


@pytest.mark.django_db
@pytest.mark.grades
class TestUploadGrade:

    def test_upload_creates_then_updates(self, staff_client, staff_user, student, subject):
        url = reverse('assessments:upload-grade')

        response = staff_client.post(url, upload_payload(student, subject, 45, 50), format='json')
        assert response.status_code == 201
        body = response.json()
        assert body['percentage'] == 90.0
        assert body['letterGrade'] == 'A'
        assert body['teacherId'] == staff_user.id
        assert body['source'] == 'manual'
        assert body['isPublished'] is False

        response = staff_client.post(url, upload_payload(student, subject, 35, 50), format='json')
        assert response.status_code == 200
        assert response.json()['id'] == body['id']
        assert response.json()['letterGrade'] == 'B'

    def test_marks_above_max_are_rejected(self, staff_client, student, subject):
        response = staff_client.post(
            reverse('assessments:upload-grade'), upload_payload(student, subject, 55, 50), format='json'
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_marks'

    def test_marks_without_max_marks_are_rejected(self, staff_client, student, subject):
        payload = upload_payload(student, subject, 40, 50)
        del payload['maxMarks']

        response = staff_client.post(reverse('assessments:upload-grade'), payload, format='json')

        assert response.status_code == 400
        assert response.json()['code'] == 'invalid_marks'

    def test_bad_term_and_year_are_validated(self, staff_client, student, subject):
        payload = upload_payload(student, subject, 40, 50, term='term9', academicYear='2024-2030')

        response = staff_client.post(reverse('assessments:upload-grade'), payload, format='json')

        assert response.status_code == 400
        assert set(response.json()) == {'term', 'academicYear'}

    def test_students_cannot_upload(self, student_client, student, subject):
        response = student_client.post(
            reverse('assessments:upload-grade'), upload_payload(student, subject, 40, 50), format='json'
        )
        assert response.status_code == 403

    def test_sealed_grade_is_conflict(self, staff_client, student, subject, school_class):
        TermResult.objects.create(student=student, class_model=school_class, term=TERM, academic_year=YEAR, is_published=True)

        response = staff_client.post(
            reverse('assessments:upload-grade'), upload_payload(student, subject, 40, 50), format='json'
        )

        assert response.status_code == 409
        assert response.json()['code'] == 'result_already_published'

    def test_override_is_admin_only(self, staff_client, admin_client, student, subject, school_class):
        TermResult.objects.create(student=student, class_model=school_class, term=TERM, academic_year=YEAR, is_published=True)
        payload = upload_payload(student, subject, 40, 50, override=True)

        assert staff_client.post(reverse('assessments:upload-grade'), payload, format='json').status_code == 403
        assert admin_client.post(reverse('assessments:upload-grade'), payload, format='json').status_code == 201


@pytest.mark.django_db
@pytest.mark.grades
class TestBulkUpload:

    def test_bulk_upload(self, staff_client, student, create_student, subject):
        other = create_student(admission_number='JSS1A/002')
        payload = {
            'subjectId': subject.code,
            'term': TERM,
            'academicYear': YEAR,
            'records': [
                {'studentId': student.id, 'marks': 40, 'maxMarks': 50},
                {'studentId': other.admission_number, 'marks': 15, 'maxMarks': 50, 'remarks': 'Retake advised'},
            ],
        }

        response = staff_client.post(reverse('assessments:bulk-upload-grades'), payload, format='json')

        assert response.status_code == 200
        body = response.json()
        assert body['created'] == 2
        assert body['updated'] == 0
        assert [r['letterGrade'] for r in body['records']] == ['B', 'F']

    def test_bulk_upload_is_all_or_nothing(self, staff_client, student, subject):
        payload = {
            'subjectId': subject.id,
            'term': TERM,
            'academicYear': YEAR,
            'records': [
                {'studentId': student.id, 'marks': 40, 'maxMarks': 50},
                {'studentId': 'STU-MISSING', 'marks': 20, 'maxMarks': 50},
            ],
        }

        response = staff_client.post(reverse('assessments:bulk-upload-grades'), payload, format='json')

        assert response.status_code == 404
        assert not GradeRecord.objects.exists()

    def test_empty_bulk_upload_is_rejected(self, staff_client, subject):
        payload = {'subjectId': subject.id, 'term': TERM, 'academicYear': YEAR, 'records': []}
        response = staff_client.post(reverse('assessments:bulk-upload-grades'), payload, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
@pytest.mark.grades
class TestListAndDeleteGrades:

    def test_list_with_filters(self, staff_client, student, subject, english):
        url = reverse('assessments:upload-grade')
        staff_client.post(url, upload_payload(student, subject, 40, 50), format='json')
        staff_client.post(url, upload_payload(student, english, 30, 50), format='json')

        response = staff_client.get(reverse('assessments:list-grades'), {'student': student.id, 'subject': english.id})

        assert response.status_code == 200
        assert len(response.json()) == 1
        assert response.json()[0]['subjectName'] == 'English Language'

    def test_delete(self, staff_client, student, subject):
        record_id = staff_client.post(
            reverse('assessments:upload-grade'), upload_payload(student, subject, 40, 50), format='json'
        ).json()['id']

        response = staff_client.delete(reverse('assessments:delete-grade', kwargs={'record_id': record_id}))

        assert response.status_code == 204
        assert not GradeRecord.objects.filter(id=record_id).exists()

    def test_publish_single_grade(self, staff_client, student, subject):
        record_id = staff_client.post(
            reverse('assessments:upload-grade'), upload_payload(student, subject, 40, 50), format='json'
        ).json()['id']
        url = reverse('assessments:publish-grade', kwargs={'record_id': record_id})

        first = staff_client.post(url)
        second = staff_client.post(url)

        assert first.status_code == 200
        assert first.json()['isPublished'] is True
        assert second.status_code == 409
        assert second.json()['code'] == 'already_published'

    def test_students_cannot_publish_grades(self, staff_client, student_client, student, subject):
        record_id = staff_client.post(
            reverse('assessments:upload-grade'), upload_payload(student, subject, 40, 50), format='json'
        ).json()['id']

        response = student_client.post(reverse('assessments:publish-grade', kwargs={'record_id': record_id}))

        assert response.status_code == 403
