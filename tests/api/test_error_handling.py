from unittest import mock

import pytest
from django.db import InterfaceError, OperationalError
from django.urls import reverse

from assessments.exceptions import (
    AssessmentError,
    NotFound,
    StorageError,
    StorageUnavailable,
    WriteConflict,
    translate_storage_errors,
)


class FakeDriverError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


def raise_wrapped(cause):
    try:
        raise cause
    except FakeDriverError as e:
        raise OperationalError(str(e)) from e


def test_database_failures_become_storage_unavailable():
    @translate_storage_errors
    def failing():
        raise OperationalError('database is locked')

    with pytest.raises(StorageUnavailable):
        failing()


def test_interface_errors_become_storage_unavailable():
    @translate_storage_errors
    def failing():
        raise InterfaceError('connection already closed')

    with pytest.raises(StorageUnavailable):
        failing()


def test_storage_failures_are_not_domain_errors():
    assert not issubclass(StorageUnavailable, AssessmentError)
    assert issubclass(StorageUnavailable, StorageError)

    @translate_storage_errors
    def failing():
        raise OperationalError('connection refused')

    with pytest.raises(StorageUnavailable):
        try:
            failing()
        except AssessmentError:
            pytest.fail('storage failure was caught as a domain error')


@pytest.mark.parametrize('pgcode', ['40P01', '40001'])
def test_lock_conflicts_become_write_conflict(pgcode):
    @translate_storage_errors
    def failing():
        raise_wrapped(FakeDriverError('deadlock detected', pgcode=pgcode))

    with pytest.raises(WriteConflict):
        failing()


def test_mysql_deadlock_becomes_write_conflict():
    @translate_storage_errors
    def failing():
        raise OperationalError(1213, 'Deadlock found when trying to get lock')

    with pytest.raises(WriteConflict):
        failing()


def test_domain_errors_pass_through_untouched():
    @translate_storage_errors
    def failing():
        raise NotFound('missing')

    with pytest.raises(NotFound):
        failing()


@pytest.mark.django_db
def test_storage_failure_maps_to_service_unavailable(staff_client, exam):
    with mock.patch(
        'assessments.services.cbt_session.ScoredOutcome.objects.select_related',
        side_effect=OperationalError('connection refused'),
    ):
        response = staff_client.get(reverse('assessments:cbt-class-results', kwargs={'exam_id': exam.id}))

    assert response.status_code == 503
    assert response.json()['code'] == 'storage_unavailable'
    assert response['Retry-After'] == '30'


@pytest.mark.django_db
def test_lock_conflict_maps_to_conflict(staff_client, exam):
    with mock.patch(
        'assessments.services.cbt_session.ScoredOutcome.objects.select_related',
        side_effect=OperationalError(1213, 'Deadlock found when trying to get lock'),
    ):
        response = staff_client.get(reverse('assessments:cbt-class-results', kwargs={'exam_id': exam.id}))

    assert response.status_code == 409
    assert response.json()['code'] == 'write_conflict'
