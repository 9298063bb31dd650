"""
Assessment error taxonomy.

Domain errors are recoverable and surface to the API caller verbatim through
assessment_exception_handler. StorageUnavailable is the only fatal condition
and is kept apart from the domain errors.
"""
import functools
import logging

from django.db import InterfaceError, OperationalError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AssessmentError(Exception):
    code = 'assessment_error'
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Assessment request could not be completed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(AssessmentError):
    code = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class AlreadyActive(AssessmentError):
    code = 'already_active'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'An active session already exists for this exam'


class AlreadySubmitted(AssessmentError):
    """Carries the outcome of the earlier submission so retries can treat it as success"""

    code = 'already_submitted'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'This session has already been submitted'

    def __init__(self, message=None, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class AlreadyPublished(AssessmentError):
    code = 'already_published'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'This term result has already been published'


class NotPublished(AssessmentError):
    code = 'not_published'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'This term result is not published'


class SessionNotActive(AssessmentError):
    code = 'session_not_active'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'This session is no longer accepting answers'


class DeadlineExceeded(AssessmentError):
    """Carries the best-effort outcome computed when the session was expired"""

    code = 'deadline_exceeded'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'The submission deadline has passed'

    def __init__(self, message=None, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class UnknownQuestion(AssessmentError):
    code = 'unknown_question'
    default_message = 'Question does not belong to this exam'


class InvalidOption(AssessmentError):
    code = 'invalid_option'
    default_message = 'Selected option does not exist for this question'


class InvalidMarks(AssessmentError):
    code = 'invalid_marks'
    default_message = 'Marks are invalid'


class NoSubjects(AssessmentError):
    code = 'no_subjects'
    default_message = 'No grade records exist for this student and term'


class ResultAlreadyPublished(AssessmentError):
    code = 'result_already_published'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'The term result for this grade has already been published'


class WriteConflict(AssessmentError):
    """The database aborted the transaction on a lock conflict; safe for the caller to retry"""

    code = 'write_conflict'
    status_code = status.HTTP_409_CONFLICT
    default_message = 'The request conflicted with a concurrent update, please retry'


class StorageError(Exception):
    """Base for data store failures. Never a subclass of AssessmentError."""

    code = 'storage_error'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'The data store failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class StorageUnavailable(StorageError):
    code = 'storage_unavailable'
    default_message = 'The data store is currently unavailable'


# SQLSTATE serialization_failure / deadlock_detected, MySQL lock wait timeout / deadlock
LOCK_CONFLICT_CODES = {'40001', '40P01', 1205, 1213}


def is_lock_conflict(error) -> bool:
    cause = error.__cause__
    sqlstate = getattr(cause, 'sqlstate', None) or getattr(cause, 'pgcode', None)
    if sqlstate in LOCK_CONFLICT_CODES:
        return True
    args = getattr(cause, 'args', None) or error.args
    return bool(args) and isinstance(args[0], (int, str)) and args[0] in LOCK_CONFLICT_CODES


def translate_storage_errors(func):
    """Re-raise database failures as StorageUnavailable, or WriteConflict for lock conflicts"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            if isinstance(e, OperationalError) and is_lock_conflict(e):
                logger.warning(f"Lock conflict in {func.__qualname__}: {e}")
                raise WriteConflict() from e
            logger.error(f"Storage failure in {func.__qualname__}: {e}", exc_info=True)
            raise StorageUnavailable() from e

    return wrapper


def assessment_exception_handler(exc, context):
    """DRF exception handler mapping assessment and storage errors to {'error', 'code'} bodies"""
    if isinstance(exc, StorageError):
        response = Response({'error': exc.message, 'code': exc.code}, status=exc.status_code)
        response['Retry-After'] = '30'
        return response
    if isinstance(exc, AssessmentError):
        data = {'error': exc.message, 'code': exc.code}
        outcome = getattr(exc, 'outcome', None)
        if outcome is not None:
            from assessments.serializers.cbt import ScoredOutcomeSerializer
            data['outcome'] = ScoredOutcomeSerializer(outcome).data
        return Response(data, status=exc.status_code)
    return exception_handler(exc, context)
