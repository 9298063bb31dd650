from .user import User, UserManager
from .academic import (
    Class,
    Subject,
    Exam,
    Question,
    CBTSession,
    SessionAnswer,
    ScoredOutcome,
)
from .student import (
    Student,
    GradeRecord,
    TermResult,
)

__all__ = [
    'User',
    'UserManager',
    'Class',
    'Subject',
    'Exam',
    'Question',
    'CBTSession',
    'SessionAnswer',
    'ScoredOutcome',
    'Student',
    'GradeRecord',
    'TermResult',
]
