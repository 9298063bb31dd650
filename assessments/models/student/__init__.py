from .student import Student
from .grades import GradeRecord
from .results import TermResult
