from .classes import Class
from .curriculum import Subject
from .exams import Exam, Question
from .cbt import CBTSession, SessionAnswer, ScoredOutcome
