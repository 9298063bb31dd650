from .cbt import (
    CBTSessionSerializer,
    ScoredOutcomeSerializer,
    QuestionPayloadSerializer,
    RecordAnswerSerializer,
    ClassResultsSerializer,
)
from .grades import (
    GradeRecordSerializer,
    GradeEntrySerializer,
    GradeUploadSerializer,
    BulkGradeUploadSerializer,
)
from .results import TermResultSerializer, TermResultPublishSerializer
