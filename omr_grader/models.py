# omr_grader/models.py
"""
Result types produced while grading a sheet.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Tuple

VerdictState = Literal['unmarked', 'resolved', 'ambiguous']


@dataclass(frozen=True)
class QuestionVerdict:
    """The resolved answer for one question on one sheet."""

    question_number: int
    student_answer: str = ''
    is_ambiguous: bool = False
    marked_labels: Tuple[str, ...] = ()
    densities: Dict[str, float] = field(default_factory=dict, compare=False)

    @property
    def state(self) -> VerdictState:
        if self.is_ambiguous:
            return 'ambiguous'
        return 'resolved' if self.student_answer else 'unmarked'


@dataclass(frozen=True)
class AnswerDetail:
    question: int
    student_answer: str
    correct_answer: str
    is_correct: bool
    is_warning: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'question': self.question,
            'studentAnswer': self.student_answer,
            'correctAnswer': self.correct_answer,
            'isCorrect': self.is_correct,
            'isWarning': self.is_warning,
        }


@dataclass(frozen=True)
class GradingReport:
    """Scored result of one sheet. Built once all of its questions are resolved."""

    student_id: str
    score: int
    total: int
    details: Tuple[AnswerDetail, ...]
    timestamp: int

    @property
    def percentage(self) -> float:
        return (100.0 * self.score / self.total) if self.total else 0.0

    @property
    def warnings(self) -> List[int]:
        return [d.question for d in self.details if d.is_warning]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentId': self.student_id,
            'score': self.score,
            'total': self.total,
            'details': [d.to_dict() for d in self.details],
            'timestamp': self.timestamp,
        }


@dataclass(frozen=True)
class SheetFailure:
    """A sheet of a batch that could not be graded."""

    student_id: str
    source: str
    error: str


@dataclass(frozen=True)
class GradedSheet:
    """A graded sheet together with what it was graded from."""

    report: GradingReport
    verdicts: Tuple[QuestionVerdict, ...]
    source: str
    image: Any = field(default=None, repr=False, compare=False)


@dataclass
class BatchResult:
    reports: List[GradingReport] = field(default_factory=list)
    failures: List[SheetFailure] = field(default_factory=list)

    def add(self, outcome):
        if isinstance(outcome, SheetFailure):
            self.failures.append(outcome)
        elif isinstance(outcome, GradedSheet):
            self.reports.append(outcome.report)
        else:
            self.reports.append(outcome)

    @property
    def average_score(self) -> float:
        if not self.reports:
            return 0.0
        return sum(r.score for r in self.reports) / len(self.reports)

    def sorted_reports(self) -> List[GradingReport]:
        return sorted(self.reports, key=lambda r: r.student_id)
