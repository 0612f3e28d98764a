# omr_grader/grader.py
"""
Functions for grading the extracted answers against the answer key.
"""
import logging
import time

from .models import AnswerDetail, GradingReport

logger = logging.getLogger(__name__)


def _now_ms():
    return int(time.time() * 1000)


def grade_answers(verdicts, correct_answers, student_id='', timestamp=None) -> GradingReport:
    """
    Compares the verdicts to the answer key and calculates the score.

    The key maps question numbers (int or numeric string) to option labels.
    Only questions with a key are graded; the others count towards neither
    score nor total. Details are ordered by question number.
    """
    # JSON-shaped keys arrive as strings.
    correct_answers = {int(q): label for q, label in correct_answers.items()}

    details = []
    for verdict in sorted(verdicts, key=lambda v: v.question_number):
        q_num = verdict.question_number
        correct_ans = correct_answers.get(q_num)
        if correct_ans is None:
            logger.info("Question %d has no key and is not graded.", q_num)
            continue

        details.append(AnswerDetail(
            question=q_num,
            student_answer=verdict.student_answer,
            correct_answer=correct_ans,
            is_correct=verdict.student_answer == correct_ans,
            is_warning=verdict.is_ambiguous,
        ))

    report = GradingReport(
        student_id=student_id,
        score=sum(1 for d in details if d.is_correct),
        total=len(details),
        details=tuple(details),
        timestamp=_now_ms() if timestamp is None else timestamp,
    )

    logger.info(
        "Grading complete for %s. Score: %d/%d (%.2f%%)",
        student_id or '<unnamed>', report.score, report.total, report.percentage,
    )
    return report
