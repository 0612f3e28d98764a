# omr_grader/answer_extractor.py
"""
Functions to extract the student's answers from the catalog regions.
"""
import logging
from typing import List

from . import config
from .density import ink_density
from .models import QuestionVerdict

logger = logging.getLogger(__name__)


def resolve_question(question_number, densities, cfg=None) -> QuestionVerdict:
    """
    Turns the densities of one question's options into a verdict.

    No mark leaves the answer empty; a single mark is the answer; two or more
    marks leave it empty and flag the question as ambiguous. The resolver
    never picks between competing marks.
    """
    cfg = cfg or config.DEFAULT_DETECTION
    marked = tuple(
        label for label, density in densities.items()
        if density > cfg.mark_presence_threshold
    )

    if len(marked) == 1:
        answer, ambiguous = marked[0], False
    else:
        answer, ambiguous = '', len(marked) > 1

    return QuestionVerdict(
        question_number=question_number,
        student_answer=answer,
        is_ambiguous=ambiguous,
        marked_labels=marked,
        densities=dict(densities),
    )


def extract_answers(image, catalog, cfg=None) -> List[QuestionVerdict]:
    """
    For each question in the catalog, determines which option is marked.

    Returns one verdict per question in ascending question order.
    """
    cfg = cfg or config.DEFAULT_DETECTION

    verdicts = []
    for q_num, regions in catalog.regions_by_question().items():
        densities = {r.option_label: ink_density(image, r, cfg) for r in regions}
        verdict = resolve_question(q_num, densities, cfg)
        if verdict.is_ambiguous:
            logger.info("Question %d has multiple marks %s. Marking as ambiguous.", q_num, list(verdict.marked_labels))
        verdicts.append(verdict)

    logger.debug("Extracted answers for %d questions.", len(verdicts))
    return verdicts
