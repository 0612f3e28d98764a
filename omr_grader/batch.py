# omr_grader/batch.py
"""
Grading of single sheets and batches of sheets against one catalog.

Each sheet is independent: a sheet that cannot be decoded or graded is
reported as a SheetFailure and the rest of the batch carries on.
"""
import logging
import os
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, Optional, Sequence, Union

import numpy as np

from . import config
from .answer_extractor import extract_answers
from .catalog import parse_catalog
from .errors import ImageDecodeError
from .grader import grade_answers
from .image_processing import load_image
from .models import BatchResult, GradedSheet, GradingReport, SheetFailure

logger = logging.getLogger(__name__)

SheetOutcome = Union[GradingReport, SheetFailure]


def _grade_pixels(pixels, catalog, student_id, cfg, timestamp=None):
    verdicts = extract_answers(pixels, catalog, cfg)
    report = grade_answers(verdicts, catalog.correct_answers, student_id, timestamp)
    return report, verdicts


def grade_sheet(image, catalog, student_id='', cfg=None, timestamp=None) -> GradingReport:
    """
    Executes the full grading workflow for a single sheet image.
    ``image`` may be a path, encoded bytes or a decoded pixel array.
    """
    catalog = parse_catalog(catalog)
    report, _ = _grade_pixels(load_image(image), catalog, student_id, cfg, timestamp)
    return report


def _describe(source):
    if isinstance(source, (str, os.PathLike)):
        return os.fspath(source)
    if isinstance(source, np.ndarray):
        return f"<array shape={source.shape}>"
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"<{len(source)} bytes>"
    return f"<{type(source).__name__}>"


def _is_path(source):
    return isinstance(source, (str, os.PathLike))


def _default_student_ids(images):
    """
    File stem for paths, ``STU-<n>`` otherwise. Stems shared by several files
    fall back to the file name, and any id still repeated gets a ``-<n>`` suffix.
    """
    ids = [
        os.path.splitext(os.path.basename(os.fspath(src)))[0] if _is_path(src)
        else f"{config.STUDENT_ID_PREFIX}-{i + 1:04d}"
        for i, src in enumerate(images)
    ]
    stem_counts = Counter(ids)
    for i, src in enumerate(images):
        if stem_counts[ids[i]] > 1 and _is_path(src):
            ids[i] = os.path.basename(os.fspath(src))

    # Same file name in different directories.
    seen = Counter()
    for i, student_id in enumerate(ids):
        seen[student_id] += 1
        if seen[student_id] > 1:
            ids[i] = f"{student_id}-{seen[student_id]}"
    return ids


def _assign_ids(images, student_ids):
    if student_ids is None:
        return _default_student_ids(images)
    student_ids = [str(s) for s in student_ids]
    if len(student_ids) != len(images):
        raise ValueError(
            f"Got {len(student_ids)} student ids for {len(images)} images."
        )
    return student_ids


def _grade_one(source, student_id, catalog, cfg, keep_image):
    try:
        pixels = load_image(source)
        report, verdicts = _grade_pixels(pixels, catalog, student_id, cfg)
    except ImageDecodeError as e:
        logger.warning("Skipping sheet %s: %s", student_id, e)
        return SheetFailure(student_id=student_id, source=_describe(source), error=str(e))
    except Exception as e:
        logger.exception("An unexpected error occurred while processing %s", student_id)
        return SheetFailure(student_id=student_id, source=_describe(source), error=f"{type(e).__name__}: {e}")

    return GradedSheet(
        report=report,
        verdicts=tuple(verdicts),
        source=_describe(source),
        image=pixels if keep_image else None,
    )


def iter_graded_sheets(images, catalog, student_ids: Optional[Sequence] = None, cfg=None,
                       max_workers: int = config.DEFAULT_WORKERS,
                       keep_images=True) -> Iterator[Union[GradedSheet, SheetFailure]]:
    """
    Grades sheets in submission order, yielding each graded sheet (report,
    verdicts, source and, with ``keep_images``, the decoded pixels) or its
    failure as soon as it is ready.
    """
    catalog = parse_catalog(catalog)
    images = list(images)
    ids = _assign_ids(images, student_ids)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            yield from executor.map(
                lambda pair: _grade_one(pair[0], pair[1], catalog, cfg, keep_images),
                zip(images, ids),
            )
        return

    for source, student_id in zip(images, ids):
        yield _grade_one(source, student_id, catalog, cfg, keep_images)


def iter_grade_batch(images, catalog, student_ids: Optional[Sequence] = None, cfg=None) -> Iterator[SheetOutcome]:
    """
    Grades sheets one at a time in submission order, yielding each complete
    report (or failure) as soon as it is ready.
    """
    for outcome in iter_graded_sheets(images, catalog, student_ids, cfg, keep_images=False):
        yield outcome if isinstance(outcome, SheetFailure) else outcome.report


def grade_batch(images, catalog, student_ids: Optional[Sequence] = None, cfg=None,
                max_workers: int = config.DEFAULT_WORKERS) -> BatchResult:
    """
    Grades every image against ``catalog``. Reports and failures keep
    submission order whether or not the sheets are graded in parallel.
    """
    images = list(images)
    result = BatchResult()
    for outcome in iter_graded_sheets(images, catalog, student_ids, cfg, max_workers, keep_images=False):
        result.add(outcome)

    logger.info(
        "Graded %d of %d sheets (%d failed).",
        len(result.reports), len(images), len(result.failures),
    )
    return result
