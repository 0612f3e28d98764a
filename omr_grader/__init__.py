"""
OMR Grader: scores photographed multiple-choice answer sheets against a
catalog of option regions and an answer key.
"""
from .answer_extractor import extract_answers, resolve_question
from .batch import grade_batch, grade_sheet, iter_grade_batch, iter_graded_sheets
from .catalog import Region, RegionCatalog, catalog_from_layout, load_catalog, parse_catalog
from .config import DetectionConfig
from .density import ink_density
from .errors import CatalogError, ImageDecodeError, OMRError
from .grader import grade_answers
from .image_processing import load_image
from .models import AnswerDetail, BatchResult, GradedSheet, GradingReport, QuestionVerdict, SheetFailure

__version__ = '1.0.0'

__all__ = [
    'AnswerDetail',
    'BatchResult',
    'CatalogError',
    'DetectionConfig',
    'GradedSheet',
    'GradingReport',
    'ImageDecodeError',
    'OMRError',
    'QuestionVerdict',
    'Region',
    'RegionCatalog',
    'SheetFailure',
    'catalog_from_layout',
    'extract_answers',
    'grade_answers',
    'grade_batch',
    'grade_sheet',
    'ink_density',
    'iter_grade_batch',
    'iter_graded_sheets',
    'load_catalog',
    'load_image',
    'parse_catalog',
    'resolve_question',
]
