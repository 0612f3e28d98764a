# omr_grader/config.py
"""
Configuration constants for the OMR Grader application.
"""
import os
from dataclasses import dataclass

import cv2

# --- Core Paths ---
# Base directory is one level up from the package directory where this file lives
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

INPUT_DIR = os.path.join(BASE_DIR, 'omr_input')
OUTPUT_VISUAL_DIR = os.path.join(BASE_DIR, 'graded_output')
CSV_DIR = os.path.join(BASE_DIR, 'csv_data')

CATALOG_PATH = os.path.join(BASE_DIR, 'catalog.json')
REPORTS_JSON_NAME = 'reports.json'
SUMMARY_CSV_NAME = 'student_answers.csv'

IMAGE_EXTENSIONS = ('*.png', '*.jpg', '*.jpeg')


# --- Option Alphabet ---
# Latin A-E and Thai ko kai .. cho chan
OPTION_LABELS = ('A', 'B', 'C', 'D', 'E', 'ก', 'ข', 'ค', 'ง', 'จ')


# --- Mark Detection Parameters ---
# Fraction trimmed from each side of a region before sampling, so the printed
# border of the option box is not counted as ink.
SAMPLE_INSET = 0.15
# A pixel whose mean of R, G, B is below this value (0-255) is "dark".
DARK_PIXEL_THRESHOLD = 170
# A region whose dark-pixel ratio is strictly above this value bears a mark.
MARK_PRESENCE_THRESHOLD = 0.08


@dataclass(frozen=True)
class DetectionConfig:
    sample_inset: float = SAMPLE_INSET
    dark_pixel_threshold: float = DARK_PIXEL_THRESHOLD
    mark_presence_threshold: float = MARK_PRESENCE_THRESHOLD


DEFAULT_DETECTION = DetectionConfig()


# --- Batch Parameters ---
STUDENT_ID_PREFIX = 'STU'
DEFAULT_WORKERS = 1


# --- Logging ---
LOG_LEVEL = os.environ.get('OMR_LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


# --- Visualization Parameters ---
VIS_CORRECT_ANSWER_COLOR = (0, 255, 0)   # Green
VIS_WRONG_ANSWER_COLOR = (0, 0, 255)     # Red
VIS_WARNING_COLOR = (0, 165, 255)        # Orange for ambiguous marks
VIS_KEY_COLOR = (0, 200, 0)              # Dark green outline for a missed key
VIS_DEFAULT_REGION_COLOR = (255, 0, 0)   # Blue for all other regions
VIS_TEXT_COLOR = (0, 0, 0)               # Black
VIS_THICKNESS_REGION = 1
VIS_THICKNESS_ANSWER = 3

VIS_INFO_FONT = cv2.FONT_HERSHEY_SIMPLEX
VIS_INFO_FONT_SCALE = 0.9
VIS_INFO_FONT_THICKNESS = 2
VIS_HEADER_ORIGIN = (20, 40)
VIS_HEADER_LINE_HEIGHT = 35
