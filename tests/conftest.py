import numpy as np
import pytest

from omr_grader.catalog import Region, parse_catalog

SHEET_SIZE = 400


def _region_layout(questions, labels):
    # 10% boxes on a 20% grid: question rows, option columns.
    boxes = []
    for q in range(1, questions + 1):
        for i, label in enumerate(labels):
            boxes.append({
                'id': f"q{q}-{label}",
                'questionNumber': q,
                'optionLabel': label,
                'x': 10 + i * 20,
                'y': 10 + (q - 1) * 20,
                'w': 10,
                'h': 10,
            })
    return boxes


@pytest.fixture
def catalog_data():
    def build(questions=2, labels='ABCD', key=None):
        return {
            'boxes': _region_layout(questions, labels),
            'correctAnswers': {} if key is None else {str(q): a for q, a in key.items()},
        }
    return build


@pytest.fixture
def make_catalog(catalog_data):
    def build(questions=2, labels='ABCD', key=None):
        return parse_catalog(catalog_data(questions, labels, key))
    return build


@pytest.fixture
def blank_sheet():
    def build(size=SHEET_SIZE, channels=3):
        shape = (size, size) if channels == 1 else (size, size, channels)
        return np.full(shape, 255, dtype=np.uint8)
    return build


def _pixel_rect(region, image):
    img_h, img_w = image.shape[:2]
    x = int(round(region.x / 100.0 * img_w))
    y = int(round(region.y / 100.0 * img_h))
    w = int(round(region.w / 100.0 * img_w))
    h = int(round(region.h / 100.0 * img_h))
    return x, y, w, h


@pytest.fixture
def mark():
    """Fills whole regions of an image with ink, in place."""
    def fill(image, catalog, *targets, value=0):
        for q_num, label in targets:
            region = next(r for r in catalog.regions_for(q_num) if r.option_label == label)
            x, y, w, h = _pixel_rect(region, image)
            image[y:y + h, x:x + w] = value
        return image
    return fill


@pytest.fixture
def region():
    def build(x=10, y=10, w=10, h=10, label='A', question=1, region_id='r1'):
        return Region(id=region_id, question_number=question, option_label=label, x=x, y=y, w=w, h=h)
    return build
