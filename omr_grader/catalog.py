# omr_grader/catalog.py
"""
The region catalog: where every answer option lives on the page and which
option is correct for each question.

Catalogs arrive as JSON produced by an external layout service. They are
parsed once, strictly, into frozen models and then shared read-only by every
sheet graded against them. Anything malformed is rejected here with a
CatalogError so that a broken layout never silently mis-scores a batch.
"""
import json
import logging
import re
from collections import defaultdict
from typing import Annotated, Any, Dict, List, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from . import config
from .errors import CatalogError

logger = logging.getLogger(__name__)

# Geometry is expressed in percent of the image width/height.
Percent = Annotated[float, Field(ge=0, le=100, allow_inf_nan=False)]

_JSON_BLOCK = re.compile(r'\{[\s\S]*\}|\[[\s\S]*\]')


def _normalise_label(value):
    label = str(value).strip().upper()
    if label not in config.OPTION_LABELS:
        raise ValueError(
            f"option label {value!r} is not one of {' '.join(config.OPTION_LABELS)}"
        )
    return label


class Region(BaseModel):
    """One candidate answer-option rectangle."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    question_number: int = Field(alias='questionNumber', gt=0)
    option_label: str = Field(alias='optionLabel')
    x: Percent
    y: Percent
    w: Percent
    h: Percent

    @field_validator('option_label', mode='before')
    @classmethod
    def _check_label(cls, value):
        return _normalise_label(value)


class RegionCatalog(BaseModel):
    """Ordered regions of a sheet layout plus the correct-answer key."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    regions: Tuple[Region, ...] = Field(alias='boxes', min_length=1)
    correct_answers: Dict[int, str] = Field(alias='correctAnswers', default_factory=dict)

    @field_validator('correct_answers', mode='before')
    @classmethod
    def _check_key_labels(cls, value):
        if not isinstance(value, dict):
            return value
        return {q: _normalise_label(label) for q, label in value.items()}

    @model_validator(mode='after')
    def _check_layout(self):
        seen_ids = set()
        labels_by_question = defaultdict(list)
        for region in self.regions:
            if region.id in seen_ids:
                raise ValueError(f"duplicate region id {region.id!r}")
            seen_ids.add(region.id)

            labels = labels_by_question[region.question_number]
            if region.option_label in labels:
                raise ValueError(
                    f"question {region.question_number} has option "
                    f"{region.option_label!r} more than once"
                )
            labels.append(region.option_label)

        for q_num, label in self.correct_answers.items():
            if q_num not in labels_by_question:
                raise ValueError(f"correct answer given for question {q_num}, which has no regions")
            if label not in labels_by_question[q_num]:
                raise ValueError(
                    f"correct answer {label!r} for question {q_num} is not one of its "
                    f"options {labels_by_question[q_num]}"
                )
        return self

    def question_numbers(self) -> List[int]:
        return sorted({r.question_number for r in self.regions})

    def regions_by_question(self) -> Dict[int, List[Region]]:
        """Regions grouped by question, in ascending question order."""
        grouped = defaultdict(list)
        for region in self.regions:
            grouped[region.question_number].append(region)
        return {q_num: grouped[q_num] for q_num in sorted(grouped)}

    def regions_for(self, question_number: int) -> List[Region]:
        return [r for r in self.regions if r.question_number == question_number]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class LayoutBox(BaseModel):
    """A box as reported by the layout service for the reference sheet."""

    model_config = ConfigDict(populate_by_name=True)

    question_number: int = Field(alias='questionNumber', gt=0)
    option_label: str = Field(alias='optionLabel')
    x: Percent
    y: Percent
    w: Percent
    h: Percent
    is_marked: bool = Field(alias='isMarked', default=False)

    @field_validator('option_label', mode='before')
    @classmethod
    def _check_label(cls, value):
        return _normalise_label(value)


class LayoutResponse(BaseModel):
    boxes: List[LayoutBox]


def parse_catalog(data) -> RegionCatalog:
    """
    Validates a JSON-shaped catalog and returns the frozen RegionCatalog.
    Raises CatalogError with the offending fields on any mismatch.
    """
    if isinstance(data, RegionCatalog):
        return data
    try:
        catalog = RegionCatalog.model_validate(data)
    except ValidationError as e:
        raise CatalogError(f"Malformed region catalog: {e}") from e

    logger.info(
        "Loaded catalog with %d regions over %d questions (%d keyed).",
        len(catalog.regions), len(catalog.question_numbers()), len(catalog.correct_answers),
    )
    return catalog


def _extract_json(text):
    # Layout responses sometimes wrap the JSON in prose or markdown fences.
    match = _JSON_BLOCK.search(text)
    return match.group(0) if match else text


def catalog_from_layout(response) -> RegionCatalog:
    """
    Converts a layout-service response for the reference sheet into a catalog.

    Boxes get ids ``box-<index>`` in response order, and the key is taken from
    the boxes flagged ``isMarked``.
    """
    if isinstance(response, bytes):
        response = response.decode('utf-8')
    if isinstance(response, str):
        try:
            response = json.loads(_extract_json(response))
        except json.JSONDecodeError as e:
            raise CatalogError(f"Layout response is not valid JSON: {e}") from e

    try:
        layout = LayoutResponse.model_validate(response)
    except ValidationError as e:
        raise CatalogError(f"Malformed layout response: {e}") from e

    if not layout.boxes:
        raise CatalogError("Layout response contains no answer boxes.")

    regions = []
    correct_answers = {}
    for index, box in enumerate(layout.boxes):
        regions.append(Region(
            id=f"box-{index}",
            question_number=box.question_number,
            option_label=box.option_label,
            x=box.x, y=box.y, w=box.w, h=box.h,
        ))
        if box.is_marked:
            previous = correct_answers.get(box.question_number)
            if previous is not None and previous != box.option_label:
                raise CatalogError(
                    f"Reference sheet marks question {box.question_number} more than once "
                    f"({previous!r} and {box.option_label!r})."
                )
            correct_answers[box.question_number] = box.option_label

    return parse_catalog({'boxes': regions, 'correctAnswers': correct_answers})


def load_catalog(path, layout=False) -> RegionCatalog:
    """Loads a catalog (or, with ``layout=True``, a raw layout response) from a JSON file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Region catalog not found at {path}")

    if layout:
        return catalog_from_layout(text)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Region catalog at {path} is not valid JSON: {e}") from e
    return parse_catalog(data)
