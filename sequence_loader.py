# -*- coding: utf-8 -*-
########################
# sequence_loader.py
########################
# Purpose:
# - Load a preprocessed hit object sequence from a UTF-8 JSON document.
# - Validate it with pydantic and convert it into a DifficultyObjectSequence.
#
########################
# Key Logic:
# - Document shape:
#   {
#     "approach_rate": 9.0,
#     "clock_rate": 1.0,
#     "objects": [
#       {"kind": "point", "start_time": 0, "radius": 26, "stacked_position": [256, 192], ...}
#     ]
#   }
# - Positions are [x, y] pairs. stacked_end_position defaults to stacked_position.
# - delta_time, strain_time, time_preempt and time_fade_in are optional and derived when absent.
# - Strict contract:
#   - Unknown object fields are rejected.
#   - Any failure is a SequenceLoadError carrying the file path.
#
########################
# Interfaces:
# Public exceptions:
# - class SequenceLoadError(Exception)
#
# Public models:
# - HitObjectModel(BaseModel)
# - SequenceDocumentModel(BaseModel)
#
# Public dataclasses:
# - @dataclass(frozen=True) class LoadedSequence
#   - objects: DifficultyObjectSequence
#   - records: tuple[HitObjectRecord, ...]
#   - approach_rate: float
#   - clock_rate: float
#   - source_path: Optional[pathlib.Path]
#   - build(clock_rate: Optional[float] = None) -> DifficultyObjectSequence
#
# Public functions:
# - parse_sequence_document(payload: dict, *, source_path=None) -> LoadedSequence
# - load_sequence_document(path: pathlib.Path) -> LoadedSequence
#
########################

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from difficulty_objects import DifficultyObjectSequence, HitObjectRecord, build_difficulty_objects
from reading_models import ObjectKind, ReadingInputError, Vector2

logger = logging.getLogger(__name__)


class SequenceLoadError(Exception):
    """Raised when a sequence document cannot be read, parsed or validated."""


class HitObjectModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: ObjectKind = ObjectKind.POINT
    start_time: float = Field(ge=0)
    radius: float = Field(gt=0)
    stacked_position: Tuple[float, float]
    stacked_end_position: Optional[Tuple[float, float]] = None
    lazy_jump_distance: float = Field(default=0.0, ge=0)
    minimum_jump_distance: float = Field(default=0.0, ge=0)
    lazy_travel_distance: float = Field(default=0.0, ge=0)
    travel_time: float = Field(default=0.0, ge=0)
    angle: Optional[float] = None
    repeat_count: int = Field(default=0, ge=0)
    delta_time: Optional[float] = Field(default=None, ge=0)
    strain_time: Optional[float] = Field(default=None, ge=0)
    time_preempt: Optional[float] = Field(default=None, gt=0)
    time_fade_in: Optional[float] = Field(default=None, gt=0)

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def to_record(self) -> HitObjectRecord:
        end_position = self.stacked_end_position
        return HitObjectRecord(
            kind=self.kind,
            start_time=self.start_time,
            radius=self.radius,
            stacked_position=Vector2(*self.stacked_position),
            stacked_end_position=Vector2(*end_position) if end_position is not None else None,
            lazy_jump_distance=self.lazy_jump_distance,
            minimum_jump_distance=self.minimum_jump_distance,
            lazy_travel_distance=self.lazy_travel_distance,
            travel_time=self.travel_time,
            angle=self.angle,
            repeat_count=self.repeat_count,
            delta_time=self.delta_time,
            strain_time=self.strain_time,
            time_preempt=self.time_preempt,
            time_fade_in=self.time_fade_in,
        )


class SequenceDocumentModel(BaseModel):
    approach_rate: Optional[float] = None
    clock_rate: float = Field(default=1.0, gt=0)
    objects: List[HitObjectModel] = Field(default_factory=list)

    @field_validator("approach_rate")
    @classmethod
    def validate_approach_rate(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not math.isfinite(value):
            raise ValueError("approach_rate must be finite")
        return value


@dataclass(frozen=True)
class LoadedSequence:
    objects: DifficultyObjectSequence
    records: Tuple[HitObjectRecord, ...]
    approach_rate: Optional[float]
    clock_rate: float
    source_path: Optional[Path]

    def build(self, clock_rate: Optional[float] = None) -> DifficultyObjectSequence:
        """Rebuild the sequence at another clock rate. None keeps the document's rate."""
        if clock_rate is None or clock_rate == self.clock_rate:
            return self.objects
        return build_difficulty_objects(self.records, approach_rate=self.approach_rate, clock_rate=clock_rate)


def parse_sequence_document(payload: Dict[str, Any], *, source_path: Optional[Path] = None) -> LoadedSequence:
    source_text = str(source_path) if source_path is not None else "<document>"

    try:
        document = SequenceDocumentModel.model_validate(payload)
    except ValidationError as exception:
        raise SequenceLoadError(f"Sequence document validation failed for {source_text}:\n{exception}") from exception

    records = tuple(item.to_record() for item in document.objects)
    try:
        objects = build_difficulty_objects(
            records,
            approach_rate=document.approach_rate,
            clock_rate=document.clock_rate,
        )
    except ReadingInputError as exception:
        raise SequenceLoadError(f"Invalid sequence in {source_text}: {exception}") from exception

    logger.debug("Loaded %d objects from %s", len(objects), source_text)
    return LoadedSequence(
        objects=objects,
        records=records,
        approach_rate=document.approach_rate,
        clock_rate=document.clock_rate,
        source_path=source_path,
    )


def load_sequence_document(path: Path) -> LoadedSequence:
    document_path = Path(path)
    try:
        raw_text = document_path.read_text(encoding="utf-8")
    except OSError as exception:
        raise SequenceLoadError(f"Failed to read sequence document: {document_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise SequenceLoadError(f"Sequence document is not valid JSON: {document_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise SequenceLoadError(f"Sequence document root must be a JSON object: {document_path}")

    return parse_sequence_document(parsed, source_path=document_path)
