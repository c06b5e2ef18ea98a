"""
Pydantic models for answer payloads and vocabulary items.

These models validate what route handlers pass into the scheduler before any
progress record is touched.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from vocab_core.errors import ValidationError


class LearningMode(str, Enum):
    """Exercise direction used for the auxiliary per-mode counters."""
    ENG_TO_JPN = "eng_to_jpn"
    JPN_TO_ENG = "jpn_to_eng"
    AUDIO_RECOGNITION = "audio_recognition"
    CONTEXT_FILL = "context_fill"


LEARNING_MODES = frozenset(mode.value for mode in LearningMode)


class AnswerEvent(BaseModel):
    """One answer submitted by a learner."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    item_id: str = Field(..., min_length=1, alias="wordId", description="Vocabulary item id")
    correct: bool = Field(..., alias="isCorrect", description="Whether the answer was correct")
    response_time_ms: Optional[int] = Field(
        None, ge=0, alias="responseTime", description="Time taken to answer in milliseconds"
    )
    mode: Optional[str] = Field(None, description="Learning mode, e.g. eng_to_jpn")


class VocabularyItemIn(BaseModel):
    """A vocabulary item to add to the catalog."""
    id: str = Field(..., min_length=1)
    english: str = Field(..., min_length=1)
    japanese: str = Field(..., min_length=1)
    phonetic: Optional[str] = None
    part_of_speech: str = "other"
    example_english: Optional[str] = None
    example_japanese: Optional[str] = None
    created_at: Optional[datetime] = None


def parse_answer(payload: Any) -> AnswerEvent:
    """
    Validate one raw answer (dict or AnswerEvent).

    Raises:
        ValidationError: if the payload is malformed (missing item id, ...)
    """
    if isinstance(payload, AnswerEvent):
        return payload

    item_id = payload.get("item_id", payload.get("wordId")) if isinstance(payload, dict) else None
    try:
        return AnswerEvent.model_validate(payload)
    except PydanticValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "payload" for err in exc.errors()
        )
        raise ValidationError(f"Malformed answer ({fields})", item_id=item_id) from exc
