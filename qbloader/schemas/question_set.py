from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionSetIndex(BaseModel):
    name: str
    slug: str
    difficulty: Optional[str | int] = None
    format: Optional[str] = None
    bonuses: Optional[bool] = None
    # integer code or style name, see MetadataStyle.coerce
    metadata_style: Any = Field(default=None, alias="metadataStyle")
    author_first: bool = Field(default=True, alias="authorFirst")

    model_config = ConfigDict(populate_by_name=True)


class EditionIndex(BaseModel):
    name: str
    slug: str
    date: Optional[str] = None


class TossupIn(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None
    metadata: Optional[str] = None


class BonusIn(BaseModel):
    leadin: Optional[str] = None
    metadata: Optional[str] = None
    answers: List[str] = Field(default_factory=list)
    parts: List[str] = Field(default_factory=list)
    values: Optional[List[Any]] = None
    difficulty_modifiers: Optional[List[str | int]] = Field(default=None, alias="difficultyModifiers")

    model_config = ConfigDict(populate_by_name=True)


class PacketFile(BaseModel):
    tossups: List[TossupIn] = Field(default_factory=list)
    bonuses: List[BonusIn] = Field(default_factory=list)
