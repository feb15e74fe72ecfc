from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RoundMapping(BaseModel):
    number: int
    packet: str


class TournamentIndex(BaseModel):
    name: str
    slug: str
    set_name: str = Field(alias="set")
    edition: str
    location: Optional[str] = None
    level: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    rounds_to_exclude_from_individual_stats: List[int] = Field(default_factory=list)
    # only present for tournaments shipped as buzzes.csv / bonuses.csv
    rounds: Optional[List[RoundMapping]] = None

    model_config = ConfigDict(populate_by_name=True)


# --- .qbj match documents (only the fields the import reads) ---

class QbjPlayer(BaseModel):
    name: str


class QbjTeam(BaseModel):
    name: str
    players: List[QbjPlayer] = Field(default_factory=list)


class QbjMatchPlayer(BaseModel):
    player: QbjPlayer


class QbjMatchTeam(BaseModel):
    team: QbjTeam
    match_players: List[QbjMatchPlayer] = Field(default_factory=list)


class QbjBuzzPosition(BaseModel):
    word_index: Optional[int] = None


class QbjResult(BaseModel):
    value: int


class QbjBuzz(BaseModel):
    player: QbjPlayer
    team: QbjTeam
    buzz_position: QbjBuzzPosition = Field(default_factory=QbjBuzzPosition)
    result: QbjResult


class QbjQuestionRef(BaseModel):
    question_number: int


class QbjBonusPart(BaseModel):
    controlled_points: int = 0


class QbjBonus(BaseModel):
    question: QbjQuestionRef
    parts: List[QbjBonusPart] = Field(default_factory=list)


class QbjMatchQuestion(BaseModel):
    question_number: Optional[int] = None
    tossup_question: QbjQuestionRef
    buzzes: List[QbjBuzz] = Field(default_factory=list)
    bonus: Optional[QbjBonus] = None


class QbjMatch(BaseModel):
    packets: str = ""
    tossups_read: Optional[int] = None
    match_teams: List[QbjMatchTeam]
    match_questions: List[QbjMatchQuestion] = Field(default_factory=list)
