from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qbloader.models.base import Base


class Tournament(Base):
    __tablename__ = "tournament"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    question_set_edition_id: Mapped[int] = mapped_column(
        ForeignKey("question_set_edition.id", ondelete="CASCADE"), nullable=False, index=True
    )
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    start_date: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    end_date: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    edition: Mapped["QuestionSetEdition"] = relationship(back_populates="tournaments")  # noqa: F821
    rounds: Mapped[List["Round"]] = relationship(back_populates="tournament", cascade="all, delete-orphan")
    teams: Mapped[List["Team"]] = relationship(back_populates="tournament", cascade="all, delete-orphan")


class Round(Base):
    __tablename__ = "round"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        ForeignKey("tournament.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # rounds split over several packets get number * 100
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    packet_id: Mapped[int] = mapped_column(ForeignKey("packet.id", ondelete="CASCADE"), nullable=False)
    exclude_from_individual: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    tournament: Mapped["Tournament"] = relationship(back_populates="rounds")
    packet: Mapped["Packet"] = relationship(back_populates="rounds")  # noqa: F821
    games: Mapped[List["Game"]] = relationship(back_populates="round", cascade="all, delete-orphan")


class Team(Base):
    __tablename__ = "team"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tournament_id: Mapped[int] = mapped_column(
        ForeignKey("tournament.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)

    tournament: Mapped["Tournament"] = relationship(back_populates="teams")
    players: Mapped[List["Player"]] = relationship(back_populates="team", cascade="all, delete-orphan")
    bonus_part_directs: Mapped[List["BonusPartDirect"]] = relationship(
        back_populates="team", cascade="all, delete-orphan"
    )


class Player(Base):
    __tablename__ = "player"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    # name collisions are checked within one question set's player pool
    question_set_id: Mapped[int] = mapped_column(
        ForeignKey("question_set.id", ondelete="CASCADE"), nullable=False, index=True
    )

    team: Mapped["Team"] = relationship(back_populates="players")
    buzzes: Mapped[List["Buzz"]] = relationship(back_populates="player", cascade="all, delete-orphan")


class Game(Base):
    __tablename__ = "game"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    round_id: Mapped[int] = mapped_column(ForeignKey("round.id", ondelete="CASCADE"), nullable=False, index=True)
    tossups_read: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    team_one_id: Mapped[int] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False)
    team_two_id: Mapped[int] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False)

    round: Mapped["Round"] = relationship(back_populates="games")
    team_one: Mapped["Team"] = relationship(foreign_keys=[team_one_id])
    team_two: Mapped["Team"] = relationship(foreign_keys=[team_two_id])
    buzzes: Mapped[List["Buzz"]] = relationship(back_populates="game", cascade="all, delete-orphan")
    bonus_part_directs: Mapped[List["BonusPartDirect"]] = relationship(
        back_populates="game", cascade="all, delete-orphan"
    )


class Buzz(Base):
    __tablename__ = "buzz"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("player.id", ondelete="CASCADE"), nullable=False)
    game_id: Mapped[int] = mapped_column(ForeignKey("game.id", ondelete="CASCADE"), nullable=False, index=True)
    tossup_id: Mapped[int] = mapped_column(ForeignKey("tossup.id", ondelete="CASCADE"), nullable=False, index=True)
    buzz_position: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False)

    player: Mapped["Player"] = relationship(back_populates="buzzes")
    game: Mapped["Game"] = relationship(back_populates="buzzes")
    tossup: Mapped["Tossup"] = relationship(back_populates="buzzes")  # noqa: F821


class BonusPartDirect(Base):
    __tablename__ = "bonus_part_direct"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_id: Mapped[int] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False)
    game_id: Mapped[int] = mapped_column(ForeignKey("game.id", ondelete="CASCADE"), nullable=False, index=True)
    bonus_part_id: Mapped[int] = mapped_column(
        ForeignKey("bonus_part.id", ondelete="CASCADE"), nullable=False, index=True
    )
    value: Mapped[int] = mapped_column(Integer, nullable=False)

    team: Mapped["Team"] = relationship(back_populates="bonus_part_directs")
    game: Mapped["Game"] = relationship(back_populates="bonus_part_directs")
    bonus_part: Mapped["BonusPart"] = relationship(back_populates="directs")  # noqa: F821
