from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qbloader.models.base import Base


class QuestionSet(Base):
    __tablename__ = "question_set"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    difficulty: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    format: Mapped[str] = mapped_column(String(20), nullable=False, default="powers")  # acf|powers|superpowers|pace
    bonuses: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    editions: Mapped[List["QuestionSetEdition"]] = relationship(
        back_populates="question_set", cascade="all, delete-orphan"
    )


class QuestionSetEdition(Base):
    __tablename__ = "question_set_edition"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_set_id: Mapped[int] = mapped_column(
        ForeignKey("question_set.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    # dates are kept as written in index.json
    date: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    question_set: Mapped["QuestionSet"] = relationship(back_populates="editions")
    packets: Mapped[List["Packet"]] = relationship(
        back_populates="edition", cascade="all, delete-orphan"
    )
    tournaments: Mapped[List["Tournament"]] = relationship(  # noqa: F821
        back_populates="edition", cascade="all, delete-orphan"
    )

    __table_args__ = (UniqueConstraint("question_set_id", "slug", name="uq_edition_set_slug"),)


class Packet(Base):
    __tablename__ = "packet"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_set_edition_id: Mapped[int] = mapped_column(
        ForeignKey("question_set_edition.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    descriptor: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    number: Mapped[int] = mapped_column(Integer, nullable=False)

    edition: Mapped["QuestionSetEdition"] = relationship(back_populates="packets")
    packet_questions: Mapped[List["PacketQuestion"]] = relationship(
        back_populates="packet", cascade="all, delete-orphan"
    )
    rounds: Mapped[List["Round"]] = relationship(  # noqa: F821
        back_populates="packet", cascade="all, delete-orphan"
    )

    __table_args__ = (UniqueConstraint("question_set_edition_id", "name", name="uq_packet_edition_name"),)


class PacketQuestion(Base):
    __tablename__ = "packet_question"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    packet_id: Mapped[int] = mapped_column(ForeignKey("packet.id", ondelete="CASCADE"), nullable=False)
    # tossup N and bonus N of a packet share the number
    question_number: Mapped[int] = mapped_column(Integer, nullable=False)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("question.id", ondelete="CASCADE"), nullable=False, index=True
    )

    packet: Mapped["Packet"] = relationship(back_populates="packet_questions")
    question: Mapped["Question"] = relationship(back_populates="packet_questions")  # noqa: F821

    __table_args__ = (
        UniqueConstraint("packet_id", "question_number", "question_id", name="uq_packet_question"),
    )
