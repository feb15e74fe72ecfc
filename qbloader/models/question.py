from __future__ import annotations

from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qbloader.models.base import Base


class Question(Base):
    __tablename__ = "question"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    metadata_text: Mapped[Optional[str]] = mapped_column("metadata", Text, nullable=True)
    author: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    editor: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    subcategory: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    subcategory_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    subsubcategory_slug: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    packet_questions: Mapped[List["PacketQuestion"]] = relationship(  # noqa: F821
        back_populates="question", cascade="all, delete-orphan"
    )
    tossup: Mapped[Optional["Tossup"]] = relationship(
        back_populates="parent", uselist=False, cascade="all, delete-orphan"
    )
    bonus: Mapped[Optional["Bonus"]] = relationship(
        back_populates="question", uselist=False, cascade="all, delete-orphan"
    )


class Tossup(Base):
    __tablename__ = "tossup"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("question.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    answer_sanitized: Mapped[str] = mapped_column(Text, nullable=False)
    answer_primary: Mapped[str] = mapped_column(Text, nullable=False)

    # "question" is taken by the text column
    parent: Mapped["Question"] = relationship(back_populates="tossup")
    hashes: Mapped[List["TossupHash"]] = relationship(back_populates="tossup", cascade="all, delete-orphan")
    buzzes: Mapped[List["Buzz"]] = relationship(  # noqa: F821
        back_populates="tossup", cascade="all, delete-orphan"
    )


class Bonus(Base):
    __tablename__ = "bonus"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("question.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    leadin: Mapped[str] = mapped_column(Text, nullable=False, default="")
    leadin_sanitized: Mapped[str] = mapped_column(Text, nullable=False, default="")

    question: Mapped["Question"] = relationship(back_populates="bonus")
    parts: Mapped[List["BonusPart"]] = relationship(
        back_populates="bonus", cascade="all, delete-orphan", order_by="BonusPart.part_number"
    )
    hashes: Mapped[List["BonusHash"]] = relationship(back_populates="bonus", cascade="all, delete-orphan")


class BonusPart(Base):
    __tablename__ = "bonus_part"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bonus_id: Mapped[int] = mapped_column(ForeignKey("bonus.id", ondelete="CASCADE"), nullable=False, index=True)
    part_number: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..3
    part: Mapped[str] = mapped_column(Text, nullable=False)
    part_sanitized: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    answer_sanitized: Mapped[str] = mapped_column(Text, nullable=False)
    answer_primary: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    difficulty_modifier: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    bonus: Mapped["Bonus"] = relationship(back_populates="parts")
    directs: Mapped[List["BonusPartDirect"]] = relationship(  # noqa: F821
        back_populates="bonus_part", cascade="all, delete-orphan"
    )


class TossupHash(Base):
    __tablename__ = "tossup_hash"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("question.id", ondelete="CASCADE"), nullable=False)
    tossup_id: Mapped[int] = mapped_column(ForeignKey("tossup.id", ondelete="CASCADE"), nullable=False)

    tossup: Mapped["Tossup"] = relationship(back_populates="hashes")


class BonusHash(Base):
    __tablename__ = "bonus_hash"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    question_id: Mapped[int] = mapped_column(ForeignKey("question.id", ondelete="CASCADE"), nullable=False)
    bonus_id: Mapped[int] = mapped_column(ForeignKey("bonus.id", ondelete="CASCADE"), nullable=False)

    bonus: Mapped["Bonus"] = relationship(back_populates="hashes")
