from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from qbloader.core.errors import BonusValidationError
from qbloader.models.question import Bonus, BonusHash, BonusPart, Question, Tossup, TossupHash
from qbloader.models.question_set import PacketQuestion
from qbloader.schemas.question_set import BonusIn, TossupIn
from qbloader.services.metadata import ParsedMetadata
from qbloader.services.slugs import SlugDictionary
from qbloader.services.text import make_slug, remove_tags, shorten_answerline


logger = logging.getLogger(__name__)


BONUS_PARTS = 3

_FIELD_SEPARATOR = "\x1f"


def content_hash(fields: Iterable[Optional[str]]) -> str:
    joined = _FIELD_SEPARATOR.join(f or "" for f in fields)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


def tossup_hash(tossup: TossupIn) -> str:
    return content_hash([tossup.question, tossup.answer, tossup.metadata])


def bonus_hash(bonus: BonusIn) -> str:
    return content_hash([bonus.leadin, "".join(bonus.parts), "".join(bonus.answers), bonus.metadata])


def _slug_taken(session: Session) -> Callable[[str], bool]:
    def is_taken(slug: str) -> bool:
        return session.scalar(select(Question.id).where(Question.slug == slug)) is not None

    return is_taken


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _new_question(
    session: Session,
    slugs: SlugDictionary,
    base_slug: str,
    metadata_text: Optional[str],
    parsed: ParsedMetadata,
) -> Question:
    question = Question(
        slug=slugs.assign(base_slug, is_taken=_slug_taken(session)),
        metadata_text=metadata_text,
        author=parsed.author or None,
        editor=parsed.editor or None,
        category=parsed.category or None,
        category_slug=make_slug(parsed.category.lower()) or None,
        subcategory=parsed.subcategory or None,
        subcategory_slug=make_slug(parsed.subcategory.lower()) or None,
        subsubcategory_slug=make_slug(parsed.subsubcategory.lower()) or None,
    )
    session.add(question)
    session.flush()
    return question


def _link(session: Session, packet_id: int, question_number: int, question_id: int) -> None:
    session.add(PacketQuestion(packet_id=packet_id, question_number=question_number, question_id=question_id))
    session.flush()


def insert_tossup(
    session: Session,
    slugs: SlugDictionary,
    packet_id: int,
    question_number: int,
    tossup: TossupIn,
    parsed: ParsedMetadata,
    base_slug: str,
) -> int:
    """Store a tossup, reusing an identical one when its content hash is known.

    Either way the question is bound to (packet_id, question_number).
    """
    digest = tossup_hash(tossup)

    with session.begin_nested():
        existing = session.scalar(select(TossupHash).where(TossupHash.hash == digest))
        if existing is not None:
            question_id, tossup_id = existing.question_id, existing.tossup_id
        else:
            question = _new_question(session, slugs, base_slug, tossup.metadata, parsed)
            answer = tossup.answer or ""
            sanitized = remove_tags(answer)
            row = Tossup(
                question_id=question.id,
                question=tossup.question or "",
                answer=answer,
                answer_sanitized=sanitized,
                answer_primary=shorten_answerline(sanitized),
            )
            session.add(row)
            session.flush()
            session.add(TossupHash(hash=digest, question_id=question.id, tossup_id=row.id))
            question_id, tossup_id = question.id, row.id

        _link(session, packet_id, question_number, question_id)

    return tossup_id


def validate_bonus(bonus: BonusIn) -> None:
    modifiers = bonus.difficulty_modifiers
    if not modifiers:
        raise BonusValidationError("difficulty modifiers missing")
    if len(modifiers) != BONUS_PARTS or len({str(m) for m in modifiers}) != len(modifiers):
        listed = ", ".join(str(m) for m in modifiers)
        raise BonusValidationError(f"difficulty modifiers must be {BONUS_PARTS} distinct values, got [{listed}]")
    if len(bonus.parts) != len(modifiers) or len(bonus.answers) != len(modifiers):
        raise BonusValidationError(
            f"expected {len(modifiers)} parts and answers, "
            f"got {len(bonus.parts)} parts and {len(bonus.answers)} answers"
        )


def insert_bonus(
    session: Session,
    slugs: SlugDictionary,
    packet_id: int,
    question_number: int,
    bonus: BonusIn,
    parsed: ParsedMetadata,
    base_slug: str,
) -> Optional[int]:
    """Store a bonus and its parts; ``None`` means the bonus was rejected.

    The question row, the bonus row and all parts go into one savepoint, so a
    failure part-way leaves nothing behind.
    """
    primary_answers = [shorten_answerline(remove_tags(a)) for a in bonus.answers]
    try:
        validate_bonus(bonus)
    except BonusValidationError as e:
        logger.warning(
            "\tRejected bonus %d in packet ID %d with answerlines [%s]: %s.",
            question_number,
            packet_id,
            ", ".join(primary_answers),
            e,
        )
        return None

    digest = bonus_hash(bonus)

    with session.begin_nested():
        existing = session.scalar(select(BonusHash).where(BonusHash.hash == digest))
        if existing is not None:
            question_id, bonus_id = existing.question_id, existing.bonus_id
        else:
            question = _new_question(session, slugs, base_slug, bonus.metadata, parsed)
            leadin = bonus.leadin or ""
            row = Bonus(question_id=question.id, leadin=leadin, leadin_sanitized=remove_tags(leadin))
            session.add(row)
            session.flush()

            values = bonus.values or []
            for i, (part, answer) in enumerate(zip(bonus.parts, bonus.answers)):
                session.add(
                    BonusPart(
                        bonus_id=row.id,
                        part_number=i + 1,
                        part=part,
                        part_sanitized=remove_tags(part),
                        answer=answer,
                        answer_sanitized=remove_tags(answer),
                        answer_primary=primary_answers[i],
                        value=_as_int(values[i]) if i < len(values) else None,
                        difficulty_modifier=str(bonus.difficulty_modifiers[i]),
                    )
                )
            session.add(BonusHash(hash=digest, question_id=question.id, bonus_id=row.id))
            session.flush()
            question_id, bonus_id = question.id, row.id

        _link(session, packet_id, question_number, question_id)

    return bonus_id
