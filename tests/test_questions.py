import logging

import pytest
from sqlalchemy import func, select

from qbloader.core.errors import BonusValidationError
from qbloader.models.question import Bonus, BonusPart, Question, Tossup, TossupHash
from qbloader.models.question_set import Packet, PacketQuestion, QuestionSet, QuestionSetEdition
from qbloader.schemas.question_set import BonusIn, TossupIn
from qbloader.services.metadata import MetadataStyle, parse_metadata
from qbloader.services.questions import content_hash, insert_bonus, insert_tossup, tossup_hash, validate_bonus
from qbloader.services.slugs import SlugDictionary


@pytest.fixture
def packet_ids(session):
    question_set = QuestionSet(name="Test Open", slug="test-open", format="powers", bonuses=True)
    session.add(question_set)
    session.flush()
    edition = QuestionSetEdition(question_set_id=question_set.id, name="Main", slug="main")
    session.add(edition)
    session.flush()
    packets = [Packet(question_set_edition_id=edition.id, name=f"Round 0{n}", descriptor=str(n), number=n) for n in (1, 2)]
    session.add_all(packets)
    session.commit()
    return [p.id for p in packets]


def _bonus(modifiers):
    return BonusIn(
        leadin="For 10 points each:",
        metadata="Jane Doe, Biology",
        parts=["Name this organelle.", "Name this process.", "Name this scientist."],
        answers=["<b>mitochondrion</b>", "glycolysis [accept EMP pathway]", "Krebs"],
        values=[10, 10, 10],
        difficultyModifiers=modifiers,
    )


def _count(session, model):
    return session.scalar(select(func.count()).select_from(model))


def test_content_hash_separates_fields():
    assert content_hash(["ab", "c"]) != content_hash(["a", "bc"])
    assert content_hash([None, "x"]) == content_hash(["", "x"])


def test_identical_tossup_is_stored_once(session, packet_ids):
    tossup = TossupIn(question="This philosopher wrote the Republic.", answer="Plato", metadata="Jane Doe, Philosophy")
    parsed = parse_metadata(tossup.metadata, MetadataStyle.DEFAULT)
    slugs = SlugDictionary()

    first = insert_tossup(session, slugs, packet_ids[0], 1, tossup, parsed, "plato")
    second = insert_tossup(session, slugs, packet_ids[1], 4, tossup, parsed, "plato")
    session.commit()

    assert first == second
    assert _count(session, Question) == 1
    assert _count(session, TossupHash) == 1
    links = session.execute(select(PacketQuestion.packet_id, PacketQuestion.question_number)).all()
    assert sorted(links) == [(packet_ids[0], 1), (packet_ids[1], 4)]

    question = session.scalar(select(Question))
    assert (question.slug, question.category, question.subcategory) == ("plato", "RMPSS", "Philosophy")
    assert session.get(Tossup, first).answer_primary == "Plato"


def test_changed_text_is_a_new_question_with_numbered_slug(session, packet_ids):
    slugs = SlugDictionary()
    parsed = parse_metadata("Jane Doe, Philosophy", MetadataStyle.DEFAULT)
    a = TossupIn(question="Republic author.", answer="Plato", metadata="Jane Doe, Philosophy")
    b = TossupIn(question="Symposium author.", answer="Plato", metadata="Jane Doe, Philosophy")

    insert_tossup(session, slugs, packet_ids[0], 1, a, parsed, "plato")
    insert_tossup(session, slugs, packet_ids[0], 2, b, parsed, "plato")
    session.commit()

    assert tossup_hash(a) != tossup_hash(b)
    assert sorted(session.scalars(select(Question.slug))) == ["plato", "plato-2"]


def test_slug_already_in_store_is_skipped(session, packet_ids):
    parsed = parse_metadata("Jane Doe, Philosophy", MetadataStyle.DEFAULT)
    tossup = TossupIn(question="Republic author.", answer="Plato", metadata="Jane Doe, Philosophy")
    insert_tossup(session, SlugDictionary(), packet_ids[0], 1, tossup, parsed, "plato")

    other = TossupIn(question="Phaedo author.", answer="Plato", metadata="Jane Doe, Philosophy")
    insert_tossup(session, SlugDictionary(), packet_ids[1], 1, other, parsed, "plato")
    session.commit()

    assert sorted(session.scalars(select(Question.slug))) == ["plato", "plato-2"]


def test_validate_bonus():
    validate_bonus(_bonus(["e", "m", "h"]))
    with pytest.raises(BonusValidationError):
        validate_bonus(_bonus(None))
    with pytest.raises(BonusValidationError):
        validate_bonus(_bonus([1, 1, 2]))
    with pytest.raises(BonusValidationError):
        validate_bonus(_bonus(["e", "m"]))


def test_bonus_with_repeated_modifiers_is_rejected(session, packet_ids, caplog):
    parsed = parse_metadata("Jane Doe, Biology", MetadataStyle.DEFAULT)
    with caplog.at_level(logging.WARNING):
        result = insert_bonus(session, SlugDictionary(), packet_ids[0], 1, _bonus([1, 1, 2]), parsed, "mitochondrion")
    session.commit()

    assert result is None
    assert "Rejected bonus 1" in caplog.text
    assert "mitochondrion, glycolysis, Krebs" in caplog.text
    assert _count(session, Question) == 0
    assert _count(session, Bonus) == 0


def test_bonus_is_stored_with_parts(session, packet_ids):
    parsed = parse_metadata("Jane Doe, Biology", MetadataStyle.DEFAULT)
    bonus_id = insert_bonus(session, SlugDictionary(), packet_ids[0], 1, _bonus([1, 2, 3]), parsed, "mitochondrion")
    session.commit()

    parts = session.scalars(select(BonusPart).where(BonusPart.bonus_id == bonus_id).order_by(BonusPart.part_number)).all()
    assert [p.part_number for p in parts] == [1, 2, 3]
    assert [p.difficulty_modifier for p in parts] == ["1", "2", "3"]
    assert [p.answer_primary for p in parts] == ["mitochondrion", "glycolysis", "Krebs"]
    assert parts[0].answer_sanitized == "mitochondrion"
    assert all(p.value == 10 for p in parts)

    again = insert_bonus(session, SlugDictionary(), packet_ids[1], 1, _bonus([1, 2, 3]), parsed, "mitochondrion")
    session.commit()
    assert again == bonus_id
    assert _count(session, Bonus) == 1
