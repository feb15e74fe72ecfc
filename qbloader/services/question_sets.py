from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qbloader.core.config import EDITIONS_FOLDER, PACKETS_FOLDER
from qbloader.core.errors import DuplicateUnitError, MissingInputError
from qbloader.models.question import Question
from qbloader.models.question_set import Packet, PacketQuestion, QuestionSet, QuestionSetEdition
from qbloader.schemas.question_set import EditionIndex, PacketFile, QuestionSetIndex
from qbloader.services.files import list_entries, read_index, read_json, require_dir
from qbloader.services.metadata import MetadataStyle, QuestionFormat, parse_metadata
from qbloader.services.packets import resolve_packet
from qbloader.services.questions import insert_bonus, insert_tossup
from qbloader.services.slugs import SlugDictionary
from qbloader.services.stats import ImportStats
from qbloader.services.text import answer_slug, answers_slug


logger = logging.getLogger(__name__)


@dataclass
class QuestionSetContext:
    """Per question set state: metadata convention and the slug scope."""

    question_set_id: int
    name: str
    metadata_style: Optional[MetadataStyle]
    author_first: bool = True
    has_bonuses: bool = True
    subcategory_map: Optional[Mapping[str, str]] = None
    slugs: SlugDictionary = field(default_factory=SlugDictionary)


def _question_format(value: Optional[str]) -> QuestionFormat:
    if not value:
        return QuestionFormat.POWERS
    try:
        return QuestionFormat(value.lower())
    except ValueError:
        logger.warning("Unknown format %r, using %s.", value, QuestionFormat.POWERS.value)
        return QuestionFormat.POWERS


def get_or_create_question_set(session: Session, index: QuestionSetIndex) -> QuestionSet:
    question_set = session.scalar(select(QuestionSet).where(QuestionSet.slug == index.slug))
    if question_set is None:
        question_set = QuestionSet(
            name=index.name,
            slug=index.slug,
            difficulty=None if index.difficulty is None else str(index.difficulty),
            format=_question_format(index.format).value,
            bonuses=True if index.bonuses is None else index.bonuses,
        )
        session.add(question_set)
        session.flush()
    return question_set


def find_edition(session: Session, set_slug: str, edition_slug: str) -> Optional[QuestionSetEdition]:
    return session.scalar(
        select(QuestionSetEdition)
        .join(QuestionSet, QuestionSetEdition.question_set_id == QuestionSet.id)
        .where(QuestionSet.slug == set_slug, QuestionSetEdition.slug == edition_slug)
    )


def delete_edition(session: Session, edition: QuestionSetEdition) -> None:
    """Delete an edition with its packets, the tournaments played on it and the
    questions that no other edition uses."""
    question_ids = set(
        session.scalars(
            select(PacketQuestion.question_id)
            .join(Packet, PacketQuestion.packet_id == Packet.id)
            .where(Packet.question_set_edition_id == edition.id)
        )
    )
    session.delete(edition)
    session.flush()

    if question_ids:
        still_used = set(
            session.scalars(select(PacketQuestion.question_id).where(PacketQuestion.question_id.in_(question_ids)))
        )
        for question in session.scalars(select(Question).where(Question.id.in_(question_ids - still_used))):
            session.delete(question)
        session.flush()


def import_packet(
    session: Session,
    ctx: QuestionSetContext,
    edition_id: int,
    packet_path: Path,
    fallback_index: int,
    stats: ImportStats,
) -> Packet:
    packet_name = packet_path.stem
    identifier = resolve_packet(packet_name, fallback_index)
    data = read_json(packet_path, PacketFile)

    packet = Packet(
        question_set_edition_id=edition_id,
        name=packet_name,
        descriptor=identifier.descriptor,
        number=identifier.number,
    )
    session.add(packet)
    session.flush()

    num_tossups = num_bonuses = 0

    for number, tossup in enumerate(data.tossups, start=1):
        if not tossup.metadata and ctx.metadata_style != MetadataStyle.NONE:
            logger.warning("\tError in saving data for tossup %d: Couldn't process metadata.", number)
            continue
        slug = answer_slug(tossup.answer)
        if not slug:
            logger.warning("\tError in saving data for tossup %d: Couldn't process answer slug.", number)
            continue
        parsed = parse_metadata(tossup.metadata, ctx.metadata_style, ctx.author_first, ctx.subcategory_map)
        insert_tossup(session, ctx.slugs, packet.id, number, tossup, parsed, slug)
        num_tossups += 1

    if ctx.has_bonuses:
        for number, bonus in enumerate(data.bonuses, start=1):
            if not bonus.metadata and ctx.metadata_style != MetadataStyle.NONE:
                logger.warning("\tError in saving data for bonus %d: Couldn't process metadata.", number)
                continue
            slug = answers_slug(bonus.answers)
            if not slug:
                logger.warning("\tError in saving data for bonus %d: Couldn't process answer slug.", number)
                continue
            parsed = parse_metadata(bonus.metadata, ctx.metadata_style, ctx.author_first, ctx.subcategory_map)
            try:
                bonus_id = insert_bonus(session, ctx.slugs, packet.id, number, bonus, parsed, slug)
            except SQLAlchemyError:
                logger.exception("\tError parsing bonus %d of packet ID %d", number, packet.id)
                continue
            if bonus_id is None:
                stats.rejected_bonuses += 1
            else:
                num_bonuses += 1

    stats.packets += 1
    stats.tossups += num_tossups
    stats.bonuses += num_bonuses
    logger.info("\t%d tossups%s", num_tossups, f", {num_bonuses} bonuses" if ctx.has_bonuses else "")
    return packet


def import_edition(
    session: Session,
    ctx: QuestionSetContext,
    set_slug: str,
    edition_folder: Path,
    overwrite: bool,
    stats: ImportStats,
) -> None:
    index = read_index(edition_folder, EditionIndex)
    packets_path = require_dir(edition_folder / PACKETS_FOLDER)

    existing = find_edition(session, set_slug, index.slug)
    if existing is not None:
        if not overwrite:
            raise DuplicateUnitError(f"edition {index.name} is already in database")
        logger.info("\tReplacing edition %s.", index.name)
        delete_edition(session, existing)

    edition = QuestionSetEdition(
        question_set_id=ctx.question_set_id,
        name=index.name,
        slug=index.slug,
        date=index.date,
    )
    session.add(edition)
    session.commit()
    stats.editions += 1

    for i, packet_path in enumerate(list_entries(packets_path, suffix=".json"), start=1):
        try:
            packet = import_packet(session, ctx, edition.id, packet_path, i, stats)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Error processing %s", packet_path)
            stats.skipped += 1
            continue
        logger.info(
            "Set: %s | Edition: %s | Packet #%d | ID: %s | Filename: %s",
            ctx.name,
            index.name,
            packet.number,
            packet.descriptor,
            packet_path.name,
        )


def import_question_set(
    session: Session,
    folder: Path,
    overwrite: bool,
    stats: ImportStats,
    subcategory_map: Optional[Mapping[str, str]] = None,
) -> None:
    index = read_index(folder, QuestionSetIndex)
    question_set = get_or_create_question_set(session, index)
    session.commit()
    stats.question_sets += 1

    editions_path = require_dir(folder / EDITIONS_FOLDER)

    style = MetadataStyle.coerce(index.metadata_style)
    if style is None:
        logger.warning("%s has no usable metadataStyle (%r).", folder.name, index.metadata_style)

    ctx = QuestionSetContext(
        question_set_id=question_set.id,
        name=question_set.name,
        metadata_style=style,
        author_first=index.author_first,
        has_bonuses=question_set.bonuses,
        subcategory_map=subcategory_map,
    )

    for edition_folder in list_entries(editions_path):
        try:
            import_edition(session, ctx, question_set.slug, edition_folder, overwrite, stats)
        except (MissingInputError, DuplicateUnitError) as e:
            session.rollback()
            logger.info("\tSkipping %s as %s.", edition_folder.name, e)
            stats.skipped += 1
        except Exception:
            session.rollback()
            logger.exception("Error creating set edition at %s", edition_folder)
            stats.skipped += 1


def import_question_sets(
    session: Session,
    root: Path,
    overwrite: bool = False,
    subcategory_map: Optional[Mapping[str, str]] = None,
) -> ImportStats:
    """Load every question set folder under ``root``.

    A broken set, edition or packet is logged and skipped; the rest of the
    tree is still imported.
    """
    stats = ImportStats()
    for folder in list_entries(require_dir(Path(root))):
        try:
            import_question_set(session, folder, overwrite, stats, subcategory_map)
        except MissingInputError as e:
            session.rollback()
            logger.info("Skipping %s as %s.", folder.name, e)
            stats.skipped += 1
        except Exception:
            session.rollback()
            logger.exception("Error reading %s", folder)
            stats.skipped += 1
    return stats
