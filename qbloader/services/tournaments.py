from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from qbloader.core.config import BONUSES_FILE, BUZZES_FILE, GAMES_FOLDER
from qbloader.core.errors import DuplicateUnitError, MissingInputError, UnresolvedReferenceError
from qbloader.models.question_set import Packet, QuestionSet, QuestionSetEdition
from qbloader.models.tournament import Tournament
from qbloader.schemas.tournament import QbjMatch, QbjMatchQuestion, RoundMapping, TournamentIndex
from qbloader.services.entities import (
    BoundRound,
    TournamentContext,
    bonus_part_for,
    create_game,
    ensure_player,
    ensure_round,
    ensure_team,
    find_bonus_parts,
    find_game,
    find_packet_by_name,
    find_tossup,
    record_bonus_part_direct,
    record_buzz,
)
from qbloader.services.files import list_entries, read_index, read_json, require_dir
from qbloader.services.packets import clean_packet_name, round_number_from_filename
from qbloader.services.stats import ImportStats
from qbloader.services.text import clean_name


logger = logging.getLogger(__name__)


# CSV exports carry no tossup count
CSV_TOSSUPS_READ = 20

_NON_DIGITS_RE = re.compile(r"\D")


def find_edition_ids(session: Session, set_name: str, edition_name: str) -> Optional[Tuple[int, int]]:
    """(question_set_id, edition_id) for a set and edition given by name."""
    row = session.execute(
        select(QuestionSet.id, QuestionSetEdition.id)
        .join(QuestionSetEdition, QuestionSetEdition.question_set_id == QuestionSet.id)
        .where(QuestionSet.name == set_name, QuestionSetEdition.name == edition_name)
    ).first()
    return None if row is None else (row[0], row[1])


def delete_tournament(session: Session, tournament: Tournament) -> None:
    session.delete(tournament)
    session.flush()


# --- CSV results ---

def _csv_rows(path: Path) -> Iterator[Tuple[int, List[str]]]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        next(reader, None)
        for line_no, row in enumerate(reader, start=2):
            if row:
                yield line_no, row


def _csv_round(
    session: Session, ctx: TournamentContext, packets_by_round: Dict[int, str], number: int
) -> BoundRound:
    packet_name = packets_by_round.get(number)
    if packet_name is None:
        raise UnresolvedReferenceError(f"round {number} has no packet mapping")

    bound = ctx.rounds.get(number, {}).get(packet_name)
    if bound is not None:
        return bound

    packet_id = find_packet_by_name(session, ctx.edition_id, packet_name)
    if packet_id is None:
        raise UnresolvedReferenceError(f"packet {packet_name} not found in edition")
    return ensure_round(session, ctx, number, packet_id, packet_name)


# row handlers resolve every reference before writing anything

def _import_buzz_row(
    session: Session, ctx: TournamentContext, packets_by_round: Dict[int, str], row: List[str], stats: ImportStats
) -> None:
    external_game_id = int(row[0])
    round_number = int(row[1])
    question_number = int(row[2])
    team = clean_name(row[3])
    player = clean_name(row[4])
    opponent = clean_name(row[5])
    buzz_position = int(row[9]) if row[9].strip() else None
    value = int(row[10])

    bound = _csv_round(session, ctx, packets_by_round, round_number)
    tossup_id = find_tossup(session, ctx, bound.packet_id, question_number)
    if tossup_id is None:
        raise UnresolvedReferenceError(
            f"no tossup {question_number} found in packet ID {bound.packet_id} of tournament "
            f"{ctx.tournament_name} in game between {team} and {opponent}"
        )

    team_id = ensure_team(session, ctx, team)
    opponent_id = ensure_team(session, ctx, opponent)
    player_id = ensure_player(session, ctx, team, player)

    game_id = ctx.games.get(external_game_id)
    if game_id is None:
        game_id = create_game(session, bound.round_id, team_id, opponent_id, CSV_TOSSUPS_READ)
        ctx.games[external_game_id] = game_id
        stats.games += 1

    record_buzz(session, player_id, game_id, tossup_id, buzz_position, value)
    stats.buzzes += 1


def _import_bonus_row(
    session: Session, ctx: TournamentContext, packets_by_round: Dict[int, str], row: List[str], stats: ImportStats
) -> None:
    external_game_id = int(row[0])
    round_number = int(row[1])
    bonus_number = int(row[3])
    team = clean_name(row[4])
    part_number = int(_NON_DIGITS_RE.sub("", row[8]))
    value = int(row[11])

    game_id = ctx.games.get(external_game_id)
    if game_id is None:
        raise UnresolvedReferenceError(f"game {external_game_id} has no buzzes")
    team_id = ctx.teams.get(team)
    if team_id is None:
        raise UnresolvedReferenceError(f"team {team} not seen in buzzes")

    bound = _csv_round(session, ctx, packets_by_round, round_number)
    part_id = bonus_part_for(find_bonus_parts(session, ctx, bound.packet_id, bonus_number), part_number)
    if part_id is None:
        raise UnresolvedReferenceError(
            f"no bonus {bonus_number} part {part_number} found in packet ID {bound.packet_id}"
        )

    record_bonus_part_direct(session, team_id, game_id, part_id, value)
    stats.bonus_part_directs += 1


def import_csv_results(
    session: Session, ctx: TournamentContext, folder: Path, rounds: List[RoundMapping], stats: ImportStats
) -> None:
    """Load buzzes.csv and bonuses.csv; rows that reference unknown data are skipped."""
    packets_by_round = {r.number: r.packet for r in rounds}

    for file_name, handler in ((BUZZES_FILE, _import_buzz_row), (BONUSES_FILE, _import_bonus_row)):
        for line_no, row in _csv_rows(folder / file_name):
            try:
                handler(session, ctx, packets_by_round, row, stats)
            except (UnresolvedReferenceError, ValueError, IndexError) as e:
                logger.warning("\tSkipping %s line %d: %s.", file_name, line_no, e)
                stats.skipped += 1
        session.commit()


# --- .qbj match files ---

def _record_tossup(
    session: Session,
    ctx: TournamentContext,
    game_id: int,
    packet: Packet,
    round_number: int,
    teams: Tuple[str, str],
    question: QbjMatchQuestion,
    stats: ImportStats,
) -> None:
    question_number = question.tossup_question.question_number
    tossup_id = find_tossup(session, ctx, packet.id, question_number)
    if tossup_id is None:
        logger.warning(
            "\tNo tossup %d found in packet #%d (%s) of tournament %s in round %d game between %s and %s.",
            question_number,
            packet.number,
            packet.descriptor,
            ctx.tournament_name,
            round_number,
            *teams,
        )
        return

    for buzz in question.buzzes:
        player_id = ensure_player(session, ctx, clean_name(buzz.team.name), clean_name(buzz.player.name))
        record_buzz(session, player_id, game_id, tossup_id, buzz.buzz_position.word_index, buzz.result.value)
        stats.buzzes += 1


def _record_bonus(
    session: Session,
    ctx: TournamentContext,
    game_id: int,
    packet: Packet,
    question: QbjMatchQuestion,
    stats: ImportStats,
) -> None:
    bonus = question.bonus
    if bonus is None:
        return

    bonus_number = bonus.question.question_number
    controlling = next((b for b in question.buzzes if b.result.value > 0), None)
    if controlling is None:
        logger.warning("\tBonus %d in packet ID %d has no team with a correct buzz.", bonus_number, packet.id)
        return
    team_name = clean_name(controlling.team.name)
    team_id = ensure_team(session, ctx, team_name)

    parts = find_bonus_parts(session, ctx, packet.id, bonus_number)
    if not parts:
        return

    for index, part in enumerate(bonus.parts, start=1):
        part_id = bonus_part_for(parts, index)
        if part_id is None:
            logger.warning(
                "No bonus with part %d found for %d in packet ID %d, which was directed to %s "
                "at tournament ID %d (%s).",
                index,
                bonus_number,
                packet.id,
                team_name,
                ctx.tournament_id,
                ctx.tournament_name,
            )
            continue
        record_bonus_part_direct(session, team_id, game_id, part_id, part.controlled_points)
        stats.bonus_part_directs += 1


def import_game_file(
    session: Session, ctx: TournamentContext, path: Path, token_index: int, stats: ImportStats
) -> None:
    round_number = round_number_from_filename(path.name, token_index)
    if round_number is None:
        raise UnresolvedReferenceError(f"no round number in file name {path.name}")

    match = read_json(path, QbjMatch)
    if len(match.match_teams) < 2:
        raise UnresolvedReferenceError(f"{path.name} does not list two teams")

    packet_name = clean_packet_name(match.packets)
    team_names = (clean_name(match.match_teams[0].team.name), clean_name(match.match_teams[1].team.name))

    bound = ctx.rounds.get(round_number, {}).get(packet_name)
    team_one_id, team_two_id = ctx.teams.get(team_names[0]), ctx.teams.get(team_names[1])
    if bound is not None and team_one_id is not None and team_two_id is not None:
        if find_game(session, bound.round_id, team_one_id, team_two_id) is not None:
            raise DuplicateUnitError(
                f"duplicate file for game between {team_names[0]} and {team_names[1]} in round {round_number}"
            )

    packet_id = find_packet_by_name(session, ctx.edition_id, packet_name)
    if packet_id is None:
        raise UnresolvedReferenceError(f"couldn't find packet {packet_name} for game {path.stem}")
    packet = session.get(Packet, packet_id)
    bound = ensure_round(session, ctx, round_number, packet_id, packet_name)

    for match_team in match.match_teams:
        team_name = clean_name(match_team.team.name)
        ensure_team(session, ctx, team_name)
        names = [p.name for p in match_team.team.players] + [mp.player.name for mp in match_team.match_players]
        for player_name in names:
            ensure_player(session, ctx, team_name, clean_name(player_name))

    game_id = create_game(
        session, bound.round_id, ctx.teams[team_names[0]], ctx.teams[team_names[1]], match.tossups_read
    )
    stats.games += 1

    for question in match.match_questions:
        _record_tossup(session, ctx, game_id, packet, round_number, team_names, question, stats)
        _record_bonus(session, ctx, game_id, packet, question, stats)

    session.flush()


def import_game_files(
    session: Session, ctx: TournamentContext, games_path: Path, stats: ImportStats, token_index: int = 1
) -> None:
    for path in sorted(games_path.rglob("*.qbj")):
        state = ctx.checkpoint()
        try:
            import_game_file(session, ctx, path, token_index, stats)
            session.commit()
        except DuplicateUnitError as e:
            session.rollback()
            ctx.restore(state)
            logger.info("\tSkipping %s.", e)
            stats.skipped += 1
        except UnresolvedReferenceError as e:
            session.rollback()
            ctx.restore(state)
            logger.warning("\tSkipping %s: %s.", path.name, e)
            stats.skipped += 1
        except Exception:
            session.rollback()
            ctx.restore(state)
            logger.exception("Error occurred while parsing %s and writing it to db", path)
            stats.skipped += 1


# --- tournaments ---

def import_tournament(session: Session, folder: Path, overwrite: bool, stats: ImportStats) -> None:
    index = read_index(folder, TournamentIndex)
    logger.info("Tournament: %s | Set: %s | Edition: %s", folder.name, index.set_name, index.edition)

    ids = find_edition_ids(session, index.set_name, index.edition)
    if ids is None:
        raise MissingInputError(f"couldn't find edition {index.edition} of question set {index.set_name}")
    question_set_id, edition_id = ids

    existing = session.scalar(select(Tournament).where(Tournament.slug == index.slug))
    if existing is not None:
        if not overwrite:
            raise DuplicateUnitError("tournament is already in database")
        delete_tournament(session, existing)

    if index.rounds is None:
        games_path = require_dir(folder / GAMES_FOLDER)
    else:
        for file_name in (BUZZES_FILE, BONUSES_FILE):
            if not (folder / file_name).is_file():
                raise MissingInputError(f"'{file_name}' file not found")

    tournament = Tournament(
        name=index.name,
        slug=index.slug,
        question_set_edition_id=edition_id,
        location=index.location,
        level=index.level,
        start_date=index.start_date,
        end_date=index.end_date,
    )
    session.add(tournament)
    session.commit()

    ctx = TournamentContext(
        tournament_id=tournament.id,
        tournament_name=index.name,
        question_set_id=question_set_id,
        edition_id=edition_id,
        excluded_rounds=set(index.rounds_to_exclude_from_individual_stats),
    )

    snapshot = stats.copy()
    try:
        if index.rounds is not None:
            import_csv_results(session, ctx, folder, index.rounds, stats)
        else:
            # PACE game files start with the round number
            token_index = 0 if "pace" in index.name.lower() else 1
            import_game_files(session, ctx, games_path, stats, token_index)
    except Exception:
        # a tournament is stored whole or not at all
        session.rollback()
        stats.restore(snapshot)
        delete_tournament(session, session.get(Tournament, ctx.tournament_id))
        session.commit()
        raise
    stats.tournaments += 1


def import_tournaments(session: Session, root: Path, overwrite: bool = False) -> ImportStats:
    """Load every tournament folder under ``root``; a failing tournament is skipped."""
    stats = ImportStats()
    for folder in list_entries(require_dir(Path(root))):
        try:
            import_tournament(session, folder, overwrite, stats)
        except (MissingInputError, DuplicateUnitError) as e:
            session.rollback()
            logger.info("\tSkipping %s as %s.", folder.name, e)
            stats.skipped += 1
        except Exception:
            session.rollback()
            logger.exception("Error reading %s", folder)
            stats.skipped += 1
    return stats
