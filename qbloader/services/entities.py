from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from qbloader.models.question import Bonus, BonusPart, Question, Tossup
from qbloader.models.question_set import Packet, PacketQuestion
from qbloader.models.tournament import BonusPartDirect, Buzz, Game, Player, Round, Team
from qbloader.services.slugs import SlugDictionary
from qbloader.services.text import make_slug


logger = logging.getLogger(__name__)


# rounds that used more than one packet keep the second one under number * 100
MULTI_PACKET_ROUND_FACTOR = 100


@dataclass
class BoundRound:
    round_id: int
    packet_id: int


@dataclass
class TournamentContext:
    """Lookup caches for one tournament import; thrown away afterwards."""

    tournament_id: int
    tournament_name: str
    question_set_id: int
    edition_id: int
    excluded_rounds: Set[int] = field(default_factory=set)

    # round number -> packet name -> bound round
    rounds: Dict[int, Dict[str, BoundRound]] = field(default_factory=dict)
    teams: Dict[str, int] = field(default_factory=dict)
    players: Dict[Tuple[str, str], int] = field(default_factory=dict)
    tossups: Dict[Tuple[int, int], int] = field(default_factory=dict)
    bonus_parts: Dict[Tuple[int, int], List[Tuple[int, int]]] = field(default_factory=dict)
    # external game id (CSV) -> game id
    games: Dict[int, int] = field(default_factory=dict)
    team_slugs: SlugDictionary = field(default_factory=SlugDictionary)

    def checkpoint(self) -> Dict[str, Any]:
        """Copy of the caches, for restoring after a rolled-back game."""
        return {name: copy.deepcopy(getattr(self, name)) for name in _CACHE_FIELDS}

    def restore(self, state: Dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)


_CACHE_FIELDS = ("rounds", "teams", "players", "games", "team_slugs")


def find_packet_by_name(session: Session, edition_id: int, name: str) -> Optional[int]:
    return session.scalar(
        select(Packet.id).where(Packet.question_set_edition_id == edition_id, Packet.name == name)
    )


def ensure_team(session: Session, ctx: TournamentContext, name: str) -> int:
    team_id = ctx.teams.get(name)
    if team_id is not None:
        return team_id

    team = Team(tournament_id=ctx.tournament_id, name=name, slug=ctx.team_slugs.assign(make_slug(name)))
    session.add(team)
    session.flush()
    ctx.teams[name] = team.id
    return team.id


def ensure_player(session: Session, ctx: TournamentContext, team_name: str, player_name: str) -> int:
    """Player identity is (team, name) within the tournament.

    The same name already used in the question set's player pool (another
    team, another tournament on the same set) gets a numbered slug.
    """
    key = (team_name, player_name)
    player_id = ctx.players.get(key)
    if player_id is not None:
        return player_id

    team_id = ensure_team(session, ctx, team_name)
    slug = make_slug(player_name)

    namesakes = session.scalars(
        select(Player).where(Player.name == player_name, Player.question_set_id == ctx.question_set_id)
    ).all()
    if namesakes:
        team_names = session.scalars(
            select(Team.name).where(Team.id.in_({p.team_id for p in namesakes})).order_by(Team.name)
        ).all()
        slug = f"{slug}-{len(namesakes) + 1}"
        logger.warning(
            "\tDuplicate player name found - %s already exists on these teams: %s. "
            "Using slug %s for the player on %s.",
            player_name,
            ", ".join(team_names),
            slug,
            team_name,
        )

    player = Player(team_id=team_id, name=player_name, slug=slug, question_set_id=ctx.question_set_id)
    session.add(player)
    session.flush()
    ctx.players[key] = player.id
    return player.id


def ensure_round(
    session: Session,
    ctx: TournamentContext,
    number: int,
    packet_id: int,
    packet_name: str = "",
) -> BoundRound:
    """Bind a round number to a packet.

    A round number seen with a second, different packet gets its own Round
    numbered ``number * 100`` rather than being merged into the first one.
    """
    bound = ctx.rounds.get(number)
    if bound is not None and packet_name in bound:
        return bound[packet_name]

    stored_number = number if bound is None else number * MULTI_PACKET_ROUND_FACTOR
    row = Round(
        tournament_id=ctx.tournament_id,
        number=stored_number,
        packet_id=packet_id,
        exclude_from_individual=number in ctx.excluded_rounds,
    )
    session.add(row)
    session.flush()

    if bound is None:
        bound = ctx.rounds[number] = {}
    else:
        logger.warning(
            "\tMultiple packets used for round %d of %s:\n\t\t%s",
            number,
            ctx.tournament_name,
            "\n\t\t".join([*bound, packet_name]),
        )
    bound[packet_name] = BoundRound(round_id=row.id, packet_id=packet_id)
    return bound[packet_name]


def find_tossup(session: Session, ctx: TournamentContext, packet_id: int, question_number: int) -> Optional[int]:
    key = (packet_id, question_number)
    if key not in ctx.tossups:
        tossup_id = session.scalar(
            select(Tossup.id)
            .join(Question, Tossup.question_id == Question.id)
            .join(PacketQuestion, PacketQuestion.question_id == Question.id)
            .where(PacketQuestion.packet_id == packet_id, PacketQuestion.question_number == question_number)
            .limit(1)
        )
        if tossup_id is None:
            return None
        ctx.tossups[key] = tossup_id
    return ctx.tossups[key]


def find_bonus_parts(
    session: Session, ctx: TournamentContext, packet_id: int, question_number: int
) -> List[Tuple[int, int]]:
    """(bonus_part_id, part_number) pairs of bonus N in a packet."""
    key = (packet_id, question_number)
    if key not in ctx.bonus_parts:
        rows = session.execute(
            select(BonusPart.id, BonusPart.part_number)
            .join(Bonus, BonusPart.bonus_id == Bonus.id)
            .join(PacketQuestion, PacketQuestion.question_id == Bonus.question_id)
            .where(PacketQuestion.packet_id == packet_id, PacketQuestion.question_number == question_number)
            .order_by(BonusPart.part_number)
        ).all()
        ctx.bonus_parts[key] = [(r.id, r.part_number) for r in rows]
    return ctx.bonus_parts[key]


def bonus_part_for(parts: List[Tuple[int, int]], part_number: int) -> Optional[int]:
    return next((part_id for part_id, number in parts if number == part_number), None)


def find_game(session: Session, round_id: int, team_one_id: int, team_two_id: int) -> Optional[int]:
    return session.scalar(
        select(Game.id).where(
            Game.round_id == round_id,
            Game.team_one_id == team_one_id,
            Game.team_two_id == team_two_id,
        )
    )


def create_game(
    session: Session, round_id: int, team_one_id: int, team_two_id: int, tossups_read: Optional[int]
) -> int:
    game = Game(round_id=round_id, tossups_read=tossups_read, team_one_id=team_one_id, team_two_id=team_two_id)
    session.add(game)
    session.flush()
    return game.id


def record_buzz(
    session: Session, player_id: int, game_id: int, tossup_id: int, buzz_position: Optional[int], value: int
) -> None:
    session.add(
        Buzz(player_id=player_id, game_id=game_id, tossup_id=tossup_id, buzz_position=buzz_position, value=value)
    )


def record_bonus_part_direct(session: Session, team_id: int, game_id: int, bonus_part_id: int, value: int) -> None:
    session.add(BonusPartDirect(team_id=team_id, game_id=game_id, bonus_part_id=bonus_part_id, value=value))
