import logging

import pytest
from sqlalchemy import func, select

from qbloader.models.question import Question
from qbloader.models.question_set import Packet, QuestionSetEdition
from qbloader.models.tournament import BonusPartDirect, Buzz, Game, Player, Round, Team, Tournament
from qbloader.services.question_sets import import_question_sets
from qbloader.services.tournaments import CSV_TOSSUPS_READ, import_tournaments
from tests.conftest import write_json


def _count(session, model):
    return session.scalar(select(func.count()).select_from(model))


def _index(**extra):
    index = {
        "name": "Test Open Chicago",
        "slug": "test-open-chicago",
        "set": "Test Open",
        "edition": "Main",
        "location": "Chicago, IL",
        "level": "College",
        "start_date": "2024-02-03",
        "end_date": "2024-02-03",
        "rounds_to_exclude_from_individual_stats": [2],
    }
    index.update(extra)
    return index


def _player(name):
    return {"name": name}


def _buzz(player, team, word_index, value):
    return {
        "player": _player(player),
        "team": {"name": team},
        "buzz_position": {"word_index": word_index},
        "result": {"value": value},
    }


def _match(packet, questions, team_one="Chicago A (UG)", team_two="Chicago B"):
    return {
        "packets": packet,
        "tossups_read": 20,
        "match_teams": [
            {"team": {"name": team_one, "players": [_player("Alex Kim"), _player("Sam Lee")]}},
            {"team": {"name": team_two, "players": [_player("Jo Park")]}, "match_players": [{"player": _player("Ri Cho")}]},
        ],
        "match_questions": questions,
    }


ROUND_ONE_QUESTIONS = [
    {
        "question_number": 1,
        "tossup_question": {"question_number": 1},
        "buzzes": [_buzz("Jo Park", "Chicago B", 30, -5), _buzz("Alex Kim", "Chicago A (UG)", 42, 10)],
        "bonus": {
            "question": {"question_number": 1},
            "parts": [{"controlled_points": 10}, {"controlled_points": 0}, {"controlled_points": 10}],
        },
    },
    {
        "question_number": 2,
        "tossup_question": {"question_number": 2},
        "buzzes": [_buzz("Dana Fox", "Chicago B", 55, 10)],
    },
    {
        "question_number": 3,
        "tossup_question": {"question_number": 9},
        "buzzes": [],
    },
]


@pytest.fixture
def loaded_sets(session, question_sets_root):
    import_question_sets(session, question_sets_root)


@pytest.fixture
def qbj_root(tmp_path):
    root = tmp_path / "tournaments"
    folder = root / "test-open-chicago"
    write_json(folder / "index.json", _index())
    games = folder / "game_files"
    write_json(games / "chicago_1_a_b.qbj", _match("Round 01 (2)", ROUND_ONE_QUESTIONS))
    write_json(games / "round2" / "chicago_2_a_b.qbj", _match("Round 02", ROUND_ONE_QUESTIONS[1:2]))
    return root


@pytest.fixture
def csv_root(tmp_path):
    root = tmp_path / "tournaments"
    folder = root / "test-open-chicago"
    write_json(folder / "index.json", _index(rounds=[{"number": 1, "packet": "Round 01"}]))
    (folder / "buzzes.csv").write_text(
        "game_id,round,question_number,team,player,opponent,a,b,c,buzz_position,value\n"
        "1,1,1,Chicago A (UG),Alex Kim,Chicago B,,,,42,10\n"
        "1,1,2,Chicago B,Jo Park,Chicago A (UG),,,,30,-5\n"
        "1,1,9,Chicago B,Jo Park,Chicago A (UG),,,,30,10\n",
        encoding="utf-8",
    )
    (folder / "bonuses.csv").write_text(
        "game_id,round,r,bonus,team,a,b,c,part,d,e,value\n"
        "1,1,,1,Chicago A (UG),,,,Part 1,,,10\n"
        "1,1,,1,Chicago A (UG),,,,Part 2,,,0\n"
        "1,1,,1,Chicago A (UG),,,,Part 3,,,10\n",
        encoding="utf-8",
    )
    return root


def test_import_qbj_games(session, loaded_sets, qbj_root, caplog):
    with caplog.at_level(logging.WARNING):
        stats = import_tournaments(session, qbj_root)

    assert (stats.tournaments, stats.games, stats.buzzes, stats.bonus_part_directs) == (1, 2, 4, 3)
    assert "No tossup 9 found" in caplog.text

    tournament = session.scalar(select(Tournament))
    assert (tournament.slug, tournament.location, tournament.start_date) == (
        "test-open-chicago",
        "Chicago, IL",
        "2024-02-03",
    )
    assert sorted(session.scalars(select(Team.name))) == ["Chicago A", "Chicago B"]
    # roster players, match players and players that only appear in buzzes
    assert sorted(session.scalars(select(Player.name))) == ["Alex Kim", "Dana Fox", "Jo Park", "Ri Cho", "Sam Lee"]

    rounds = session.execute(select(Round.number, Round.exclude_from_individual).order_by(Round.number)).all()
    assert rounds == [(1, False), (2, True)]

    directs = session.scalars(select(BonusPartDirect.value)).all()
    assert sorted(directs) == [0, 10, 10]
    chicago_a = session.scalar(select(Team.id).where(Team.name == "Chicago A"))
    assert {d.team_id for d in session.scalars(select(BonusPartDirect))} == {chicago_a}


def test_duplicate_game_file_is_skipped(session, loaded_sets, qbj_root, caplog):
    games = qbj_root / "test-open-chicago" / "game_files"
    write_json(games / "chicago_1_a_b_copy.qbj", _match("Round 01", ROUND_ONE_QUESTIONS))

    with caplog.at_level(logging.INFO):
        stats = import_tournaments(session, qbj_root)

    assert stats.games == 2
    assert stats.skipped == 1
    assert "duplicate file for game between Chicago A and Chicago B in round 1" in caplog.text
    assert _count(session, Game) == 2
    assert _count(session, Buzz) == 4


def test_game_with_unknown_packet_is_skipped(session, loaded_sets, qbj_root, caplog):
    games = qbj_root / "test-open-chicago" / "game_files"
    write_json(games / "chicago_3_c_d.qbj", _match("Round 17", ROUND_ONE_QUESTIONS, "Team C", "Team D"))

    with caplog.at_level(logging.WARNING):
        stats = import_tournaments(session, qbj_root)

    assert stats.games == 2
    assert stats.skipped == 1
    assert "Round 17" in caplog.text
    # nothing from the failed game is left behind
    assert "Team C" not in session.scalars(select(Team.name)).all()


def test_existing_tournament_is_skipped_or_replaced(session, loaded_sets, qbj_root):
    import_tournaments(session, qbj_root)

    stats = import_tournaments(session, qbj_root)
    assert (stats.tournaments, stats.skipped) == (0, 1)
    assert _count(session, Game) == 2

    stats = import_tournaments(session, qbj_root, overwrite=True)
    assert stats.tournaments == 1
    assert _count(session, Tournament) == 1
    assert _count(session, Game) == 2
    assert _count(session, Buzz) == 4


def test_unknown_edition_skips_the_tournament(session, loaded_sets, qbj_root, caplog):
    write_json(qbj_root / "test-open-chicago" / "index.json", _index(edition="Mirror"))

    with caplog.at_level(logging.INFO):
        stats = import_tournaments(session, qbj_root)

    assert stats.tournaments == 0
    assert stats.skipped == 1
    assert "couldn't find edition Mirror of question set Test Open" in caplog.text
    assert _count(session, Tournament) == 0


def test_import_csv_results(session, loaded_sets, csv_root, caplog):
    with caplog.at_level(logging.WARNING):
        stats = import_tournaments(session, csv_root)

    assert (stats.tournaments, stats.games, stats.buzzes, stats.bonus_part_directs) == (1, 1, 2, 3)
    assert stats.skipped == 1
    assert "buzzes.csv line 4" in caplog.text

    game = session.scalar(select(Game))
    assert game.tossups_read == CSV_TOSSUPS_READ
    assert sorted(session.scalars(select(Buzz.value))) == [-5, 10]
    assert sorted(session.scalars(select(Team.name))) == ["Chicago A", "Chicago B"]


BONUSES_HEADER = b"game_id,round,r,bonus,team,a,b,c,part,d,e,value\n"


def test_tournament_failing_midway_is_removed(session, loaded_sets, csv_root, caplog):
    bonuses = csv_root / "test-open-chicago" / "bonuses.csv"
    good = bonuses.read_bytes()
    bonuses.write_bytes(BONUSES_HEADER + b"1,1,,1,\xff\xfe,,,,Part 1,,,10\n")

    with caplog.at_level(logging.ERROR):
        stats = import_tournaments(session, csv_root)

    assert (stats.tournaments, stats.buzzes, stats.skipped) == (0, 0, 1)
    assert "Error reading" in caplog.text
    assert _count(session, Tournament) == 0
    assert _count(session, Buzz) == 0
    assert _count(session, Team) == 0

    bonuses.write_bytes(good)
    stats = import_tournaments(session, csv_root)

    assert (stats.tournaments, stats.buzzes, stats.bonus_part_directs) == (1, 2, 3)
    assert _count(session, BonusPartDirect) == 3


def test_overwriting_an_edition_removes_its_tournaments(session, loaded_sets, question_sets_root, qbj_root):
    import_tournaments(session, qbj_root)
    assert _count(session, Game) == 2

    stats = import_question_sets(session, question_sets_root, overwrite=True)

    assert stats.editions == 1
    for model in (Tournament, Round, Team, Player, Game, Buzz, BonusPartDirect):
        assert _count(session, model) == 0, model.__name__
    assert _count(session, QuestionSetEdition) == 1
    assert _count(session, Packet) == 2
    assert _count(session, Question) == 8
