import logging
from pathlib import Path

import click

from qbloader.core.config import QUESTION_SETS_DIR, TOURNAMENTS_DIR, settings
from qbloader.core.db import create_tables, get_session, init_engine_if_needed
from qbloader.services.question_sets import import_question_sets
from qbloader.services.stats import ImportStats
from qbloader.services.tournaments import import_tournaments


logger = logging.getLogger(__name__)


def _setup() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(message)s")
    create_tables(init_engine_if_needed())


def _report(stats: ImportStats) -> None:
    click.echo(f"Done. {stats.summary() or 'nothing imported'}.")


@click.command()
@click.option("--overwrite", is_flag=True, default=False, help="Replace editions that are already loaded.")
def import_question_sets_command(overwrite: bool) -> None:
    """Load question sets from data/question_sets."""
    _setup()
    root = Path(settings.BASE_PATH) / QUESTION_SETS_DIR
    logger.info("Reading question sets from %s", root)
    with get_session() as session:
        stats = import_question_sets(session, root, overwrite=overwrite)
    _report(stats)


@click.command()
@click.option("--overwrite", is_flag=True, default=False, help="Replace tournaments that are already loaded.")
def import_tournaments_command(overwrite: bool) -> None:
    """Load tournament results from data/tournaments."""
    _setup()
    root = Path(settings.BASE_PATH) / TOURNAMENTS_DIR
    logger.info("Reading tournaments from %s", root)
    with get_session() as session:
        stats = import_tournaments(session, root, overwrite=overwrite)
    _report(stats)
