"""question sets and tournaments

Revision ID: 5b1d0c7e9a42
Revises:
Create Date: 2026-10-19 15:02:11.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1d0c7e9a42'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "question_set",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("difficulty", sa.String(50), nullable=True),
        sa.Column("format", sa.String(20), nullable=False, server_default="powers"),
        sa.Column("bonuses", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_question_set_slug", "question_set", ["slug"], unique=True)

    op.create_table(
        "question_set_edition",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_set_id", sa.Integer(), sa.ForeignKey("question_set.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("date", sa.String(40), nullable=True),
        sa.UniqueConstraint("question_set_id", "slug", name="uq_edition_set_slug"),
    )
    op.create_index("ix_question_set_edition_question_set_id", "question_set_edition", ["question_set_id"])

    op.create_table(
        "packet",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_set_edition_id", sa.Integer(), sa.ForeignKey("question_set_edition.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(300), nullable=False),
        sa.Column("descriptor", sa.String(100), nullable=False, server_default=""),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.UniqueConstraint("question_set_edition_id", "name", name="uq_packet_edition_name"),
    )
    op.create_index("ix_packet_question_set_edition_id", "packet", ["question_set_edition_id"])

    op.create_table(
        "question",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("metadata", sa.Text(), nullable=True),
        sa.Column("author", sa.String(200), nullable=True),
        sa.Column("editor", sa.String(200), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("category_slug", sa.String(100), nullable=True),
        sa.Column("subcategory", sa.String(100), nullable=True),
        sa.Column("subcategory_slug", sa.String(100), nullable=True),
        sa.Column("subsubcategory_slug", sa.String(100), nullable=True),
    )
    op.create_index("ix_question_slug", "question", ["slug"], unique=True)
    op.create_index("ix_question_category_slug", "question", ["category_slug"])

    op.create_table(
        "packet_question",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("packet_id", sa.Integer(), sa.ForeignKey("packet.id", ondelete="CASCADE"), nullable=False),
        sa.Column("question_number", sa.Integer(), nullable=False),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("question.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("packet_id", "question_number", "question_id", name="uq_packet_question"),
    )
    op.create_index("ix_packet_question_question_id", "packet_question", ["question_id"])

    op.create_table(
        "tossup",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("question.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("answer_sanitized", sa.Text(), nullable=False),
        sa.Column("answer_primary", sa.Text(), nullable=False),
    )
    op.create_table(
        "bonus",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("question.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("leadin", sa.Text(), nullable=False, server_default=""),
        sa.Column("leadin_sanitized", sa.Text(), nullable=False, server_default=""),
    )
    op.create_table(
        "bonus_part",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("bonus_id", sa.Integer(), sa.ForeignKey("bonus.id", ondelete="CASCADE"), nullable=False),
        sa.Column("part_number", sa.Integer(), nullable=False),
        sa.Column("part", sa.Text(), nullable=False),
        sa.Column("part_sanitized", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("answer_sanitized", sa.Text(), nullable=False),
        sa.Column("answer_primary", sa.Text(), nullable=False),
        sa.Column("value", sa.Integer(), nullable=True),
        sa.Column("difficulty_modifier", sa.String(10), nullable=True),
    )
    op.create_index("ix_bonus_part_bonus_id", "bonus_part", ["bonus_id"])

    op.create_table(
        "tossup_hash",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hash", sa.String(64), nullable=False),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("question.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tossup_id", sa.Integer(), sa.ForeignKey("tossup.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_tossup_hash_hash", "tossup_hash", ["hash"], unique=True)
    op.create_table(
        "bonus_hash",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("hash", sa.String(64), nullable=False),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("question.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bonus_id", sa.Integer(), sa.ForeignKey("bonus.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_bonus_hash_hash", "bonus_hash", ["hash"], unique=True)

    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("question_set_edition_id", sa.Integer(), sa.ForeignKey("question_set_edition.id", ondelete="CASCADE"), nullable=False),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("level", sa.String(50), nullable=True),
        sa.Column("start_date", sa.String(40), nullable=True),
        sa.Column("end_date", sa.String(40), nullable=True),
    )
    op.create_index("ix_tournament_slug", "tournament", ["slug"], unique=True)
    op.create_index("ix_tournament_question_set_edition_id", "tournament", ["question_set_edition_id"])

    op.create_table(
        "round",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tournament_id", sa.Integer(), sa.ForeignKey("tournament.id", ondelete="CASCADE"), nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("packet_id", sa.Integer(), sa.ForeignKey("packet.id", ondelete="CASCADE"), nullable=False),
        sa.Column("exclude_from_individual", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_round_tournament_id", "round", ["tournament_id"])

    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tournament_id", sa.Integer(), sa.ForeignKey("tournament.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
    )
    op.create_index("ix_team_tournament_id", "team", ["tournament_id"])

    op.create_table(
        "player",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("team.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("question_set_id", sa.Integer(), sa.ForeignKey("question_set.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_player_team_id", "player", ["team_id"])
    op.create_index("ix_player_question_set_id", "player", ["question_set_id"])

    op.create_table(
        "game",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("round_id", sa.Integer(), sa.ForeignKey("round.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tossups_read", sa.Integer(), nullable=True),
        sa.Column("team_one_id", sa.Integer(), sa.ForeignKey("team.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team_two_id", sa.Integer(), sa.ForeignKey("team.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_game_round_id", "game", ["round_id"])

    op.create_table(
        "buzz",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("player.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("game.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tossup_id", sa.Integer(), sa.ForeignKey("tossup.id", ondelete="CASCADE"), nullable=False),
        sa.Column("buzz_position", sa.Integer(), nullable=True),
        sa.Column("value", sa.Integer(), nullable=False),
    )
    op.create_index("ix_buzz_game_id", "buzz", ["game_id"])
    op.create_index("ix_buzz_tossup_id", "buzz", ["tossup_id"])

    op.create_table(
        "bonus_part_direct",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("team.id", ondelete="CASCADE"), nullable=False),
        sa.Column("game_id", sa.Integer(), sa.ForeignKey("game.id", ondelete="CASCADE"), nullable=False),
        sa.Column("bonus_part_id", sa.Integer(), sa.ForeignKey("bonus_part.id", ondelete="CASCADE"), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False),
    )
    op.create_index("ix_bonus_part_direct_game_id", "bonus_part_direct", ["game_id"])
    op.create_index("ix_bonus_part_direct_bonus_part_id", "bonus_part_direct", ["bonus_part_id"])


def downgrade():
    op.drop_table("bonus_part_direct")
    op.drop_table("buzz")
    op.drop_table("game")
    op.drop_table("player")
    op.drop_table("team")
    op.drop_table("round")
    op.drop_table("tournament")
    op.drop_table("bonus_hash")
    op.drop_table("tossup_hash")
    op.drop_table("bonus_part")
    op.drop_table("bonus")
    op.drop_table("tossup")
    op.drop_table("packet_question")
    op.drop_table("question")
    op.drop_table("packet")
    op.drop_table("question_set_edition")
    op.drop_table("question_set")
