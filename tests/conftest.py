import json
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from qbloader.core.db import build_engine
from qbloader.models.base import Base


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine, expire_on_commit=False, autoflush=False) as session:
        yield session


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def tossup(n: int, answer: str, metadata: str = "Jane Doe, Biology") -> dict:
    return {"question": f"Tossup text {n} about {answer}.", "answer": answer, "metadata": metadata}


def bonus(n: int, answers, modifiers=("e", "m", "h"), metadata: str = "Jane Doe, Biology") -> dict:
    return {
        "leadin": f"Bonus leadin {n}.",
        "metadata": metadata,
        "parts": [f"Part {i} of bonus {n}." for i in range(1, len(answers) + 1)],
        "answers": list(answers),
        "values": [10] * len(answers),
        "difficultyModifiers": list(modifiers),
    }


def make_packet(n: int) -> dict:
    return {
        "tossups": [tossup(1, f"Answer {n}A"), tossup(2, f"Answer {n}B")],
        "bonuses": [
            bonus(1, [f"Bonus {n} one", f"Bonus {n} two", f"Bonus {n} three"]),
            bonus(2, [f"Bonus {n} four", f"Bonus {n} five", f"Bonus {n} six"]),
        ],
    }


@pytest.fixture
def question_sets_root(tmp_path):
    """One set ("Test Open") with one edition of two packets."""
    root = tmp_path / "question_sets"
    set_dir = root / "test-open"
    write_json(
        set_dir / "index.json",
        {"name": "Test Open", "slug": "test-open", "difficulty": 5, "format": "powers", "metadataStyle": 1},
    )
    edition = set_dir / "editions" / "main"
    write_json(edition / "index.json", {"name": "Main", "slug": "main", "date": "2024-01-20"})
    write_json(edition / "packet_files" / "Round 01.json", make_packet(1))
    write_json(edition / "packet_files" / "Round 02.json", make_packet(2))
    (edition / "packet_files" / ".DS_Store").write_text("", encoding="utf-8")
    return root
