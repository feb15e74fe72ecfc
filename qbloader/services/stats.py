from __future__ import annotations

from dataclasses import asdict, dataclass, replace


@dataclass
class ImportStats:
    question_sets: int = 0
    editions: int = 0
    packets: int = 0
    tossups: int = 0
    bonuses: int = 0
    rejected_bonuses: int = 0
    tournaments: int = 0
    games: int = 0
    buzzes: int = 0
    bonus_part_directs: int = 0
    skipped: int = 0

    def copy(self) -> ImportStats:
        return replace(self)

    def restore(self, snapshot: ImportStats) -> None:
        """Roll the counters back to ``snapshot`` after a discarded unit."""
        for name, value in asdict(snapshot).items():
            setattr(self, name, value)

    def summary(self) -> str:
        return ", ".join(f"{name.replace('_', ' ')}: {value}" for name, value in asdict(self).items() if value)
