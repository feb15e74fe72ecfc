from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Type, TypeVar

from pydantic import BaseModel

from qbloader.core.config import IGNORED_SUFFIXES, INDEX_FILE
from qbloader.core.errors import MissingInputError


ModelT = TypeVar("ModelT", bound=BaseModel)


def list_entries(folder: Path, suffix: Optional[str] = None) -> List[Path]:
    """Sorted children of ``folder`` minus .DS_Store files and zip archives."""
    entries = [p for p in folder.iterdir() if not p.name.endswith(IGNORED_SUFFIXES)]
    if suffix is not None:
        entries = [p for p in entries if p.is_file() and p.suffix == suffix]
    return sorted(entries, key=lambda p: p.name)


def read_json(path: Path, model: Type[ModelT]) -> ModelT:
    return model.model_validate_json(path.read_bytes())


def read_index(folder: Path, model: Type[ModelT]) -> ModelT:
    index_path = folder / INDEX_FILE
    if not index_path.is_file():
        raise MissingInputError(f"'{INDEX_FILE}' file not found")
    return read_json(index_path, model)


def require_dir(path: Path) -> Path:
    if not path.is_dir():
        raise MissingInputError(f"{path} folder not found")
    return path
