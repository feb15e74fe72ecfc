from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from qbloader.core.config import settings


logger = logging.getLogger(__name__)


DEFAULT_SUBCATEGORY_MAP = Path(__file__).resolve().parent.parent / "data" / "subcat_to_cat.json"


class QuestionFormat(str, Enum):
    ACF = "acf"
    POWERS = "powers"
    SUPERPOWERS = "superpowers"
    PACE = "pace"


class MetadataStyle(IntEnum):
    """Metadata conventions; values match ``metadataStyle`` in set index files."""

    DEFAULT = 1
    NO_AUTHOR = 2
    AUTHOR_AND_CATEGORY = 3
    NSC = 4
    NASAT = 5
    QB_READER = 6
    NONE = 7

    @classmethod
    def coerce(cls, value: Any) -> Optional["MetadataStyle"]:
        """Accept the integer code or a name such as "qbReader" / "QB_READER"."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None
        text = str(value).strip()
        if text.isdigit():
            return cls.coerce(int(text))
        key = re.sub(r"[^a-z]", "", text.lower())
        for member in cls:
            if member.name.replace("_", "").lower() == key:
                return member
        return None


@dataclass
class ParsedMetadata:
    category: str = ""
    subcategory: str = ""
    subsubcategory: str = ""
    author: str = ""
    editor: str = ""


_DEFAULT_RE = re.compile(r"(.*?), (.*)")
_AUTHOR_AND_CATEGORY_RE = re.compile(r"(.*?)[,-](.*)")
_NSC_RE = re.compile(r"(.+?), (.*)&gt;.*Editor: (.*)")
_NASAT_RE = re.compile(r"(.+?) , (.*)")


@lru_cache(maxsize=None)
def _load_subcategory_map(path: str) -> Dict[str, str]:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def get_subcategory_map() -> Dict[str, str]:
    return _load_subcategory_map(settings.SUBCATEGORY_MAP_PATH or str(DEFAULT_SUBCATEGORY_MAP))


def _group(match: Optional[re.Match], index: int) -> str:
    if match is None:
        return ""
    return match.group(index) or ""


def _split_path(path: str, size: int) -> list[str]:
    parts = path.split(" - ") if path else []
    return (parts + [""] * size)[:size]


def parse_metadata(
    text: Optional[str],
    style: Optional[MetadataStyle],
    author_first: bool = True,
    subcategory_map: Optional[Mapping[str, str]] = None,
) -> ParsedMetadata:
    """Pull category and authorship fields out of a question's metadata line.

    Lines that do not fit the style's grammar leave the affected fields
    empty instead of raising.
    """
    result = ParsedMetadata()
    if not text:
        return result

    lookup = get_subcategory_map() if subcategory_map is None else subcategory_map

    if style == MetadataStyle.DEFAULT:
        match = _DEFAULT_RE.search(text)
        first, second = _group(match, 1).strip(), _group(match, 2)
        author, raw_path = (first, second) if author_first else (second.strip(), first)
        result.author = author
        head, tail, rest = _split_path(raw_path, 3)
        if head and head not in lookup and head in lookup.values() and tail:
            # "Science - Biology": the path starts at the category level
            result.subcategory, result.subsubcategory = tail, rest
            result.category = lookup.get(tail) or head
        else:
            result.subcategory, result.subsubcategory = head, tail
            result.category = lookup.get(head) or head
    elif style == MetadataStyle.NO_AUTHOR:
        result.subcategory = text
        result.category = lookup.get(text) or text
    elif style == MetadataStyle.AUTHOR_AND_CATEGORY:
        match = _AUTHOR_AND_CATEGORY_RE.search(text)
        result.author = _group(match, 1).strip()
        result.subcategory = _group(match, 2).strip()
        result.category = lookup.get(result.subcategory) or result.subcategory
    elif style == MetadataStyle.NSC:
        match = _NSC_RE.search(text)
        result.author = _group(match, 1)
        result.editor = _group(match, 3)
        result.category, result.subcategory, result.subsubcategory = _split_path(_group(match, 2), 3)
    elif style == MetadataStyle.NASAT:
        match = _NASAT_RE.search(text)
        result.author = _group(match, 1)
        result.category, result.subcategory, result.subsubcategory = _split_path(_group(match, 2), 3)
    elif style == MetadataStyle.QB_READER:
        result.category, result.subcategory, result.subsubcategory = _split_path(text, 3)
    elif style == MetadataStyle.NONE:
        pass
    else:
        logger.debug("Unknown metadata style %r; leaving metadata fields empty.", style)
        return result

    if result.category and result.category in result.subcategory:
        result.subcategory = result.subcategory.replace(result.category, "").strip()

    return result
