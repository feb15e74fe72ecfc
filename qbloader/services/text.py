from __future__ import annotations

import re
from typing import Iterable

from slugify import slugify


_TAG_RE = re.compile(r"<[^>]+>")
_PAREN_RE = re.compile(r" *\([^)]*\)")
_NAME_TAG_RE = re.compile(r"\([a-zA-Z0-9]+\)")


def _decode_entities(text: str) -> str:
    return text.replace("&nbsp;", " ").replace("&amp;", "&")


def remove_tags(text: str | None) -> str:
    """Drop markup tags and the two entities that show up in packet exports."""
    if not text:
        return ""
    return _decode_entities(_TAG_RE.sub("", text))


def sanitize(text: str | None) -> str:
    if not text:
        return ""
    return _PAREN_RE.sub("", text).strip()


def shorten_answerline(answer: str | None) -> str:
    """Primary answer: everything before the first "[" minus parentheticals.

    "Plato (accept Aristocles) [or Platon]" -> "Plato"
    """
    if not answer:
        return ""
    head = answer.split("[")[0]
    return _decode_entities(sanitize(head)).strip()


def clean_name(name: str | None) -> str:
    # "Chicago A (UG)" -> "Chicago A"
    if not name:
        return ""
    return _NAME_TAG_RE.sub("", name).strip()


def to_title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in text.lower().split(" "))


def make_slug(text: str | None) -> str:
    if not text:
        return ""
    return slugify(text)


def answer_slug(answer: str | None) -> str:
    return make_slug(shorten_answerline(remove_tags(answer))[:50])


def answers_slug(answers: Iterable[str] | None) -> str:
    if not answers:
        return ""
    return make_slug(" ".join(shorten_answerline(remove_tags(a))[:25] for a in answers))
