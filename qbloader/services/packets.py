from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from qbloader.core.config import settings
from qbloader.services.text import to_title_case


logger = logging.getLogger(__name__)


PACKET_WORDS = ("packet", "round")

_DELIMITERS_RE = re.compile(r"[-–—_,.:|\s]+")
_INTEGER_RE = re.compile(r"\d+")
_NUMBERED_PACKET_RE = re.compile(r"\(\d+\)")


@dataclass(frozen=True)
class PacketIdentifier:
    descriptor: str
    number: int


def _first_in_range(text: str, min_number: int, max_number: int) -> Optional[int]:
    for raw in _INTEGER_RE.findall(text):
        value = int(raw)
        if min_number <= value <= max_number:
            return value
    return None


def resolve_packet(
    label: str,
    fallback_index: int,
    min_number: Optional[int] = None,
    max_number: Optional[int] = None,
) -> PacketIdentifier:
    """Derive a display descriptor and a comparable number from a packet label.

    Tried in order:
      1. the token after "packet"/"round" ("Round 07" -> "7", 7;
         "Packet Finals" -> "Finals", fallback)
      2. the first embedded integer inside the plausible range
      3. short labels without digits are kept verbatim ("A")
      4. positional fallback

    Integers outside [min_number, max_number] are ignored so that years and
    similar numbers are not read as round numbers.
    """
    lo = settings.PACKET_NUMBER_MIN if min_number is None else min_number
    hi = settings.PACKET_NUMBER_MAX if max_number is None else max_number

    lowered = label.lower()
    tokens = [t for t in _DELIMITERS_RE.split(lowered) if t]

    if any(word in lowered for word in PACKET_WORDS):
        word_index = next(
            (i for i, token in enumerate(tokens) if any(word in token for word in PACKET_WORDS)),
            None,
        )
        if word_index is not None and word_index + 1 < len(tokens):
            descriptor = to_title_case(tokens[word_index + 1])
            number = _first_in_range(descriptor, lo, hi)
            if number is not None:
                return PacketIdentifier(str(number), number)
            return PacketIdentifier(descriptor, fallback_index)

    number = _first_in_range(label, lo, hi)
    if number is not None:
        return PacketIdentifier(str(number), number)

    if not _INTEGER_RE.search(label) and len(label) < 3:
        return PacketIdentifier(label, fallback_index)

    logger.warning(
        "Unable to detect packet number or identifier for %r. Using %d for both.",
        label,
        fallback_index,
    )
    return PacketIdentifier(str(fallback_index), fallback_index)


def clean_packet_name(name: str) -> str:
    # .qbj files reference "Packet 3 (2)" for re-uploaded packets
    return _NUMBERED_PACKET_RE.sub("", name).strip()


def round_number_from_filename(file_name: str, token_index: int = 1) -> Optional[int]:
    """Round number from a game file name such as "mytourney_3_teamA_teamB.qbj"."""
    tokens = file_name.split("_")
    if token_index >= len(tokens):
        return None
    match = re.match(r"\s*(\d+)", tokens[token_index])
    return int(match.group(1)) if match else None
