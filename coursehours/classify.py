"""
Title classification (event summary -> teaching metadata).

Calendar exports of the timetable tool encode everything in the event title, e.g.

    R5.09 Virtualisation avancée TDA
    SAe 3.OSC.03 APP TP2

The grammar is heuristic. It is applied as a fixed sequence of small rules:

1. cohort rule:  the token "APP" marks an apprenticeship group and is removed
2. type rule:    the RIGHTMOST known type tag (TDA, TP1, Controle, ...) wins
3. name rule:    everything before the type tag is the module name
4. code rules:   ordered regex list on the start of the module name,
                 falling back to the first word

Important rules (DO NOT CHANGE):
- classify_title() never raises; odd titles degrade to fallback fields
- the marker is removed wherever it appears, not only at a fixed position
- names are rebuilt from tokens, so runs of whitespace collapse to one space
  (a title without type tag keeps its words, not its spacing)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple

from coursehours.model import (
    APPRENTICE,
    APPRENTICE_MARKER,
    KNOWN_SESSION_TYPES,
    STANDARD,
    UNSPECIFIED_TYPE,
)


# Tried in order against the start of the module name
CODE_RULES: Tuple[Pattern[str], ...] = (
    # resource code, e.g. R5.09 or R3.Crypto.01
    re.compile(r"^R\d(\.\w+)+", re.IGNORECASE | re.ASCII),
    # project code, e.g. SAe 3.OSC.03
    re.compile(r"^SAe\s\d(\.\w+)+", re.IGNORECASE | re.ASCII),
)


@dataclass(frozen=True)
class TitleInfo:
    module_name: str
    module_code: str
    session_type: str
    cohort: str


def tokenize(title: str) -> List[str]:
    return title.split()


def split_cohort(tokens: List[str]) -> Tuple[str, List[str]]:
    """
    Return (cohort, tokens without the apprenticeship marker).
    """
    if APPRENTICE_MARKER in tokens:
        return APPRENTICE, [t for t in tokens if t != APPRENTICE_MARKER]
    return STANDARD, list(tokens)


def find_session_type(tokens: List[str]) -> Optional[int]:
    """
    Index of the rightmost known session type tag, or None.

    Scanning backwards matters: a tag-like word may also be part of the module name.
    """
    for i in range(len(tokens) - 1, -1, -1):
        if tokens[i] in KNOWN_SESSION_TYPES:
            return i
    return None


def extract_module_code(module_name: str) -> Optional[str]:
    """
    Apply CODE_RULES in order; None if no rule matches.
    """
    for rule in CODE_RULES:
        match = rule.match(module_name)
        if match:
            return match.group(0).strip()
    return None


def classify_title(title: str) -> TitleInfo:
    """
    Decode one raw event title into module name, module code, session type and cohort.
    """
    raw_tokens = tokenize(title or "")
    cohort, tokens = split_cohort(raw_tokens)

    type_index = find_session_type(tokens)
    if type_index is None:
        session_type = UNSPECIFIED_TYPE
        name_tokens = tokens
    else:
        session_type = tokens[type_index]
        name_tokens = tokens[:type_index]

    module_name = " ".join(name_tokens)

    module_code = extract_module_code(module_name)
    if not module_code:
        # fallback: first word of the name, then of the raw title
        if name_tokens:
            module_code = name_tokens[0]
        elif raw_tokens:
            module_code = raw_tokens[0]
        else:
            module_code = UNSPECIFIED_TYPE

    return TitleInfo(
        module_name=module_name,
        module_code=module_code,
        session_type=session_type,
        cohort=cohort,
    )
