"""
Stage 3: Display Text

Derives the board's title / subtitle / org / contact from a booking's
reservee and purpose text. Rules are tried in order; the first that
applies wins:

1. Pickleball     - fixed title, only descriptive leftovers as subtitle
2. Catch Corner   - fixed title, detail from purpose or reservee
3. Organization   - "Org, Contact" where Org carries an org keyword
4. Person         - "Last, First" flipped to "First Last"
5. Other comma    - left side as title, right side as contact
6. Plain          - reservee (or purpose) as title

Every subtitle is scrubbed of internal annotations afterwards.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import pandas as pd

from ..config.column_mappings import (
    CATCH_CORNER_TITLE,
    DEFAULT_TITLE,
    INTERNAL_NOTE_PATTERNS,
    ORGANIZATION_KEYWORDS,
    PICKLEBALL_BOILERPLATE,
    PICKLEBALL_TITLE,
)

_WS = re.compile(r"\s+")
_PICKLEBALL = re.compile(r"pickle\s*ball", re.IGNORECASE)
_PICKLEBALL_BOILERPLATE = re.compile(
    r"\b(?:" + "|".join(PICKLEBALL_BOILERPLATE) + r")\b", re.IGNORECASE
)
_CATCH_CORNER = re.compile(r"^catch\s*corner\b\s*\(?", re.IGNORECASE)
_INTERNAL_NOTES = [re.compile(p, re.IGNORECASE) for p in INTERNAL_NOTE_PATTERNS]

# Letters (accented too), spaces, apostrophes, hyphens, periods
_NAME_PART = r"[^\W\d_](?:[^\W\d_]|['’\-. ])*"
_PERSON = re.compile(rf"^\s*{_NAME_PART}\s*,\s*{_NAME_PART}\s*$")

_EMPTY_BRACKETS = re.compile(r"\(\s*\)|\[\s*\]")
_REPEATED_SEPARATORS = re.compile(r"\s*([,;:/|-])(?:\s*[,;:/|-])+\s*")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,;:])")
_EDGE_SEPARATORS = re.compile(r"^[\s,;:/|-]+|[\s,;:/|-]+$")
_TRAILING_TITLE = re.compile(r"[,\s]+$")


@dataclass(frozen=True)
class DisplayText:
    title: str
    subtitle: str = ""
    org: str = ""
    contact: str = ""


def _squash(text: str) -> str:
    return _WS.sub(" ", text or "").strip()


def _single_separator(match) -> str:
    sep = match.group(1)
    return f" {sep} " if sep in "-/|" else f"{sep} "


def tidy_separators(text: str) -> str:
    """Collapse empty brackets, doubled separators, and dangling punctuation."""
    out = _squash(text)
    previous = None
    while out != previous:
        previous = out
        out = _EMPTY_BRACKETS.sub(" ", out)
        out = _REPEATED_SEPARATORS.sub(_single_separator, out)
        out = _SPACE_BEFORE_PUNCT.sub(r"\1", out)
        out = _squash(out)
        out = _EDGE_SEPARATORS.sub("", out)
    return out


def scrub_internal_notes(text: str) -> str:
    """Remove administrative-only annotations from subtitle text."""
    out = text or ""
    for pattern in _INTERNAL_NOTES:
        out = pattern.sub(" ", out)
    return tidy_separators(out)


def has_org_keyword(text: str, keywords: Sequence[str]) -> bool:
    words = set(re.findall(r"[a-z0-9]+", (text or "").lower()))
    return any(k.lower() in words for k in keywords)


def looks_like_person(text: str, keywords: Sequence[str] = ORGANIZATION_KEYWORDS) -> bool:
    """
    True for "Last, First" text.

    Both sides must be letters only; the right side is one to three
    words; no organization keyword may appear.
    """
    text = _squash(text)
    if not text or text.count(",") != 1 or any(ch.isdigit() for ch in text):
        return False
    if not _PERSON.match(text):
        return False
    if has_org_keyword(text, keywords):
        return False
    first = text.split(",", 1)[1].split()
    return 1 <= len(first) <= 3


def flip_person(text: str) -> str:
    """'Doe, Jane' -> 'Jane Doe'."""
    last, first = (part.strip() for part in _squash(text).split(",", 1))
    return _squash(f"{first} {last}")


def split_comma(text: str) -> Tuple[str, str]:
    left, _, right = _squash(text).partition(",")
    return left.strip(), right.strip()


# =============================================================================
# RULES
# =============================================================================

Rule = Callable[[str, str, Sequence[str]], Optional[DisplayText]]


def pickleball_rule(reservee: str, purpose: str, keywords: Sequence[str]) -> Optional[DisplayText]:
    if not (_PICKLEBALL.search(reservee) or _PICKLEBALL.search(purpose)):
        return None
    residual = tidy_separators(_PICKLEBALL_BOILERPLATE.sub(" ", purpose))
    if not re.search(r"[^\W\d_]", residual):
        residual = ""
    return DisplayText(title=PICKLEBALL_TITLE, subtitle=residual)


def catch_corner_rule(reservee: str, purpose: str, keywords: Sequence[str]) -> Optional[DisplayText]:
    if not _CATCH_CORNER.match(reservee):
        return None
    detail = _CATCH_CORNER.sub("", reservee).rstrip(") ").strip()
    return DisplayText(title=CATCH_CORNER_TITLE, subtitle=purpose or detail, org=CATCH_CORNER_TITLE)


def organization_rule(reservee: str, purpose: str, keywords: Sequence[str]) -> Optional[DisplayText]:
    if "," not in reservee:
        return None
    org, contact = split_comma(reservee)
    if not org or not has_org_keyword(org, keywords):
        return None
    if looks_like_person(contact, keywords):
        contact = flip_person(contact)
    return DisplayText(title=org, subtitle=purpose or contact, org=org, contact=contact)


def person_rule(reservee: str, purpose: str, keywords: Sequence[str]) -> Optional[DisplayText]:
    if not looks_like_person(reservee, keywords):
        return None
    return DisplayText(title=flip_person(reservee), subtitle=purpose)


def comma_rule(reservee: str, purpose: str, keywords: Sequence[str]) -> Optional[DisplayText]:
    if "," not in reservee:
        return None
    title, contact = split_comma(reservee)
    if not title:
        return None
    return DisplayText(title=title, subtitle=purpose or contact, contact=contact)


def plain_rule(reservee: str, purpose: str, keywords: Sequence[str]) -> Optional[DisplayText]:
    title = reservee or purpose or DEFAULT_TITLE
    subtitle = purpose if purpose and purpose.casefold() != title.casefold() else ""
    org = reservee if reservee and has_org_keyword(reservee, keywords) else ""
    return DisplayText(title=title, subtitle=subtitle, org=org)


DISPLAY_RULES: List[Rule] = [
    pickleball_rule,
    catch_corner_rule,
    organization_rule,
    person_rule,
    comma_rule,
    plain_rule,
]


def derive_display_text(
    reservee: str,
    purpose: str,
    keywords: Sequence[str] = ORGANIZATION_KEYWORDS,
) -> DisplayText:
    """Apply the display rules to one booking's reservee/purpose."""
    reservee = _squash(reservee)
    purpose = _squash(purpose)
    for rule in DISPLAY_RULES:
        text = rule(reservee, purpose, keywords)
        if text is not None:
            break

    title = _TRAILING_TITLE.sub("", text.title).strip() or DEFAULT_TITLE
    return DisplayText(
        title=title,
        subtitle=scrub_internal_notes(text.subtitle),
        org=_squash(text.org),
        contact=_squash(text.contact),
    )


def apply_display_text(slots: pd.DataFrame, keywords: Sequence[str] = ORGANIZATION_KEYWORDS) -> pd.DataFrame:
    """Add title/subtitle/org/contact columns to booking slots."""
    df = slots.copy()
    texts = [derive_display_text(r, p, keywords) for r, p in zip(df["reservee"], df["purpose"])]
    df["title"] = [t.title for t in texts]
    df["subtitle"] = [t.subtitle for t in texts]
    df["org"] = [t.org for t in texts]
    df["contact"] = [t.contact for t in texts]
    return df.drop(columns=["reservee", "purpose"])
