from __future__ import annotations

import re
import unicodedata
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

# NOTE: Shared keyword heuristics. The prompt builder (journal themes) and the
# profile builder (emotional state, support needs) both read journal text
# through this module so the keyword lists live in one place.

# Journal theme taxonomy, checked in order; first hit wins per entry.
JOURNAL_THEMES: Tuple[Tuple[str, str], ...] = (
    ("pain", "pain management"),
    ("stress", "stress coping"),
    ("sleep", "sleep issues"),
    ("medication", "treatment tracking"),
)
DEFAULT_THEME = "general wellness"
NO_ENTRIES_THEME = "No recent entries"

STRUGGLING_WORDS = ("painful", "difficult", "worse", "struggling", "hard", "frustrated")
IMPROVING_WORDS = ("better", "improving", "good", "positive", "hopeful", "progress")

# Support need -> trigger words found anywhere in recent journal text.
SUPPORT_NEED_TRIGGERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Sleep improvement strategies", ("sleep", "tired")),
    ("Stress management techniques", ("stress", "anxiety")),
    ("Treatment experience sharing", ("medication", "treatment")),
)


def normalize_text(text: str) -> str:
    """
    Deterministic normalization for keyword matching.

    - removes unicode quirks (smart quotes, non-breaking spaces)
    - collapses whitespace
    - lowercases
    """
    if not text:
        return ""
    t = unicodedata.normalize("NFKC", text)
    t = t.replace("\u00a0", " ")
    t = re.sub(r"[\u2010-\u2015]", "-", t)
    t = " ".join(t.split())
    return t.lower()


def entry_text(entry: Mapping[str, Any]) -> str:
    """Journal entries carry their body in `content`; symptom logs use `notes`."""
    if not entry:
        return ""
    return normalize_text(str(entry.get("content") or entry.get("notes") or ""))


def joined_text(entries: Iterable[Mapping[str, Any]]) -> str:
    return " ".join(normalize_text(str(e.get("content") or "")) for e in entries or [])


def classify_theme(text: str) -> str:
    for keyword, theme in JOURNAL_THEMES:
        if keyword in text:
            return theme
    return DEFAULT_THEME


def extract_journal_themes(entries: Sequence[Dict[str, Any]], *, max_entries: int = 5) -> List[str]:
    """Ordered, de-duplicated themes of the first `max_entries` entries."""
    out: List[str] = []
    seen = set()
    for entry in list(entries or [])[:max_entries]:
        theme = classify_theme(entry_text(entry))
        if theme in seen:
            continue
        seen.add(theme)
        out.append(theme)
    return out


def summarize_journal_themes(entries: Sequence[Dict[str, Any]]) -> str:
    themes = extract_journal_themes(entries)
    return ", ".join(themes) if themes else NO_ENTRIES_THEME


def count_present(text: str, words: Iterable[str]) -> int:
    """Number of distinct words that occur (as substrings) in text."""
    return sum(1 for w in words if w in text)
