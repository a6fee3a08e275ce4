from peerlink.core.text_processing import (
    DEFAULT_THEME,
    NO_ENTRIES_THEME,
    count_present,
    entry_text,
    extract_journal_themes,
    joined_text,
    normalize_text,
    summarize_journal_themes,
)


def test_normalize_text_collapses_whitespace_and_lowercases():
    assert normalize_text("  Sleep\n\tIssues  ") == "sleep issues"


def test_normalize_text_handles_unicode_quirks():
    assert normalize_text("Flare\u00a0up \u2014 again") == "flare up - again"
    assert normalize_text("") == ""


def test_entry_text_prefers_content_then_notes():
    assert entry_text({"content": "Pain today", "notes": "ignored"}) == "pain today"
    assert entry_text({"notes": "Took MEDICATION"}) == "took medication"
    assert entry_text({}) == ""


def test_joined_text_uses_content_only():
    assert joined_text([{"content": "A"}, {"notes": "B"}, {"content": "C"}]) == "a  c"


def test_themes_first_keyword_wins_per_entry():
    entries = [
        {"content": "Pain and stress all day"},
        {"content": "Could not sleep"},
        {"content": "Nice walk outside"},
        {"content": "Stressful meeting"},
    ]
    assert extract_journal_themes(entries) == [
        "pain management",
        "sleep issues",
        DEFAULT_THEME,
        "stress coping",
    ]


def test_themes_are_deduplicated_and_bounded():
    entries = [{"content": "pain"}] * 3 + [{"content": "medication review"}] * 3
    assert extract_journal_themes(entries) == ["pain management", "treatment tracking"]
    assert extract_journal_themes(entries, max_entries=3) == ["pain management"]


def test_summary_for_no_entries():
    assert summarize_journal_themes([]) == NO_ENTRIES_THEME
    assert summarize_journal_themes([{"content": "Sleep"}, {"content": "PAIN"}]) == "sleep issues, pain management"


def test_count_present_counts_distinct_words():
    assert count_present("worse and worse, so frustrated", ("worse", "frustrated", "better")) == 2
