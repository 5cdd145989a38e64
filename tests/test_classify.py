# tests/test_classify.py
import pytest

from modules.posting_watch.lib.classify import (
    FINANCE_KEYWORDS,
    GENERAL_KEYWORDS,
    TECH_KEYWORDS,
    classify_division,
    keyword_score,
)
from modules.posting_watch.lib.models import Division


@pytest.mark.parametrize(
    "title, url, expected",
    [
        ("Senior Software Engineer", "https://x/jobs/1", Division.TECHNOLOGY),
        ("Staff Accountant - Accounts Payable", "...", Division.FINANCE),
        ("Warehouse Supervisor", "...", Division.GENERAL_STAFFING),
        ("", "https://x/y", Division.UNCATEGORIZED),
        ("Nurse Practitioner", "https://boards.greenhouse.io/acme/jobs/102", Division.UNCATEGORIZED),
    ],
)
def test_known_titles(title, url, expected):
    assert classify_division(title, url) is expected


def test_url_text_contributes_to_score():
    # nothing in the title; the URL path carries the signal
    assert classify_division("Opening #12", "https://x/careers/payroll-tax") is Division.FINANCE


def test_general_wins_over_tied_tech_and_finance():
    # tech 1 ("python"), finance 1 ("payroll"), general 1 ("coordinator")
    assert classify_division("Python Payroll Coordinator", "") is Division.GENERAL_STAFFING


def test_tie_between_tech_and_finance_without_general_is_uncategorized():
    # tech 1 ("python"), finance 1 ("payroll"), no general keyword
    assert classify_division("Python Payroll", "") is Division.UNCATEGORIZED


def test_tech_must_strictly_beat_general():
    # "manager" (general) vs "software" (tech): tie -> general staffing
    assert classify_division("Software Manager", "") is Division.GENERAL_STAFFING


def test_keyword_score_counts_distinct_keywords():
    assert keyword_score("data data data", ("data",)) == 1
    assert keyword_score("", TECH_KEYWORDS) == 0


@pytest.mark.parametrize("title, url", [(None, None), ("\x00", "\n"), ("🚀" * 50, "x" * 5000), (123, 456)])
def test_never_raises_and_always_labels(title, url):
    assert classify_division(title, url) in set(Division)


def test_keyword_tables_are_disjoint_enough():
    # a keyword appearing in two tables would make ties unexplainable
    assert not set(TECH_KEYWORDS) & set(FINANCE_KEYWORDS)
    assert not set(FINANCE_KEYWORDS) & set(GENERAL_KEYWORDS)
