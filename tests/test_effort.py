import pytest

from scoring.effort import estimate_difficulty, estimate_hours


@pytest.mark.parametrize("solution,difficulty", [
    ("Add a <title> to the page.", "easy"),
    ("Configure the server to send HSTS.", "easy"),
    ("Implement responsive breakpoints.", "medium"),
    ("Migrate the site to HTTPS.", "hard"),
    ("Rebuild the layout with CSS grid.", "hard"),
    ("Compress images.", "medium"),
    ("", "medium"),
])
def test_estimate_difficulty(solution, difficulty):
    assert estimate_difficulty(solution) == difficulty


def test_keywords_match_whole_words_only():
    # "address" and "settings" must not count as "add" / "set"
    assert estimate_difficulty("Review the address settings.") == "medium"


def test_easier_keyword_wins():
    assert estimate_difficulty("Add caching, then migrate assets to a CDN.") == "easy"


@pytest.mark.parametrize("priority,difficulty,hours", [
    ("critical", "easy", 2.0),
    ("critical", "hard", 8.0),
    ("high", "medium", 3.0),
    ("medium", "easy", 0.5),
    ("low", "easy", 0.25),
    ("info", "hard", 1.0),
])
def test_estimate_hours(priority, difficulty, hours):
    assert estimate_hours(priority, difficulty) == hours
