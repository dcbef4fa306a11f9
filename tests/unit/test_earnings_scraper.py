"""Tests for earnings scraping."""

from unittest.mock import Mock

import pytest

from src.exceptions import UpstreamError, ValidationError
from src.ingestion.earnings_scraper import scrape_earnings


PLAYER_PAGE = (
    '<table class="wikitable"><tr><th>#</th></tr>'
    '<tr><td>1</td><td><span class="name"><a>aspas</a></span></td>'
    '<td></td><td></td><td></td><td></td><td>$1,000</td></tr></table>'
)
TEAM_PAGE = (
    '<table class="wikitable"><tr><th>#</th></tr>'
    '<tr><td>1</td><td><a></a><a>LOUD</a></td>'
    '<td></td><td></td><td></td><td></td><td>$2,000</td></tr></table>'
)


@pytest.fixture
def client():
    client = Mock()
    pages = {
        "Portal:Statistics/Player_earnings": PLAYER_PAGE,
        "Portal:Statistics/Organization_Winnings": TEAM_PAGE,
    }
    client.fetch_page.side_effect = lambda page, source: pages[page]
    return client


def test_scrapes_both_kinds_with_statistics_source(client):
    batch = scrape_earnings(client)

    assert [r.name for r in batch.records["players"]] == ["aspas"]
    assert [r.name for r in batch.records["teams"]] == ["LOUD"]
    assert batch.errors == []
    assert all(c.kwargs["source"] == "statistics" for c in client.fetch_page.call_args_list)


def test_single_kind(client):
    batch = scrape_earnings(client, ["teams"])

    assert list(batch.records) == ["teams"]
    client.fetch_page.assert_called_once_with("Portal:Statistics/Organization_Winnings", source="statistics")


def test_failed_page_is_left_out(client):
    def fetch(page, source):
        if page.endswith("Player_earnings"):
            raise UpstreamError("Liquipedia API error: 503 for " + page)
        return TEAM_PAGE

    client.fetch_page.side_effect = fetch

    batch = scrape_earnings(client)

    assert "players" not in batch.records
    assert batch.records["teams"][0].earnings == 2000
    assert batch.errors == [
        "Portal:Statistics/Player_earnings: Liquipedia API error: 503 for Portal:Statistics/Player_earnings"
    ]


@pytest.mark.parametrize("kinds", [["coaches"], []])
def test_unknown_kind_rejected(client, kinds):
    with pytest.raises(ValidationError):
        scrape_earnings(client, kinds)
