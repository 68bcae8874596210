"""
Unit tests for the Allociné candidate source.

The HTTP client is mocked: no network access.
"""
from unittest.mock import MagicMock

import pytest
import requests
from pydantic import SecretStr

from recommandateur.adapters.allocine.allocine import AllocineCandidateSource, parse_feed_item
from recommandateur.adapters.allocine.client import AllocineAPIClient
from recommandateur.config.preferences import Thresholds
from recommandateur.settings import AllocineSettings


def feed_item(**overrides):
    item = {
        "title": "Alien",
        "productionYear": 1979,
        "genre": [{"$": "Science fiction"}, {"$": "Épouvante-horreur"}],
        "statistics": {"userRating": "4.3", "pressRating": 4.5},
        "poster": {"href": "https://img.example/alien.jpg"},
        "synopsisShort": "Dans l'espace...",
        "castingShort": {"actors": "Sigourney Weaver, Tom Skerritt", "directors": "Ridley Scott"},
    }
    item.update(overrides)
    return item


class TestParseFeedItem:

    def test_full_item(self):
        c = parse_feed_item(feed_item(), "film", 3.0)

        assert c.titre == "Alien"
        assert c.annee == "1979"
        assert c.genres == ["Science fiction", "Épouvante-horreur"]
        assert c.spectateurs == 4.3
        assert c.presse == 4.5
        assert c.cast == ["Sigourney Weaver", "Tom Skerritt"]
        assert c.crew == ["Ridley Scott"]
        assert c.canonical_key == "alien-1979"

    def test_rating_at_threshold_is_dropped(self):
        assert parse_feed_item(feed_item(statistics={"userRating": 3.0}), "film", 3.0) is None

    def test_missing_poster_is_dropped(self):
        assert parse_feed_item(feed_item(poster={}), "film", 3.0) is None

    def test_missing_title_is_dropped(self):
        assert parse_feed_item(feed_item(title=None), "film", 3.0) is None

    def test_missing_press_rating(self):
        c = parse_feed_item(feed_item(statistics={"userRating": 4}), "serie", 3.0)
        assert c.presse is None
        assert c.type == "serie"


@pytest.fixture
def client():
    return MagicMock(spec=AllocineAPIClient)


class TestAllocineCandidateSource:

    def test_search_parameters(self, client):
        client.get.return_value = {"feed": {"tvseries": [feed_item()]}}
        pool = AllocineCandidateSource(client, count=5).fetch_candidates("serie", "drame")

        client.get.assert_called_once_with("search", params={"filter": "tvseries", "count": 5, "q": "drame"})
        assert [c.type for c in pool] == ["serie"]

    def test_horror_threshold_applies(self, client):
        client.get.return_value = {"feed": {"movie": [feed_item(statistics={"userRating": 2.8})]}}
        source = AllocineCandidateSource(client)

        assert source.fetch_candidates("film", "drame") == []
        assert len(source.fetch_candidates("film", "horreur")) == 1

    def test_explicit_thresholds(self, client):
        client.get.return_value = {"feed": {"movie": [feed_item()]}}
        pool = AllocineCandidateSource(client).fetch_candidates("film", "sf", Thresholds(default=4.4))
        assert pool == []

    def test_upstream_error_returns_empty_pool(self, client):
        client.get.side_effect = requests.HTTPError("503")
        assert AllocineCandidateSource(client).fetch_candidates("film", "drame") == []

    @pytest.mark.parametrize("payload", [{}, {"feed": None}, {"feed": {"movie": "oops"}}, []])
    def test_malformed_payload(self, client, payload):
        client.get.return_value = payload
        assert AllocineCandidateSource(client).fetch_candidates("film", "drame") == []

    def test_without_client(self):
        assert AllocineCandidateSource(None).fetch_candidates("film", "drame") == []

    def test_unknown_type(self, client):
        assert AllocineCandidateSource(client).fetch_candidates("livre", "drame") == []
        client.get.assert_not_called()


class TestAllocineAPIClient:

    def test_partner_code_and_format_are_sent(self):
        cfg = AllocineSettings(partner_code=SecretStr("abc"))
        api = AllocineAPIClient(cfg)
        response = MagicMock()
        response.content = b"{}"
        response.json.return_value = {"feed": {}}
        api.session = MagicMock()
        api.session.get.return_value = response

        assert api.get("search", params={"q": "drame"}) == {"feed": {}}

        url = api.session.get.call_args.args[0]
        params = api.session.get.call_args.kwargs["params"]
        assert url == "https://api.allocine.fr/rest/v3/search"
        assert params == {"q": "drame", "partner": "abc", "format": "json"}
