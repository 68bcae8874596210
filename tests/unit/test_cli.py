"""
Unit tests for the recommend CLI.
"""
import json
from unittest.mock import patch

import pytest

from recommandateur.adapters.base import StaticCandidateSource
from recommandateur.cli import recommend
from recommandateur.storage.kv import InMemoryKVStore


@pytest.fixture
def offline(candidate):
    """Run the CLI against an in-memory store and a one-title pool."""
    with patch.object(recommend, "build_kv_store", return_value=InMemoryKVStore()), \
         patch.object(recommend, "build_candidate_source",
                      return_value=StaticCandidateSource([candidate()])):
        yield


def test_prints_card(offline, capsys):
    assert recommend.main(["--type", "film", "--genre", "drame"]) == 0
    out = capsys.readouterr().out
    assert "**Drame Test (2020)**" in out


def test_json_output(offline, capsys):
    assert recommend.main(["--type", "film", "--genre", "drame", "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["titre"] == "Drame Test"


def test_nothing_found_exits_1(offline):
    assert recommend.main(["--type", "serie", "--genre", "drame"]) == 1


def test_invalid_type_is_rejected_by_argparse():
    with pytest.raises(SystemExit):
        recommend.main(["--type", "livre", "--genre", "drame"])
