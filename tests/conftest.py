"""Shared fixtures: in-memory store and candidate factories."""
import pytest

from recommandateur.lists.store import ListStore
from recommandateur.recommendation.schemas import Candidate
from recommandateur.storage.kv import InMemoryKVStore


def make_candidate(titre="Drame Test", annee="2020", type="film", **overrides) -> Candidate:
    """Candidate that passes every default filter unless overridden."""
    fields = dict(
        titre=titre,
        annee=annee,
        type=type,
        genres=["Drame"],
        presse=3.8,
        spectateurs=4.2,
        accroche="Une histoire.",
        affiche_url="https://img.example/poster.jpg",
        canonical_key=f"{titre} {annee}",
    )
    fields.update(overrides)
    return Candidate(**fields)


@pytest.fixture
def kv():
    return InMemoryKVStore()


@pytest.fixture
def store(kv):
    return ListStore(kv)


@pytest.fixture
def candidate():
    """Factory fixture: candidate(titre=..., **overrides)."""
    return make_candidate
