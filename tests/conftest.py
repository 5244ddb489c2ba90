import random
import pytest

from factories import make_profile, make_routine


@pytest.fixture
def profile():
    return make_profile()


@pytest.fixture
def routine():
    return make_routine()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture(autouse=True)
def _offline(monkeypatch):
    # agents must take their no-API paths unless a test opts in
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
