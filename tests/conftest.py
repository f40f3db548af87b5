import pytest

from partycompass.bank import QuestionBank, load_question_bank
from partycompass.config import PACKAGE_DIR, Settings
from partycompass.service import CompassService


def make_bank(questions, party_ids, baseline, version="test"):
    return QuestionBank.from_dict(
        {"version": version, "questions": questions},
        {"baseline": baseline, "parties": [{"id": pid, "name": pid.upper()} for pid in party_ids]},
    )


@pytest.fixture
def toy_bank():
    """Três perguntas, dois partidos: X é a referência."""
    return make_bank(
        [
            {"id": 1, "text": "Q1", "category": "taxation", "axis": "economic", "weight": 1,
             "party_scores": {"x": 2, "y": -2}},
            {"id": 2, "text": "Q2", "category": "housing", "axis": "economic", "weight": 1,
             "party_scores": {"x": 1, "y": -1}},
            {"id": 3, "text": "Q3", "category": "governance", "axis": "social", "weight": 2,
             "party_scores": {"x": -2, "y": 2}},
        ],
        ["x", "y"],
        baseline="x",
    )


@pytest.fixture
def mini_bank():
    """Três partidos com posições nulas e neutras misturadas; 'a' é a referência."""
    return make_bank(
        [
            {"id": 1, "text": "Q1", "category": "taxation", "axis": "economic", "weight": 1,
             "party_scores": {"a": 2, "b": 0, "c": -2}},
            {"id": 2, "text": "Q2", "category": "housing", "axis": "economic", "weight": 2,
             "party_scores": {"a": 1, "b": 1, "c": None}},
            {"id": 3, "text": "Q3", "category": "governance", "axis": "social", "weight": 3,
             "party_scores": {"a": -2, "b": -1, "c": 2}},
            {"id": 4, "text": "Q4", "category": "civil_liberties", "axis": "social", "weight": 1,
             "party_scores": {"a": 2, "b": -2, "c": None}},
            {"id": 5, "text": "Q5", "category": "taxation", "axis": "economic", "weight": 1,
             "party_scores": {"a": 0, "b": 0, "c": 1}},
        ],
        ["a", "b", "c"],
        baseline="a",
    )


@pytest.fixture(scope="session")
def real_bank():
    return load_question_bank(PACKAGE_DIR / "data")


@pytest.fixture
def test_settings():
    return Settings()


@pytest.fixture
def real_service(real_bank, test_settings):
    return CompassService(real_bank, test_settings)
