from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from .axis import AxisAccumulator, clamp, directions_for
from .bank import CATEGORIES, MAX_ANSWER, MIN_ANSWER, QuestionBank

logger = logging.getLogger(__name__)


class CategoryScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    economic: float = 0.0
    social: float = 0.0


class QuizResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    economic_score: float
    social_score: float
    scores_by_party: Dict[str, int]
    scores_by_category: Dict[str, CategoryScore]
    # cópia das respostas usadas, para a análise comparativa posterior
    answers: Dict[int, int]


def coerce_answers(answers: Mapping[Any, Any]) -> Dict[int, int]:
    """
    Normaliza o mapa de respostas: chaves viram int e valores são
    limitados a -2..+2. Chaves que não são números de pergunta são
    descartadas, assim como valores não numéricos ou infinitos.
    """
    clean: Dict[int, int] = {}
    for qid, value in answers.items():
        try:
            key = int(qid)
            v = int(value)
        except (TypeError, ValueError, OverflowError):
            logger.debug("Ignoring malformed answer %r=%r", qid, value)
            continue
        clean[key] = int(clamp(v, MIN_ANSWER, MAX_ANSWER))
    return clean


def compute_scores(
    bank: QuestionBank,
    answers: Mapping[Any, Any],
    directions: Optional[Mapping[int, int]] = None,
    axis_range: float = 10.0,
    multiplier: float = 1.0,
    epsilon: float = 0.1,
) -> QuizResults:
    """
    Converte as respostas em pontuação nos eixos e pontuação bruta por partido.

    answers: {1: 2, 7: -1, ...}  (0 e ausente são equivalentes)

    - eixo: soma de resposta * direção * peso, dividida pelo máximo
      possível (2 * peso) e escalada para -axis_range..+axis_range;
    - partido: produto escalar resposta * posição * peso, sem limite;
    - categoria: média simples de resposta * direção por eixo.
    """
    snapshot = coerce_answers(answers)
    if directions is None:
        directions = directions_for(bank, epsilon)

    acc = AxisAccumulator(axis_range, multiplier)
    party_scores: Dict[str, int] = {pid: 0 for pid in bank.party_ids}
    category_totals: Dict[str, Dict[str, float]] = {
        cat: {"economic": 0.0, "social": 0.0} for cat in CATEGORIES
    }
    category_counts: Dict[str, int] = {cat: 0 for cat in CATEGORIES}

    for qid, value in snapshot.items():
        question = bank.get(qid)
        if question is None:
            logger.debug("Ignoring answer for unknown question %s", qid)
            continue
        if value == 0:
            continue

        direction = directions.get(question.id, 0)
        if acc.add(question, value, direction):
            category_totals[question.category][question.axis] += value * direction
            category_counts[question.category] += 1

        for pid in bank.party_ids:
            stance = question.stance(pid)
            if stance is None:
                continue
            party_scores[pid] += value * stance * question.weight

    scores_by_category = {
        cat: CategoryScore(
            economic=totals["economic"] / category_counts[cat] if category_counts[cat] else 0.0,
            social=totals["social"] / category_counts[cat] if category_counts[cat] else 0.0,
        )
        for cat, totals in category_totals.items()
    }

    point = acc.point()
    return QuizResults(
        economic_score=point.x,
        social_score=point.y,
        scores_by_party=party_scores,
        scores_by_category=scores_by_category,
        answers=snapshot,
    )
