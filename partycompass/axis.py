# partycompass/axis.py

from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, NamedTuple, Optional, Sequence

from .bank import AXES, MAX_ANSWER, Question, QuestionBank

# ---------------------------------------------------------
# EIXOS do compasso — espaço 2D
# economic → esquerda (-) redistribuição, bem-estar, estatal
#            direita (+) livre mercado, impostos baixos, privatização
# social   → libertário (-) liberdades civis, liberdade pessoal
#            autoritário (+) controle estatal, valores tradicionais
# ---------------------------------------------------------


class Point(NamedTuple):
    x: float
    y: float

    @property
    def economic(self) -> float:
        return self.x

    @property
    def social(self) -> float:
        return self.y


ORIGIN = Point(0.0, 0.0)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


# ---------------------------------------------------------
# Direção do eixo: "concordar" empurra para + ou para -?
# ---------------------------------------------------------
def axis_direction(
    question: Question,
    baseline: str,
    others: Sequence[str],
    epsilon: float = 0.1,
) -> int:
    """
    Infere para que lado do eixo a concordância com a pergunta empurra.

    Compara a posição do partido de referência com a média dos demais:
    se a referência apoia mais a afirmação, "concordar" aponta para +1;
    se os demais apoiam mais, aponta para -1. Diferenças abaixo de
    epsilon são consideradas sem inclinação clara (0).

    Posições None ficam fora da média; 0 (neutro) entra normalmente.
    """
    base = question.stance(baseline)
    if base is None:
        return 0

    defined = [s for s in (question.stance(pid) for pid in others) if s is not None]
    if not defined:
        return 0

    diff = base - sum(defined) / len(defined)
    if abs(diff) < epsilon:
        return 0
    return sign(diff)


def directions_for(bank: QuestionBank, epsilon: float = 0.1) -> Dict[int, int]:
    others = bank.other_party_ids
    return {q.id: axis_direction(q, bank.baseline, others, epsilon) for q in bank}


# ---------------------------------------------------------
# Acumulador compartilhado: mesma transformação para usuário e partidos
# ---------------------------------------------------------
class AxisAccumulator:
    """
    Soma ponderada por eixo com o máximo possível como denominador.

    Toda posição no compasso (respondente ou partido) passa por aqui,
    o que garante que os dois são colocados com a mesma fórmula.
    """

    def __init__(self, axis_range: float = 10.0, multiplier: float = 1.0) -> None:
        self.axis_range = axis_range
        self.multiplier = multiplier
        self.numerator: Dict[str, int] = {axis: 0 for axis in AXES}
        self.denominator: Dict[str, int] = {axis: 0 for axis in AXES}

    def add(self, question: Question, value: int, direction: int) -> bool:
        """
        Registra uma resposta. Retorna False quando ela não conta para eixo
        nenhum (resposta neutra ou direção indefinida).
        """
        if value == 0 or direction == 0:
            return False
        self.numerator[question.axis] += value * direction * question.weight
        self.denominator[question.axis] += MAX_ANSWER * question.weight
        return True

    def score(self, axis: str) -> float:
        den = self.denominator[axis]
        # eixo sem nenhuma resposta válida: fica no centro
        if den == 0:
            return 0.0
        raw = (self.numerator[axis] / den) * self.axis_range * self.multiplier
        return clamp(raw, -self.axis_range, self.axis_range)

    def point(self) -> Point:
        return Point(self.score("economic"), self.score("social"))


# ---------------------------------------------------------
# Posição de cada partido, calculada a partir das próprias respostas
# ---------------------------------------------------------
def party_position(
    bank: QuestionBank,
    party_id: str,
    directions: Optional[Mapping[int, int]] = None,
    axis_range: float = 10.0,
    multiplier: float = 1.0,
    epsilon: float = 0.1,
) -> Point:
    bank.party(party_id)
    if directions is None:
        directions = directions_for(bank, epsilon)

    acc = AxisAccumulator(axis_range, multiplier)
    for question in bank:
        stance = question.stance(party_id)
        if stance is None:
            continue
        acc.add(question, stance, directions.get(question.id, 0))
    return acc.point()


# ---------------------------------------------------------
# Normalização: recentra tudo na média dos partidos
# ---------------------------------------------------------
def centroid(points: Iterable[Point]) -> Point:
    pts = list(points)
    if not pts:
        return ORIGIN
    return Point(
        sum(p.x for p in pts) / len(pts),
        sum(p.y for p in pts) / len(pts),
    )


def normalize_point(point: Point, mean: Point) -> Point:
    return Point(point.x - mean.x, point.y - mean.y)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


# ---------------------------------------------------------
# Quadrantes
# ---------------------------------------------------------
QUADRANT_DESCRIPTIONS: Dict[str, str] = {
    "Authoritarian Right": (
        "You favor free market economics combined with traditional values and strong state "
        "authority. You believe in meritocracy, personal responsibility, and maintaining social order."
    ),
    "Authoritarian Left": (
        "You support economic redistribution and a strong welfare state, but also believe in "
        "state authority to maintain social cohesion and traditional values."
    ),
    "Libertarian Left": (
        "You support economic equality and redistribution while strongly valuing personal "
        "freedoms, civil liberties, and progressive social policies."
    ),
    "Libertarian Right": (
        "You favor free market economics and minimal government intervention in both economic "
        "and personal matters. You value individual liberty above collective needs."
    ),
    "Centrist": (
        "You hold moderate views that balance between different political philosophies, "
        "avoiding extremes on both economic and social issues."
    ),
}


def quadrant_name(x: float, y: float) -> str:
    if x >= 0 and y > 0:
        return "Authoritarian Right"
    if x < 0 and y > 0:
        return "Authoritarian Left"
    if x < 0 and y <= 0:
        return "Libertarian Left"
    if x >= 0 and y <= 0:
        return "Libertarian Right"
    # só NaN chega aqui
    return "Centrist"


def quadrant_description(x: float, y: float) -> str:
    return QUADRANT_DESCRIPTIONS.get(quadrant_name(x, y), QUADRANT_DESCRIPTIONS["Centrist"])
