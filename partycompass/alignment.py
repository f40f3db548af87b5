# partycompass/alignment.py

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from .axis import Point, centroid, clamp, distance, normalize_point
from .bank import Party


class PartyAlignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    party: Party
    position: Point
    normalized_position: Point
    distance: float
    alignment: float  # 0-100
    economic_diff: float
    social_diff: float


class TopAlignedResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    best: PartyAlignment
    close_ones: List[PartyAlignment]
    is_tie: bool
    tie_threshold: float


# ---------------------------------------------------------
# Ranking: distância euclidiana no espaço recentrado
# ---------------------------------------------------------
def rank_parties(
    positions: Sequence[Tuple[Party, Point]],
    user: Point,
    inflation: float = 2.5,
) -> List[PartyAlignment]:
    """
    Ordena os partidos do mais próximo ao mais distante do usuário.

    Tudo é recentrado na média dos partidos antes de medir. A distância
    máxima é a maior extensão observada (partidos ou usuário) vezes
    `inflation`, de modo que 100% só acontece com distância zero.

    Empates de distância mantêm a ordem do registro (sort estável).
    """
    if not positions:
        return []

    mean = centroid(p for _, p in positions)
    user_n = normalize_point(user, mean)
    normalized = [(party, pos, normalize_point(pos, mean)) for party, pos in positions]

    max_extent = max(
        max(math.hypot(n.x, n.y) for _, _, n in normalized),
        math.hypot(user_n.x, user_n.y),
    )
    max_distance = max_extent * inflation

    ranked: List[PartyAlignment] = []
    for party, pos, pos_n in normalized:
        dist = distance(pos_n, user_n)
        # todos sobre o centro: nada a diferenciar
        if max_distance == 0:
            alignment = 100.0
        else:
            alignment = clamp(((max_distance - dist) / max_distance) * 100, 0.0, 100.0)

        ranked.append(
            PartyAlignment(
                party=party,
                position=pos,
                normalized_position=pos_n,
                distance=dist,
                alignment=alignment,
                economic_diff=pos.x - user.x,
                social_diff=pos.y - user.y,
            )
        )

    ranked.sort(key=lambda r: r.distance)
    return ranked


def detect_ties(ranked: Sequence[PartyAlignment], threshold: float) -> TopAlignedResult:
    """
    Marca como "próximos" os partidos cujo alinhamento fica a até
    `threshold` pontos percentuais do primeiro colocado.
    """
    if not ranked:
        raise ValueError("ranking vazio")

    best = ranked[0]
    close_ones = [r for r in ranked[1:] if abs(r.alignment - best.alignment) <= threshold]
    return TopAlignedResult(
        best=best,
        close_ones=close_ones,
        is_tie=len(close_ones) > 0,
        tie_threshold=threshold,
    )
