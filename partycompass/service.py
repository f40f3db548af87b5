from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .alignment import PartyAlignment, TopAlignedResult, detect_ties, rank_parties
from .axis import Point, centroid, directions_for, normalize_point, party_position
from .bank import Party, Question, QuestionBank, load_question_bank
from .config import Settings, settings as default_settings
from .differential import (
    CommonGround,
    PivotalQuestion,
    PolicyDifference,
    ReviewMode,
    common_ground,
    key_differences,
    pivotal_impact,
    review_counts,
    review_questions,
    split_pivotal,
)
from .logic import QuizResults, coerce_answers, compute_scores

logger = logging.getLogger(__name__)


class _Landscape:
    """Direções, posições dos partidos e centroide: calculados uma única vez."""

    def __init__(self, directions: Dict[int, int], positions: Dict[str, Point]) -> None:
        self.directions = directions
        self.positions = positions
        self.mean = centroid(positions.values())


class CompassService:
    """
    Ponto de entrada do motor de pontuação.

    Guarda o banco de perguntas (imutável) e calcula sob demanda, uma
    única vez, a posição de cada partido e a média entre eles. Todas as
    demais operações são funções puras das respostas recebidas.
    """

    def __init__(self, bank: QuestionBank, config: Optional[Settings] = None) -> None:
        self.bank = bank
        self.config = config or default_settings
        self._landscape: Optional[_Landscape] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "CompassService":
        config = config or default_settings
        return cls(load_question_bank(config.DATA_DIR), config)

    # -----------------------------------------------------
    # cache das posições
    # -----------------------------------------------------
    def _get_landscape(self) -> _Landscape:
        landscape = self._landscape
        if landscape is not None:
            return landscape

        with self._lock:
            if self._landscape is None:
                cfg = self.config
                directions = directions_for(self.bank, cfg.DIRECTION_EPSILON)
                positions = {
                    pid: party_position(
                        self.bank,
                        pid,
                        directions=directions,
                        axis_range=cfg.AXIS_RANGE,
                        multiplier=cfg.SCORE_MULTIPLIER,
                    )
                    for pid in self.bank.party_ids
                }
                self._landscape = _Landscape(directions, positions)
                logger.info(
                    "Party positions computed for %d parties (mean=%.3f, %.3f)",
                    len(positions),
                    self._landscape.mean.x,
                    self._landscape.mean.y,
                )
            return self._landscape

    def axis_direction(self, question_id: int) -> int:
        return self._get_landscape().directions.get(question_id, 0)

    # -----------------------------------------------------
    # pontuação
    # -----------------------------------------------------
    def calculate_scores(self, answers: Mapping[Any, Any]) -> QuizResults:
        cfg = self.config
        return compute_scores(
            self.bank,
            answers,
            directions=self._get_landscape().directions,
            axis_range=cfg.AXIS_RANGE,
            multiplier=cfg.SCORE_MULTIPLIER,
        )

    # -----------------------------------------------------
    # posições
    # -----------------------------------------------------
    def party_position(self, party_id: str) -> Point:
        self.bank.party(party_id)
        return self._get_landscape().positions[party_id]

    def get_all_positions(self) -> List[Tuple[Party, Point]]:
        positions = self._get_landscape().positions
        return [(party, positions[party.id]) for party in self.bank.parties]

    def mean_position(self) -> Point:
        return self._get_landscape().mean

    def normalize(self, x: float, y: float) -> Point:
        return normalize_point(Point(x, y), self.mean_position())

    # -----------------------------------------------------
    # alinhamento
    # -----------------------------------------------------
    def rank_alignment(self, economic: float, social: float) -> List[PartyAlignment]:
        return rank_parties(
            self.get_all_positions(),
            Point(economic, social),
            inflation=self.config.DISTANCE_INFLATION,
        )

    def top_aligned(
        self,
        economic: float,
        social: float,
        threshold: Optional[float] = None,
    ) -> TopAlignedResult:
        if threshold is None:
            threshold = self.config.TIE_THRESHOLD
        return detect_ties(self.rank_alignment(economic, social), threshold)

    def closest_party(self, economic: float, social: float) -> Party:
        return self.rank_alignment(economic, social)[0].party

    # -----------------------------------------------------
    # comparação entre dois partidos
    # -----------------------------------------------------
    def key_differences(
        self,
        party_a: str,
        party_b: str,
        answers: Optional[Mapping[Any, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[PolicyDifference]:
        return key_differences(
            self.bank,
            party_a,
            party_b,
            coerce_answers(answers or {}),
            limit=self.config.KEY_DIFFERENCES_LIMIT if limit is None else limit,
            threshold=self.config.SIGNIFICANT_DIFFERENCE,
        )

    def common_ground(self, party_a: str, party_b: str, limit: Optional[int] = None) -> List[CommonGround]:
        return common_ground(
            self.bank,
            party_a,
            party_b,
            limit=self.config.COMMON_GROUND_LIMIT if limit is None else limit,
        )

    def pivotal_impact(self, answers: Mapping[Any, Any], party_a: str, party_b: str) -> List[PivotalQuestion]:
        return pivotal_impact(self.bank, coerce_answers(answers), party_a, party_b)

    def sided_with(
        self, answers: Mapping[Any, Any], party_a: str, party_b: str
    ) -> Dict[str, List[PivotalQuestion]]:
        return split_pivotal(self.pivotal_impact(answers, party_a, party_b), party_a, party_b)

    # -----------------------------------------------------
    # revisão detalhada
    # -----------------------------------------------------
    def review_questions(
        self,
        answers: Mapping[Any, Any],
        closest_id: str,
        second_id: Optional[str] = None,
        category: Optional[str] = None,
        mode: ReviewMode = "all",
    ) -> List[Question]:
        return review_questions(self.bank, coerce_answers(answers), closest_id, second_id, category, mode)

    def review_counts(
        self, answers: Mapping[Any, Any], closest_id: str, second_id: Optional[str] = None
    ) -> Dict[str, Any]:
        return review_counts(self.bank, coerce_answers(answers), closest_id, second_id)
