# partycompass/bank.py

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

logger = logging.getLogger(__name__)

Axis = Literal["economic", "social"]
Category = Literal[
    "taxation",
    "housing",
    "healthcare",
    "employment",
    "welfare",
    "governance",
    "civil_liberties",
    "immigration",
]

AXES: Tuple[str, ...] = ("economic", "social")
CATEGORIES: Tuple[str, ...] = (
    "taxation",
    "housing",
    "healthcare",
    "employment",
    "welfare",
    "governance",
    "civil_liberties",
    "immigration",
)

CATEGORY_LABELS: Dict[str, str] = {
    "taxation": "Taxation & Fiscal Policy",
    "housing": "Housing",
    "healthcare": "Healthcare",
    "employment": "Employment & Wages",
    "welfare": "Social Welfare",
    "governance": "Governance & Transparency",
    "civil_liberties": "Civil Liberties",
    "immigration": "Immigration & Population",
}

# Escala Likert de 5 pontos usada tanto nas respostas quanto nas posições dos partidos
ANSWER_LABELS: Dict[int, str] = {
    2: "Strongly Agree",
    1: "Agree",
    0: "Neutral",
    -1: "Disagree",
    -2: "Strongly Disagree",
}

MIN_ANSWER = -2
MAX_ANSWER = 2


class QuestionBankError(ValueError):
    """Dados de referência inválidos (perguntas ou partidos)."""


class UnknownPartyError(KeyError):
    """Identificador de partido fora do registro."""


class Party(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    short_name: str = ""
    color: str = "#888888"
    founded: Optional[int] = None
    leader: Optional[str] = None
    description: str = ""
    key_policies: Tuple[str, ...] = ()
    website: Optional[str] = None

    @property
    def label(self) -> str:
        return self.short_name or self.name or self.id


class Question(BaseModel):
    """
    Uma afirmação do questionário.

    party_scores mapeia cada partido do registro para a posição dele
    (-2..+2). O valor None significa "sem dados" e é diferente de 0
    (neutro): None nunca entra em cálculo nenhum.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    text: str
    category: Category
    axis: Axis
    weight: int = Field(ge=1, le=3)
    party_scores: Mapping[str, Optional[int]]

    @field_validator("party_scores")
    @classmethod
    def stances_in_range(cls, v: Mapping[str, Optional[int]]) -> Mapping[str, Optional[int]]:
        for party_id, stance in v.items():
            if stance is not None and not (MIN_ANSWER <= stance <= MAX_ANSWER):
                raise ValueError(f"posição fora da escala para '{party_id}': {stance}")
        # somente leitura: as direções e posições em cache dependem destes valores
        return MappingProxyType(dict(v))

    @field_serializer("party_scores")
    def dump_party_scores(self, v: Mapping[str, Optional[int]]) -> Dict[str, Optional[int]]:
        return dict(v)

    def stance(self, party_id: str) -> Optional[int]:
        return self.party_scores.get(party_id)


class QuestionBank:
    """
    Banco de perguntas + registro de partidos, imutável depois de carregado.

    A ordem de `parties` é a ordem do registro e define o desempate em
    todos os rankings. `baseline` é o partido de referência usado para
    inferir a direção de cada pergunta no eixo.
    """

    def __init__(
        self,
        questions: List[Question],
        parties: List[Party],
        baseline: str,
        version: str = "unversioned",
    ) -> None:
        party_ids = [p.id for p in parties]
        if not party_ids:
            raise QuestionBankError("O registro de partidos está vazio.")
        if len(set(party_ids)) != len(party_ids):
            raise QuestionBankError("Identificadores de partido duplicados no registro.")
        if baseline not in party_ids:
            raise QuestionBankError(f"Partido de referência desconhecido: '{baseline}'.")

        index: Dict[int, Question] = {}
        expected = set(party_ids)
        for q in questions:
            if q.id in index:
                raise QuestionBankError(f"Pergunta duplicada: id {q.id}.")

            keys = set(q.party_scores)
            missing = expected - keys
            unknown = keys - expected
            if missing:
                raise QuestionBankError(
                    f"Pergunta {q.id} sem posição para: {', '.join(sorted(missing))}."
                )
            if unknown:
                raise QuestionBankError(
                    f"Pergunta {q.id} cita partidos fora do registro: {', '.join(sorted(unknown))}."
                )
            index[q.id] = q

        self.version = version
        self.baseline = baseline
        self._questions: Tuple[Question, ...] = tuple(questions)
        self._parties: Tuple[Party, ...] = tuple(parties)
        self._index = index
        self._party_index = {p.id: p for p in parties}

    # -----------------------------------------------------
    # acesso
    # -----------------------------------------------------
    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def parties(self) -> Tuple[Party, ...]:
        return self._parties

    @property
    def party_ids(self) -> Tuple[str, ...]:
        return tuple(p.id for p in self._parties)

    @property
    def other_party_ids(self) -> Tuple[str, ...]:
        return tuple(pid for pid in self.party_ids if pid != self.baseline)

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def get(self, question_id: int) -> Optional[Question]:
        return self._index.get(question_id)

    def party(self, party_id: str) -> Party:
        try:
            return self._party_index[party_id]
        except KeyError:
            raise UnknownPartyError(party_id) from None

    def has_party(self, party_id: str) -> bool:
        return party_id in self._party_index

    def by_category(self) -> Dict[str, List[Question]]:
        grouped: Dict[str, List[Question]] = {}
        for q in self._questions:
            grouped.setdefault(q.category, []).append(q)
        return grouped

    # -----------------------------------------------------
    # construção
    # -----------------------------------------------------
    @classmethod
    def from_dict(
        cls,
        questions_data: Mapping[str, Any],
        parties_data: Mapping[str, Any],
    ) -> "QuestionBank":
        """
        Monta o banco a partir do conteúdo já decodificado dos JSONs:

        questions_data: {"version": "...", "questions": [...]}
        parties_data:   {"baseline": "pap", "parties": [...]}
        """
        try:
            questions = [Question.model_validate(q) for q in questions_data.get("questions", [])]
            parties = [Party.model_validate(p) for p in parties_data.get("parties", [])]
        except ValidationError as exc:
            raise QuestionBankError(str(exc)) from exc

        baseline = parties_data.get("baseline")
        if not baseline:
            raise QuestionBankError("parties.json precisa definir 'baseline'.")

        return cls(
            questions=questions,
            parties=parties,
            baseline=str(baseline),
            version=str(questions_data.get("version", "unversioned")),
        )


def load_question_bank(data_dir: Path) -> QuestionBank:
    """
    Carrega questions.json e parties.json de data_dir.
    """
    data_dir = Path(data_dir)
    try:
        with open(data_dir / "questions.json", "r", encoding="utf-8") as f:
            questions_data = json.load(f)
        with open(data_dir / "parties.json", "r", encoding="utf-8") as f:
            parties_data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise QuestionBankError(f"Não foi possível ler os dados em {data_dir}: {exc}") from exc

    bank = QuestionBank.from_dict(questions_data, parties_data)
    logger.info(
        "Question bank %s loaded: %d questions, %d parties (baseline=%s)",
        bank.version,
        len(bank),
        len(bank.parties),
        bank.baseline,
    )
    return bank
