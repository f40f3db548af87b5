# partycompass/differential.py

from __future__ import annotations

from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .bank import Question, QuestionBank

ReviewMode = Literal["all", "aligned", "differed", "pivotal"]


class PolicyDifference(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: int
    question_text: str
    category: str
    axis: str
    party1_answer: int
    party2_answer: int
    user_answer: Optional[int] = None
    difference_score: int
    # id de um dos partidos, "both" ou "neither"
    user_aligns_with: str


class CommonGround(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: int
    question_text: str
    category: str
    shared_stance: str
    agreement: int


class PivotalQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: int
    question_text: str
    category: str
    axis: str
    user_answer: int
    impact_a: int
    impact_b: int
    net: int
    favors: Optional[str] = None


def _pair(question: Question, party_a: str, party_b: str) -> Tuple[Optional[int], Optional[int]]:
    return question.stance(party_a), question.stance(party_b)


def _check_parties(bank: QuestionBank, *party_ids: str) -> None:
    for pid in party_ids:
        bank.party(pid)


def _answer_for(answers: Mapping[int, int], question_id: int) -> Optional[int]:
    value = answers.get(question_id)
    if value is None:
        return None
    return int(value)


# ---------------------------------------------------------
# Diferenças-chave: onde os dois partidos mais divergem
# ---------------------------------------------------------
def key_differences(
    bank: QuestionBank,
    party_a: str,
    party_b: str,
    answers: Optional[Mapping[int, int]] = None,
    limit: int = 5,
    threshold: int = 2,
) -> List[PolicyDifference]:
    _check_parties(bank, party_a, party_b)
    answers = answers or {}

    differences: List[PolicyDifference] = []
    for question in bank:
        sa, sb = _pair(question, party_a, party_b)
        if sa is None or sb is None:
            continue

        diff = abs(sa - sb)
        if diff < threshold:
            continue

        user_answer = _answer_for(answers, question.id)
        aligns_with = "neither"
        if user_answer:
            dist_a = abs(user_answer - sa)
            dist_b = abs(user_answer - sb)
            if dist_a <= 1 and dist_b <= 1:
                aligns_with = "both"
            elif dist_a <= dist_b - 1:
                aligns_with = party_a
            elif dist_b <= dist_a - 1:
                aligns_with = party_b

        differences.append(
            PolicyDifference(
                question_id=question.id,
                question_text=question.text,
                category=question.category,
                axis=question.axis,
                party1_answer=sa,
                party2_answer=sb,
                user_answer=user_answer,
                difference_score=diff,
                user_aligns_with=aligns_with,
            )
        )

    differences.sort(key=lambda d: d.difference_score, reverse=True)
    return differences[:limit]


# ---------------------------------------------------------
# Terreno comum: onde os dois partidos estão do mesmo lado
# ---------------------------------------------------------
def shared_stance_label(a: int, b: int) -> str:
    avg = (a + b) / 2
    if avg >= 1.5:
        return "Strongly support"
    if avg > 0:
        return "Support"
    if avg <= -1.5:
        return "Strongly oppose"
    return "Oppose"


def common_ground(
    bank: QuestionBank,
    party_a: str,
    party_b: str,
    limit: int = 3,
) -> List[CommonGround]:
    _check_parties(bank, party_a, party_b)

    found: List[CommonGround] = []
    for question in bank:
        sa, sb = _pair(question, party_a, party_b)
        if not sa or not sb:
            continue
        if (sa > 0) != (sb > 0):
            continue

        found.append(
            CommonGround(
                question_id=question.id,
                question_text=question.text,
                category=question.category,
                shared_stance=shared_stance_label(sa, sb),
                agreement=min(abs(sa), abs(sb)),
            )
        )

    found.sort(key=lambda c: c.agreement, reverse=True)
    return found[:limit]


# ---------------------------------------------------------
# Perguntas decisivas: quais respostas puxaram para A ou para B
# ---------------------------------------------------------
def pivotal_impact(
    bank: QuestionBank,
    answers: Mapping[int, int],
    party_a: str,
    party_b: str,
) -> List[PivotalQuestion]:
    """
    Para cada pergunta respondida (não neutra), compara o quanto a
    resposta somou para cada partido. net > 0 favorece party_a.
    Ordenado do mais decisivo para o menos.
    """
    _check_parties(bank, party_a, party_b)

    impacts: List[PivotalQuestion] = []
    for qid, raw in answers.items():
        question = bank.get(qid)
        if question is None or not raw:
            continue
        sa, sb = _pair(question, party_a, party_b)
        if sa is None or sb is None:
            continue

        value = int(raw)
        impact_a = value * sa * question.weight
        impact_b = value * sb * question.weight
        net = impact_a - impact_b
        favors = party_a if net > 0 else party_b if net < 0 else None

        impacts.append(
            PivotalQuestion(
                question_id=question.id,
                question_text=question.text,
                category=question.category,
                axis=question.axis,
                user_answer=value,
                impact_a=impact_a,
                impact_b=impact_b,
                net=net,
                favors=favors,
            )
        )

    impacts.sort(key=lambda p: abs(p.net), reverse=True)
    return impacts


def split_pivotal(
    impacts: List[PivotalQuestion],
    party_a: str,
    party_b: str,
) -> Dict[str, List[PivotalQuestion]]:
    return {
        party_a: [p for p in impacts if p.favors == party_a],
        party_b: [p for p in impacts if p.favors == party_b],
    }


# ---------------------------------------------------------
# Revisão pergunta a pergunta
# ---------------------------------------------------------
def closest_party_for_answer(answer: int, question: Question) -> List[Tuple[str, int]]:
    """
    Partidos ordenados pela distância entre a resposta e a posição de cada um.
    Partidos sem posição ficam de fora.
    """
    ranked = [
        (pid, abs(answer - stance))
        for pid, stance in question.party_scores.items()
        if stance is not None
    ]
    ranked.sort(key=lambda item: item[1])
    return ranked


def _is_aligned(answer: int, question: Question, closest_id: str) -> bool:
    ranked = closest_party_for_answer(answer, question)
    return bool(ranked) and ranked[0][0] == closest_id


def _is_pivotal(answer: int, question: Question, closest_id: str, second_id: str) -> bool:
    sc = question.stance(closest_id)
    ss = question.stance(second_id)
    if sc is None or ss is None:
        return False
    if abs(sc - ss) < 1:
        return False
    return abs(abs(answer - sc) - abs(answer - ss)) >= 0.5


def review_questions(
    bank: QuestionBank,
    answers: Mapping[int, int],
    closest_id: str,
    second_id: Optional[str] = None,
    category: Optional[str] = None,
    mode: ReviewMode = "all",
) -> List[Question]:
    """
    Filtra as perguntas para a revisão detalhada.

    aligned  → a resposta ficou mais perto do partido mais próximo no geral
    differed → a resposta ficou mais perto de outro partido
    pivotal  → os dois primeiros divergem e a resposta pendeu para um deles
    """
    _check_parties(bank, closest_id, *([second_id] if second_id else []))

    selected: List[Question] = []
    for question in bank:
        if category and question.category != category:
            continue

        answer = _answer_for(answers, question.id)
        if answer is None:
            if mode == "all":
                selected.append(question)
            continue

        if mode == "aligned" and not _is_aligned(answer, question, closest_id):
            continue
        if mode == "differed" and _is_aligned(answer, question, closest_id):
            continue
        if mode == "pivotal" and second_id and not _is_pivotal(answer, question, closest_id, second_id):
            continue

        selected.append(question)
    return selected


def review_counts(
    bank: QuestionBank,
    answers: Mapping[int, int],
    closest_id: str,
    second_id: Optional[str] = None,
) -> Dict[str, Any]:
    _check_parties(bank, closest_id, *([second_id] if second_id else []))

    aligned = differed = pivotal = 0
    for question in bank:
        answer = _answer_for(answers, question.id)
        if answer is None:
            continue
        if _is_aligned(answer, question, closest_id):
            aligned += 1
        else:
            differed += 1
        if second_id and _is_pivotal(answer, question, closest_id, second_id):
            pivotal += 1

    return {"aligned": aligned, "differed": differed, "pivotal": pivotal}
