from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Annotated, Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .alignment import PartyAlignment
from .axis import Point, quadrant_description, quadrant_name
from .bank import ANSWER_LABELS, CATEGORY_LABELS, Party, Question, UnknownPartyError
from .config import settings
from .differential import split_pivotal
from .service import CompassService

logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

AnswerValue = Annotated[int, Field(ge=-2, le=2)]


class AnswersPayload(BaseModel):
    answers: Dict[int, AnswerValue]
    tie_threshold: Optional[float] = Field(default=None, ge=0)


class ComparePayload(BaseModel):
    answers: Dict[int, AnswerValue] = Field(default_factory=dict)
    party_a: str
    party_b: str
    limit: Optional[int] = Field(default=None, ge=1)


def _point(p: Point) -> Dict[str, float]:
    return {"x": p.x, "y": p.y}


def _party(party: Party) -> Dict[str, Any]:
    return party.model_dump()


def _question(q: Question, direction: int) -> Dict[str, Any]:
    item = q.model_dump()
    item["direction"] = direction
    return item


def _alignment(a: PartyAlignment) -> Dict[str, Any]:
    return {
        "party": _party(a.party),
        "position": _point(a.position),
        "normalized_position": _point(a.normalized_position),
        "distance": a.distance,
        "alignment": a.alignment,
        "economic_diff": a.economic_diff,
        "social_diff": a.social_diff,
    }


def create_app(compass: Optional[CompassService] = None) -> FastAPI:
    config = compass.config if compass is not None else settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = compass or CompassService.from_settings(config)
        # já deixa as posições dos partidos calculadas antes da primeira requisição
        service.get_all_positions()
        app.state.compass = service
        logger.info("%s %s ready", config.APP_NAME, config.APP_VERSION)
        yield

    app = FastAPI(title=config.APP_NAME, version=config.APP_VERSION, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_compass(request: Request) -> CompassService:
        return request.app.state.compass

    @app.get("/api/health")
    def health(service: CompassService = Depends(get_compass)) -> Any:
        return {"status": "ok", "questions_version": service.bank.version}

    @app.get("/api/questions")
    def get_questions(service: CompassService = Depends(get_compass)) -> Any:
        """
        Retorna as perguntas em dois formatos:

        - questions: lista achatada, na ordem do questionário
        - by_category: mesmas perguntas agrupadas por categoria
        """
        flat_list = [_question(q, service.axis_direction(q.id)) for q in service.bank]
        by_category = {
            cat: [q.id for q in qs] for cat, qs in service.bank.by_category().items()
        }
        return {
            "version": service.bank.version,
            "questions": flat_list,
            "by_category": by_category,
            "category_labels": CATEGORY_LABELS,
            "answer_labels": {str(k): v for k, v in ANSWER_LABELS.items()},
        }

    @app.get("/api/parties")
    def get_parties(service: CompassService = Depends(get_compass)) -> Any:
        mean = service.mean_position()
        return {
            "baseline": service.bank.baseline,
            "mean": _point(mean),
            "parties": [
                {
                    "party": _party(party),
                    "position": _point(pos),
                    "normalized_position": _point(service.normalize(pos.x, pos.y)),
                }
                for party, pos in service.get_all_positions()
            ],
        }

    @app.post("/api/submit")
    def submit_answers(payload: AnswersPayload, service: CompassService = Depends(get_compass)) -> Any:
        results = service.calculate_scores(payload.answers)
        x, y = results.economic_score, results.social_score

        ranking = service.rank_alignment(x, y)
        top = service.top_aligned(x, y, payload.tie_threshold)

        # nenhuma resposta com sinal: resultado fica no centro, mas avisamos o front
        inconclusive = not any(payload.answers.values())

        return {
            "scores": results.model_dump(),
            "quadrant": {
                "name": quadrant_name(x, y),
                "description": quadrant_description(x, y),
            },
            "ranking": [_alignment(a) for a in ranking],
            "top": {
                "best": _alignment(top.best),
                "close_ones": [_alignment(a) for a in top.close_ones],
                "is_tie": top.is_tie,
                "tie_threshold": top.tie_threshold,
            },
            "inconclusive": inconclusive,
        }

    @app.post("/api/compare")
    def compare_parties(payload: ComparePayload, service: CompassService = Depends(get_compass)) -> Any:
        a, b = payload.party_a, payload.party_b
        try:
            differences = service.key_differences(a, b, payload.answers, limit=payload.limit)
            shared = service.common_ground(a, b, limit=payload.limit)
            pivotal = service.pivotal_impact(payload.answers, a, b)
            counts = service.review_counts(payload.answers, a, b)
        except UnknownPartyError as exc:
            raise HTTPException(status_code=404, detail=f"Partido não encontrado: {exc.args[0]}")

        sided = {pid: [p.question_id for p in group] for pid, group in split_pivotal(pivotal, a, b).items()}

        return {
            "party_a": a,
            "party_b": b,
            "key_differences": [d.model_dump() for d in differences],
            "common_ground": [c.model_dump() for c in shared],
            "pivotal": [p.model_dump() for p in pivotal],
            "sided_with": sided,
            "review_counts": counts,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "partycompass.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
