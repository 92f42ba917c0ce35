"""Psychometric scale endpoints."""

from fastapi import APIRouter

from counseling.schemas.scale import ScaleAnswers, ScaleDefinition, ScaleScore
from counseling.services.scales import SCALES, get_scale, score_answers

router = APIRouter()


@router.get("", response_model=list[ScaleDefinition])
def list_scales():
    """Every available questionnaire."""
    return SCALES


@router.get("/{scale_id}", response_model=ScaleDefinition)
def get_scale_definition(scale_id: str):
    return get_scale(scale_id)


@router.post("/{scale_id}/score", response_model=ScaleScore)
def preview_score(scale_id: str, request: ScaleAnswers):
    """Score answers without saving them."""
    return score_answers(scale_id, request.answers)
