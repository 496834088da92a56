# origaspect/services/api/routers/aspect.py
from __future__ import annotations
from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException

from origaspect.common.settings import get_settings
from origaspect.domain.dataclasses.reconcile import ReconcileConfig
from origaspect.domain.policies.ratio_converter import parse_ratio, prepare_candidates
from origaspect.domain.ports.cropdetect import AspectRatioDetectorPort
from origaspect.services.api.deps import get_detector, get_engine, get_reconcile_config
from origaspect.services.mappers.reconcile import (
    apply_options,
    to_domain_video_item,
    to_reconcile_response,
)
from origaspect.services.reconcile.engine import ReconcileCancelled, ReconciliationEngine
from origaspect.services.schemas.aspect import (
    CandidateRead,
    DetectRequest,
    DetectResponse,
    RatioParseRequest,
    RatioParseResponse,
    ReconcileRequest,
    ReconcileResponse,
)

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/aspect", tags=["aspect"])


@router.post("/parse", response_model=RatioParseResponse)
def parse_aspect_ratio(req: RatioParseRequest) -> RatioParseResponse:
    value = parse_ratio(req.text)
    return RatioParseResponse(
        text=req.text,
        valid=value is not None,
        value=float(value) if value is not None else None,
    )


@router.get("/candidates", response_model=list[CandidateRead])
def list_candidates(config: ReconcileConfig = Depends(get_reconcile_config)) -> list[CandidateRead]:
    return [CandidateRead(text=c.text, value=float(c.value)) for c in prepare_candidates(config.accepted_aspect_ratios)]


@router.post("/detect", response_model=DetectResponse)
def detect_aspect_ratio(
    req: DetectRequest,
    detector: AspectRatioDetectorPort = Depends(get_detector),
) -> DetectResponse:
    ratio = detector.detect(req.path, req.duration_sec, checks_per_video=req.checks_per_video)
    return DetectResponse(
        path=req.path,
        detected=ratio is not None,
        ratio=float(ratio) if ratio is not None else None,
    )


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile_item(
    req: ReconcileRequest,
    engine: ReconciliationEngine = Depends(get_engine),
    base_config: ReconcileConfig = Depends(get_reconcile_config),
) -> ReconcileResponse:
    try:
        item = to_domain_video_item(req.item)
    except ValueError as e:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(e)) from e

    config = apply_options(base_config, req.options)
    try:
        decision = engine.reconcile(item, config)
    except ReconcileCancelled as e:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail="reconciliation cancelled") from e
    return to_reconcile_response(decision)
