from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from qrhunt import __version__
from qrhunt.api.deps import get_hunt, get_settings
from qrhunt.api.models import (
    CreateCodeRequest,
    LegacyAddPointsRequest,
    LegacyCreateCodeRequest,
    LegacyScanResponse,
    ScanRequest,
    ScanResponse,
)
from qrhunt.config import Settings
from qrhunt.game import Hunt, ScanResult, create_code, scan_code
from qrhunt.models import HighScoreEntry

router = APIRouter()


def _scan(*, hunt: Hunt, settings: Settings, token: str, group_name: str) -> ScanResult:
    try:
        return scan_code(hunt=hunt, token=token, group_name=group_name, signing_key=settings.signing_key)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


def _create(*, hunt: Hunt, settings: Settings, description: str, points: int, provided_key: str) -> str:
    try:
        _, token = create_code(
            hunt=hunt,
            description=description,
            points=points,
            provided_key=provided_key,
            signing_key=settings.signing_key,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return token


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/info")
async def info(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    return {"name": "qrhunt", "version": __version__, "mode": settings.mode.value}


@router.get("/highscores", response_model=list[HighScoreEntry])
def highscores_route(hunt: Hunt = Depends(get_hunt)) -> list[HighScoreEntry]:
    return hunt.scores.highscores()


@router.post("/scan", response_model=ScanResponse)
def scan_route(
    payload: ScanRequest,
    hunt: Hunt = Depends(get_hunt),
    settings: Settings = Depends(get_settings),
) -> ScanResponse:
    result = _scan(hunt=hunt, settings=settings, token=payload.token, group_name=payload.group_name)
    return ScanResponse(code_found=result.code_found, scanned_first=result.scanned_first)


@router.post("/codes", response_model=str)
def create_code_route(
    payload: CreateCodeRequest,
    hunt: Hunt = Depends(get_hunt),
    settings: Settings = Depends(get_settings),
) -> str:
    return _create(
        hunt=hunt,
        settings=settings,
        description=payload.description,
        points=payload.points,
        provided_key=payload.signing_key,
    )


@router.get("/api/highscores", response_model=list[HighScoreEntry])
def legacy_highscores_route(hunt: Hunt = Depends(get_hunt)) -> list[HighScoreEntry]:
    return hunt.scores.highscores()


@router.post("/api/add-points", response_model=LegacyScanResponse)
def legacy_add_points_route(
    payload: LegacyAddPointsRequest,
    hunt: Hunt = Depends(get_hunt),
    settings: Settings = Depends(get_settings),
) -> LegacyScanResponse:
    result = _scan(hunt=hunt, settings=settings, token=payload.jwt_scanned, group_name=payload.group_name)
    return LegacyScanResponse(qr_code_found=result.code_found, scanned_first=result.scanned_first)


@router.post("/api/create-qr-code", response_model=str)
def legacy_create_qr_code_route(
    payload: LegacyCreateCodeRequest,
    hunt: Hunt = Depends(get_hunt),
    settings: Settings = Depends(get_settings),
) -> str:
    return _create(
        hunt=hunt,
        settings=settings,
        description=payload.description,
        points=payload.points,
        provided_key=payload.key,
    )
