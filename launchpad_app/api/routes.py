from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request
from pydantic import ValidationError

from launchpad_app.config import settings
from launchpad_app.schemas import ScenarioParameters, out_of_range_fields
from launchpad_app.services.simulation import describe_models, flatten_series, simulate, summarize
from launchpad_app.utils.json_safety import sanitize_floats


router = APIRouter()


def _check_horizon(params: ScenarioParameters):
    if params.time_horizon > settings.MAX_TIME_HORIZON:
        raise HTTPException(
            status_code=422,
            detail=f"time_horizon must be <= {settings.MAX_TIME_HORIZON}. Got: {params.time_horizon}",
        )


def _scenario_payload(request: Request) -> Dict[str, Any]:
    session = request.app.state.session
    params = session.parameters
    return {
        "version": session.store.version,
        "parameters": params.model_dump(),
        "warnings": out_of_range_fields(params),
    }


@router.post("/simulate")
async def api_simulate(data: ScenarioParameters):
    _check_horizon(data)
    series = simulate(data)
    return sanitize_floats({
        "series": series,
        "chart_rows": flatten_series(series),
        "summary": summarize(series, data.initial_deposit),
        "warnings": out_of_range_fields(data),
    })


@router.get("/models")
async def api_models():
    return describe_models()


@router.get("/scenario")
async def api_get_scenario(request: Request):
    return sanitize_floats(_scenario_payload(request))


@router.patch("/scenario")
async def api_update_scenario(changes: Dict[str, Any], request: Request):
    session = request.app.state.session
    try:
        session.update(changes)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False))
    return sanitize_floats(_scenario_payload(request))


@router.get("/scenario/series")
async def api_scenario_series(request: Request):
    session = request.app.state.session
    params = session.parameters
    _check_horizon(params)
    series = session.series()
    return sanitize_floats({
        "version": session.store.version,
        "series": series,
        "summary": summarize(series, params.initial_deposit),
        "warnings": out_of_range_fields(params),
    })


@router.get("/health")
async def health():
    return {"status": "ok"}
