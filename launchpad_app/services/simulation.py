import logging
from typing import Dict, List

import numpy as np

from launchpad_app.schemas import ScenarioParameters
from launchpad_app.services.protocols import (
    PROTOCOL_LABELS,
    PROTOCOL_MODELS,
    PROTOCOL_VARIANTS,
)


logger = logging.getLogger(__name__)

# Points per period for each time_step selector
TIME_STEPS = {
    "integer": 1,
    "half": 2,
}


def time_axis(time_horizon: int, time_step: str = "integer") -> np.ndarray:
    """Time points 0..time_horizon inclusive. Negative horizons collapse to t=0."""
    per_period = TIME_STEPS[time_step]
    n_points = max(int(time_horizon), 0) * per_period + 1
    return np.arange(n_points, dtype=float) / per_period


def _evaluate(params: ScenarioParameters, t: np.ndarray) -> Dict[str, Dict]:
    with np.errstate(all="ignore"):
        return {name: model(params, t) for name, model in PROTOCOL_MODELS.items()}


def _point(results: Dict[str, Dict], t: float, i: int) -> Dict:
    return {
        "time": t,
        "label": f"T+{t:g}",
        "protocols": {
            name: {
                "total": float(r["total"][i]),
                "components": {k: float(v[i]) for k, v in r["components"].items()},
                "metrics": {k: float(v[i]) for k, v in r["metrics"].items()},
            }
            for name, r in results.items()
        },
    }


def simulate(params: ScenarioParameters) -> List[Dict]:
    """Evaluate every protocol model over the scenario's time axis."""
    t = time_axis(params.time_horizon, params.time_step)
    results = _evaluate(params, t)
    logger.debug(
        "simulated %d point(s) for %d protocol(s), horizon=%s step=%s",
        len(t), len(results), params.time_horizon, params.time_step,
    )
    return [_point(results, float(ti), i) for i, ti in enumerate(t)]


def evaluate_point(params: ScenarioParameters, t: float) -> Dict:
    """Evaluate every protocol model at a single time point."""
    results = _evaluate(params, np.array([float(t)]))
    return _point(results, float(t), 0)


def summarize(series: List[Dict], initial_deposit: float) -> Dict:
    """Final value, return and peak per protocol, read off a simulated series."""
    if not series:
        return {"protocols": {}, "best_protocol": None, "horizon": 0.0}

    last = series[-1]
    protocols = {}
    for name, final in last["protocols"].items():
        totals = np.array([p["protocols"][name]["total"] for p in series], dtype=float)
        peak_idx = int(np.argmax(totals))
        final_total = final["total"]
        protocols[name] = {
            "label": PROTOCOL_LABELS.get(name, name),
            "final_total": final_total,
            "return_pct": (final_total / initial_deposit - 1.0) * 100 if initial_deposit != 0 else 0.0,
            "peak_total": float(totals[peak_idx]),
            "peak_time": series[peak_idx]["time"],
        }

    best = max(protocols, key=lambda name: protocols[name]["final_total"])
    return {
        "protocols": protocols,
        "best_protocol": best,
        "horizon": last["time"],
    }


def flatten_series(series: List[Dict]) -> List[Dict]:
    """One flat row per point, keyed <protocol>_<field>, for chart libraries."""
    rows = []
    for point in series:
        row = {"time": point["time"]}
        for name, r in point["protocols"].items():
            row[f"{name}_total"] = r["total"]
            for k, v in r["components"].items():
                row[f"{name}_{k}"] = v
            for k, v in r["metrics"].items():
                row[f"{name}_{k}"] = v
        rows.append(row)
    return rows


def describe_models() -> List[Dict]:
    """Names, fields and variant selectors of every protocol model."""
    sample = evaluate_point(ScenarioParameters(), 0.0)["protocols"]
    return [
        {
            "name": name,
            "label": PROTOCOL_LABELS.get(name, name),
            "components": list(sample[name]["components"]),
            "metrics": list(sample[name]["metrics"]),
            "variants": {k: list(v) for k, v in PROTOCOL_VARIANTS.get(name, {}).items()},
        }
        for name in PROTOCOL_MODELS
    ]
