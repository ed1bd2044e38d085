"""
Closed-form return models for each launch mechanism.

Every model takes the scenario and a numpy array of time points and returns
{"total", "components", "metrics"} with one value per time point. Points are
independent of each other; the array is only there so a whole horizon is
evaluated in one pass. Components always add up to total; metrics are
informational and never summed.
"""

import logging
from typing import Callable, Dict, Sequence, Tuple

import numpy as np

from launchpad_app.schemas import ScenarioParameters


logger = logging.getLogger(__name__)

# ── Gobbler (simple) ──
_GOBBLER_MAX_EARLY_MULTIPLIER = 2.0
_GOBBLER_EARLY_DECAY = 5.0          # entry periods per 1.0 of multiplier lost
_GOBBLER_FEE_RATE = 0.015

# ── Gobbler (virtual liquidity) ──
_VIRTUAL_BONUS_WINDOW = 5.0
_VIRTUAL_BONUS_PER_PERIOD = 0.1
_VIRTUAL_FEE_RATE = 0.01
_VIRTUAL_FEE_GROWTH = 0.05

# ── Snapper ──
_SNAPPER_FEE_RATE = 0.01
_SNAPPER_FEE_CURVE = 0.3

# ── M3M3 ──
_M3M3_BASE_APY = 0.35
_M3M3_MULTIPLIER_STEP = 0.15
_M3M3_MULTIPLIER_CAP = 3.0

# Linear reward accrual spreads one APY over this many periods
_REWARD_PERIODS = 20.0

# ── Ripper ──
_RIPPER_LP_SHARE = 0.6
_RIPPER_EARLY_WINDOW = 4.0
_RIPPER_EARLY_BONUS = 0.5
_RIPPER_FEE_RATE = 0.01
_RIPPER_FEE_GROWTH = 0.05
_RIPPER_STAKING_APY = 0.30
_RIPPER_MULTIPLIER_STEP = 0.15
_RIPPER_MULTIPLIER_CAP = 2.5


# A regime table is an ordered sequence of (upper_bound, formula) pairs.
# The first row whose bound lies above t supplies the value at t.
Regime = Tuple[float, Callable[..., np.ndarray]]

BONDING_CURVES: Dict[str, Sequence[Regime]] = {
    "standard": (
        (5.0, lambda t, d: d * (1 + t * 0.2)),                                   # surge
        (10.0, lambda t, d: d * 2.0),                                            # plateau
        (np.inf, lambda t, d: np.maximum(d * 2 * np.power(0.95, t - 10), d * 0.1)),  # decay
    ),
    "exponential": (
        (5.0, lambda t, d: d * np.power(1.5, t)),
        (10.0, lambda t, d: d * np.power(1.2, t)),
        (np.inf, lambda t, d: np.maximum(d * np.power(0.9, t - 10), d * 0.1)),
    ),
}

MARKET_CAP_MULTIPLIER: Sequence[Regime] = (
    (5.0, lambda t: np.power(1.3, t)),
    (10.0, lambda t: 1.3 ** 5 * np.power(1.15, t - 5)),
    (np.inf, lambda t: 1.3 ** 5 * 1.15 ** 5 * np.power(1.05, t - 10)),
)


def _market_cap_trajectory(horizon: float) -> Sequence[Regime]:
    """Growth, stabilization and maturity over thirds of the horizon. Never below the initial target after growth."""
    return (
        (horizon / 3, lambda t, lo, hi: lo * np.power(1.5, t)),
        # 1 + ln(t/H) is negative for t < H/e
        (horizon * 2 / 3, lambda t, lo, hi: np.maximum(hi * (1 + np.log(t / horizon)), lo)),
        (np.inf, lambda t, lo, hi: np.maximum(hi * np.power(0.95, t - horizon * 2 / 3), lo)),
    )


def piecewise(t: np.ndarray, regimes: Sequence[Regime], *args, inclusive: bool = False) -> np.ndarray:
    """Evaluate a regime table at every point of t."""
    t = np.atleast_1d(np.asarray(t, dtype=float))
    conditions = [(t <= upper) if inclusive else (t < upper) for upper, _ in regimes]
    # every formula is evaluated on the whole axis, including points it never serves
    with np.errstate(all="ignore"):
        choices = [np.broadcast_to(np.asarray(formula(t, *args), dtype=float), t.shape) for _, formula in regimes]
    return np.select(conditions, choices, default=np.nan)


def time_held(t: np.ndarray, entry_time: float) -> np.ndarray:
    return np.maximum(0.0, t - entry_time)


def _sanitize(model: str, field: str, values, shape) -> np.ndarray:
    arr = np.array(np.broadcast_to(np.asarray(values, dtype=float), shape))
    bad = ~np.isfinite(arr)
    if bad.any():
        logger.warning("%s.%s: replaced %d non-finite value(s) with 0", model, field, int(bad.sum()))
        arr[bad] = 0.0
    return arr


def _model_result(model: str, shape, components: Dict, metrics: Dict) -> Dict:
    clean = {name: _sanitize(model, name, values, shape) for name, values in components.items()}

    total = np.zeros(shape, dtype=float)
    for values in clean.values():
        total = total + values

    # Finite components can still overflow once summed
    overflow = ~np.isfinite(total)
    if overflow.any():
        logger.warning("%s.total: overflow at %d point(s), components zeroed", model, int(overflow.sum()))
        for values in clean.values():
            values[overflow] = 0.0
        total[overflow] = 0.0

    return {
        "total": total,
        "components": clean,
        "metrics": {name: _sanitize(model, name, values, shape) for name, values in metrics.items()},
    }


def gobbler_returns(params: ScenarioParameters, t: np.ndarray) -> Dict:
    """Early-incentive liquidity: early entrants get up to 2x LP tokens, fees accrue linearly."""
    deposit = np.float64(params.initial_deposit)
    entry = np.float64(params.entry_time)
    held = time_held(t, entry)

    early_multiplier = np.maximum(_GOBBLER_MAX_EARLY_MULTIPLIER - entry / _GOBBLER_EARLY_DECAY, 1.0)
    lp_tokens = deposit * early_multiplier
    fees = lp_tokens * held * _GOBBLER_FEE_RATE

    return _model_result(
        "gobbler",
        t.shape,
        {"lp_tokens": lp_tokens, "fees": fees},
        {"early_multiplier": early_multiplier},
    )


def gobbler_virtual_returns(params: ScenarioParameters, t: np.ndarray) -> Dict:
    """Gobbler with a virtual liquidity booster feeding accelerating fee accrual."""
    deposit = np.float64(params.initial_deposit)
    entry = np.float64(params.entry_time)
    held = time_held(t, entry)

    base_liquidity = np.abs(deposit)
    early_bonus = np.maximum(0.0, _VIRTUAL_BONUS_WINDOW - entry) * _VIRTUAL_BONUS_PER_PERIOD
    virtual_liquidity = base_liquidity * (1 + early_bonus)
    fees = virtual_liquidity * held * _VIRTUAL_FEE_RATE * (1 + held * _VIRTUAL_FEE_GROWTH)

    return _model_result(
        "gobbler_virtual",
        t.shape,
        {"liquidity": base_liquidity, "fees": fees},
        {"virtual_liquidity": virtual_liquidity},
    )


def snapper_returns(params: ScenarioParameters, t: np.ndarray) -> Dict:
    """Flat distribution: no entry bonus, fee rate grows with sqrt of time held."""
    deposit = np.float64(params.initial_deposit)
    held = time_held(t, np.float64(params.entry_time))

    fee_multiplier = np.sqrt(1 + held * _SNAPPER_FEE_CURVE)
    fees = deposit * held * _SNAPPER_FEE_RATE * fee_multiplier

    return _model_result(
        "snapper",
        t.shape,
        {"lp_tokens": deposit, "fees": fees},
        {"fee_multiplier": fee_multiplier},
    )


def m3m3_returns(params: ScenarioParameters, t: np.ndarray) -> Dict:
    """Tiered staking. Only top stakers earn; rewards split between SOL and the token."""
    deposit = np.float64(params.initial_deposit)
    rewards_cfg = params.rewards

    if not params.is_top_staker:
        return _model_result(
            "m3m3",
            t.shape,
            {"principal": deposit, "sol_rewards": 0.0, "token_rewards": 0.0},
            {"apy": 0.0, "staking_multiplier": 0.0},
        )

    held = time_held(t, np.float64(params.entry_time))
    staking_multiplier = np.minimum(1 + held * _M3M3_MULTIPLIER_STEP, _M3M3_MULTIPLIER_CAP)
    effective_apy = _M3M3_BASE_APY * staking_multiplier

    if rewards_cfg.accrual == "compounding":
        n = np.float64(rewards_cfg.compound_period)
        total_rewards = deposit * np.power(1 + effective_apy / n, n * held) - deposit
    else:
        total_rewards = deposit * effective_apy * (held / _REWARD_PERIODS)

    sol_ratio = np.float64(rewards_cfg.sol_token_ratio)
    return _model_result(
        "m3m3",
        t.shape,
        {
            "principal": deposit,
            "sol_rewards": total_rewards * sol_ratio,
            "token_rewards": total_rewards * (1 - sol_ratio),
        },
        {"apy": effective_apy * 100, "staking_multiplier": staking_multiplier},
    )


def pump_fun_returns(params: ScenarioParameters, t: np.ndarray) -> Dict:
    """Bonding-curve price. Driven by launch age t, not by time held."""
    deposit = np.float64(params.initial_deposit)
    bonding = params.bonding

    price = piecewise(t, BONDING_CURVES[bonding.curve_type], deposit)
    liquidity = price * np.float64(bonding.lp_token_ratio)

    horizon = float(max(params.time_horizon, 0))
    market_cap = piecewise(
        t,
        _market_cap_trajectory(horizon),
        np.float64(bonding.initial_mc_target),
        np.float64(bonding.bonding_mc_target),
        inclusive=True,
    )

    return _model_result(
        "pump_fun",
        t.shape,
        {"price": price},
        {"liquidity": liquidity, "market_cap": market_cap},
    )


def ripper_returns(params: ScenarioParameters, t: np.ndarray) -> Dict:
    """
    Hypothetical AMM + staking hybrid.

    60% of the deposit is provided as liquidity (with a bonus for entries in
    the first four periods) and earns AMM fees plus, for top stakers, staking
    rewards. The other 40% is held as the token and tracks the market cap.
    """
    deposit = np.float64(params.initial_deposit)
    entry = np.float64(params.entry_time)
    held = time_held(t, entry)

    initial_lp = deposit * _RIPPER_LP_SHARE
    early_bonus = np.float64(0.0)
    if entry <= _RIPPER_EARLY_WINDOW:
        early_bonus = initial_lp * _RIPPER_EARLY_BONUS * (_RIPPER_EARLY_WINDOW - entry) / _RIPPER_EARLY_WINDOW
    lp_tokens = initial_lp + early_bonus

    amm_fees = lp_tokens * held * _RIPPER_FEE_RATE * (1 + t * _RIPPER_FEE_GROWTH)

    if params.is_top_staker:
        multiplier = np.minimum(1 + held * _RIPPER_MULTIPLIER_STEP, _RIPPER_MULTIPLIER_CAP)
        staking_rewards = lp_tokens * _RIPPER_STAKING_APY * multiplier * (held / _REWARD_PERIODS)
    else:
        staking_rewards = 0.0

    market_cap_multiplier = piecewise(t, MARKET_CAP_MULTIPLIER)
    non_lp_value = deposit * (1 - _RIPPER_LP_SHARE) * market_cap_multiplier

    return _model_result(
        "ripper",
        t.shape,
        {
            "lp_tokens": lp_tokens,
            "amm_fees": amm_fees,
            "staking_rewards": staking_rewards,
            "non_lp_value": non_lp_value,
        },
        {"market_cap_multiplier": market_cap_multiplier, "early_bonus": early_bonus},
    )


PROTOCOL_MODELS: Dict[str, Callable[[ScenarioParameters, np.ndarray], Dict]] = {
    "gobbler": gobbler_returns,
    "gobbler_virtual": gobbler_virtual_returns,
    "snapper": snapper_returns,
    "m3m3": m3m3_returns,
    "pump_fun": pump_fun_returns,
    "ripper": ripper_returns,
}

PROTOCOL_LABELS: Dict[str, str] = {
    "gobbler": "Gobbler",
    "gobbler_virtual": "Gobbler (virtual liquidity)",
    "snapper": "Snapper",
    "m3m3": "M3M3",
    "pump_fun": "Pump.fun",
    "ripper": "Ripper (hypothetical)",
}

# Parameter selectors that switch a model between its formula variants
PROTOCOL_VARIANTS: Dict[str, Dict[str, Sequence[str]]] = {
    "m3m3": {"rewards.accrual": ("linear", "compounding")},
    "pump_fun": {"bonding.curve_type": tuple(BONDING_CURVES)},
}
