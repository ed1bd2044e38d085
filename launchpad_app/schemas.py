import math
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class FeeDistribution(BaseModel):
    lp: float = 0.6
    staking: float = 0.3
    protocol: float = 0.1


class InvestmentParams(BaseModel):
    fee_distribution: FeeDistribution = Field(default_factory=FeeDistribution)
    base_staking_apy: float = 0.25
    early_lp_bonus: float = 0.5
    return_timeframe: float = 20


class BondingParams(BaseModel):
    # standard    — linear surge, flat plateau, 5%/period decay
    # exponential — 1.5^t surge, 1.2^t plateau, 10%/period decay
    curve_type: str = "standard"
    lp_token_ratio: float = 0.2
    initial_mc_target: float = 1_000_000
    bonding_mc_target: float = 69_000_000
    pool_thickness: float = 0.2

    @field_validator("curve_type")
    @classmethod
    def valid_curve_type(cls, v):
        vv = str(v).lower().strip()
        if vv not in {"standard", "exponential"}:
            raise ValueError("curve_type must be one of: standard, exponential")
        return vv


class RewardParams(BaseModel):
    sol_token_ratio: float = 0.3
    compound_period: float = 1
    lock_duration_multiplier: float = 1
    show_combined_rewards: bool = True
    # linear      — rewards = deposit * APY * time_held / 20
    # compounding — rewards = deposit * (1 + APY/n)^(n * time_held) - deposit
    accrual: str = "linear"

    @field_validator("accrual")
    @classmethod
    def valid_accrual(cls, v):
        vv = str(v).lower().strip()
        if vv not in {"linear", "compounding"}:
            raise ValueError("accrual must be one of: linear, compounding")
        return vv


class ScenarioParameters(BaseModel):
    initial_deposit: float = 1000.0
    entry_time: float = 0.0
    time_horizon: int = 10
    is_top_staker: bool = True

    # integer — one point per period; half — one point per half period
    time_step: str = "integer"

    investment: InvestmentParams = Field(default_factory=InvestmentParams)
    bonding: BondingParams = Field(default_factory=BondingParams)
    rewards: RewardParams = Field(default_factory=RewardParams)

    @field_validator("time_step")
    @classmethod
    def valid_time_step(cls, v):
        vv = str(v).lower().strip()
        if vv not in {"integer", "half"}:
            raise ValueError("time_step must be one of: integer, half")
        return vv


# Advisory ranges for the front end's controls. The engine accepts anything
# outside them; out_of_range_fields() only reports.
# (low, high), None = unbounded, both ends inclusive unless listed in _EXCLUSIVE_LOW
PARAMETER_RANGES: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    "initial_deposit": (0.0, None),
    "entry_time": (0.0, None),
    "time_horizon": (1, 20),
    "investment.fee_distribution.lp": (0.0, 1.0),
    "investment.fee_distribution.staking": (0.0, 1.0),
    "investment.fee_distribution.protocol": (0.0, 1.0),
    "investment.base_staking_apy": (0.0, 1.0),
    "investment.early_lp_bonus": (0.0, 2.0),
    "investment.return_timeframe": (1.0, 365.0),
    "bonding.lp_token_ratio": (0.0, 1.0),
    "bonding.initial_mc_target": (0.0, None),
    "bonding.bonding_mc_target": (0.0, None),
    "bonding.pool_thickness": (0.0, 1.0),
    "rewards.sol_token_ratio": (0.0, 1.0),
    "rewards.compound_period": (1.0, 365.0),
    "rewards.lock_duration_multiplier": (1.0, 3.0),
}
_EXCLUSIVE_LOW = {"initial_deposit", "bonding.initial_mc_target", "bonding.bonding_mc_target"}

# Fee splits further than this from 1.0 are reported
_FEE_SPLIT_TOLERANCE = 0.01


def _lookup(params: BaseModel, dotted: str):
    value = params
    for part in dotted.split("."):
        value = getattr(value, part)
    return value


def out_of_range_fields(params: ScenarioParameters) -> List[str]:
    """Describe every parameter outside its advisory range."""
    warnings = []
    for name, (low, high) in PARAMETER_RANGES.items():
        v = float(_lookup(params, name))
        if not math.isfinite(v):
            warnings.append(f"{name}={v} is not a finite number")
            continue
        if low is not None:
            if name in _EXCLUSIVE_LOW and v <= low:
                warnings.append(f"{name}={v} should be > {low:g}")
                continue
            if v < low:
                warnings.append(f"{name}={v} should be >= {low:g}")
                continue
        if high is not None and v > high:
            warnings.append(f"{name}={v} should be <= {high:g}")

    if params.entry_time > params.time_horizon:
        warnings.append(
            f"entry_time={params.entry_time} is after time_horizon={params.time_horizon}"
        )

    split = params.investment.fee_distribution
    split_total = split.lp + split.staking + split.protocol
    if math.isfinite(split_total) and abs(split_total - 1.0) > _FEE_SPLIT_TOLERANCE:
        warnings.append(f"fee_distribution sums to {split_total:.2f}, expected 1.00")
    return warnings
