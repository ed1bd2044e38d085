"""Tests for the parameter store and the recompute-on-change session."""
import sys
import os

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from launchpad_app.schemas import ScenarioParameters, out_of_range_fields
from launchpad_app.services.parameter_store import ParameterStore
from launchpad_app.services.session import SimulationSession


# ── Parameter store ──────────────────────────────────────────────────────────

def test_store_starts_with_defaults():
    store = ParameterStore()
    assert store.get() == ScenarioParameters()
    assert store.version == 0


def test_top_level_update():
    store = ParameterStore()
    params = store.set({"initial_deposit": 500, "is_top_staker": False})
    assert params.initial_deposit == 500.0
    assert params.is_top_staker is False
    assert params.time_horizon == 10
    assert store.version == 1


def test_nested_update_merges_one_level():
    store = ParameterStore()
    store.set({"rewards": {"accrual": "compounding", "compound_period": 12}})
    params = store.set({"rewards": {"sol_token_ratio": 0.5}})
    assert params.rewards.sol_token_ratio == 0.5
    assert params.rewards.accrual == "compounding"
    assert params.rewards.compound_period == 12


def test_fee_distribution_keeps_other_splits():
    store = ParameterStore()
    store.set({"investment": {"fee_distribution": {"lp": 0.2, "staking": 0.2, "protocol": 0.6}}})
    params = store.set({"investment": {"fee_distribution": {"lp": 0.5}}})
    split = params.investment.fee_distribution
    assert (split.lp, split.staking, split.protocol) == (0.5, 0.2, 0.6)
    assert params.investment.base_staking_apy == 0.25
    assert store.version == 2


def test_unknown_fee_split_is_ignored():
    store = ParameterStore()
    params = store.set({"investment": {"fee_distribution": {"treasury": 0.5}}})
    assert params == ScenarioParameters()
    assert store.version == 0


def test_unknown_fields_are_ignored():
    store = ParameterStore()
    params = store.set({"bogus": 1, "rewards": {"not_a_field": 2}})
    assert params == ScenarioParameters()
    assert store.version == 0


def test_out_of_range_values_are_accepted():
    store = ParameterStore()
    params = store.set({"initial_deposit": -50, "entry_time": 99, "rewards": {"sol_token_ratio": 3}})
    assert params.initial_deposit == -50
    warnings = out_of_range_fields(params)
    assert any(w.startswith("initial_deposit") for w in warnings)
    assert any("entry_time=99.0 is after" in w for w in warnings)
    assert any(w.startswith("rewards.sol_token_ratio") for w in warnings)


def test_wrong_type_raises_and_keeps_state():
    store = ParameterStore()
    store.set({"initial_deposit": 750})
    with pytest.raises(ValidationError):
        store.set({"initial_deposit": "lots"})
    assert store.get().initial_deposit == 750
    assert store.version == 1


def test_unknown_selector_value_raises():
    store = ParameterStore()
    with pytest.raises(ValidationError):
        store.set({"bonding": {"curve_type": "quadratic"}})
    assert store.get().bonding.curve_type == "standard"


def test_partial_model_update():
    store = ParameterStore()
    params = store.set(ScenarioParameters(entry_time=4))
    assert params.entry_time == 4
    assert params.initial_deposit == 1000.0


def test_snapshot_is_a_copy():
    store = ParameterStore()
    snapshot = store.get()
    snapshot.rewards.sol_token_ratio = 0.9
    assert store.get().rewards.sol_token_ratio == 0.3


def test_default_parameters_have_no_warnings():
    assert out_of_range_fields(ScenarioParameters()) == []


# ── Session ──────────────────────────────────────────────────────────────────

def test_session_recomputes_only_on_change():
    session = SimulationSession()
    first = session.series()
    assert session.series() is first
    assert session.recomputations == 1

    session.update({"initial_deposit": 2000})
    second = session.series()
    assert second is not first
    assert session.recomputations == 2
    assert second[0]["protocols"]["gobbler"]["total"] == pytest.approx(4000.0)

    # same value again: nothing changed
    session.update({"initial_deposit": 2000})
    assert session.series() is second
    assert session.recomputations == 2


def test_session_series_follows_horizon():
    session = SimulationSession()
    session.update({"time_horizon": 4, "time_step": "half"})
    assert len(session.series()) == 9
