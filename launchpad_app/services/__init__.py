from launchpad_app.services.parameter_store import ParameterStore
from launchpad_app.services.session import SimulationSession
from launchpad_app.services.simulation import describe_models, evaluate_point, flatten_series, simulate, summarize

__all__ = [
    "ParameterStore",
    "SimulationSession",
    "describe_models",
    "evaluate_point",
    "flatten_series",
    "simulate",
    "summarize",
]
