import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel

from launchpad_app.schemas import ScenarioParameters


logger = logging.getLogger(__name__)

# Structured sub-objects merged one level deep on update
_NESTED_FIELDS = {"investment", "bonding", "rewards"}


def _merge_known(current: Dict[str, Any], update: Dict[str, Any], prefix: str, applied: List[str]) -> Dict[str, Any]:
    section = dict(current)
    for key, value in update.items():
        name = f"{prefix}.{key}"
        if key not in section:
            logger.debug("ignoring unknown parameter %r", name)
            continue
        if isinstance(section[key], dict) and isinstance(value, dict):
            value = _merge_known(section[key], value, name, applied)
        else:
            applied.append(name)
        section[key] = value
    return section


class ParameterStore:
    """Current scenario parameters. Holds state only; never recomputes anything."""

    def __init__(self, params: Optional[ScenarioParameters] = None):
        self._params = params.model_copy(deep=True) if params is not None else ScenarioParameters()
        self.version = 0

    def get(self) -> ScenarioParameters:
        return self._params.model_copy(deep=True)

    def set(self, partial: Union[Dict[str, Any], BaseModel]) -> ScenarioParameters:
        """
        Merge a partial update into the current parameters.

        Top-level fields are replaced. investment/bonding/rewards are merged
        field by field, and so is a structured field inside them
        (fee_distribution), keeping the splits the update leaves out.
        Unknown fields are ignored. Raises
        pydantic.ValidationError, leaving the store untouched, when a known
        field gets a value pydantic cannot coerce.
        """
        if isinstance(partial, BaseModel):
            partial = partial.model_dump(exclude_unset=True)

        merged = self._params.model_dump()
        applied = []
        for key, value in partial.items():
            if key not in merged:
                logger.debug("ignoring unknown parameter %r", key)
                continue
            if key in _NESTED_FIELDS and isinstance(value, dict):
                value = _merge_known(merged[key], value, key, applied)
            else:
                applied.append(key)
            merged[key] = value

        self._params = ScenarioParameters.model_validate(merged)
        if applied:
            self.version += 1
            logger.debug("parameters updated (version %d): %s", self.version, ", ".join(applied))
        return self.get()
