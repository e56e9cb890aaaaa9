"""Resource Configuration - resolves which models are exposed and under which paths.

Invariants:
    - Every binding references a model present in the registry
    - singular/plural default to lower(name) and lower(name) + "s"
    - No two paths collide across the whole binding table (checked here, not per request)
    - The returned table is built once at startup and never mutated

Design Decisions:
    - Raw config accepts None (all models), a list of names, or a mapping
      name -> True | False | {singular, plural}
    - Names written as /regex/ select every matching registered model
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from autorest.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

PLURAL_SUFFIX = "s"


@dataclass(frozen=True)
class ModelBinding:
    """One exposed model: its registry name, both path names and the model reference."""
    model_name: str
    singular: str
    plural: str
    model: Any


def configure(
    raw_config: Any, registry: Mapping[str, Any],
) -> dict[str, ModelBinding]:
    """Build the binding table. Raises ConfigurationError on any invalid entry."""
    selected = _select_models(raw_config, list(registry))

    bindings: dict[str, ModelBinding] = {}
    for model_name, overrides in selected.items():
        binding = ModelBinding(
            model_name=model_name,
            singular=overrides.get("singular", model_name.lower()),
            plural=overrides.get(
                "plural", f"{model_name.lower()}{PLURAL_SUFFIX}",
            ),
            model=registry[model_name],
        )
        bindings[model_name] = binding

    _check_paths(bindings)
    for binding in bindings.values():
        logger.info(
            f'Exposing {binding.model_name} (endpoints "/{binding.singular}" '
            f'& "/{binding.plural}")',
            extra={"model": binding.model_name},
        )
    return bindings


def _select_models(
    raw_config: Any, available: list[str],
) -> dict[str, dict[str, str]]:
    """Normalize raw config to {model_name: path overrides}."""
    if raw_config is None:
        return {name: {} for name in available}
    if isinstance(raw_config, str):
        raw_config = [raw_config]
    if isinstance(raw_config, (list, tuple)):
        raw_config = {name: True for name in raw_config}
    if not isinstance(raw_config, Mapping):
        raise ConfigurationError(
            f"Models configuration must be a list or a mapping, "
            f"got {type(raw_config).__name__}",
        )

    selected: dict[str, dict[str, str]] = {}
    for key, desc in raw_config.items():
        overrides = _normalize_desc(key, desc)
        for name in _resolve_names(key, available):
            if overrides is None:
                selected.pop(name, None)
            else:
                selected[name] = overrides
    return selected


def _resolve_names(key: str, available: list[str]) -> list[str]:
    if len(key) > 2 and key.startswith("/") and key.endswith("/"):
        try:
            pattern = re.compile(key[1:-1])
        except re.error as e:
            raise ConfigurationError(f'Invalid model pattern "{key}": {e}')
        return [name for name in available if pattern.fullmatch(name)]
    if key not in available:
        hint = ", ".join(sorted(available)) or "none registered"
        raise ConfigurationError(
            f'Tried to configure unknown model "{key}" (available: {hint})',
        )
    return [key]


def _normalize_desc(key: str, desc: Any) -> dict[str, str] | None:
    if desc is True:
        return {}
    if desc is False or desc is None:
        return None
    if not isinstance(desc, Mapping):
        raise ConfigurationError(
            f'Configuration of "{key}" must be true, false or a mapping',
        )
    unknown = set(desc) - {"singular", "plural"}
    if unknown:
        raise ConfigurationError(
            f'Unknown settings for "{key}": {", ".join(sorted(unknown))}',
        )
    for setting, path in desc.items():
        if not isinstance(path, str) or not path or "/" in path:
            raise ConfigurationError(
                f'Invalid {setting} path {path!r} for "{key}"',
            )
    return dict(desc)


def _check_paths(bindings: dict[str, ModelBinding]) -> None:
    owners: dict[str, str] = {}
    for binding in bindings.values():
        for path in (binding.singular, binding.plural):
            if path in owners:
                raise ConfigurationError(
                    f'Path "/{path}" of {binding.model_name} collides with '
                    f"{owners[path]}",
                )
            owners[path] = binding.model_name
