"""Model Registry - name -> ORM class mapping built from the declarative Base.

Invariants:
    - Built once at startup, read-only afterwards
    - Keys are the ORM class names, the names used in the exposed_models config
    - A models module that fails to import is a ConfigurationError (fatal)

Design Decisions:
    - Registry read from Base.registry.mappers: importing the models module is
      enough to register them, no decorator needed
"""

import importlib
import logging

from sqlalchemy.orm import DeclarativeBase

from autorest.core.errors import ConfigurationError
from autorest.db.base import Base

logger = logging.getLogger(__name__)


def registry_from_base(base: type[DeclarativeBase] = Base) -> dict[str, type]:
    """Every mapped class declared on base, keyed by class name."""
    return {
        mapper.class_.__name__: mapper.class_
        for mapper in base.registry.mappers
    }


def load_registry(
    models_module: str, base: type[DeclarativeBase] = Base,
) -> dict[str, type]:
    """Import the module declaring the models, then read the registry."""
    try:
        importlib.import_module(models_module)
    except ImportError as e:
        raise ConfigurationError(
            f'Cannot import models module "{models_module}": {e}',
        )
    registry = registry_from_base(base)
    logger.info(f"Loaded {len(registry)} models from {models_module}")
    return registry
