"""
Connector Registry — builds the record source named in config.

Built-in types are looked up by short name; anything else is treated as a
fully qualified class path so custom connectors can be plugged in.
"""

from __future__ import annotations

import importlib
import logging

from marginpilot.config import ConnectorConfig
from marginpilot.connectors.base import BaseConnector

logger = logging.getLogger("marginpilot.connectors.registry")

# Built-in connector type mapping
_BUILTIN_CONNECTORS: dict[str, str] = {
    "csv": "marginpilot.connectors.csv_connector.CSVConnector",
}


def create_connector(config: ConnectorConfig) -> BaseConnector | None:
    """Instantiate a connector from config, or None if it cannot be loaded."""
    connector_path = _BUILTIN_CONNECTORS.get(config.type, config.type)
    if "." not in connector_path:
        logger.error("Unknown connector type '%s'", config.type)
        return None

    module_path, class_name = connector_path.rsplit(".", 1)
    try:
        module = importlib.import_module(module_path)
        connector_cls = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        logger.error("Cannot load connector '%s': %s", config.type, e)
        return None

    logger.debug("Created %s connector", config.type)
    return connector_cls(credentials=config.credentials, **config.options)
