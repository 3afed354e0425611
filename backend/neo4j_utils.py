"""
Utility functions for turning Neo4j query results into JSON-serializable data.
"""

import logging
from typing import Any, Dict, Iterable, List, Union

logger = logging.getLogger(__name__)

JSONValue = Union[int, str, bool, Dict[str, "JSONValue"]]

# Only these pass through the normalizer unchanged. bool is listed separately
# because it is a subclass of int.
TERMINAL_TYPES = (int, str, bool)


def is_terminal_value(value: Any) -> bool:
    """
    Returns whether a value is a leaf of the JSON tree.

    A leaf is exactly an integer, a string or a boolean. Everything else
    (maps, nodes, relationships, lists, paths, floats, temporals, None) is
    treated as a compound value.
    """
    return type(value) in TERMINAL_TYPES


def expand_value(value: Any) -> JSONValue:
    """
    Transforms a Neo4j value into a JSON-serializable object.

    Compound values always become mappings from each of their keys to the
    expanded value under that key. Values that expose no keys (lists, None,
    floats, paths, temporals) therefore become an empty mapping.
    """
    if is_terminal_value(value):
        return value

    keys = getattr(value, "keys", None)
    if keys is None:
        return {}

    return {key: expand_value(value.get(key)) for key in keys()}


def records_to_json(records: Iterable[Any]) -> List[Dict[str, JSONValue]]:
    """
    Converts the records of a query that does not return paths.

    Each record becomes one mapping from its keys to the expanded values.
    """
    return [{key: expand_value(record.get(key)) for key in record.keys()} for record in records]


def get_connection_health_info(store):
    """
    Get information about Neo4j connection health.
    Useful for debugging and monitoring.
    """
    try:
        store.verify_connectivity()
        return {
            "status": "healthy",
            "database": store.database,
        }
    except Exception as e:
        logger.error(f"Neo4j connectivity check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
            "message": "Failed to connect to Neo4j",
        }
