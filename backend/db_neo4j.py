import logging
from contextlib import contextmanager
from typing import Any, Generator, Iterator, List, Optional

from neo4j import GraphDatabase  # type: ignore[reportMissingImports]
from neo4j.exceptions import AuthError, ServiceUnavailable, SessionExpired

from config import (
    NEO4J_CONNECTION_ACQUISITION_TIMEOUT,
    NEO4J_DATABASE,
    NEO4J_MAX_CONNECTION_LIFETIME,
    NEO4J_MAX_CONNECTION_POOL_SIZE,
    NEO4J_PASSWORD,
    NEO4J_URI,
    NEO4J_USERNAME,
)

logger = logging.getLogger(__name__)

EXPANSION_QUERY = """
MATCH (node {label: $label})
CALL apoc.path.expand(node, $relationship_filter, null, $min_hops, $max_hops)
YIELD path
RETURN path, length(path) AS hops
ORDER BY hops
"""


class GraphStoreUnavailable(ConnectionError):
    """The graph database could not be reached or refused our credentials."""


# Lazy driver initialization - only create when first needed
_driver = None


def _create_driver():
    if not NEO4J_PASSWORD:
        raise ValueError(
            "NEO4J_PASSWORD environment variable is required. "
            "Please set it in your .env.local file."
        )
    return GraphDatabase.driver(
        NEO4J_URI,
        auth=(NEO4J_USERNAME, NEO4J_PASSWORD),
        max_connection_lifetime=NEO4J_MAX_CONNECTION_LIFETIME,
        max_connection_pool_size=NEO4J_MAX_CONNECTION_POOL_SIZE,
        connection_acquisition_timeout=NEO4J_CONNECTION_ACQUISITION_TIMEOUT,
        keep_alive=True,
    )


def _get_driver():
    """Get or create the process-wide Neo4j driver."""
    global _driver
    if _driver is None:
        _driver = _create_driver()
        logger.info(f"Created Neo4j driver for {NEO4J_URI}")
    return _driver


def close_driver() -> None:
    """Close the process-wide driver, if one was created."""
    global _driver
    if _driver is not None:
        try:
            _driver.close()
        finally:
            _driver = None
        logger.info("Closed Neo4j driver")


class Neo4jGraphStore:
    """
    Runs graph queries against one Neo4j database.

    Each call opens its own session and always closes it before returning,
    whether the query succeeded or failed. The store holds no per-request
    state and can be shared by concurrent requests.
    """

    def __init__(self, driver, database: Optional[str] = None):
        self.driver = driver
        self.database = database or NEO4J_DATABASE

    @contextmanager
    def _session(self) -> Iterator[Any]:
        try:
            with self.driver.session(database=self.database) as session:
                yield session
        except (ServiceUnavailable, SessionExpired, AuthError) as e:
            logger.error(f"Neo4j database '{self.database}' is unavailable: {e}")
            raise GraphStoreUnavailable(str(e)) from e

    def verify_connectivity(self) -> None:
        """
        Raises:
            GraphStoreUnavailable: if the database cannot be reached
        """
        try:
            self.driver.verify_connectivity()
        except (ServiceUnavailable, SessionExpired, AuthError) as e:
            logger.error(f"Neo4j connectivity check failed: {e}")
            raise GraphStoreUnavailable(str(e)) from e

    def run_query(self, query: str, **parameters) -> List[Any]:
        """Run a Cypher query and return all of its records."""
        with self._session() as session:
            return list(session.run(query, **parameters))

    def run_expansion(
        self,
        seed_label: str,
        relationship_filter: str,
        min_hops: int,
        max_hops: int,
    ) -> List[Any]:
        """
        Expand outward from the node labelled `seed_label` with apoc.path.expand.

        Returns every path found, shortest first. `max_hops = -1` lifts the bound.
        """
        records = self.run_query(
            EXPANSION_QUERY,
            label=seed_label,
            relationship_filter=relationship_filter,
            min_hops=min_hops,
            max_hops=max_hops,
        )
        return [record["path"] for record in records]


def get_graph_store() -> Generator[Neo4jGraphStore, None, None]:
    """FastAPI dependency that yields a graph store bound to the shared driver."""
    yield Neo4jGraphStore(_get_driver(), NEO4J_DATABASE)
