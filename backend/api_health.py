"""
Health check endpoints for monitoring system status.
"""

from fastapi import APIRouter, Depends, Response

from db_neo4j import Neo4jGraphStore, get_graph_store
from neo4j_utils import get_connection_health_info
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/data/healthcheck")
@router.get("/healthcheck")
def healthcheck():
    """A webservice sanity-check endpoint."""
    return Response(status_code=200)


@router.get("/health/")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "ok", "service": "wilhelm-backend"}


@router.get("/health/neo4j")
def neo4j_health_check(store: Neo4jGraphStore = Depends(get_graph_store)):
    """Check Neo4j database connectivity."""
    conn_info = get_connection_health_info(store)
    return {
        "status": conn_info["status"],
        "database": store.database,
        "connection": conn_info,
    }
