from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, List
import logging

from config import EXPAND_DEFAULT_MAX_HOPS
from db_neo4j import Neo4jGraphStore, get_graph_store
from languages import Language, require_language
from models.graph import LABEL_ATTRIBUTE, Graph
from neo4j_utils import records_to_json
from services_expansion import UNBOUNDED_HOPS, expand_apoc, expand_dfs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/neo4j", tags=["neo4j"])


@router.get("/languages/{language}/count")
def get_count_by_language(
    language: Language = Depends(require_language),
    store: Neo4jGraphStore = Depends(get_graph_store),
) -> List[Dict[str, Any]]:
    """Total number of terms of a language, as [{"count": n}]."""
    query = "MATCH (term:Term {language: $language}) RETURN count(*) AS count"
    return records_to_json(store.run_query(query, language=language.database_name))


@router.get("/languages/{language}")
def get_vocabulary_by_language_paged(
    language: Language = Depends(require_language),
    per_page: int = Query(..., alias="perPage", ge=1),
    page: int = Query(..., ge=1),
    store: Neo4jGraphStore = Depends(get_graph_store),
) -> List[Dict[str, Any]]:
    """One page of (term, definition) pairs of a language."""
    query = f"""
    MATCH (t:Term)-[r]->(d:Definition)
    WHERE t.language = $language
    RETURN t.{LABEL_ATTRIBUTE} AS term, d.{LABEL_ATTRIBUTE} AS definition
    SKIP $skip LIMIT $limit
    """
    records = store.run_query(
        query,
        language=language.database_name,
        skip=(page - 1) * per_page,
        limit=per_page,
    )
    return records_to_json(records)


@router.get("/search/{keyword}")
def search(keyword: str, store: Neo4jGraphStore = Depends(get_graph_store)) -> List[Dict[str, Any]]:
    """All nodes whose label contains the keyword."""
    query = f"MATCH (node) WHERE node.{LABEL_ATTRIBUTE} CONTAINS $keyword RETURN node"
    return records_to_json(store.run_query(query, keyword=keyword))


@router.get("/expand/{word}", response_model=Graph)
def expand(word: str, store: Neo4jGraphStore = Depends(get_graph_store)):
    """Related terms and definitions of a word, up to the configured number of hops."""
    return expand_apoc(store, word, EXPAND_DEFAULT_MAX_HOPS)


@router.get("/expandApoc/{word}", response_model=Graph)
def expand_with_apoc(
    word: str,
    max_hops: int = Query(UNBOUNDED_HOPS, alias="maxHops", ge=-1),
    store: Neo4jGraphStore = Depends(get_graph_store),
):
    """
    Expand a word in a single query.

    Good for small subgraphs or when the service and the database are far apart;
    large expansions can exhaust the memory the database grants one query.
    """
    return expand_apoc(store, word, max_hops)


@router.get("/expandDfs/{word}", response_model=Graph)
def expand_with_dfs(word: str, store: Neo4jGraphStore = Depends(get_graph_store)):
    """
    Expand the full component of a word with one small query per reachable label.

    Good for large subgraphs at the cost of more round-trips.
    """
    return expand_dfs(store, word)
