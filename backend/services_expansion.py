"""
Subgraph expansion from a seed label.

Two strategies are offered:

- expand_apoc: a single round-trip that lets apoc.path.expand walk up to
  `max_hops` relationships away from the seed. Cheap on the network, but the
  whole subgraph is materialized in one query, which can exhaust the memory the
  database allows a query for large or unbounded expansions.

- expand_dfs: repeated one-hop expansions driven from this side, merging the
  partial graphs as it goes. One round-trip per reachable label, but each query
  stays small.
"""

import logging
from typing import List, Set

from config import EXPAND_RELATIONSHIP_FILTER
from models.graph import Graph, Link, Node

logger = logging.getLogger(__name__)

UNBOUNDED_HOPS = -1


class MissingSeedNode(LookupError):
    """A one-hop expansion of a label did not contain the node with that label."""

    def __init__(self, label: str, graph: Graph):
        self.label = label
        self.graph = graph
        super().__init__(f"'{label}' was not found in graph {graph}")


def graph_from_paths(paths) -> Graph:
    """Collect every node and relationship touched by any of the paths into one Graph."""
    nodes: Set[Node] = set()
    links: Set[Link] = set()
    for path in paths:
        nodes.update(Node.from_neo4j(node) for node in path.nodes)
        links.update(Link.from_neo4j(relationship) for relationship in path.relationships)
    return Graph.of(nodes, links)


def expand_apoc(
    store,
    label: str,
    max_hops: int = UNBOUNDED_HOPS,
    relationship_filter: str = EXPAND_RELATIONSHIP_FILTER,
) -> Graph:
    """
    Expand the subgraph around `label` in a single query.

    Args:
        store: graph store client
        label: label of the seed node
        max_hops: the longest path to follow, or -1 for no limit
        relationship_filter: apoc relationship filter, e.g. "LINK"

    Returns:
        the subgraph of every node and link on any path found; empty if the seed
        does not exist or has no relationships
    """
    logger.info(f"apoc expanding '{label}' with max hops of {max_hops}")
    paths = store.run_expansion(label, relationship_filter, 1, max_hops)
    return graph_from_paths(paths)


def expand_dfs(store, label: str, relationship_filter: str = EXPAND_RELATIONSHIP_FILTER) -> Graph:
    """
    Expand the whole reachable component of `label` one hop at a time.

    Every reachable label is expanded exactly once, so cycles terminate. The
    visited set belongs to this call only.

    Raises:
        MissingSeedNode: if a non-empty one-hop expansion does not contain its seed
    """
    visited: Set[str] = set()
    pending: List[str] = [label]
    result = Graph.empty()

    while pending:
        current = pending.pop()
        if current in visited:
            continue
        visited.add(current)

        one_hop = expand_apoc(store, current, 1, relationship_filter)
        if one_hop.is_empty():
            logger.info(f"'{current}' has no neighbors or does not exist")
            continue

        seed = one_hop.find_node_by_label(current)
        if seed is None:
            error = MissingSeedNode(current, one_hop)
            logger.error(str(error))
            raise error

        result = result.merge(one_hop)
        pending.extend(
            neighbor.label
            for neighbor in one_hop.get_undirected_neighbors_of(seed)
            if neighbor.label not in visited
        )

    logger.info(f"DFS expansion of '{label}' visited {len(visited)} labels")
    return result
