# Knowledge graph models: nodes, links and immutable subgraph snapshots.
import datetime
import logging
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

logger = logging.getLogger(__name__)

# The database property whose value is used as the caption of a node or link.
LABEL_ATTRIBUTE = "label"


class DataContractViolation(ValueError):
    """A record returned by the graph database does not have the shape this service expects."""


def _split_label(kind: str, properties: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    if LABEL_ATTRIBUTE not in properties:
        logger.error(f"Neo4j {kind} does not contain '{LABEL_ATTRIBUTE}' attribute: {properties}")
        raise DataContractViolation(
            f"Neo4j {kind} is missing the required '{LABEL_ATTRIBUTE}' attribute: {properties}. "
            "The graph database schema and this service have drifted apart."
        )
    attributes = {key: value for key, value in properties.items() if key != LABEL_ATTRIBUTE}
    return str(properties[LABEL_ATTRIBUTE]), attributes


def _freeze_value(value: Any) -> Any:
    """
    Convert a property value into an immutable, JSON-compatible one.

    Neo4j temporal values become ISO-8601 strings, lists become tuples and maps
    become read-only views. Unknown driver types fall back to their string form.
    """
    if hasattr(value, "to_native"):
        # Neo4j DateTime/Date/Time -> Python datetime -> ISO string
        native = value.to_native()
        if hasattr(native, "isoformat"):
            return native.isoformat()
    if hasattr(value, "iso_format"):
        # Neo4j Duration
        return value.iso_format()
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return MappingProxyType({str(key): _freeze_value(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        # also covers spatial points, which are tuples of coordinates
        return tuple(_freeze_value(item) for item in value)
    return str(value)


def _thaw_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw_value(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw_value(item) for item in value]
    return value


class Node(BaseModel):
    """
    A graph vertex.

    Identity is the database element id only: two nodes with the same id are
    equal even if their labels or attributes differ.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    attributes: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("attributes", mode="after")
    @classmethod
    def freeze_attributes(cls, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze_value(attributes)

    @field_serializer("attributes")
    def serialize_attributes(self, attributes: Mapping[str, Any]) -> Dict[str, Any]:
        return _thaw_value(attributes)

    @classmethod
    def from_neo4j(cls, node: Any) -> "Node":
        """
        Convert a driver node into a Node.

        The element id becomes the id, the "label" property becomes the label and
        every other property becomes an attribute.

        Raises:
            DataContractViolation: if the node has no "label" property
        """
        label, attributes = _split_label("node", dict(node.items()))
        return cls(id=node.element_id, label=label, attributes=attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.label


class Link(BaseModel):
    """A directed edge. Equality is structural over all four fields."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str
    source_node_id: str = Field(alias="sourceNodeId")
    target_node_id: str = Field(alias="targetNodeId")
    attributes: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("attributes", mode="after")
    @classmethod
    def freeze_attributes(cls, attributes: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze_value(attributes)

    @field_serializer("attributes")
    def serialize_attributes(self, attributes: Mapping[str, Any]) -> Dict[str, Any]:
        return _thaw_value(attributes)

    @classmethod
    def from_neo4j(cls, relationship: Any) -> "Link":
        """
        Convert a driver relationship into a Link.

        The start and end node element ids become the source and target ids.

        Raises:
            DataContractViolation: if the relationship has no "label" property
        """
        label, attributes = _split_label("relationship", dict(relationship.items()))
        return cls(
            label=label,
            source_node_id=relationship.start_node.element_id,
            target_node_id=relationship.end_node.element_id,
            attributes=attributes,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Link):
            return NotImplemented
        return (
            self.label == other.label
            and self.source_node_id == other.source_node_id
            and self.target_node_id == other.target_node_id
            and self.attributes == other.attributes
        )

    def __hash__(self) -> int:
        # attributes may hold unhashable values; equal links still hash equal
        return hash((self.label, self.source_node_id, self.target_node_id))

    def __str__(self) -> str:
        return f"({self.source_node_id})-{self.label}-({self.target_node_id})"


class Graph(BaseModel):
    """
    An immutable subgraph snapshot.

    Serializes as {"nodes": [...], "links": [...]}; element order is not stable.
    Every transformation returns a new Graph.
    """
    model_config = ConfigDict(frozen=True)

    nodes: FrozenSet[Node] = frozenset()
    links: FrozenSet[Link] = frozenset()

    @classmethod
    def of(cls, nodes: Iterable[Node] = (), links: Iterable[Link] = ()) -> "Graph":
        return cls(nodes=frozenset(nodes), links=frozenset(links))

    @classmethod
    def empty(cls) -> "Graph":
        """The identity element of merge."""
        return cls()

    def is_empty(self) -> bool:
        return not self.nodes and not self.links

    def get_undirected_neighbors_of(self, node: Node) -> Set[Node]:
        """
        Return every node of this graph that shares a link with `node`, in either direction.

        The queried node is never its own neighbor. A node with no incident links, or one
        that is not in this graph, has no neighbors.
        """
        neighbor_ids = set()
        for link in self.links:
            if node.id in (link.source_node_id, link.target_node_id):
                neighbor_ids.update((link.source_node_id, link.target_node_id))
        neighbor_ids.discard(node.id)

        return {candidate for candidate in self.nodes if candidate.id in neighbor_ids}

    def merge(self, other: "Graph") -> "Graph":
        """
        Union the nodes and links of both graphs into a new Graph.

        Nodes are deduplicated by id. When both graphs hold a node with the same id but
        different label or attributes, which copy survives is unspecified.
        """
        return Graph(nodes=self.nodes | other.nodes, links=self.links | other.links)

    def find_node_by_label(self, label: str) -> Optional[Node]:
        return next((node for node in self.nodes if node.label == label), None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Graph):
            return NotImplemented
        return self.nodes == other.nodes and self.links == other.links

    def __hash__(self) -> int:
        return hash((self.nodes, self.links))

    def __str__(self) -> str:
        return self.model_dump_json(by_alias=True)
