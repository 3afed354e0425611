from models.graph import (
    LABEL_ATTRIBUTE,
    DataContractViolation,
    Graph,
    Link,
    Node,
)

__all__ = [
    "LABEL_ATTRIBUTE",
    "DataContractViolation",
    "Graph",
    "Link",
    "Node",
]
