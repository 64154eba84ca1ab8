"""
Canvas document model.

A canvas file is a JSON object holding an ordered ``nodes`` list and an
ordered ``edges`` list. Other tools write to the same files, so nodes of
unknown types, unknown fields, every edge and any extra top-level keys are
carried through a load/save cycle as-is. Only nodes created here are typed.
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List

LINK_NODE_TYPE = "link"
NODE_WIDTH = 880
NODE_HEIGHT = 680


def random_node_id() -> str:
    """Random 64-bit id as 16 lowercase hex characters."""
    return f"{random.getrandbits(64):016x}"


@dataclass
class LinkNode:
    """A link card created from a captured URL."""
    url: str
    x: int
    y: int
    date: str = ""
    id: str = field(default_factory=random_node_id)
    type: str = LINK_NODE_TYPE
    width: int = NODE_WIDTH
    height: int = NODE_HEIGHT

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "url": self.url,
        }
        if self.date:
            data["date"] = self.date
        data.update({
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        })
        return data


@dataclass
class Canvas:
    """
    In-memory canvas document.

    ``nodes`` holds the raw node objects in file order; the last entry is
    the most recently appended node.
    """
    nodes: List[Dict[str, Any]] = field(default_factory=list)
    edges: List[Any] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Canvas":
        """
        Build a canvas from decoded JSON.

        Raises:
            ValueError: If the document does not have the canvas shape
        """
        if not isinstance(data, dict):
            raise ValueError("top-level value is not an object")

        for key in ("nodes", "edges"):
            if key not in data:
                raise ValueError(f"missing field '{key}'")
            if not isinstance(data[key], list):
                raise ValueError(f"field '{key}' is not a list")

        nodes = data["nodes"]
        for index, node in enumerate(nodes):
            if not isinstance(node, dict):
                raise ValueError(f"node {index} is not an object")

        # Placement reads only the last node's grid position
        if nodes:
            last = len(nodes) - 1
            for coord in ("x", "y"):
                value = nodes[last].get(coord)
                if not isinstance(value, int) or isinstance(value, bool):
                    raise ValueError(f"node {last} has no integer '{coord}'")

        extra = {k: v for k, v in data.items() if k not in ("nodes", "edges")}
        return cls(nodes=list(nodes), edges=list(data["edges"]), extra=extra)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"nodes": self.nodes, "edges": self.edges}
        data.update(self.extra)
        return data

    def append(self, node: LinkNode) -> None:
        self.nodes.append(node.to_dict())

    @property
    def last_node(self):
        return self.nodes[-1] if self.nodes else None
