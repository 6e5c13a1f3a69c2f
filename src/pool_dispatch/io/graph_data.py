# io/graph_data.py
"""Node-link graph input: {"nodes": [{id, x, y}], "links": [{source, target, length}]}."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pool_dispatch.domain.entities.geography import Edge, Node
from pool_dispatch.domain.graph import RoadGraph, build_graph
from pool_dispatch.errors import GraphValidationError


def _as_id(v: Any) -> str:
    if v is None or isinstance(v, (bool, dict, list)):
        raise ValueError(f"not a usable node id: {v!r}")
    return str(v)


def _as_number(v: Any):
    # no bool or numeric-string coercion
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"not a number: {v!r}")
    return v


class NodeRecord(BaseModel):
    # OSM exports carry many more attributes (street_count, highway, ...)
    model_config = ConfigDict(extra="ignore")
    id: str
    x: float = Field(allow_inf_nan=False)  # longitude
    y: float = Field(allow_inf_nan=False)  # latitude

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        return _as_id(v)

    @field_validator("x", "y", mode="before")
    @classmethod
    def _numeric_coord(cls, v):
        return _as_number(v)

    def to_node(self) -> Node:
        return Node(self.id, lat=self.y, lon=self.x)


class LinkRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")
    source: str
    target: str
    length: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("source", "target", mode="before")
    @classmethod
    def _coerce_ends(cls, v):
        return _as_id(v)

    @field_validator("length", mode="before")
    @classmethod
    def _numeric_length(cls, v):
        return _as_number(v)

    def to_edge(self) -> Edge:
        return Edge(self.source, self.target, self.length)


class NodeLinkModel(BaseModel):
    model_config = ConfigDict(extra="ignore")
    nodes: list[NodeRecord] = Field(default_factory=list)
    links: list[LinkRecord]


def parse_node_link(data: Mapping[str, Any]) -> tuple[list[Node], list[Edge]]:
    try:
        model = NodeLinkModel.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise GraphValidationError(problems) from e
    return [n.to_node() for n in model.nodes], [lk.to_edge() for lk in model.links]


def graph_from_node_link(data: Mapping[str, Any]) -> RoadGraph:
    nodes, edges = parse_node_link(data)
    return build_graph(nodes, edges)
