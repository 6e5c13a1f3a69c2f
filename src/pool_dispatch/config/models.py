import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False  # emit per-ring / per-permutation DEBUG records


# ----------------- GRAPH ---------------------


class GraphByPath(BaseModel):
    model_config = ConfigDict(extra="forbid")
    by: Literal["path"] = "path"
    file: str
    fmt: Literal["json"] = "json"
    must_exist: bool = True

    @field_validator("file")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


class GraphByName(BaseModel):
    model_config = ConfigDict(extra="forbid")
    by: Literal["name"] = "name"
    name: str


GraphRef = Annotated[GraphByPath | GraphByName, Field(discriminator="by")]

# ----------------- CELL GRIDS ---------------------


class GridH3Model(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["h3"] = "h3"
    resolution: int = Field(default=9, ge=0, le=15)


GridUnion = Annotated[GridH3Model, Field(discriminator="kind")]

# ----------------- SOLVER ---------------------


class SolverModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    frontier: Literal["heap", "sorted_list"] = "heap"


# ----------------- MATCHING / POOLING ---------------------


class MatchingModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    max_radius: int = Field(default=3, ge=0)
    start_radius: Literal[0, 1] = 1
    fallback: Literal["none", "entire_pool"] = "none"
    workers: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_radius(self):
        if self.max_radius < self.start_radius:
            raise ValueError(
                f"max_radius ({self.max_radius}) must be >= start_radius ({self.start_radius})"
            )
        return self


class PoolModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    max_riders: int = Field(default=2, ge=1, le=3)


# ------------------------------------------------------------------


class EngineModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    run_id: str = "local"
    seed: int = 123
    graph: GraphRef | None = None  # None => graph data passed to build()
    log: LogModel = LogModel()
    grid: GridUnion = Field(default_factory=GridH3Model)
    solver: SolverModel = SolverModel()
    matching: MatchingModel = MatchingModel()
    pool: PoolModel = PoolModel()
