# pool_dispatch/runtime/resources.py
import json
from functools import lru_cache
from pathlib import Path


@lru_cache(maxsize=8)
def load_graph_data(file: str, fmt: str = "json") -> dict | None:
    """Raw node-link mapping from disk; None if the file is missing."""
    p = Path(file)
    if not p.exists():
        return None
    if fmt == "json":
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)
    raise ValueError(f"Unsupported graph fmt {fmt!r}")
