# runtime/rng.py
from __future__ import annotations

from zlib import crc32

import numpy as np


def _u32(x: int) -> int:
    return int(x & 0xFFFFFFFF)


def _tag(s: object) -> int:
    return _u32(crc32(str(s).encode("utf-8")))


class RNGStreams:
    """
    Named, reproducible numpy Generators.
    Entropy path: [seed, crc32(scenario), crc32(stream), *crc32(parts)], so a
    stream's draws do not depend on which other streams were used first.
    """

    def __init__(self, seed: int, *, scenario: str | int = 0):
        self.seed = _u32(seed)
        self.scenario_tag = _tag(scenario)
        self._cache: dict[tuple, np.random.Generator] = {}

    def stream(self, name: str, *parts: object) -> np.random.Generator:
        key = (name, *parts)
        gen = self._cache.get(key)
        if gen is None:
            ss = np.random.SeedSequence(
                entropy=[self.seed, self.scenario_tag, _tag(name), *(_tag(p) for p in parts)]
            )
            gen = self._cache[key] = np.random.Generator(np.random.PCG64(ss))
        return gen
