"""
Per-run identity and randomness.

Every founder is attached to a RunContext and every descendant inherits it,
so ordinal indexes are issued by a counter owned by the run rather than by
process-wide state, and all stochastic draws consume the same generator.
"""

from collections import defaultdict
from typing import Dict, Hashable, Optional, Tuple

from stochastic.random_source import RandomSource, global_source


class RunContext:
    """Ordinal counters, random source and mutation cache for one run."""

    _default: Optional["RunContext"] = None

    def __init__(self, seed: Optional[int] = None, source: Optional[RandomSource] = None):
        if source is not None and seed is not None:
            raise ValueError("give either a seed or a random source, not both")
        self.random = source if source is not None else RandomSource(seed)
        self._counters: Dict[str, int] = defaultdict(int)
        # (kind, index) -> every mutation accumulated from founder to carrier
        self.accumulated_mutations: Dict[Hashable, Tuple] = {}

    @classmethod
    def default(cls) -> "RunContext":
        """Shared context used when a founder is created without one.

        Reseeding the global random source starts a fresh default context.
        """
        source = global_source()
        if cls._default is None or cls._default.random is not source:
            cls._default = cls(source=source)
        return cls._default

    @classmethod
    def reset_default(cls) -> None:
        cls._default = None

    def next_index(self, kind: str) -> int:
        index = self._counters[kind]
        self._counters[kind] = index + 1
        return index

    def count_issued(self, kind: str) -> int:
        return self._counters[kind]
