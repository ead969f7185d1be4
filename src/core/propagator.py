"""
Entities that propagate themselves through discrete time steps.

At each step a propagator may produce offspring, become dormant, or die.
Parent and founder links are fixed at construction, so the ancestry of a
propagator forms an append-only tree that can be traced without mutation.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, TYPE_CHECKING

from .context import RunContext

if TYPE_CHECKING:
    from .tumor_env import TumorEnv


class State(Enum):
    ALIVE = "ALIVE"
    DORMANT = "DORMANT"
    DEAD = "DEAD"


class Propagator(ABC):
    """Base class for cells, lineages, demes and tumors.

    Attributes:
        index: Ordinal identity, unique per kind within a run context.
        generation: 0 for a founder, parent generation + 1 otherwise.
        context: The run context shared by the whole ancestry tree.
    """

    kind = "propagator"

    def __init__(self, parent: Optional["Propagator"], context: Optional[RunContext] = None):
        if parent is None:
            self.context = context if context is not None else RunContext.default()
            self.generation = 0
            self._founder = None
        else:
            if context is not None and context is not parent.context:
                raise ValueError("a child must share the run context of its parent")
            self.context = parent.context
            self.generation = parent.generation + 1
            self._founder = parent.founder

        self._parent = parent
        self.index = self.context.next_index(self.kind)

    @abstractmethod
    def advance(self, env: "TumorEnv") -> List["Propagator"]:
        """Advance through one time step and return any new offspring.

        Dead propagators must return an empty list and stay dead.
        """

    @property
    @abstractmethod
    def state(self) -> State:
        ...

    @property
    def parent(self) -> Optional["Propagator"]:
        return self._parent

    @property
    def founder(self) -> "Propagator":
        return self if self._founder is None else self._founder

    @property
    def key(self):
        return self.kind, self.index

    def is_founder(self) -> bool:
        return self._parent is None

    def is_alive(self) -> bool:
        return self.state is State.ALIVE

    def is_dormant(self) -> bool:
        return self.state is State.DORMANT

    def is_dead(self) -> bool:
        return self.state is State.DEAD

    def trace_lineage(self, first_generation: int = 0) -> List["Propagator"]:
        """Ancestors of this propagator (and itself), oldest first.

        Stops at the ancestor in first_generation, or at the founder.
        """
        if first_generation < 0:
            raise ValueError("first generation must be non-negative")

        lineage = []
        node = self
        while node is not None and node.generation >= first_generation:
            lineage.append(node)
            node = node.parent

        lineage.reverse()
        return lineage

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.index})"
