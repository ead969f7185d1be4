"""
Failure raised when a data-model invariant is found to be broken.

These are programming errors: a mutation claimed by two lineages, a lineage
located in two demes, a deme producing two daughters in one step. The run
cannot be trusted after one is raised, so nothing in the model catches it.
"""


class ConsistencyError(RuntimeError):
    """An internal invariant of the tumor model was violated."""
