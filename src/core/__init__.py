"""Propagating entities of the tumor model: lineages, cells, demes, tumor."""
