"""
Simulation driver for the deme-based tumor growth model.

Builds a founding lineage inside one deme, places it at the origin of the
tumor lattice and repeatedly advances an unrestricted environment,
recording summary metrics after each step.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd

from core.context import RunContext
from core.deme import Deme
from core.lineage import NeutralLineage
from core.metrics import compute_clone_count, compute_mutation_burden
from core.tumor import Tumor
from core.tumor_env import TumorEnv

from .parameter_profiles import NEUTRAL_DEMO_PROFILE, ParameterProfile

logger = logging.getLogger(__name__)


class Simulation:
    """Run a tumor simulation and record metrics at each step."""

    def __init__(
        self,
        profile: ParameterProfile = NEUTRAL_DEMO_PROFILE,
        seed: Optional[int] = None,
    ):
        self.profile = profile
        self.context = RunContext(seed)

        founder = NeutralLineage.create_founder(
            profile.growth_rate(),
            profile.mutation_rate_model(),
            profile.founder_cell_count,
            self.context,
        )
        self.tumor = Tumor.create(Deme.create(founder))
        self.env = TumorEnv.unrestricted(self.tumor, profile.env_parameters())

        # History
        self.history: List[Dict] = []
        self._record()

    @property
    def time_step(self) -> int:
        return self.env.time_step

    def step(self):
        """Advance one time step and record metrics."""
        self.env.advance()
        self._record()

        h = self.history[-1]
        logger.debug(
            "t=%d cells=%d demes=%d lineages=%d",
            h["time"], h["cells"], h["live_demes"], h["lineages"],
        )

    def run(self, steps: int = 50):
        """Run for a fixed number of steps, stopping early if the tumor dies."""
        if steps < 0:
            raise ValueError("steps must be non-negative")
        for _ in range(steps):
            if self.tumor.is_empty():
                logger.info("tumor extinct at t=%d", self.time_step)
                break
            self.step()
        logger.info("finished at t=%d with %d cells", self.time_step, self.tumor.count_cells())

    def run_until(self, cell_count: int, max_steps: int = 1000) -> bool:
        """Run until the tumor reaches cell_count cells.

        Returns:
            True if the target was reached within max_steps.
        """
        if cell_count <= 0:
            raise ValueError("cell_count must be positive")
        for _ in range(max_steps):
            if self.tumor.count_cells() >= cell_count:
                break
            if self.tumor.is_empty():
                logger.info("tumor extinct at t=%d", self.time_step)
                break
            self.step()

        reached = self.tumor.count_cells() >= cell_count
        logger.info(
            "target of %d cells %s at t=%d",
            cell_count, "reached" if reached else "not reached", self.time_step,
        )
        return reached

    def _record(self):
        tumor = self.tumor
        rg = tumor.compute_moment().radius_of_gyration() if not tumor.is_empty() else 0.0
        self.history.append({
            "time": self.time_step,
            "cells": tumor.count_cells(),
            "live_demes": tumor.count_live_demes(),
            "dead_demes": tumor.count_dead_demes(),
            "lineages": tumor.count_lineages(),
            "clones": compute_clone_count(tumor),
            "mutations": self.context.count_issued("mutation"),
            "radius_of_gyration": rg,
            "mutation_burden": compute_mutation_burden(tumor),
        })

    # --- Convenience accessors ---

    def cell_series(self) -> List[int]:
        return [h["cells"] for h in self.history]

    def deme_series(self) -> List[int]:
        return [h["live_demes"] for h in self.history]

    def radius_series(self) -> List[float]:
        return [h["radius_of_gyration"] for h in self.history]

    def burden_series(self) -> List[float]:
        return [h["mutation_burden"] for h in self.history]

    def history_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.history).set_index("time")

    def survey_frame(self) -> pd.DataFrame:
        """One row per mutation carried by at least one live cell."""
        columns = [
            "mutation", "creation_time", "age", "origin_x", "origin_y", "origin_z",
            "cell_count", "site_count", "mean_distance",
        ]
        rows = []
        surveys = self.tumor.survey_mutations(self.time_step)
        for mutation, survey in surveys.items():
            x, y, z = survey.origin.as_tuple()
            rows.append({
                "mutation": mutation.index,
                "creation_time": mutation.creation_time,
                "age": survey.age,
                "origin_x": x,
                "origin_y": y,
                "origin_z": z,
                "cell_count": survey.cell_count,
                "site_count": survey.site_count,
                "mean_distance": survey.mean_distance(),
            })
        frame = pd.DataFrame(rows, columns=columns)
        return frame.sort_values("mutation").reset_index(drop=True)

    def summary(self) -> str:
        if not self.history:
            return "No simulation data."
        h = self.history[-1]

        if h["cells"] == 0:
            status = "Extinct"
        elif h["live_demes"] == 1:
            status = "Single deme"
        else:
            status = "Spatially expanding"

        lines = [
            f"=== Simulation '{self.profile.name}' t={h['time']} ===",
            f"  Cells:     {h['cells']} ({status})",
            f"  Demes:     {h['live_demes']} live, {h['dead_demes']} dead",
            f"  Lineages:  {h['lineages']} ({h['clones']} live clones)",
            f"  Mutations: {h['mutations']} (burden {h['mutation_burden']:.2f} per cell)",
            f"  Rg:        {h['radius_of_gyration']:.2f} sites",
        ]
        return "\n".join(lines)
