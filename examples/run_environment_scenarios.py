"""
Environment Scenarios: growth constraints at the lineage and deme level
=======================================================================

Growth overrides (slow growth, no growth, no birth) act on the propagators
an environment is handed to directly; a deme passes its lineages the
unwrapped component environment, so those scenarios advance a lone founder
lineage. Deme division overrides act on a deme. Resulting cell counts are
saved to results/ folder.

Usage: python examples/run_environment_scenarios.py
"""

import sys
import os
import json
import argparse
import logging

# Ensure src is on path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from core.context import RunContext
from core.deme import Deme
from core.growth_rate import GrowthRate
from core.lineage import NeutralLineage
from core.mutation import MutationRate
from core.tumor_env import EnvParameters, TumorEnv

RESULTS_DIR = os.path.join(os.path.dirname(__file__), "..", "results")

logger = logging.getLogger("environment_scenarios")

# (name, level, restriction applied to the unrestricted environment)
SCENARIOS = [
    ("Unrestricted lineage", "lineage", lambda env: env),
    ("Slow growth (50%)", "lineage", lambda env: env.slow_growth(0.5)),
    ("No growth", "lineage", lambda env: env.no_growth()),
    ("No birth", "lineage", lambda env: env.no_birth()),
    ("Unrestricted deme", "deme", lambda env: env),
    ("No deme division", "deme", lambda env: env.no_deme_division()),
]


def run_scenario(name, level, restrict, seed=42, steps=20, net_rate=0.3,
                 mutation_rate=0.05, init_size=200, max_deme_size=1000):
    """Advance one lineage or one deme for a number of steps."""
    context = RunContext(seed)
    founder = NeutralLineage.create_founder(
        GrowthRate.net(net_rate), MutationRate.poisson(mutation_rate), init_size, context
    )
    parameters = EnvParameters(maximum_deme_size=max_deme_size)

    if level == "lineage":
        env = restrict(TumorEnv.unrestricted(founder, parameters))
        cells = [founder.count_cells()]
        for _ in range(steps):
            env.advance()
            cells.append(sum(lineage.count_cells() for lineage in env.view_propagators()))
            if cells[-1] == 0:
                logger.info("%s: extinct after %d steps", name, len(cells) - 1)
                break
        return {
            "scenario": name,
            "level": level,
            "environment": repr(env),
            "final_cells": cells[-1],
            "divisions": 0,
            "lineages": len(env.view_propagators()),
            "cell_series": cells,
        }

    deme = Deme.create(founder)
    env = restrict(TumorEnv.unrestricted(deme, parameters))
    cells = [deme.count_cells()]
    divisions = 0
    for _ in range(steps):
        for daughter in deme.advance(env):
            divisions += 1
            logger.debug("%s: %d cells moved to %r", name, daughter.count_cells(), daughter)
        cells.append(deme.count_cells())
        if deme.is_dead():
            logger.info("%s: deme extinct after %d steps", name, len(cells) - 1)
            break

    return {
        "scenario": name,
        "level": level,
        "environment": repr(env),
        "final_cells": cells[-1],
        "divisions": divisions,
        "lineages": deme.count_lineages(),
        "cell_series": cells,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Compare deme growth under composed environment constraints."
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed.")
    parser.add_argument("--steps", type=int, default=20, help="Time steps per scenario.")
    parser.add_argument(
        "--net-rate", type=float, default=0.3, help="Net growth rate of the founder."
    )
    parser.add_argument(
        "--max-deme-size", type=int, default=1000, help="Maximum deme size."
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s %(message)s")

    print("=" * 60)
    print("  Deme Growth: Environment Scenario Comparison")
    print("=" * 60)
    print(
        "Run config: "
        f"seed={args.seed}, steps={args.steps}, "
        f"net_rate={args.net_rate}, max_deme_size={args.max_deme_size}"
    )

    all_results = []
    for name, level, restrict in SCENARIOS:
        result = run_scenario(
            name,
            level,
            restrict,
            seed=args.seed,
            steps=args.steps,
            net_rate=args.net_rate,
            max_deme_size=args.max_deme_size,
        )
        print(f"\n--- {name} ---")
        print(f"  Environment:  {result['environment']}")
        print(f"  Final cells:  {result['final_cells']}")
        print(f"  Divisions:    {result['divisions']}")
        print(f"  Lineages:     {result['lineages']}")
        all_results.append(result)

    os.makedirs(RESULTS_DIR, exist_ok=True)
    results_file = os.path.join(RESULTS_DIR, "environment_scenarios.json")
    with open(results_file, "w") as f:
        json.dump(all_results, f, indent=2)
    print(f"\nResults saved to {results_file}")


if __name__ == "__main__":
    main()
