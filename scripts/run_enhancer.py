import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from data_structures import default_params
from enhancer_sim import EnhancerSimulator, SimulationNotConverged
from aggregate import summarize_levels
from report import format_rate_table, format_summary, save_plots
import numpy as np
import argparse

# Every numeric EnhancerParams field can be overridden from the command line.
INT_FIELDS = ["max_level", "min_downgrade_level", "min_halve_level", "min_reset_level"]
FLOAT_FIELDS = [
    "value_increment", "min_value",
    "upgrade_rate_curve", "max_upgrade_rate", "min_upgrade_rate",
    "downgrade_rate_curve", "max_downgrade_rate", "halve_ratio", "reset_ratio",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Simulate a population of actors enhancing from level 0 to max level')
    parser.add_argument('--actors', type=int, default=10000,
                        help='Number of simulated actors (default: 10000)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the random generator (default: fresh entropy)')
    parser.add_argument('--max-rounds', type=int, default=None,
                        help='Give up after this many rounds if some actors are still below max level (default: no limit)')
    parser.add_argument('--report-every', type=int, default=2500,
                        help='Print a progress line every N rounds (default: 2500)')
    parser.add_argument('--out-dir', type=str, default='.',
                        help='Directory for box.png and scatter.png (default: current directory)')
    parser.add_argument('--y-max', type=float, default=800.0,
                        help='Upper y-axis limit for both plots (default: 800)')
    parser.add_argument('--no-plots', action='store_true',
                        help='Skip drawing plots')
    parser.add_argument('--progress', action='store_true',
                        help='Show a tqdm progress bar over rounds')
    parser.add_argument('--verbose', action='store_true',
                        help='Print simulator progress lines and the per-level summary table')

    defaults = default_params()
    for name in INT_FIELDS:
        parser.add_argument('--' + name.replace('_', '-'), type=int, default=getattr(defaults, name),
                            help=f'(default: {getattr(defaults, name)})')
    for name in FLOAT_FIELDS:
        parser.add_argument('--' + name.replace('_', '-'), type=float, default=getattr(defaults, name),
                            help=f'(default: {getattr(defaults, name)})')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_rounds is not None and args.max_rounds < 1:
        parser.error(f"--max-rounds must be >= 1, got {args.max_rounds}")

    params = default_params().replace(**{name: getattr(args, name) for name in INT_FIELDS + FLOAT_FIELDS})
    rng = np.random.default_rng(args.seed)

    try:
        sim = EnhancerSimulator(
            params,
            actor_count=args.actors,
            rng=rng,
            verbose=args.verbose,
            progress=args.progress,
            report_every=args.report_every,
        )
    except (TypeError, ValueError) as e:
        print(f"Invalid parameters: {e}")
        return 2

    print("Computed enhancement rates:")
    print(format_rate_table(sim.rates), end="")

    try:
        result = sim.run(max_rounds=args.max_rounds)
    except SimulationNotConverged as e:
        print(f"Simulation did not converge: {e}")
        return 1

    if args.verbose:
        print("\nFirst-arrival attempts per level:")
        print(format_summary(summarize_levels(result.distributions)), end="")

    if not args.no_plots:
        print("Drawing scatterplot and box plot")
        box, scatter = save_plots(result.distributions, result.points, out_dir=args.out_dir, rng=rng, y_max=args.y_max)
        print(f"Data saved to {box} and {scatter}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
