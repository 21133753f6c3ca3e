"""
Command line entry point for stress tests and topology sweeps.

    contagion-sim stress --topology ring --lam 0.5 --p 0.7 --narrate
    contagion-sim sweep --heatmap sweep.png
"""

import argparse
import logging
from typing import List, Optional

from network_generator import full_mesh_network, ring_network
from shock_model import Coefficients, DefaultRule
from simulation_driver import (
    DEFAULT_GRID_START,
    DEFAULT_GRID_STEP,
    DEFAULT_GRID_STOP,
    coefficient_grid,
    format_report,
    stress_test,
    sweep,
)

TOPOLOGIES = {
    'ring': ring_network,
    'mesh': full_mesh_network,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Interbank contagion simulator')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every shock')
    sub = parser.add_subparsers(dest='command', required=True)

    stress = sub.add_parser('stress', help='Default one bank and run the cascade')
    stress.add_argument('--topology', choices=sorted(TOPOLOGIES), default='ring')
    stress.add_argument('--banks', type=int, default=5)
    stress.add_argument('--balance', type=float, default=1000.0)
    stress.add_argument('--total-exposure', type=float, default=5000.0,
                        help='Exposure per bank, split evenly among neighbours')
    stress.add_argument('--lam', type=float, default=0.5, help='lambda_c = lambda_f')
    stress.add_argument('--p', type=float, default=0.7, help='Panic withdrawal rate')
    stress.add_argument('--no-panic', action='store_true')
    stress.add_argument('--bank', default='1', help='Bank that defaults first')
    stress.add_argument('--inclusive-threshold', action='store_true',
                        help='Default at balance <= 0 instead of < 0')
    stress.add_argument('--narrate', action='store_true', help='Print every event')
    stress.add_argument('--plot', default=None, help='Save the final network to this file')

    grid = sub.add_parser('sweep', help='Compare full mesh (A) against ring (B)')
    grid.add_argument('--banks', type=int, default=5)
    grid.add_argument('--balance', type=float, default=1000.0)
    grid.add_argument('--total-exposure', type=float, default=10000.0)
    grid.add_argument('--bank', default='1')
    grid.add_argument('--start', type=float, default=DEFAULT_GRID_START)
    grid.add_argument('--stop', type=float, default=DEFAULT_GRID_STOP)
    grid.add_argument('--step', type=float, default=DEFAULT_GRID_STEP)
    grid.add_argument('--heatmap', default=None, help='Save a heatmap to this file')
    return parser


def run_stress(args: argparse.Namespace) -> int:
    graph = TOPOLOGIES[args.topology](args.banks, args.balance, args.total_exposure)
    coefficients = Coefficients.uniform(args.lam, panic_rate=args.p, panic_enabled=not args.no_panic)
    rule = DefaultRule.NON_POSITIVE if args.inclusive_threshold else DefaultRule.NEGATIVE

    print(f"\n{'='*60}")
    print(f"STRESS TEST: {args.topology}, {args.banks} banks, bank {args.bank} defaults")
    print(f"{'='*60}")
    print(f"  lambda_c = {coefficients.lambda_c:.2f}  lambda_f = {coefficients.lambda_f:.2f}  "
          f"p = {coefficients.panic_rate:.2f}  panic = {coefficients.panic_enabled}")

    result = stress_test(graph, coefficients, args.bank, default_rule=rule)

    if args.narrate:
        print()
        for event in result.events:
            print(f"  [{event.round_number}] {event.describe()}")

    print(f"\nFinal balances:")
    for bank in result.graph:
        status = 'BANKRUPT' if bank.bankrupt else 'solvent'
        print(f"  {bank.bank_id:>4}: {bank.balance:12.2f}  {status}")
    print(f"\nBankrupt banks: {result.bankrupt_count}/{len(result.graph)}")

    if args.plot:
        import matplotlib.pyplot as plt
        from visualize_network import draw_bank_graph

        draw_bank_graph(result.graph)
        plt.tight_layout()
        plt.savefig(args.plot, dpi=150)
        print(f"✓ Saved network to: {args.plot}")
    return 0


def run_sweep(args: argparse.Namespace) -> int:
    mesh = full_mesh_network(args.banks, args.balance, args.total_exposure)
    ring = ring_network(args.banks, args.balance, args.total_exposure)
    values = coefficient_grid(args.start, args.stop, args.step)

    report = sweep(mesh, ring, values, values, args.bank)

    print(f"\n{'='*60}")
    print("CELLS WHERE THE RING ENDS WITH FEWER BANKRUPTCIES")
    print(f"{'='*60}")
    lines = format_report(report)
    print(lines if lines else "  none")

    if args.heatmap:
        import matplotlib.pyplot as plt
        from visualize_network import plot_sweep_heatmap

        plot_sweep_heatmap(report)
        plt.tight_layout()
        plt.savefig(args.heatmap, dpi=150)
        print(f"✓ Saved heatmap to: {args.heatmap}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )
    if args.command == 'stress':
        return run_stress(args)
    return run_sweep(args)


if __name__ == "__main__":
    raise SystemExit(main())
