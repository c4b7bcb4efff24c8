#!/usr/bin/env python3
"""
SMT register allocation simulation runner.

Runs synthetic workloads against the register allocator and reports how
the rename register pool was shared. With --compare, the same workload mix
is run under every scoring policy.
"""

import sys
from pathlib import Path
import argparse

# Add project to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from smt_regalloc.allocator.config import AllocatorConfig, ConfigurationError
from smt_regalloc.allocator.scoring import available_policies
from smt_regalloc.simulation.simulator import (
    SMTSimulator,
    SimulationConfig,
    ComparativeSimulator,
)
from smt_regalloc.utils.helpers import (
    load_config,
    save_config,
    save_results,
    setup_logging,
    create_allocator_from_config,
    default_config_path,
    Timer,
    format_number,
)


def load_workloads(config: dict) -> dict:
    """Context id -> workload name from the 'contexts' section."""
    return {int(entry['id']): entry['workload'] for entry in config.get('contexts', [])}


def run_single(config: dict, sim_config: SimulationConfig, policy: str = None) -> dict:
    """Run one simulation and print the final state."""
    allocator = create_allocator_from_config(config, scoring_policy=policy)
    simulator = SMTSimulator(allocator, sim_config)

    for context_id, workload in load_workloads(config).items():
        simulator.add_context(context_id, workload)

    print("\nInitial state:")
    print(allocator.format_allocation_state())

    results = simulator.run()

    print("\nFinal state:")
    print(allocator.format_allocation_state())
    print()
    print(simulator.metrics.get_comparison_table())
    print()
    print(results.get_summary())

    return results.to_dict()


def run_compare(config: dict, sim_config: SimulationConfig) -> dict:
    """Run every scoring policy on the same workload mix."""
    allocator_config = AllocatorConfig.from_dict(config.get('allocator', {}))
    comparison = ComparativeSimulator(allocator_config, sim_config)

    aggregated = comparison.run_comparison(load_workloads(config), available_policies())

    print("\n" + "="*70)
    print("POLICY COMPARISON")
    print("="*70)
    for policy, stats in aggregated['per_policy'].items():
        print(f"\n{policy}:")
        print(f"  Redistributions: {stats['redistributions']:,}")
        print(f"  Allocation spread: {stats['allocation_spread']:.2f}")
        for context_id, mean in stats['mean_allocation'].items():
            print(f"  Context {context_id}: {mean:.2f} registers")

    return {
        'aggregated': aggregated,
        'runs': [r.to_dict() for r in comparison.results],
    }


def main():
    parser = argparse.ArgumentParser(description='Run SMT register allocation simulation')
    parser.add_argument('--config', '-c', type=str, default=None,
                       help='YAML configuration file (default: config/default.yaml)')
    parser.add_argument('--cycles', '-n', type=int, default=None,
                       help='Cycles to simulate (overrides config)')
    parser.add_argument('--policy', '-p', type=str, default=None,
                       choices=available_policies(),
                       help='Scoring policy (overrides config)')
    parser.add_argument('--compare', action='store_true',
                       help='Compare all scoring policies')
    parser.add_argument('--output', '-o', type=str, default='results',
                       help='Output directory')
    parser.add_argument('--log-level', type=str, default='INFO',
                       help='Logging level')
    parser.add_argument('--log-file', type=str, default=None,
                       help='Optional log file')
    parser.add_argument('--quiet', '-q', action='store_true',
                       help='Disable progress bar')

    args = parser.parse_args()

    setup_logging(args.log_level, args.log_file)

    config_path = Path(args.config) if args.config else default_config_path()
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    sim_config = SimulationConfig.from_dict(config.get('simulation', {}))
    if args.cycles is not None:
        sim_config.total_cycles = args.cycles
    if args.quiet:
        sim_config.verbose = False

    print(f"Configuration: {config_path}")
    print(f"Cycles: {format_number(sim_config.total_cycles, precision=1)}")

    try:
        with Timer("Simulation"):
            if args.compare:
                results = run_compare(config, sim_config)
            else:
                results = run_single(config, sim_config, args.policy)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    output_paths = save_results(results, args.output,
                                name='comparison' if args.compare else 'simulation',
                                formats=('json',))
    # Effective configuration, with command line overrides applied
    config['simulation'] = vars(sim_config).copy()
    config_path = output_paths['json'].with_name(f"{output_paths['json'].stem}_config.yaml")
    save_config(config, config_path)

    print(f"\nResults saved to: {output_paths['json']}")
    print(f"Configuration saved to: {config_path}")


if __name__ == '__main__':
    main()
