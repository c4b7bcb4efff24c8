#!/usr/bin/env python3
"""
Analyze saved allocation simulation results.

Usage:
    python analyze_results.py --results results/
    python analyze_results.py --results "results/simulation_*.json" --compare
"""

import argparse
import json
from pathlib import Path
from typing import List, Dict


def load_results(results_dir: Path) -> List[Dict]:
    """Load all result files from directory."""
    results = []

    for result_file in sorted(results_dir.glob("*.json")):
        with open(result_file) as f:
            data = json.load(f)
            data['_filename'] = result_file.name
            results.append(data)

    return results


def _runs(result: Dict) -> List[Dict]:
    """Single-run results as a list (comparison files hold several runs)."""
    if 'runs' in result:
        return result['runs']
    return [result]


def print_summary(results: List[Dict]) -> None:
    """Print summary of results."""
    print("\n" + "="*70)
    print("RESULTS SUMMARY")
    print("="*70)

    for result in results:
        for run in _runs(result):
            print(f"\n{result.get('_filename', 'Unknown')} [{run.get('scoring_policy', '?')}]:")
            print(f"  Cycles: {run.get('total_cycles', 0):,}")
            print(f"  Redistributions: {run.get('redistributions', 0):,}")
            print(f"  Mean utilization: {run.get('utilization', {}).get('mean', 0)*100:.1f}%")

            for context_id, stats in run.get('context_results', {}).items():
                print(f"\n  Context {context_id} ({stats.get('workload', 'unknown')}):")
                print(f"    Mean registers: {stats.get('mean_allocation', 0):.2f}")
                print(f"    Range: {stats.get('min_allocation', 0)}-{stats.get('max_allocation', 0)}")
                print(f"    Miss rate: {stats.get('final_miss_rate', 0)*100:.3f}%")


def generate_comparison_table(results: List[Dict]) -> str:
    """Generate comparison table in markdown format."""
    runs = [run for result in results for run in _runs(result)]
    if not runs:
        return "No results to compare"

    policies = [run.get('scoring_policy', '?') for run in runs]

    # Workload per context, from the first run that has it
    workloads = {}
    for run in runs:
        for context_id, stats in run.get('context_results', {}).items():
            workloads.setdefault(context_id, stats.get('workload', 'unknown'))

    lines = [
        "| Context | Workload | " + " | ".join(policies) + " |",
        "|" + "---|" * (len(policies) + 2)
    ]

    for context_id in sorted(workloads, key=lambda c: int(c)):
        values = []
        for run in runs:
            stats = run.get('context_results', {}).get(context_id, {})
            values.append(f"{stats.get('mean_allocation', float('nan')):.2f}")

        lines.append(f"| {context_id} | {workloads[context_id]} | " + " | ".join(values) + " |")

    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(description="Analyze simulation results")
    parser.add_argument('--results', '-r', type=str, required=True,
                       help='Results directory or file pattern')
    parser.add_argument('--compare', '-c', action='store_true',
                       help='Generate comparison table')

    args = parser.parse_args()

    results_path = Path(args.results)

    # Load results
    if results_path.is_dir():
        results = load_results(results_path)
    else:
        # Glob pattern
        results = []
        for f in sorted(Path('.').glob(args.results)):
            with open(f) as fp:
                data = json.load(fp)
                data['_filename'] = f.name
                results.append(data)

    if not results:
        print("No results found")
        return

    print(f"Loaded {len(results)} result file(s)")

    print_summary(results)

    if args.compare:
        print("\n" + "="*70)
        print("COMPARISON TABLE (Markdown)")
        print("="*70)
        print(generate_comparison_table(results))


if __name__ == "__main__":
    main()
