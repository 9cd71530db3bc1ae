#!/usr/bin/env python3
"""
Main entry point for kd-tree range search.

This script provides a command-line interface for building the static
kd-tree and running orthogonal range queries against it.
"""

import argparse
import sys
import time

import numpy as np

from kdsearch import KDSearchArray, PointCloud, brute_force_search
from kdsearch.visualization import plot_partition, plot_query

DEMO_POINTS = [(2, 1), (2, 2), (4, 2), (6, 2), (3, 3), (5, 4)]
DEMO_QUERIES = [((2, 0), (4, 4)), ((4, 2), (10, 5))]


def run_demo(strategy='sort'):
    """Build the six-point sample and print the result of each sample query."""
    points = np.array(DEMO_POINTS)
    index = KDSearchArray(dimension=2, strategy=strategy)
    if not index.prepare(points):
        return 1

    output = []
    for query_min, query_max in DEMO_QUERIES:
        index.find(points, query_min, query_max, output)
        for i in output:
            print(i)
        print()
        output.clear()
    return 0


def run_query(path, query_min, query_max, strategy='sort', pivot='random', seed=None):
    """Load a point file and print the indices inside the query box."""
    print("\n" + "="*80)
    print("Range Query")
    print("="*80)

    print(f"\nLoading points from {path}...")
    cloud = PointCloud.from_file(path)
    print(f"  Points: {len(cloud):,} ({cloud.dimension}-D)")

    index = KDSearchArray(strategy=strategy, pivot=pivot, seed=seed)
    if not index.prepare(cloud):
        print("Could not build the kd-tree")
        return None
    print(f"  ✓ kd-tree ready (array length {index.length}, height {index.height})")

    result = index.find(cloud, query_min, query_max)
    print(f"\nQuery box: {list(query_min)} .. {list(query_max)}")
    for i in sorted(result):
        print(i)
    print(f"\nMatches: {len(result)}")
    return result


def run_benchmark(n_points=100000, dimension=3, n_queries=100, strategy='sort',
                  pivot='random', seed=0, n_jobs=1):
    """Time build and queries on random data and check results against a linear scan."""
    print("\n" + "="*80)
    print(f"RUNTIME BENCHMARKS - {strategy.upper()} PARTITION")
    print("="*80)
    print(f"Points: {n_points:,}  Dimension: {dimension}  Queries: {n_queries}")

    rng = np.random.default_rng(seed)
    cloud = PointCloud.random(n_points, dimension, seed=seed)

    print(f"\nBuilding kd-tree...")
    build_start = time.time()
    index = KDSearchArray(dimension=dimension, strategy=strategy, pivot=pivot, seed=seed)
    if not index.prepare(cloud):
        print("Could not build the kd-tree")
        return None
    build_time = time.time() - build_start
    print(f"  ✓ kd-tree built in {build_time:.3f}s (array length {index.length})")

    corners = rng.uniform(0.0, 1.0, size=(n_queries, 2, dimension))
    boxes = [(c.min(axis=0), c.max(axis=0)) for c in corners]

    print(f"\nRunning {n_queries} queries (n_jobs={n_jobs})...")
    query_start = time.time()
    results = index.find_many(cloud, boxes, n_jobs=n_jobs)
    query_time = time.time() - query_start

    scan_start = time.time()
    expected = [brute_force_search(cloud.points, lo, hi) for lo, hi in boxes]
    scan_time = time.time() - scan_start

    mismatches = sum(
        1 for got, want in zip(results, expected)
        if not np.array_equal(np.sort(np.asarray(got, dtype=np.int64)), want)
    )
    matches = sum(len(r) for r in results)

    print(f"\n{'='*80}")
    print("RESULTS")
    print("="*80)
    print(f"kd-tree queries:   {query_time:.3f}s")
    print(f"Linear scan:       {scan_time:.3f}s")
    print(f"Total matches:     {matches:,}")
    if mismatches:
        print(f"✗ {mismatches} queries differ from the linear scan")
    else:
        print(f"✓ All queries agree with the linear scan")

    return {
        'build_time': build_time,
        'query_time': query_time,
        'scan_time': scan_time,
        'matches': matches,
        'mismatches': mismatches,
    }


def run_plot(path=None, n_points=200, query_min=None, query_max=None, strategy='sort',
             seed=0, save_path='kd_partition.png', query_save_path='kd_query.png', show=True):
    """Plot the partition of a 2-D collection and, when a box is given, the query result."""
    if path is not None:
        cloud = PointCloud.from_file(path)
    else:
        cloud = PointCloud.random(n_points, 2, seed=seed)

    index = KDSearchArray(dimension=2, strategy=strategy, seed=seed)
    if not index.prepare(cloud):
        print("Could not build the kd-tree")
        return None

    query = None
    result = None
    if query_min is not None and query_max is not None:
        query = (query_min, query_max)
        result = index.find(cloud, query_min, query_max)
        print(f"Matches: {len(result)}")
        plot_query(cloud, query, result, save_path=query_save_path, show=show)

    return plot_partition(cloud, index, query=query, result=result,
                          save_path=save_path, show=show)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='kd-tree Orthogonal Range Search',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Six-point sample with the two sample queries
  python run_search.py demo

  # Query a point file
  python run_search.py query points.csv --min 0 0 --max 10 10

  # Benchmark against a linear scan
  python run_search.py benchmark --points 100000 --dimension 3 --strategy select

  # Plot the partition of random 2-D points with a query box
  python run_search.py plot --min 0.2 0.2 --max 0.6 0.5
        """
    )

    subparsers = parser.add_subparsers(dest='mode', help='Run mode')
    strategies = ['sort', 'select', 'argpartition']

    demo_parser = subparsers.add_parser('demo', help='Six-point sample queries')
    demo_parser.add_argument('--strategy', type=str, default='sort', choices=strategies,
                             help='Median partition strategy')

    query_parser = subparsers.add_parser('query', help='Range query over a point file')
    query_parser.add_argument('file', type=str, help='Point file (.csv, .txt, .ply, .pcd, .xyz)')
    query_parser.add_argument('--min', type=float, nargs='+', required=True,
                              help='Lower corner of the query box')
    query_parser.add_argument('--max', type=float, nargs='+', required=True,
                              help='Upper corner of the query box')
    query_parser.add_argument('--strategy', type=str, default='sort', choices=strategies,
                              help='Median partition strategy')
    query_parser.add_argument('--pivot', type=str, default='random', choices=['random', 'middle'],
                              help='Pivot rule for the select strategy')
    query_parser.add_argument('--seed', type=int, default=None, help='Seed for random pivots')

    bench_parser = subparsers.add_parser('benchmark', help='Benchmark against a linear scan')
    bench_parser.add_argument('--points', type=int, default=100000, help='Number of random points')
    bench_parser.add_argument('--dimension', type=int, default=3, help='Point dimension')
    bench_parser.add_argument('--queries', type=int, default=100, help='Number of random queries')
    bench_parser.add_argument('--strategy', type=str, default='sort', choices=strategies,
                              help='Median partition strategy')
    bench_parser.add_argument('--pivot', type=str, default='random', choices=['random', 'middle'],
                              help='Pivot rule for the select strategy')
    bench_parser.add_argument('--seed', type=int, default=0, help='Random seed')
    bench_parser.add_argument('--jobs', type=int, default=1, help='Parallel query jobs (-1 for all cores)')

    plot_parser = subparsers.add_parser('plot', help='Plot a 2-D partition')
    plot_parser.add_argument('--file', type=str, default=None, help='2-D point file (default: random points)')
    plot_parser.add_argument('--points', type=int, default=200, help='Number of random points')
    plot_parser.add_argument('--min', type=float, nargs=2, default=None, help='Lower corner of a query box')
    plot_parser.add_argument('--max', type=float, nargs=2, default=None, help='Upper corner of a query box')
    plot_parser.add_argument('--strategy', type=str, default='sort', choices=strategies,
                             help='Median partition strategy')
    plot_parser.add_argument('--seed', type=int, default=0, help='Random seed')
    plot_parser.add_argument('--output', type=str, default='kd_partition.png', help='Path of the saved plot')
    plot_parser.add_argument('--query-output', type=str, default='kd_query.png',
                             help='Path of the saved query plot (written when --min and --max are given)')
    plot_parser.add_argument('--no-show', action='store_true', help='Do not open the plot window')

    args = parser.parse_args(argv)

    # Default to the sample queries if no mode is given
    if args.mode is None or args.mode == 'demo':
        return run_demo(getattr(args, 'strategy', 'sort'))

    if args.mode == 'query':
        if len(args.min) != len(args.max):
            parser.error('--min and --max need the same number of components')
        result = run_query(args.file, args.min, args.max, strategy=args.strategy,
                           pivot=args.pivot, seed=args.seed)
        return 0 if result is not None else 1
    elif args.mode == 'benchmark':
        stats = run_benchmark(args.points, args.dimension, args.queries, strategy=args.strategy,
                              pivot=args.pivot, seed=args.seed, n_jobs=args.jobs)
        return 0 if stats is not None and stats['mismatches'] == 0 else 1
    elif args.mode == 'plot':
        lines = run_plot(args.file, args.points, args.min, args.max, strategy=args.strategy,
                         seed=args.seed, save_path=args.output,
                         query_save_path=args.query_output, show=not args.no_show)
        return 0 if lines is not None else 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
