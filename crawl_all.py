#!/usr/bin/env python3
"""
Wrapper script to crawl several directory partitions.

Each partition runs as its own `main.py` process with its own output,
checkpoint and log files.

Usage:
    python crawl_all.py                        # Crawl all partitions sequentially
    python crawl_all.py --parallel 4           # Run 4 partitions in parallel
    python crawl_all.py --partitions a,b,c     # Only specific partitions
    python crawl_all.py --exclude 0-9          # Exclude specific partitions
    python crawl_all.py --dry-run              # Show what would be crawled
"""

import argparse
import json
import subprocess
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from theorg_crawler.config import DEFAULT_SETTINGS, get_partition_config, list_partitions
from theorg_crawler.storage import Ledger


def read_partition_progress(partition: str, output_dir: str) -> dict:
    """
    Read a partition's checkpoint and output files.

    Returns dict with: next_page, processed, rows
    """
    config = get_partition_config(partition, output_dir)
    ledger = Ledger(config.checkpoint_file).load()

    rows = 0
    if config.output_file.exists():
        with open(config.output_file, encoding="utf-8") as f:
            rows = max(sum(1 for line in f if line.strip()) - 1, 0)

    return {
        "next_page": ledger.resume_page,
        "processed": len(ledger),
        "rows": rows,
    }


def crawl_partition(partition: str, output_dir: str, concurrency: int,
                    verbose: bool = False) -> dict:
    """
    Crawl a single partition and return results.

    Returns dict with: partition, status, duration, next_page, processed, rows, error
    """
    start_time = time.time()
    result = {
        "partition": partition,
        "status": "pending",
        "duration": 0,
        "next_page": 0,
        "processed": 0,
        "rows": 0,
        "error": None
    }

    cmd = [sys.executable, "main.py", partition,
           f"--output-dir={output_dir}", f"--concurrency={concurrency}", "--no-progress"]
    if verbose:
        cmd.append("--verbose")

    print(f"\n{'='*60}")
    print(f"STARTING: {partition}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'='*60}")

    try:
        process = subprocess.run(cmd, cwd=project_root, text=True)
    except OSError as e:
        result["status"] = "error"
        result["error"] = str(e)
    else:
        if process.returncode == 0:
            result["status"] = "success"
        else:
            result["status"] = "failed"
            result["error"] = f"Exit code: {process.returncode}"

    result.update(read_partition_progress(partition, output_dir))
    result["duration"] = time.time() - start_time
    return result


def crawl_partition_wrapper(args: tuple) -> dict:
    """Wrapper for ProcessPoolExecutor"""
    partition, output_dir, concurrency, verbose = args
    return crawl_partition(partition, output_dir, concurrency, verbose)


def select_partitions(only: str = None, exclude: str = None) -> list[str]:
    """
    Resolve --partitions / --exclude into an ordered list of partition keys.

    Raises:
        ValueError: If an unknown partition is requested
    """
    all_partitions = list_partitions()

    if only:
        selected = [p.strip().lower() for p in only.split(",") if p.strip()]
        invalid = [p for p in selected if p not in all_partitions]
        if invalid:
            raise ValueError(f"Unknown partitions: {', '.join(invalid)}")
    else:
        selected = all_partitions

    if exclude:
        excluded = {p.strip().lower() for p in exclude.split(",")}
        selected = [p for p in selected if p not in excluded]

    return selected


def print_summary(results: list[dict], total_duration: float, output_dir: str):
    """Print summary of all crawl results"""
    print("\n")
    print("#" * 70)
    print("CRAWL SUMMARY")
    print("#" * 70)

    success_count = sum(1 for r in results if r["status"] == "success")
    failed_count = len(results) - success_count
    total_rows = sum(r["rows"] for r in results)

    print(f"\nTotal partitions: {len(results)} ({success_count} success, {failed_count} failed)")
    print(f"Total duration: {total_duration/60:.1f} minutes")
    print(f"Total rows: {total_rows:,}")

    print(f"\n{'Partition':<10} {'Status':<10} {'Duration':<12} {'Next page':<10} {'Processed':<10} {'Rows':<10}")
    print("-" * 70)

    for r in sorted(results, key=lambda x: x["partition"]):
        duration_str = f"{r['duration']/60:.1f} min"
        status_icon = "✓" if r["status"] == "success" else "✗"
        print(f"{r['partition']:<10} {status_icon} {r['status']:<8} {duration_str:<12} "
              f"{r['next_page']:<10} {r['processed']:<10} {r['rows']:<10}")
        if r["error"]:
            print(f"  └─ Error: {r['error']}")

    print("-" * 70)

    summary_file = Path(output_dir) / "crawl_summary.json"
    summary_file.parent.mkdir(parents=True, exist_ok=True)
    summary = {
        "crawled_at": datetime.now().isoformat(),
        "total_duration_seconds": total_duration,
        "total_partitions": len(results),
        "success_count": success_count,
        "failed_count": failed_count,
        "total_rows": total_rows,
        "results": results
    }

    with open(summary_file, "w", encoding="utf-8") as f:
        json.dump(summary, f, ensure_ascii=False, indent=2)

    print(f"\nSummary saved to: {summary_file}")


def main():
    parser = argparse.ArgumentParser(
        description="Crawl several TheOrg directory partitions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python crawl_all.py                         # Crawl all partitions
  python crawl_all.py --parallel 4            # Run 4 partitions simultaneously
  python crawl_all.py --partitions a,b        # Only specific partitions
  python crawl_all.py --exclude 0-9           # Exclude 0-9
  python crawl_all.py --dry-run               # Preview without crawling
        """
    )

    parser.add_argument("--parallel", type=int, default=1,
                        help="Number of partitions to crawl in parallel (default: 1)")
    parser.add_argument("--partitions", type=str, default=None,
                        help="Comma-separated list of partitions to crawl")
    parser.add_argument("--exclude", type=str, default=None,
                        help="Comma-separated list of partitions to exclude")
    parser.add_argument("--concurrency", type=int, default=DEFAULT_SETTINGS.concurrency_limit,
                        help="Simultaneous company fetches per partition")
    parser.add_argument("--output-dir", default="data", help="Output directory (default: data/)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Show what would be crawled without running")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose logging")

    args = parser.parse_args()

    try:
        partitions = select_partitions(args.partitions, args.exclude)
    except ValueError as e:
        print(f"Error: {e}")
        print(f"Available: {', '.join(list_partitions())}")
        return

    if not partitions:
        print("No partitions to crawl!")
        return

    if args.dry_run:
        print("\n[DRY RUN] Would crawl the following partitions:")
        print("-" * 50)
        for partition in partitions:
            progress = read_partition_progress(partition, args.output_dir)
            print(f"  {partition:<6} (resume at page {progress['next_page']}, "
                  f"{progress['processed']} processed)")
        print("-" * 50)
        print(f"\nTotal: {len(partitions)} partitions")
        print(f"Parallel partitions: {args.parallel}")
        return

    print("#" * 70)
    print("THEORG CRAWLER - ALL PARTITIONS")
    print("#" * 70)
    print(f"Partitions: {', '.join(partitions)}")
    print(f"Parallel partitions: {args.parallel}")
    print(f"Concurrency per partition: {args.concurrency}")
    print("#" * 70)

    start_time = time.time()
    results = []

    if args.parallel > 1:
        print(f"\nRunning {args.parallel} partitions in parallel...")

        crawl_args = [
            (partition, args.output_dir, args.concurrency, args.verbose)
            for partition in partitions
        ]

        with ProcessPoolExecutor(max_workers=args.parallel) as executor:
            futures = {executor.submit(crawl_partition_wrapper, arg): arg[0] for arg in crawl_args}

            for future in as_completed(futures):
                partition = futures[future]
                result = future.result()
                results.append(result)
                print(f"\n[COMPLETED] {partition}: {result['status']} ({result['duration']/60:.1f} min)")
    else:
        for i, partition in enumerate(partitions):
            print(f"\n[{i+1}/{len(partitions)}] Processing {partition}...")
            result = crawl_partition(partition, args.output_dir, args.concurrency, args.verbose)
            results.append(result)
            print(f"[COMPLETED] {partition}: {result['status']} ({result['duration']/60:.1f} min)")

    total_duration = time.time() - start_time
    print_summary(results, total_duration, args.output_dir)


if __name__ == "__main__":
    main()
