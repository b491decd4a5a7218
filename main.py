# main.py
import argparse
import json
import logging
import sys

from benchmark import BenchmarkRunner, compare_policies
from errors import CacheError
from visualize import plot_hit_miss_rate, plot_latency_vs_throughput, plot_policy_comparison


def load_config(path="config.json"):
    with open(path, "r") as f:
        return json.load(f)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Benchmark a set-associative cache.")
    parser.add_argument("--config", default="config.json", help="path to the benchmark config")
    parser.add_argument("--compare", action="store_true",
                        help="run the workload once per eviction policy")
    parser.add_argument("--no-plots", action="store_true", help="skip rendering plots")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Could not load config {args.config}: {e}", file=sys.stderr)
        return 2
    out_cfg = cfg.get("output", {})

    try:
        if args.compare:
            results = compare_policies(cfg)
            for policy, summary in results.items():
                print(f"{policy}: hit_rate={summary['hit_rate']:.3f} evictions={summary['evictions']}")
            if not args.no_plots:
                plot_policy_comparison(results, out_cfg.get("comparison_plot", "results/policy_comparison.png"))
                print("Plots saved in results/")
            return 0

        runner = BenchmarkRunner(cfg)
        print("Starting benchmark with config:", cfg.get("benchmark", {}))
        summary, latencies = runner.run()
    except CacheError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    results_path = runner.save_results(summary, out_cfg)
    print("Benchmark Summary:", summary)
    print("Results saved to:", results_path)

    if not args.no_plots:
        plot_latency_vs_throughput(latencies, summary["throughput_ops_per_sec"], out_cfg.get("latency_plot", "results/latency_vs_throughput.png"))
        plot_hit_miss_rate(summary["hit_rate"], out_cfg.get("hitmiss_plot", "results/hit_miss_rate.png"))
        print("Plots saved in results/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
