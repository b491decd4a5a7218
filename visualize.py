# visualize.py
import os

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


def _ensure_dir(outpath):
    dirname = os.path.dirname(outpath)
    if dirname:
        os.makedirs(dirname, exist_ok=True)


def plot_latency_vs_throughput(latencies, throughput, outpath):
    _ensure_dir(outpath)
    # latency distribution, annotated with throughput
    plt.figure(figsize=(8,4))
    plt.plot(sorted(latencies), marker='.', linewidth=0.5)
    plt.title(f"Latency Distribution (Throughput: {throughput:.1f} ops/s)")
    plt.xlabel("Sorted Request Index")
    plt.ylabel("Latency (us)")
    plt.grid(True)
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
    return outpath


def plot_hit_miss_rate(hit_rate, outpath):
    _ensure_dir(outpath)
    plt.figure(figsize=(4,4))
    labels = ['Hit', 'Miss']
    sizes = [hit_rate, 1.0 - hit_rate]
    plt.pie(sizes, labels=labels, autopct='%1.1f%%')
    plt.title("Cache Hit/Miss Rate")
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
    return outpath


def plot_policy_comparison(results, outpath):
    """Bar chart of hit rate per eviction policy; `results` is {policy: summary}."""
    _ensure_dir(outpath)
    policies = list(results)
    hit_rates = [results[p]["hit_rate"] for p in policies]
    plt.figure(figsize=(6,4))
    bars = plt.bar(policies, hit_rates)
    for bar, rate in zip(bars, hit_rates):
        plt.annotate(f"{rate:.1%}", (bar.get_x() + bar.get_width() / 2, rate),
                     ha="center", va="bottom")
    plt.ylim(0, 1)
    plt.title("Hit Rate by Eviction Policy")
    plt.ylabel("Hit Rate")
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
    return outpath
