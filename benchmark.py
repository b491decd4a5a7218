# benchmark.py
import copy
import json
import logging
import os
import threading
import time

import numpy as np

from cache import SetAssociativeCache
from errors import ConfigurationError
from evictors import make_evictor

logger = logging.getLogger(__name__)

ACCESS_PATTERNS = ("sequential", "random", "mixed", "zipf")


class MemoryModel:
    def __init__(self, dram_ns=100, sram_ns=10, cache: SetAssociativeCache = None):
        self.dram_ns = dram_ns
        self.sram_ns = sram_ns
        self.cache = cache

    def read(self, key):
        """
        Read `key` through the cache.
        Hit -> SRAM latency. Miss -> DRAM latency, and the value fetched from
        "memory" is written back into the cache so the next read can hit.
        Returns (latency in microseconds, hit).
        """
        if self.cache is None:
            return self.dram_ns / 1000.0, False
        value = self.cache.get(key)
        if value is not None:
            return self.sram_ns / 1000.0, True
        self.cache.put(key, self._fetch(key))
        return self.dram_ns / 1000.0, False

    def write(self, key, value):
        """Write into the cache at SRAM latency (DRAM when uncached)."""
        if self.cache is None:
            return self.dram_ns / 1000.0
        self.cache.put(key, value)
        return self.sram_ns / 1000.0

    @staticmethod
    def _fetch(key):
        return f"block-{key}"


class BenchmarkRunner:
    def __init__(self, cfg):
        self.cfg = cfg
        bench_cfg = cfg.get("benchmark", {})
        self.seed = bench_cfg.get("random_seed", None)

        cache_cfg = cfg.get("cache", {})
        self.cache = None
        if cache_cfg.get("enabled", True):
            self.cache = SetAssociativeCache(
                capacity=cache_cfg.get("capacity", 1024),
                lines_per_set=cache_cfg.get("lines_per_set", 4),
                evictor=make_evictor(cache_cfg.get("eviction_policy", "lru"), seed=self.seed),
            )
        mem_cfg = cfg.get("memory", {})
        self.mem = MemoryModel(
            dram_ns=mem_cfg.get("dram_latency_ns", 100),
            sram_ns=mem_cfg.get("sram_latency_ns", 10),
            cache=self.cache,
        )

        self.working_set = bench_cfg.get("working_set_keys", 4096)
        self.num_requests = bench_cfg.get("num_requests", 10000)
        self.num_threads = bench_cfg.get("num_threads", 4)
        self.read_ratio = bench_cfg.get("read_ratio", 0.8)
        self.access_pattern = bench_cfg.get("access_pattern", "mixed")
        self.zipf_a = bench_cfg.get("zipf_a", 1.2)
        self._validate()

        # The cache does no locking of its own; every access goes through this.
        self.cache_lock = threading.Lock()
        self.results_lock = threading.Lock()
        self._seq_ptr = 0
        self.latencies = []
        self.hits = 0
        self.misses = 0

    def _validate(self):
        if self.access_pattern not in ACCESS_PATTERNS:
            raise ConfigurationError(
                f"Unknown access_pattern {self.access_pattern!r}; expected one of {ACCESS_PATTERNS}"
            )
        if self.num_threads < 1:
            raise ConfigurationError("num_threads must be at least 1")
        if self.working_set < 1:
            raise ConfigurationError("working_set_keys must be at least 1")
        if not 0.0 <= self.read_ratio <= 1.0:
            raise ConfigurationError("read_ratio must be within [0, 1]")
        if self.access_pattern == "zipf" and self.zipf_a <= 1.0:
            raise ConfigurationError("zipf_a must be greater than 1")

    def _generate_address(self, rng):
        if self.access_pattern == "sequential":
            return self._next_sequential()
        elif self.access_pattern == "random":
            return int(rng.integers(0, self.working_set))
        elif self.access_pattern == "zipf":
            # zipf draws start at 1; fold the long tail back into the working set
            return int(rng.zipf(self.zipf_a) - 1) % self.working_set
        else:  # mixed: mostly sequential with some random
            if rng.random() < 0.8:
                return self._next_sequential()
            return int(rng.integers(0, self.working_set))

    def _next_sequential(self):
        # caller holds cache_lock
        addr = self._seq_ptr
        self._seq_ptr = (addr + 1) % self.working_set
        return addr

    def _worker(self, requests_per_thread, rng):
        local_latencies = []
        local_hits = 0
        local_misses = 0
        for _ in range(requests_per_thread):
            with self.cache_lock:
                key = self._generate_address(rng)
                if rng.random() < self.read_ratio:
                    latency_us, hit = self.mem.read(key)
                    if hit:
                        local_hits += 1
                    else:
                        local_misses += 1
                else:
                    latency_us = self.mem.write(key, f"block-{key}")
            local_latencies.append(latency_us)

        with self.results_lock:
            self.latencies.extend(local_latencies)
            self.hits += local_hits
            self.misses += local_misses

    def run(self):
        threads = []
        per_thread = self.num_requests // self.num_threads
        rngs = [np.random.default_rng(s)
                for s in np.random.SeedSequence(self.seed).spawn(self.num_threads)]
        logger.info(
            "Running %d requests on %d threads (%s pattern)",
            per_thread * self.num_threads, self.num_threads, self.access_pattern,
        )
        start = time.time()
        for rng in rngs:
            t = threading.Thread(target=self._worker, args=(per_thread, rng))
            t.start()
            threads.append(t)
        for t in threads:
            t.join()
        end = time.time()

        total = len(self.latencies)
        lat = np.asarray(self.latencies, dtype=float)
        duration = end - start
        throughput = total / duration if duration > 0 else 0
        hit_rate = (self.hits / (self.hits + self.misses)) if (self.hits + self.misses) else 0

        summary = {
            "total_requests": total,
            "avg_latency_us": float(lat.mean()) if total else 0,
            "p50_latency_us": float(np.percentile(lat, 50)) if total else 0,
            "p99_latency_us": float(np.percentile(lat, 99)) if total else 0,
            "throughput_ops_per_sec": throughput,
            "hit_rate": hit_rate,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.cache.evictions if self.cache else 0,
            "duration_s": duration,
        }
        return summary, self.latencies

    def save_results(self, summary, out_cfg):
        results_dir = out_cfg.get("results_dir", "results")
        os.makedirs(results_dir, exist_ok=True)
        path = os.path.join(results_dir, out_cfg.get("summary_file", "summary.json"))
        with open(path, "w") as f:
            json.dump(summary, f, indent=2)
        return path


def compare_policies(cfg, policies=("lru", "mru", "random")):
    """Run the same workload once per eviction policy. Returns {policy: summary}."""
    results = {}
    for policy in policies:
        run_cfg = copy.deepcopy(cfg)
        run_cfg.setdefault("cache", {})["eviction_policy"] = policy
        summary, _ = BenchmarkRunner(run_cfg).run()
        logger.info("%s: hit_rate=%.3f evictions=%d", policy, summary["hit_rate"], summary["evictions"])
        results[policy] = summary
    return results
