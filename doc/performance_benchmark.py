"""
Performance Benchmark
=====================

Timing and size measurements for blind-bid proving:
- Generator setup (Pedersen + Bulletproof generators)
- Commitment layer and toggle encoder
- Full prove() over growing public lists
- encode_proof / decode_proof
- Proof and witness-bundle sizes

Usage:
    python performance_benchmark.py
    python performance_analysis.py      # plots from benchmark_results.json
"""

import json
import os
import random
import sys
import time
import tracemalloc
from typing import List, Tuple

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from blindbid import decode_proof, encode_proof, encode_witness, prove
from blindbid.commit import commit_toggle, commit_witness
from blindbid.config import config
from blindbid.crs import _bp_gens_lists, keygen_bp_gens, keygen_pc_gens
from blindbid.fs_oracles import generate_cs_transcript
from blindbid.gadgets import CONSTANTS, multiplier_count
from blindbid.r1cs import Prover, padded_length

from demo_blindbid import build_witness


class PerformanceBenchmark:
    """Blind-bid benchmark runner."""

    def __init__(self, seed=2024):
        print(f"🔧 Initialising benchmark (MiMC rounds: {config.mimc_rounds}, "
              f"generator capacity: {config.gens_capacity})...")
        self.rng = random.Random(seed)
        self.results = {}
        self.memory_results = {}

    def measure_time(self, func, *args, num_runs=10, **kwargs) -> Tuple[float, float, any]:
        """
        Mean and standard deviation of the run time of func, in seconds.

        Returns:
            (mean, std_dev, result of the last run)
        """
        times = []
        result = None

        for _ in range(num_runs):
            start = time.perf_counter()
            result = func(*args, **kwargs)
            end = time.perf_counter()
            times.append(end - start)

        avg_time = sum(times) / len(times)
        std_dev = (sum((t - avg_time)**2 for t in times) / len(times)) ** 0.5

        return avg_time, std_dev, result

    def measure_memory(self, func, *args, **kwargs) -> Tuple[float, any]:
        """Peak traced memory of func in MB."""
        tracemalloc.start()
        result = func(*args, **kwargs)
        _, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        return peak / 1024 / 1024, result

    def benchmark_setup(self, num_runs=3):
        """Generator setup, uncached."""
        print("\n📊 Generator setup ({} runs)".format(num_runs))
        print("=" * 60)

        def setup():
            _bp_gens_lists.cache_clear()
            return keygen_pc_gens(), keygen_bp_gens()

        avg_time, std_dev, _ = self.measure_time(setup, num_runs=num_runs)
        print(f"  ✓ capacity={config.gens_capacity}: {avg_time*1000:.2f} ± {std_dev*1000:.2f} ms")

        self.results['setup'] = {config.gens_capacity: avg_time}
        self.results['setup_std'] = {config.gens_capacity: std_dev}

    def benchmark_commitments(self, list_sizes: List[int], num_runs=10):
        """Witness commitments plus toggle commitments for each list size."""
        print("\n📊 Commitments ({} runs each)".format(num_runs))
        print("=" * 60)

        results = {}
        std_devs = {}
        for n in list_sizes:
            print(f"  N={n}...", end=" ", flush=True)

            def commit_all():
                pc_gens, _, transcript = generate_cs_transcript()
                prover = Prover(pc_gens, transcript)
                commit_witness(prover, [7, 3, 5, 2], self.rng)
                commit_toggle(prover, n, n // 2, self.rng)

            avg_time, std_dev, _ = self.measure_time(commit_all, num_runs=num_runs)
            results[n] = avg_time
            std_devs[n] = std_dev
            print(f"✓ {avg_time*1000:.2f} ± {std_dev*1000:.2f} ms")

        self.results['commitments'] = results
        self.results['commitments_std'] = std_devs
        return results

    def benchmark_proofs(self, list_sizes: List[int], num_runs=3):
        """prove(), encode_proof() and decode_proof() for each list size."""
        print("\n📊 Proving ({} runs each)".format(num_runs))
        print("=" * 60)

        results = {'prove': {}, 'encode': {}, 'decode': {}}
        std_devs = {'prove': {}, 'encode': {}, 'decode': {}}

        for n in list_sizes:
            print(f"  N={n} ({multiplier_count(len(CONSTANTS), n)} gates)...", end=" ", flush=True)
            witness, public_list = build_witness(n, n // 2)

            t1, s1, proof = self.measure_time(prove, witness, public_list, n // 2, rng=self.rng, num_runs=num_runs)
            t2, s2, data = self.measure_time(encode_proof, proof, num_runs=num_runs)
            t3, s3, _ = self.measure_time(decode_proof, data, num_runs=num_runs)

            results['prove'][n] = t1
            results['encode'][n] = t2
            results['decode'][n] = t3
            std_devs['prove'][n] = s1
            std_devs['encode'][n] = s2
            std_devs['decode'][n] = s3

            print(f"✓ prove:{t1*1000:.2f}±{s1*1000:.2f}ms encode:{t2*1000:.3f}ms decode:{t3*1000:.3f}ms")

        self.results['proofs'] = results
        self.results['proofs_std'] = std_devs
        return results

    def benchmark_memory(self, list_sizes: List[int]):
        """Peak memory of one prove() call."""
        print("\n📊 Memory")
        print("=" * 60)

        for n in list_sizes:
            witness, public_list = build_witness(n, 0)
            peak, _ = self.measure_memory(prove, witness, public_list, 0, rng=self.rng)
            self.memory_results[n] = peak
            print(f"  ✓ N={n}: {peak:.2f} MB")

    def benchmark_bandwidth(self, list_sizes: List[int]):
        """Wire sizes: opaque proof, encoded proof stream and witness bundle."""
        print("\n📊 Sizes")
        print("=" * 60)

        results = {}
        for n in list_sizes:
            witness, public_list = build_witness(n, 0)
            proof = prove(witness, public_list, 0, rng=self.rng)
            results[n] = {
                'gates': multiplier_count(len(CONSTANTS), n),
                'padded_gates': padded_length(multiplier_count(len(CONSTANTS), n)),
                'proof_bytes': len(proof.proof_bytes),
                'proof_stream': len(encode_proof(proof)),
                'witness_bundle': len(encode_witness(witness, public_list, 0)),
            }
            r = results[n]
            print(f"  ✓ N={n}: proof:{r['proof_bytes']}B stream:{r['proof_stream']}B bundle:{r['witness_bundle']}B")

        self.results['bandwidth'] = results
        return results

    def run_all_benchmarks(self, list_sizes: List[int] = None, num_runs: int = 3):
        if list_sizes is None:
            list_sizes = [1, 4, 16, 64]

        print("\n" + "=" * 60)
        print("🚀 Blind-bid benchmark")
        print(f"   {num_runs} runs per measurement")
        print("=" * 60)

        self.benchmark_setup()
        self.benchmark_commitments(list_sizes, num_runs)
        self.benchmark_proofs(list_sizes, num_runs)
        self.benchmark_memory(list_sizes)
        self.benchmark_bandwidth(list_sizes)

        print("\n" + "=" * 60)
        print("✅ Benchmark finished")
        print("=" * 60)

    def save_results(self, filename='benchmark_results.json'):
        os.makedirs(os.path.dirname(filename) if os.path.dirname(filename) else '.', exist_ok=True)

        data = {
            'timing': self.results,
            'memory': self.memory_results,
        }
        with open(filename, 'w') as f:
            json.dump(data, f, indent=2)
        print(f"\n💾 Results saved to {filename}")


if __name__ == '__main__':
    benchmark = PerformanceBenchmark()
    benchmark.run_all_benchmarks([1, 4, 16, 64], num_runs=3)
    benchmark.save_results('benchmark_results.json')
