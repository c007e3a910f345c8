"""
Performance Analysis and Visualization
======================================

Plots the results written by performance_benchmark.py:
- prove() time against public-list size
- encode/decode time
- wire sizes

Usage:
    python performance_analysis.py
"""

import json
import sys

import matplotlib.pyplot as plt
from matplotlib import rcParams

rcParams['font.sans-serif'] = ['DejaVu Sans', 'Arial']
rcParams['axes.unicode_minus'] = False


class PerformanceAnalyzer:
    """Loads benchmark_results.json and writes PNG charts."""

    def __init__(self, results_file='benchmark_results.json'):
        try:
            with open(results_file, 'r') as f:
                data = json.load(f)
                self.timing_results = data.get('timing', {})
                self.memory_results = data.get('memory', {})
        except FileNotFoundError:
            print(f"❌ Results file not found: {results_file}")
            print("Run first: python performance_benchmark.py")
            sys.exit(1)

    def plot_proving(self):
        print("📊 Proving time...")

        data = self.timing_results.get('proofs', {}).get('prove', {})
        std = self.timing_results.get('proofs_std', {}).get('prove', {})
        if not data:
            print("⚠️  No proving data")
            return

        n_values = sorted(int(k) for k in data)
        times = [data[str(n)] * 1000 for n in n_values]
        errors = [std.get(str(n), 0) * 1000 for n in n_values]

        fig, ax = plt.subplots(figsize=(10, 6))
        ax.errorbar(n_values, times, yerr=errors, fmt='o-', linewidth=2, markersize=8,
                    color='#2E86AB', capsize=4, label='prove()')
        ax.set_xscale('log', base=2)
        ax.set_xlabel('Public list size (N)', fontsize=12, fontweight='bold')
        ax.set_ylabel('Time (ms)', fontsize=12, fontweight='bold')
        ax.set_title('Blind-Bid Proving Time', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=11)

        plt.tight_layout()
        plt.savefig('perf_proving.png', dpi=300, bbox_inches='tight')
        print("✅ Saved: perf_proving.png")
        plt.close()

    def plot_codec(self):
        print("📊 Codec time...")

        data = self.timing_results.get('proofs', {})
        if not data.get('encode'):
            print("⚠️  No codec data")
            return

        n_values = sorted(int(k) for k in data['encode'])
        fig, ax = plt.subplots(figsize=(10, 6))
        for op, color in (('encode', '#A23B72'), ('decode', '#F18F01')):
            ax.plot(n_values, [data[op][str(n)] * 1e6 for n in n_values], 'o-',
                    linewidth=2, markersize=8, color=color, label=f'{op}_proof()')
        ax.set_xscale('log', base=2)
        ax.set_xlabel('Public list size (N)', fontsize=12, fontweight='bold')
        ax.set_ylabel('Time (µs)', fontsize=12, fontweight='bold')
        ax.set_title('Proof Codec Time', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=11)

        plt.tight_layout()
        plt.savefig('perf_codec.png', dpi=300, bbox_inches='tight')
        print("✅ Saved: perf_codec.png")
        plt.close()

    def plot_bandwidth(self):
        print("📊 Wire sizes...")

        data = self.timing_results.get('bandwidth', {})
        if not data:
            print("⚠️  No size data")
            return

        n_values = sorted(int(k) for k in data)
        labels = [str(n) for n in n_values]
        proof = [data[str(n)]['proof_bytes'] for n in n_values]
        stream = [data[str(n)]['proof_stream'] for n in n_values]
        bundle = [data[str(n)]['witness_bundle'] for n in n_values]

        x = range(len(n_values))
        width = 0.27
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.bar([i - width for i in x], proof, width, label='R1CS proof', color='#2E86AB')
        ax.bar(list(x), stream, width, label='Proof stream', color='#A23B72')
        ax.bar([i + width for i in x], bundle, width, label='Witness bundle', color='#F18F01')
        ax.set_xticks(list(x))
        ax.set_xticklabels(labels)
        ax.set_xlabel('Public list size (N)', fontsize=12, fontweight='bold')
        ax.set_ylabel('Bytes', fontsize=12, fontweight='bold')
        ax.set_title('Wire Sizes', fontsize=14, fontweight='bold')
        ax.grid(True, axis='y', alpha=0.3)
        ax.legend(fontsize=11)

        plt.tight_layout()
        plt.savefig('perf_bandwidth.png', dpi=300, bbox_inches='tight')
        print("✅ Saved: perf_bandwidth.png")
        plt.close()

    def generate_all_plots(self):
        self.plot_proving()
        self.plot_codec()
        self.plot_bandwidth()


if __name__ == '__main__':
    PerformanceAnalyzer().generate_all_plots()
