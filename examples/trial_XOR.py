"""
XOR Problem

This module evolves a network computing the XOR (exclusive OR) function, the
classic benchmark for topology-evolving algorithms:
    Input (0, 0) -> Output 0
    Input (0, 1) -> Output 1
    Input (1, 0) -> Output 1
    Input (1, 1) -> Output 0

XOR is not linearly separable, so a solution needs at least one hidden node;
the run has to discover it by splitting connections.

Fitness Function:
    Fitness = 4.0 - sum((output - target)^2)

    Maximum fitness of 4.0 is achieved when all four cases produce exact outputs.
    The run stops as soon as the fitness goal set in the configuration is reached.

Usage:
    python examples/trial_XOR.py
    python examples/trial_XOR.py --jobs 4 --save best_xor.npz
"""

import argparse
import logging
import numpy as np
from pathlib import Path

from evotopo import Config, Evolution, Network, Snapshot, save_network

XOR_INPUTS  = np.array([[0.0, 0.0],
                        [0.0, 1.0],
                        [1.0, 0.0],
                        [1.0, 1.0]])
XOR_OUTPUTS = np.array([[0.0],
                        [1.0],
                        [1.0],
                        [0.0]])

def xor_fitness(network: Network) -> float:
    """
    Evaluate a network on all 4 XOR cases in a single batched forward pass.
    """
    outputs = network.forward_batch(XOR_INPUTS)
    errors  = outputs - XOR_OUTPUTS
    return float(4.0 - np.sum(errors ** 2))

def generation_report(generation: int, snapshot: Snapshot) -> None:
    """
    Print a report describing the state of the run.
    """
    s  = f"===============\n"
    s += f"GENERATION {generation:04d}\n"
    s += f"number species  = {snapshot.num_species}\n"
    s += f"threshold       = {snapshot.compatibility_threshold:.2f}\n"
    s += f"maximum fitness = {snapshot.best_fitness:.4f}\n"
    if snapshot.best_genome is not None:
        s += '\n'
        s += str(snapshot.best_genome.prune())
    print(s)

def final_report(network: Network, fitness: float) -> None:
    s  = f"\nBest fitness: {fitness:.4f}\n"
    s += f"{network!r}\n\n"
    s += "input         output   target  error\n"
    s += "------------------------------------\n"
    for inputs, target in zip(XOR_INPUTS, XOR_OUTPUTS):
        output = network.forward_pass(inputs)[0]
        s += f"{inputs.tolist()} -> {output:.4f}    {target[0]}   {abs(output - target[0]):.4f}\n"
    print(s)

def main():
    parser = argparse.ArgumentParser(description='Evolve a network solving XOR')
    parser.add_argument('--config', default=str(Path(__file__).parent / 'config_xor.ini'),
                        help='Configuration file')
    parser.add_argument('--jobs', type=int, default=1,
                        help='Number of parallel fitness evaluations (-1 = all cores)')
    parser.add_argument('--every', type=int, default=10,
                        help='Print a report every N generations')
    parser.add_argument('--save', default=None,
                        help='Save the best network to this file')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config    = Config(args.config)
    evolution = Evolution(config, xor_fitness, num_jobs=args.jobs)
    evolution.add_hook(args.every, generation_report)

    best_network, best_fitness = evolution.start()
    if best_network is None:
        print("Every evaluation failed, no network to report")
        return

    final_report(best_network, best_fitness)
    if args.save:
        save_network(best_network, args.save)
        print(f"Best network saved as '{args.save}'")

if __name__ == "__main__":
    main()
