"""
Static rendering of bank networks and sweep results.
Run this script to plot the state of a ring network after a stress test.
"""

from typing import Optional

import matplotlib.pyplot as plt
import networkx as nx

from bank import BankGraph
from network_generator import ring_network, to_networkx
from shock_model import Coefficients
from simulation_driver import SweepReport, stress_test


def draw_bank_graph(graph: BankGraph, ax: Optional[plt.Axes] = None, title: Optional[str] = None) -> plt.Axes:
    """
    Draw a snapshot of the network.

    Node color = status (red bankrupt, green solvent)
    Node label = bank id and balance
    Edge label = exposure, arrows point from creditor to debtor
    """
    if ax is None:
        _, ax = plt.subplots(1, 1, figsize=(8, 8))

    G = to_networkx(graph)
    pos = nx.circular_layout(G)

    node_colors = ['#e07070' if G.nodes[n]['bankrupt'] else '#70c070' for n in G.nodes()]
    nx.draw_networkx_nodes(G, pos, ax=ax, node_size=1600, node_color=node_colors,
                           edgecolors='black', linewidths=1.5)
    nx.draw_networkx_edges(G, pos, ax=ax, arrows=True, arrowsize=15,
                           connectionstyle='arc3,rad=0.1', node_size=1600, edge_color='gray')

    labels = {n: f"{n}\n{G.nodes[n]['balance']:.1f}" for n in G.nodes()}
    nx.draw_networkx_labels(G, pos, labels, ax=ax, font_size=9, font_weight='bold')

    edge_labels = {(u, v): f"{d['weight']:.1f}" for u, v, d in G.edges(data=True)}
    nx.draw_networkx_edge_labels(G, pos, edge_labels=edge_labels, ax=ax, font_size=7,
                                 connectionstyle='arc3,rad=0.1')

    ax.set_title(title or f"{len(graph)} banks, {graph.bankrupt_count()} bankrupt", fontsize=12)
    ax.axis('off')
    return ax


def plot_sweep_heatmap(report: SweepReport, ax: Optional[plt.Axes] = None) -> plt.Axes:
    """
    Heatmap of count_a - count_b over the (p, lambda) grid.

    Positive cells are where topology B ends with fewer bankruptcies.
    """
    if ax is None:
        _, ax = plt.subplots(1, 1, figsize=(8, 6))

    counts_a, counts_b = report.count_matrices()
    diff = counts_a - counts_b
    bound = max(1, int(abs(diff).max()))

    im = ax.imshow(diff, cmap='RdYlGn', origin='lower', aspect='auto', vmin=-bound, vmax=bound)
    ax.set_xticks(range(len(report.lambda_values)))
    ax.set_xticklabels([f"{v:.2f}" for v in report.lambda_values], rotation=45)
    ax.set_yticks(range(len(report.p_values)))
    ax.set_yticklabels([f"{v:.2f}" for v in report.p_values])
    ax.set_xlabel('lambda')
    ax.set_ylabel('p')
    ax.set_title('Bankruptcies saved by topology B')
    plt.colorbar(im, ax=ax, label='count A - count B')
    return ax


if __name__ == '__main__':
    network = ring_network(5, balance=1000.0, total_exposure=5000.0)
    result = stress_test(network, Coefficients.uniform(0.5, panic_rate=0.7), "1")

    draw_bank_graph(result.graph)
    plt.tight_layout()
    plt.savefig('network_visualization.png', dpi=150)

    print(f"\nNetwork saved to 'network_visualization.png'")
    print(f"Bankrupt: {result.bankrupt_count}/{len(result.graph)}, events: {len(result.events)}")
