"""
Topology builders for interbank networks.

Turns networkx graphs into BankGraph instances where each bank spreads its
total exposure evenly over its neighbours.
"""

from typing import Optional, Tuple

import networkx as nx
import numpy as np

from bank import Bank, BankGraph


class NetworkGenerator:
    """
    Generates bank networks of a given shape.

    Node n of a generated topology becomes bank "n+1", so a 5-node ring
    yields banks "1".."5".
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the generator.

        Args:
            seed: Random seed for reproducibility
        """
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def ring_topology(self, n: int) -> nx.Graph:
        """Each bank linked to its two neighbours on a cycle."""
        if n < 3:
            raise ValueError("A ring needs at least 3 banks")
        return nx.cycle_graph(n)

    def complete_topology(self, n: int) -> nx.Graph:
        """Every bank linked to every other bank."""
        if n < 2:
            raise ValueError("A full mesh needs at least 2 banks")
        return nx.complete_graph(n)

    def generate_scale_free_topology(self, n: int, m: int) -> nx.Graph:
        """
        Generate a scale-free graph using the Barabási-Albert model.

        Args:
            n: Total number of nodes (banks)
            m: Number of edges to attach from a new node to existing nodes

        Returns:
            NetworkX Graph object
        """
        if m < 1 or m >= n:
            raise ValueError("m must be between 1 and n-1")
        return nx.barabasi_albert_graph(n, m, seed=self.seed)

    def build_bank_graph(self, G: nx.Graph, balance: float, total_exposure: float) -> BankGraph:
        """
        Assign the same balance and total exposure to every node.

        Args:
            G: Topology; undirected edges become exposures in both directions,
               directed edges point from creditor to debtor
            balance: Starting balance of each bank
            total_exposure: Exposure per bank, split evenly among neighbours

        Returns:
            BankGraph
        """
        balances = {node: balance for node in G.nodes()}
        totals = {node: total_exposure for node in G.nodes()}
        return _to_bank_graph(G, balances, totals)

    def populate_network(
        self,
        G: nx.Graph,
        balance_range: Tuple[float, float] = (1000, 2000),
        exposure_range: Tuple[float, float] = (2000, 10000)
    ) -> BankGraph:
        """
        Draw a balance and a total exposure for each node.

        Args:
            G: The topology graph
            balance_range: (min, max) for starting balances
            exposure_range: (min, max) for each bank's total exposure

        Returns:
            BankGraph
        """
        balances = {node: self.rng.uniform(*balance_range) for node in G.nodes()}
        totals = {node: self.rng.uniform(*exposure_range) for node in G.nodes()}
        return _to_bank_graph(G, balances, totals)


def _bank_id(node) -> str:
    return str(node + 1) if isinstance(node, (int, np.integer)) else str(node)


def _to_bank_graph(G: nx.Graph, balances: dict, totals: dict) -> BankGraph:
    banks = []
    for node in G.nodes():
        neighbours = list(G.successors(node)) if G.is_directed() else list(G.neighbors(node))
        share = totals[node] / len(neighbours) if neighbours else 0.0
        exposures = {_bank_id(nb): share for nb in neighbours if nb != node}
        banks.append(Bank(_bank_id(node), float(balances[node]), exposures))
    return BankGraph(banks)


def ring_network(n: int = 5, balance: float = 1000.0, total_exposure: float = 5000.0) -> BankGraph:
    """Ring of n banks, each exposed to its two neighbours."""
    gen = NetworkGenerator()
    return gen.build_bank_graph(gen.ring_topology(n), balance, total_exposure)


def full_mesh_network(n: int = 5, balance: float = 1000.0, total_exposure: float = 10000.0) -> BankGraph:
    """Fully connected network of n banks."""
    gen = NetworkGenerator()
    return gen.build_bank_graph(gen.complete_topology(n), balance, total_exposure)


def to_networkx(graph: BankGraph) -> nx.DiGraph:
    """
    Convert a BankGraph into a directed networkx graph.

    Edges point from creditor to debtor with the exposure as `weight`; nodes
    carry `balance` and `bankrupt` attributes.
    """
    G = nx.DiGraph()
    for bank in graph:
        G.add_node(bank.bank_id, balance=bank.balance, bankrupt=bank.bankrupt)
    for bank in graph:
        for target, amount in bank.exposures.items():
            G.add_edge(bank.bank_id, target, weight=amount)
    return G
