"""
Stress tests and parameter sweeps built on the contagion engine.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Tuple

import numpy as np

from bank import BankGraph, UnknownBankId
from cascade_simulator import ContagionEngine, ShockEvent
from shock_model import Coefficients, DefaultRule

logger = logging.getLogger(__name__)

DEFAULT_SENTINEL_BALANCE = -1.0
DEFAULT_GRID_START = 0.1
DEFAULT_GRID_STOP = 1.0
DEFAULT_GRID_STEP = 0.1


class StressTestResult(NamedTuple):
    graph: BankGraph
    events: List[ShockEvent]
    bankrupt_count: int


@dataclass(frozen=True)
class SweepPoint:
    """Outcome of one (p, lambda) grid cell for both topologies."""
    p: float
    lam: float
    count_a: int
    count_b: int

    @property
    def b_better(self) -> bool:
        return self.count_b < self.count_a


@dataclass
class SweepReport:
    """All grid cells of a sweep, in (p, lambda) order."""
    p_values: List[float]
    lambda_values: List[float]
    points: List[SweepPoint] = field(default_factory=list)

    def b_better(self) -> List[SweepPoint]:
        """Cells where topology B ends with strictly fewer bankruptcies than A."""
        return [pt for pt in self.points if pt.b_better]

    def count_matrices(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Bankrupt counts as arrays indexed [p, lambda].

        Returns:
            (counts for A, counts for B)
        """
        shape = (len(self.p_values), len(self.lambda_values))
        counts_a = np.zeros(shape, dtype=int)
        counts_b = np.zeros(shape, dtype=int)
        for k, pt in enumerate(self.points):
            i, j = divmod(k, len(self.lambda_values))
            counts_a[i, j] = pt.count_a
            counts_b[i, j] = pt.count_b
        return counts_a, counts_b


def coefficient_grid(
    start: float = DEFAULT_GRID_START,
    stop: float = DEFAULT_GRID_STOP,
    step: float = DEFAULT_GRID_STEP
) -> np.ndarray:
    """
    Inclusive grid of coefficient values, rounded to drop float drift.

    Args:
        start: First value
        stop: Last value (included when on the grid)
        step: Spacing

    Returns:
        1-D array of values
    """
    if step <= 0:
        raise ValueError("step must be positive")
    if stop < start:
        raise ValueError("stop must not be below start")
    n = int(np.floor((stop - start) / step + 1e-9)) + 1
    return np.round(start + step * np.arange(n), 10)


def stress_test(
    graph: BankGraph,
    coefficients: Coefficients,
    initial_default_id: str,
    *,
    sentinel_balance: float = DEFAULT_SENTINEL_BALANCE,
    default_rule: DefaultRule = DefaultRule.NEGATIVE,
    exclude_in_round_defaults: bool = False,
    max_rounds: Optional[int] = None
) -> StressTestResult:
    """
    Force one bank into default and run the cascade to completion.

    The graph is mutated in place; pass a clone to keep the original.

    Args:
        graph: Network to stress
        coefficients: Shock parameters
        initial_default_id: Bank that defaults first
        sentinel_balance: Balance written to the defaulting bank (default: -1)
        default_rule: Balance threshold convention
        exclude_in_round_defaults: See ContagionEngine
        max_rounds: Optional cap on propagation rounds

    Returns:
        StressTestResult(graph, events, bankrupt_count)

    Raises:
        UnknownBankId: If the id is not in the graph
    """
    if initial_default_id not in graph:
        raise UnknownBankId(initial_default_id)

    graph[initial_default_id].balance = sentinel_balance
    engine = ContagionEngine(
        graph,
        coefficients,
        default_rule=default_rule,
        exclude_in_round_defaults=exclude_in_round_defaults
    )
    engine.declare_default(initial_default_id)
    events = engine.run_cascade(initial_default_id, max_rounds=max_rounds)

    bankrupt_count = graph.bankrupt_count()
    logger.info("stress test on %s: %d/%d banks bankrupt after %d rounds",
                initial_default_id, bankrupt_count, len(graph), engine.rounds)
    return StressTestResult(graph, events, bankrupt_count)


def sweep(
    template_a: BankGraph,
    template_b: BankGraph,
    p_range: Iterable[float],
    lambda_range: Iterable[float],
    initial_default_id: str,
    **engine_options
) -> SweepReport:
    """
    Compare two topologies over a grid of panic rates and shock coefficients.

    Every cell runs an independent stress test on fresh clones of both
    templates with lambda_c = lambda_f = lambda and panic enabled.

    Args:
        template_a: Reference topology (left untouched)
        template_b: Compared topology (left untouched)
        p_range: Panic rates
        lambda_range: Shock coefficients
        initial_default_id: Bank that defaults first in every trial
        **engine_options: Forwarded to stress_test

    Returns:
        SweepReport with one SweepPoint per cell

    Raises:
        UnknownBankId: If the id is missing from either template
    """
    for template in (template_a, template_b):
        if initial_default_id not in template:
            raise UnknownBankId(initial_default_id)

    p_values = [float(p) for p in p_range]
    lambda_values = [float(lam) for lam in lambda_range]
    report = SweepReport(p_values, lambda_values)

    for p in p_values:
        for lam in lambda_values:
            coefficients = Coefficients.uniform(lam, panic_rate=p, panic_enabled=True)
            result_a = stress_test(template_a.clone(), coefficients, initial_default_id, **engine_options)
            result_b = stress_test(template_b.clone(), coefficients, initial_default_id, **engine_options)
            report.points.append(SweepPoint(p, lam, result_a.bankrupt_count, result_b.bankrupt_count))

    logger.info("sweep finished: %d cells, %d where B is better",
                len(report.points), len(report.b_better()))
    return report


def format_report(report: SweepReport) -> str:
    """One line per cell where topology B beats A."""
    return "\n".join(f"p: {pt.p:f}, lambda: {pt.lam:f}" for pt in report.b_better())
