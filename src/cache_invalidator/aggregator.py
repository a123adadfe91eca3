"""Result/Diagnostics Aggregator - merge per-distribution results into one OutcomeSet."""

from typing import Iterable, Set

from shared.logger import StructuredLogger
from models import OutcomeSet, TargetResult


class OutcomeAggregator:
    """Collect TargetResults in arrival order, keyed by distribution id."""

    def __init__(self, targets: Iterable[str]):
        self.outcome = OutcomeSet()
        for target in targets:
            self.outcome.records[target] = None
        self._reported: Set[str] = set()

    def add(self, result: TargetResult) -> None:
        if result.target in self._reported:
            StructuredLogger.warning("Duplicate result for distribution", distribution_id=result.target)
        self._reported.add(result.target)

        if result.record is not None:
            self.outcome.records[result.target] = result.record
        else:
            self.outcome.records.setdefault(result.target, None)
        self.outcome.diagnostics.extend(result.diagnostics)

    def build(self) -> OutcomeSet:
        missing = [target for target in self.outcome.records if target not in self._reported]
        for target in missing:
            StructuredLogger.error("No result reported for distribution", distribution_id=target)
            self.outcome.diagnostics.add_error(
                "No result reported for distribution",
                f"The invalidation task for {target} finished without reporting a result",
                target=target,
            )

        StructuredLogger.info(
            "Aggregated invalidation results",
            distributions=len(self.outcome.records),
            absent=len(self.outcome.absent_targets()),
            errors=len(self.outcome.diagnostics.errors()),
            warnings=len(self.outcome.diagnostics.warnings()),
        )
        return self.outcome


def aggregate(targets: Iterable[str], results: Iterable[TargetResult]) -> OutcomeSet:
    aggregator = OutcomeAggregator(targets)
    for result in results:
        aggregator.add(result)
    return aggregator.build()

