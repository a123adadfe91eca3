"""Fan-Out Orchestrator - run invalidations on many distributions concurrently."""

import queue
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, wait
from functools import partial
from typing import Callable, Iterable, List, Mapping, Optional, Set, Tuple, Union

from shared.aws_helpers import InvalidationClient
from shared.config import Config
from shared.logger import StructuredLogger
from aggregator import OutcomeAggregator
from invalidator import CacheInvalidator
from models import Diagnostics, InvalidationRecord, InvalidationRequest, OutcomeSet, TargetResult

TargetOperation = Callable[[], Tuple[Optional[InvalidationRecord], Diagnostics]]


def build_requests(
    distribution_ids: Iterable[str], paths: Iterable[str], timeout: Optional[float] = None
) -> List[InvalidationRequest]:
    """Same paths and timeout for every distribution, the common case."""
    paths = frozenset(paths)
    timeout = timeout if timeout is not None else Config.INVALIDATION_TIMEOUT
    return [InvalidationRequest(target, paths, timeout) for target in distribution_ids]


class FanOutInvalidator:
    """Create or reconcile invalidations across distributions, one task each.

    Tasks run on a thread pool bounded by ``max_workers``. Every task runs to
    completion: invalidations cannot be cancelled once submitted, so there is
    no early exit when a sibling fails. Results meet in a queue sized to the
    number of tasks and are aggregated once every task has finished.
    """

    def __init__(
        self,
        client: InvalidationClient,
        max_workers: Optional[int] = None,
        poll_interval: Optional[float] = None,
    ):
        self.client = client
        self.max_workers = max_workers or Config.INVALIDATION_MAX_WORKERS
        self.invalidator = CacheInvalidator(client, poll_interval=poll_interval)
        # one event per in-flight submit_and_wait call
        self._cancel_events: Set[threading.Event] = set()
        self._lock = threading.Lock()

    def submit_and_wait(self, requests: Iterable[InvalidationRequest]) -> OutcomeSet:
        """Create one invalidation per request and wait for each to complete."""
        cancel_event = threading.Event()
        tasks = [
            (request.target, partial(self.invalidator.create_and_wait, request, cancel_event=cancel_event))
            for request in requests
        ]
        with self._lock:
            self._cancel_events.add(cancel_event)
        try:
            return self._fan_out("create", tasks)
        finally:
            with self._lock:
                self._cancel_events.discard(cancel_event)

    def reconcile(self, ids: Union[Mapping[str, str], Iterable[Tuple[str, str]]]) -> OutcomeSet:
        """Re-read invalidations from ``{distribution_id: invalidation_id}`` pairs."""
        pairs = ids.items() if isinstance(ids, Mapping) else ids
        tasks = [
            (target, partial(self.invalidator.find_current, target, invalidation_id))
            for target, invalidation_id in pairs
        ]
        return self._fan_out("reconcile", tasks)

    def cancel(self) -> None:
        """Stop waiting in every submit_and_wait call currently in flight.

        Later calls wait normally. Submitted invalidations keep running on CloudFront.
        """
        with self._lock:
            pending = list(self._cancel_events)
        StructuredLogger.warning("Cancelling pending invalidation waits", calls=len(pending))
        for cancel_event in pending:
            cancel_event.set()

    def _fan_out(self, operation: str, tasks: List[Tuple[str, TargetOperation]]) -> OutcomeSet:
        targets = [target for target, _ in tasks]
        duplicates = sorted(target for target, count in Counter(targets).items() if count > 1)
        if duplicates:
            StructuredLogger.warning("Distribution requested more than once", operation=operation, distribution_ids=duplicates)

        if not tasks:
            return OutcomeSet()

        workers = min(self.max_workers, len(tasks))
        StructuredLogger.info(
            "Starting invalidation fan-out",
            operation=operation,
            distributions=len(tasks),
            workers=workers,
        )

        results: "queue.Queue[TargetResult]" = queue.Queue(maxsize=len(tasks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"invalidation-{operation}") as pool:
            futures = [pool.submit(self._run_target, results, target, task) for target, task in tasks]
            wait(futures)

        aggregator = OutcomeAggregator(targets)
        while True:
            try:
                aggregator.add(results.get_nowait())
            except queue.Empty:
                break
        return aggregator.build()

    @staticmethod
    def _run_target(results: "queue.Queue[TargetResult]", target: str, task: TargetOperation) -> None:
        try:
            record, diags = task()
        except Exception as e:
            StructuredLogger.error("Unexpected error processing distribution", exception=e, distribution_id=target)
            record, diags = None, Diagnostics()
            diags.add_error("Unexpected error processing distribution", str(e), target=target)
        results.put(TargetResult(target, record, diags))
