"""Completion Waiter - poll an invalidation until CloudFront reports it Completed."""

import threading
import time
from typing import Optional, Tuple

from shared.aws_helpers import InvalidationClient
from shared.config import Config
from shared.errors import InvalidationError
from shared.logger import StructuredLogger
from models import Diagnostics, InvalidationRecord


class CompletionWaiter:
    """Fixed-interval status polling bounded by a per-invalidation deadline.

    Sleeping happens on a cancel event, the waiter's own or one passed per
    call, so a caller can stop the waits it started. Stopping a wait never
    touches the invalidation itself.
    """

    def __init__(
        self,
        client: InvalidationClient,
        poll_interval: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.client = client
        self.poll_interval = poll_interval if poll_interval is not None else Config.INVALIDATION_POLL_INTERVAL
        self.cancel_event = cancel_event or threading.Event()

    def wait(
        self, record: InvalidationRecord, timeout: float, cancel_event: Optional[threading.Event] = None
    ) -> Tuple[InvalidationRecord, Diagnostics]:
        """
        Poll until the invalidation completes or ``timeout`` seconds pass.

        Args:
            record: Record returned by the submitter (must carry an id)
            timeout: Wait budget in seconds for this invalidation alone
            cancel_event: Overrides the waiter's own event for this wait only

        Returns:
            (best-known record, diagnostics)
        """
        cancel_event = cancel_event or self.cancel_event
        diags = Diagnostics()
        target = record.target
        invalidation_id = record.invalidation_id
        deadline = time.monotonic() + timeout
        polls = 0

        while True:
            try:
                invalidation = self.client.get_invalidation(target, invalidation_id)
            except InvalidationError as e:
                StructuredLogger.error(
                    "Polling CloudFront invalidation failed",
                    exception=e,
                    distribution_id=target,
                    invalidation_id=invalidation_id,
                    polls=polls,
                )
                diags.add_error("Error waiting for CloudFront invalidation", str(e), target=target)
                return record, diags

            polls += 1
            record = InvalidationRecord.from_remote(target, {"Id": invalidation_id, **invalidation})
            StructuredLogger.debug(
                "Polled CloudFront invalidation",
                distribution_id=target,
                invalidation_id=invalidation_id,
                status=record.status.value,
                polls=polls,
            )

            if record.is_completed:
                StructuredLogger.info(
                    "CloudFront invalidation completed",
                    distribution_id=target,
                    invalidation_id=invalidation_id,
                    polls=polls,
                )
                return record, diags

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break

            if cancel_event.wait(min(self.poll_interval, remaining)):
                StructuredLogger.warning(
                    "Stopped waiting for CloudFront invalidation",
                    distribution_id=target,
                    invalidation_id=invalidation_id,
                    status=record.status.value,
                )
                diags.add_warning(
                    "Stopped waiting for CloudFront invalidation",
                    f"Invalidation {invalidation_id} is still {record.status.value}; it was not cancelled",
                    target=target,
                )
                return record, diags

        StructuredLogger.error(
            "Timed out waiting for CloudFront invalidation",
            distribution_id=target,
            invalidation_id=invalidation_id,
            status=record.status.value,
            timeout=timeout,
            polls=polls,
        )
        diags.add_error(
            "Timed out waiting for CloudFront invalidation",
            f"Invalidation {invalidation_id} on distribution {target} did not complete within the "
            f"{timeout:g}s timeout (last status: {record.status.value})",
            target=target,
        )
        return record, diags
