"""Cache Invalidator - create-and-wait and reconciliation for one distribution."""

import threading
from typing import Optional, Tuple

from shared.aws_helpers import InvalidationClient
from shared.errors import InvalidationError, InvalidationNotFoundError
from shared.logger import StructuredLogger
from models import Diagnostics, InvalidationRecord, InvalidationRequest
from submitter import InvalidationSubmitter
from waiter import CompletionWaiter


class CacheInvalidator:
    """Invalidate CloudFront cache on a single distribution."""

    def __init__(
        self,
        client: InvalidationClient,
        poll_interval: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        submitter: Optional[InvalidationSubmitter] = None,
    ):
        self.client = client
        self.submitter = submitter or InvalidationSubmitter(client)
        self.waiter = CompletionWaiter(client, poll_interval=poll_interval, cancel_event=cancel_event)

    def create_and_wait(
        self, request: InvalidationRequest, cancel_event: Optional[threading.Event] = None
    ) -> Tuple[Optional[InvalidationRecord], Diagnostics]:
        """
        Create an invalidation and wait for CloudFront to complete it.

        A timed-out or failed wait still returns the record: the invalidation
        exists and proceeds on CloudFront's side either way.
        """
        record, diags = self.submitter.submit(request)
        if record is None:
            return None, diags

        record, wait_diags = self.waiter.wait(record, request.timeout, cancel_event=cancel_event)
        diags.extend(wait_diags)
        return record, diags

    def find_current(
        self, target: str, invalidation_id: str
    ) -> Tuple[Optional[InvalidationRecord], Diagnostics]:
        """
        Look up a previously created invalidation.

        Returns:
            (record, diagnostics). ``(None, [])`` means the invalidation does
            not exist (anymore); remote failures yield ``None`` and one Error.
        """
        diags = Diagnostics()

        if not invalidation_id:
            StructuredLogger.info("No invalidation recorded for distribution", distribution_id=target)
            return None, diags

        try:
            invalidation = self.client.get_invalidation(target, invalidation_id)
        except InvalidationNotFoundError:
            StructuredLogger.info(
                "CloudFront invalidation no longer exists",
                distribution_id=target,
                invalidation_id=invalidation_id,
            )
            return None, diags
        except InvalidationError as e:
            StructuredLogger.error(
                "Error getting CloudFront invalidation",
                exception=e,
                distribution_id=target,
                invalidation_id=invalidation_id,
            )
            diags.add_error("Error getting CloudFront invalidation", str(e), target=target)
            return None, diags

        record = InvalidationRecord.from_remote(target, {"Id": invalidation_id, **invalidation})
        StructuredLogger.info(
            "Found CloudFront invalidation",
            distribution_id=target,
            invalidation_id=record.invalidation_id,
            status=record.status.value,
        )
        return record, diags
