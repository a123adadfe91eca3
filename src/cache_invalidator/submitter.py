"""Invalidation Submitter - one CloudFront create call per distribution."""

import uuid
from typing import Callable, Optional, Tuple

from shared.aws_helpers import InvalidationClient
from shared.errors import RemoteError
from shared.logger import StructuredLogger
from models import Diagnostics, InvalidationRecord, InvalidationRequest, InvalidationStatus


def new_caller_reference() -> str:
    return str(uuid.uuid4())


class InvalidationSubmitter:
    """Create one invalidation batch, tagged with a fresh caller reference."""

    def __init__(self, client: InvalidationClient, token_factory: Callable[[], str] = new_caller_reference):
        self.client = client
        self.token_factory = token_factory

    def submit(self, request: InvalidationRequest) -> Tuple[Optional[InvalidationRecord], Diagnostics]:
        """
        Issue exactly one create call for the request.

        Returns:
            (record, diagnostics). The record is ``None`` when CloudFront
            rejected the call (one Error) or accepted it without returning an
            identifier (one Warning).
        """
        diags = Diagnostics()
        target = request.target
        caller_reference = self.token_factory()

        try:
            invalidation = self.client.create_invalidation(target, request.path_list, caller_reference)
        except RemoteError as e:
            StructuredLogger.error(
                "CloudFront invalidation create failed",
                exception=e,
                distribution_id=target,
                caller_reference=caller_reference,
            )
            diags.add_error("Error creating CloudFront invalidation", str(e), target=target)
            return None, diags

        if not invalidation or not invalidation.get("Id"):
            StructuredLogger.warning(
                "CloudFront accepted invalidation without an identifier",
                distribution_id=target,
                caller_reference=caller_reference,
            )
            diags.add_warning(
                "Unable to create CloudFront invalidation",
                "AWS did not create an invalidation and gave no reason",
                target=target,
            )
            return None, diags

        record = InvalidationRecord.from_remote(target, invalidation)
        record.status = InvalidationStatus.IN_PROGRESS

        StructuredLogger.info(
            "CloudFront invalidation created",
            distribution_id=target,
            invalidation_id=record.invalidation_id,
            caller_reference=caller_reference,
        )
        return record, diags
