"""Lambda handler for cache invalidation."""

import json
from typing import Any, Dict, Optional

from shared.aws_helpers import CloudFrontHelper
from shared.config import Config
from shared.errors import IdentifierEncodingError, InvalidationError
from shared.logger import StructuredLogger
from fanout import FanOutInvalidator, build_requests
from identifiers import decode_identifier, decode_positional
from models import OutcomeSet

# Seconds kept back from the Lambda deadline to report results
RESPONSE_MARGIN = 10.0


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Process SQS messages to create or reconcile CloudFront invalidations.

    Expected SQS message body for a create:
    {
        "action": "create",
        "distribution_ids": ["E1ABC", "E2DEF"],
        "paths": ["/content/video123/*"],
        "timeout": 600,
        "request_id": "..."
    }

    and for a reconcile:
    {
        "action": "reconcile",
        "id": "{\"E1ABC\":\"I1\",\"E2DEF\":\"I2\"}"
    }

    A reconcile may instead carry the older positional form,
    "id": "I1;I2" together with "distribution_ids".
    """
    request_id = getattr(context, "request_id", None)
    try:
        StructuredLogger.info("Cache invalidator lambda invoked", request_id=request_id)

        Config.validate()
        client = CloudFrontHelper(
            region_name=Config.AWS_REGION,
            profile_name=Config.AWS_PROFILE,
            max_attempts=Config.AWS_MAX_ATTEMPTS,
            retry_mode=Config.AWS_RETRY_MODE,
        )

        results = []
        for record in event.get("Records", []):
            try:
                message_body = json.loads(record["body"])
                outcome = process_message(client, message_body, max_timeout=_wait_budget(context))
                results.append({
                    "message_id": record.get("messageId"),
                    "action": message_body.get("action", "create"),
                    **outcome.to_dict(),
                })

                StructuredLogger.info(
                    "Invalidation message processed",
                    message_id=record.get("messageId"),
                    statuses=outcome.statuses(),
                    has_error=outcome.has_error(),
                    request_id=request_id,
                )

            except json.JSONDecodeError as e:
                StructuredLogger.error(
                    "Invalid SQS message format",
                    exception=e,
                    request_id=request_id,
                )
                results.append({"message_id": record.get("messageId"), "error": f"Invalid message: {str(e)}"})
            except InvalidationError as e:
                StructuredLogger.error(
                    "Invalid invalidation request",
                    exception=e,
                    request_id=request_id,
                )
                results.append({"message_id": record.get("messageId"), "error": str(e)})
            except Exception as e:
                StructuredLogger.error(
                    "Error processing SQS record",
                    exception=e,
                    request_id=request_id,
                )
                results.append({"message_id": record.get("messageId"), "error": "Internal error"})

        return {
            "statusCode": 200,
            "body": json.dumps({"message": "Cache invalidation completed", "results": results}),
        }

    except InvalidationError as e:
        StructuredLogger.error(
            "Invalidation error",
            exception=e,
            request_id=request_id,
        )
        return {
            "statusCode": 400,
            "body": json.dumps({"error": str(e)}),
        }
    except Exception as e:
        StructuredLogger.error(
            "Unexpected error in cache invalidator",
            exception=e,
            request_id=request_id,
        )
        return {
            "statusCode": 500,
            "body": json.dumps({"error": "Internal server error"}),
        }


def _wait_budget(context: Any) -> Optional[float]:
    """Seconds left for waiting before the Lambda is killed, if the context knows."""
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if get_remaining is None:
        return None
    return max(get_remaining() / 1000.0 - RESPONSE_MARGIN, 0.0)


def process_message(
    client: Any, message_body: Dict[str, Any], max_timeout: Optional[float] = None
) -> OutcomeSet:
    """
    Run the create or reconcile fan-out a message asks for.

    ``max_timeout`` caps every wait so results are reported before the
    invocation runs out of time; the invalidations themselves keep going.
    """
    action = message_body.get("action", "create")
    invalidator = FanOutInvalidator(client, max_workers=Config.INVALIDATION_MAX_WORKERS)

    if action == "create":
        distribution_ids = message_body.get("distribution_ids") or Config.CLOUDFRONT_DISTRIBUTION_IDS
        paths = message_body.get("paths") or Config.INVALIDATION_PATHS
        timeout = message_body.get("timeout")
        timeout = float(timeout) if timeout is not None else Config.INVALIDATION_TIMEOUT
        if max_timeout is not None and timeout > max_timeout:
            StructuredLogger.warning(
                "Capping invalidation wait to the remaining invocation time",
                requested_timeout=timeout,
                timeout=max_timeout,
            )
            timeout = max_timeout
        if not distribution_ids:
            raise InvalidationError("No CloudFront distribution ids provided or configured")

        StructuredLogger.info(
            "Processing cache invalidation",
            distribution_ids=distribution_ids,
            paths_count=len(paths),
            request_id=message_body.get("request_id"),
        )
        return invalidator.submit_and_wait(
            build_requests(distribution_ids, paths, timeout)
        )

    if action == "reconcile":
        composite_id = message_body.get("id", "")
        if not isinstance(composite_id, str):
            raise IdentifierEncodingError(
                f"Invalidation identifier must be a string, got {type(composite_id).__name__}"
            )
        if message_body.get("distribution_ids") and not composite_id.startswith("{"):
            ids = decode_positional(composite_id, message_body["distribution_ids"])
        else:
            ids = decode_identifier(composite_id)
        return invalidator.reconcile(ids)

    raise InvalidationError(f"Unknown action: {action}")
