"""AWS service helpers for CloudFront invalidations."""

from typing import Any, Dict, List, Optional, Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from shared.errors import InvalidationNotFoundError, RemoteError
from shared.logger import StructuredLogger


class InvalidationClient(Protocol):
    """Remote capability the orchestration engine depends on."""

    def create_invalidation(
        self, distribution_id: str, paths: List[str], caller_reference: str
    ) -> Optional[Dict[str, Any]]:
        ...

    def get_invalidation(self, distribution_id: str, invalidation_id: str) -> Dict[str, Any]:
        ...


class CloudFrontHelper:
    """CloudFront operations.

    The underlying boto3 client is built once and shared by every thread of a
    fan-out; boto3 clients are thread-safe, sessions are not.
    """

    def __init__(
        self,
        region_name: str = "us-east-1",
        profile_name: Optional[str] = None,
        max_attempts: Optional[int] = None,
        retry_mode: Optional[str] = None,
        client: Any = None,
    ):
        if client is None:
            retries = {}
            if max_attempts is not None:
                retries["max_attempts"] = max_attempts
            if retry_mode:
                retries["mode"] = retry_mode

            session = boto3.session.Session(profile_name=profile_name, region_name=region_name)
            client = session.client("cloudfront", config=BotoConfig(retries=retries) if retries else None)
        self.client = client

    def create_invalidation(
        self, distribution_id: str, paths: List[str], caller_reference: str
    ) -> Optional[Dict[str, Any]]:
        """Create an invalidation batch and return CloudFront's Invalidation structure."""
        try:
            StructuredLogger.info(
                "Creating CloudFront invalidation",
                distribution_id=distribution_id,
                paths_count=len(paths),
                caller_reference=caller_reference,
            )

            response = self.client.create_invalidation(
                DistributionId=distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(paths), "Items": paths},
                    "CallerReference": caller_reference,
                },
            )

            return (response or {}).get("Invalidation")
        except ClientError as e:
            raise RemoteError(str(e), code=e.response.get("Error", {}).get("Code")) from e
        except BotoCoreError as e:
            raise RemoteError(str(e)) from e

    def get_invalidation(self, distribution_id: str, invalidation_id: str) -> Dict[str, Any]:
        """Get current state of an invalidation."""
        try:
            response = self.client.get_invalidation(DistributionId=distribution_id, Id=invalidation_id)
            invalidation = (response or {}).get("Invalidation")
            if not invalidation:
                raise InvalidationNotFoundError(distribution_id, invalidation_id)
            return invalidation
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code == "NoSuchInvalidation":
                raise InvalidationNotFoundError(distribution_id, invalidation_id) from e
            raise RemoteError(str(e), code=code) from e
        except BotoCoreError as e:
            raise RemoteError(str(e)) from e
