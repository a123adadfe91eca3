"""Shared fixtures and helpers for cache invalidator tests."""

import os
import sys
import threading
import time
from collections import defaultdict
from datetime import datetime, timezone

import pytest

# ---------------------------------------------------------------------------
# Path setup: the Lambda source directory is deployed flat, so its modules
# import each other by bare name. Replicate that layout for tests.
# ---------------------------------------------------------------------------
_repo_root = os.path.join(os.path.dirname(__file__), '..')
_lambda_dir = os.path.join(_repo_root, 'src', 'cache_invalidator')
sys.path.insert(0, _lambda_dir)
sys.path.insert(0, _repo_root)

from shared.errors import InvalidationNotFoundError, RemoteError  # noqa: E402


class FakeCloudFront:
    """Thread-safe in-memory InvalidationClient.

    Args:
        polls_to_complete: distribution id -> number of get calls before the
            invalidation reports Completed; ``None`` means never completes.
        create_errors: distribution id -> exception raised by create.
        get_errors: distribution id -> exception raised by get.
        no_identifier: distribution ids whose create succeeds without an Id.
        missing: (distribution id, invalidation id) pairs reported as not found.
        create_delay / get_delay: seconds each call blocks, to observe overlap.
    """

    def __init__(self, polls_to_complete=None, create_errors=None, get_errors=None,
                 no_identifier=(), missing=(), create_delay=0.0, get_delay=0.0,
                 default_polls=1):
        self.polls_to_complete = polls_to_complete or {}
        self.create_errors = create_errors or {}
        self.get_errors = get_errors or {}
        self.no_identifier = set(no_identifier)
        self.missing = set(missing)
        self.create_delay = create_delay
        self.get_delay = get_delay
        self.default_polls = default_polls

        self._lock = threading.Lock()
        self.create_calls = []
        self.get_calls = defaultdict(int)
        self.active = 0
        self.max_active = 0

    def _enter(self):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)

    def _exit(self):
        with self._lock:
            self.active -= 1

    def create_invalidation(self, distribution_id, paths, caller_reference):
        self._enter()
        try:
            with self._lock:
                self.create_calls.append((distribution_id, list(paths), caller_reference))
            if self.create_delay:
                time.sleep(self.create_delay)
            if distribution_id in self.create_errors:
                raise self.create_errors[distribution_id]
            if distribution_id in self.no_identifier:
                return {}
            return {
                'Id': f'inv-{distribution_id}',
                'Status': 'InProgress',
                'CreateTime': datetime(2024, 1, 1, tzinfo=timezone.utc),
            }
        finally:
            self._exit()

    def get_invalidation(self, distribution_id, invalidation_id):
        self._enter()
        try:
            if self.get_delay:
                time.sleep(self.get_delay)
            if (distribution_id, invalidation_id) in self.missing:
                raise InvalidationNotFoundError(distribution_id, invalidation_id)
            if distribution_id in self.get_errors:
                raise self.get_errors[distribution_id]
            with self._lock:
                self.get_calls[distribution_id] += 1
                calls = self.get_calls[distribution_id]
            needed = self.polls_to_complete.get(distribution_id, self.default_polls)
            status = 'Completed' if needed is not None and calls >= needed else 'InProgress'
            return {'Id': invalidation_id, 'Status': status}
        finally:
            self._exit()

    def caller_references(self):
        return [ref for _, _, ref in self.create_calls]


def remote_error(message='An error occurred (AccessDenied) when calling the CreateInvalidation operation: denied'):
    return RemoteError(message, code='AccessDenied')


@pytest.fixture
def fake_cloudfront():
    return FakeCloudFront()
