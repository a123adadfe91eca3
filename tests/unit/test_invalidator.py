"""Single-distribution orchestration tests: create-and-wait and find-current."""

from conftest import FakeCloudFront, remote_error
from invalidator import CacheInvalidator
from models import InvalidationRequest, InvalidationStatus, Severity
from shared.errors import RemoteError


class TestCreateAndWait:
    def test_creates_then_waits_for_completion(self):
        client = FakeCloudFront(polls_to_complete={'E1': 2})
        record, diags = CacheInvalidator(client, poll_interval=0.01).create_and_wait(
            InvalidationRequest('E1', ['/*'], 5)
        )
        assert record.status is InvalidationStatus.COMPLETED
        assert record.invalidation_id == 'inv-E1'
        assert list(diags) == []
        assert len(client.create_calls) == 1

    def test_create_failure_short_circuits(self):
        client = FakeCloudFront(create_errors={'E1': remote_error()})
        record, diags = CacheInvalidator(client, poll_interval=0.01).create_and_wait(
            InvalidationRequest('E1', ['/*'], 5)
        )
        assert record is None
        assert len(diags) == 1
        assert client.get_calls['E1'] == 0

    def test_missing_identifier_short_circuits_with_warning(self):
        client = FakeCloudFront(no_identifier={'E1'})
        record, diags = CacheInvalidator(client, poll_interval=0.01).create_and_wait(
            InvalidationRequest('E1', ['/*'], 5)
        )
        assert record is None
        assert [d.severity for d in diags] == [Severity.WARNING]
        assert client.get_calls['E1'] == 0

    def test_timeout_keeps_in_progress_record(self):
        client = FakeCloudFront(polls_to_complete={'E1': None})
        record, diags = CacheInvalidator(client, poll_interval=0.01).create_and_wait(
            InvalidationRequest('E1', ['/*'], 0.05)
        )
        assert record.invalidation_id == 'inv-E1'
        assert record.status is InvalidationStatus.IN_PROGRESS
        assert len(diags.errors()) == 1


class TestFindCurrent:
    def test_returns_current_status(self):
        client = FakeCloudFront(polls_to_complete={'E1': 1})
        record, diags = CacheInvalidator(client).find_current('E1', 'inv-E1')
        assert record.invalidation_id == 'inv-E1'
        assert record.status is InvalidationStatus.COMPLETED
        assert list(diags) == []

    def test_not_found_is_absence_not_error(self):
        client = FakeCloudFront(missing={('E1', 'inv-gone')})
        record, diags = CacheInvalidator(client).find_current('E1', 'inv-gone')
        assert record is None
        assert list(diags) == []

    def test_remote_error_is_reported(self):
        client = FakeCloudFront(get_errors={'E1': RemoteError('AccessDenied')})
        record, diags = CacheInvalidator(client).find_current('E1', 'inv-E1')
        assert record is None
        assert len(diags) == 1
        assert diags[0].severity is Severity.ERROR
        assert diags[0].detail == 'AccessDenied'

    def test_empty_id_skips_remote_call(self, fake_cloudfront):
        record, diags = CacheInvalidator(fake_cloudfront).find_current('E1', '')
        assert record is None
        assert list(diags) == []
        assert fake_cloudfront.get_calls['E1'] == 0
