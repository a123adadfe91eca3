"""Model tests."""

from datetime import datetime, timezone

from models import (
    Diagnostics,
    InvalidationRecord,
    InvalidationRequest,
    InvalidationStatus,
    OutcomeSet,
)


def test_request_paths_are_a_set():
    request = InvalidationRequest('E1', ['/b', '/a', '/b'], 30)
    assert request.paths == frozenset({'/a', '/b'})
    assert request.path_list == ['/a', '/b']


def test_record_from_remote():
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    record = InvalidationRecord.from_remote('E1', {'Id': 'I1', 'Status': 'Completed', 'CreateTime': created})
    assert record.invalidation_id == 'I1'
    assert record.is_completed
    assert record.to_dict()['create_time'] == created.isoformat()


def test_unrecognised_status_is_unknown():
    assert InvalidationStatus.from_remote('Exploded') is InvalidationStatus.UNKNOWN
    assert InvalidationStatus.from_remote(None) is InvalidationStatus.UNKNOWN


def test_diagnostics_helpers():
    diags = Diagnostics()
    diags.add_warning('w')
    assert not diags.has_error()
    diags.add_error('e', 'detail', target='E1')
    assert diags.has_error()
    assert [d.summary for d in diags.errors()] == ['e']
    assert diags.errors()[0].to_dict() == {
        'severity': 'Error', 'summary': 'e', 'detail': 'detail', 'distribution_id': 'E1',
    }


def test_outcome_to_dict():
    outcome = OutcomeSet(records={'E1': InvalidationRecord('E1', 'I1', InvalidationStatus.COMPLETED), 'E2': None})
    outcome.diagnostics.add_error('boom', target='E2')
    data = outcome.to_dict()
    assert data['id'] == '{"E1":"I1","E2":""}'
    assert data['statuses'] == {'E1': 'Completed', 'E2': 'unknown'}
    assert data['absent'] == ['E2']
    assert list(data['invalidations']) == ['E1']
    assert data['diagnostics'][0]['distribution_id'] == 'E2'
