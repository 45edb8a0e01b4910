"""Unit tests for DynamoDB preference storage."""
import json

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from storage.dynamodb_storage import DynamoDBStorage
from venue_calendar.preferences import STORAGE_KEY, PreferenceStore


@pytest.fixture
def aws_env(monkeypatch):
    """Fake credentials and region for boto3."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')


@pytest.fixture
def dynamodb_table(aws_env):
    """Create a mock DynamoDB table for testing."""
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')

        table = dynamodb.create_table(
            TableName='test-calendar-preferences',
            KeySchema=[
                {'AttributeName': 'client_id', 'KeyType': 'HASH'},
                {'AttributeName': 'storage_key', 'KeyType': 'RANGE'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'client_id', 'AttributeType': 'S'},
                {'AttributeName': 'storage_key', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )

        yield table


@pytest.fixture
def storage(dynamodb_table):
    return DynamoDBStorage('test-calendar-preferences', client_id='client-1')


def test_get_item_missing(storage):
    """Test reading a key that was never written."""
    assert storage.get_item(STORAGE_KEY) is None


def test_set_and_get_item(storage, dynamodb_table):
    """Test writing and reading back a value."""
    storage.set_item(STORAGE_KEY, '["v1"]')

    assert storage.get_item(STORAGE_KEY) == '["v1"]'
    item = dynamodb_table.get_item(
        Key={'client_id': 'client-1', 'storage_key': STORAGE_KEY}
    )['Item']
    assert item['value'] == '["v1"]'


def test_set_item_overwrites(storage):
    """Test that a second write replaces the first."""
    storage.set_item(STORAGE_KEY, 'first')
    storage.set_item(STORAGE_KEY, 'second')

    assert storage.get_item(STORAGE_KEY) == 'second'


def test_clients_are_isolated(storage, dynamodb_table):
    """Test that each client sees only its own values."""
    other = DynamoDBStorage('test-calendar-preferences', client_id='client-2')
    storage.set_item(STORAGE_KEY, 'mine')

    assert other.get_item(STORAGE_KEY) is None


def test_preference_store_round_trip(storage):
    """Test the preference store on top of DynamoDB."""
    store = PreferenceStore(storage)
    store.save({'v2', 'v1'})

    assert json.loads(storage.get_item(STORAGE_KEY))['venueIds'] == ['v1', 'v2']
    assert store.load(['v1', 'v2', 'v3'], {'v1', 'v3'}) == {'v1'}


def test_missing_table_raises(aws_env):
    """Test that client errors propagate from the storage backend."""
    with mock_aws():
        storage = DynamoDBStorage('no-such-table', client_id='client-1')

        with pytest.raises(ClientError):
            storage.get_item(STORAGE_KEY)


def test_missing_table_absorbed_by_store(aws_env):
    """Test that the preference store falls back when DynamoDB fails."""
    with mock_aws():
        store = PreferenceStore(DynamoDBStorage('no-such-table', client_id='client-1'))

        assert store.load(['v1', 'v2'], {'v2'}) == {'v2'}
        assert store.save({'v2'}) is False
