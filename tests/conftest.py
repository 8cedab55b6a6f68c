"""
Test configuration and fixtures for the DynamoDB datasource.

Provides configuration fixtures, a mocked boto3 Table for payload-level unit
tests, and moto-backed tables for end-to-end CRUD tests.
"""

from unittest.mock import Mock

import boto3
import pytest
from moto import mock_aws

from dynamodb_datasource import Datasource, DatasourceConfig, Schema


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake AWS credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def datasource_config():
    """Datasource configuration for testing."""
    return DatasourceConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=None,
        table_prefix="test_"
    )


@pytest.fixture
def user_schema_definition():
    """Schema definition used throughout the tests."""
    return {
        'name': {'type': 'string', 'required': True},
        'age': {'type': 'number', 'required': False},
    }


@pytest.fixture
def user_schema(user_schema_definition):
    return Schema(user_schema_definition)


@pytest.fixture
def mock_table():
    """Mock boto3 DynamoDB Table resource."""
    table = Mock()
    table.name = "test_users"
    table.put_item.return_value = {}
    table.get_item.return_value = {}
    table.update_item.return_value = {'Attributes': {}}
    table.delete_item.return_value = {'Attributes': {}}
    return table


@pytest.fixture
def mock_dynamodb_resource(aws_credentials):
    """Mock DynamoDB resource."""
    with mock_aws():
        yield boto3.resource('dynamodb', region_name='us-east-1')


@pytest.fixture
def users_table(mock_dynamodb_resource):
    """Create the prefixed users table for testing."""
    table = mock_dynamodb_resource.create_table(
        TableName='test_users',
        KeySchema=[
            {'AttributeName': 'userId', 'KeyType': 'HASH'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'userId', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )
    table.wait_until_exists()
    return table


@pytest.fixture
def datasource(datasource_config, users_table):
    """Datasource running inside the moto mock."""
    return Datasource(datasource_config)


@pytest.fixture
def users(datasource, user_schema_definition):
    """Model for the moto-backed users table."""
    return datasource.model('users', 'userId', user_schema_definition)
