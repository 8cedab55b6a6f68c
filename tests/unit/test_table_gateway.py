"""
Tests for TableGateway (core/table_gateway.py)

These tests verify that payloads are passed to boto3 untouched and that
botocore failures come back as datasource exceptions.
"""

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, ParamValidationError, ReadTimeoutError

from dynamodb_datasource.core.table_gateway import TableGateway, map_service_error
from dynamodb_datasource.exceptions import (
    ConditionalCheckFailedError,
    ConnectionError,
    ServiceError,
)


def client_error(code, operation_name='PutItem', message='Something went wrong'):
    return ClientError(
        error_response={'Error': {'Code': code, 'Message': message}},
        operation_name=operation_name
    )


@pytest.fixture
def gateway(mock_table):
    return TableGateway(mock_table, "userId")


class TestTableGateway:
    """Test TableGateway class."""

    def test_initialization(self, gateway, mock_table):
        assert gateway.table is mock_table
        assert gateway.primary_key == "userId"
        assert gateway.table_name == "test_users"

    def test_put_item_passes_payload(self, gateway, mock_table):
        payload = {'Item': {'userId': 'user-1'}, 'ReturnConsumedCapacity': 'NONE'}

        gateway.put_item(**payload)

        mock_table.put_item.assert_called_once_with(**payload)

    def test_get_item_returns_response(self, gateway, mock_table):
        mock_table.get_item.return_value = {'Item': {'userId': 'user-1'}}

        assert gateway.get_item(Key={'userId': 'user-1'}) == {'Item': {'userId': 'user-1'}}

    def test_update_item_returns_response(self, gateway, mock_table):
        mock_table.update_item.return_value = {'Attributes': {'userId': 'user-1'}}

        response = gateway.update_item(Key={'userId': 'user-1'}, UpdateExpression='SET #a = :a')

        assert response == {'Attributes': {'userId': 'user-1'}}

    def test_delete_item_returns_response(self, gateway, mock_table):
        mock_table.delete_item.return_value = {'Attributes': {'userId': 'user-1'}}

        assert gateway.delete_item(Key={'userId': 'user-1'}) == {'Attributes': {'userId': 'user-1'}}

    def test_conditional_check_failure(self, gateway, mock_table):
        mock_table.delete_item.side_effect = client_error('ConditionalCheckFailedException', 'DeleteItem')

        with pytest.raises(ConditionalCheckFailedError) as exc_info:
            gateway.delete_item(Key={'userId': 'user-1'})

        assert exc_info.value.resource_id == 'user-1'
        assert exc_info.value.code == 'ConditionalCheckFailedException'
        assert isinstance(exc_info.value.__cause__, ClientError)

    def test_throttling_is_passed_through(self, gateway, mock_table):
        mock_table.put_item.side_effect = client_error('ProvisionedThroughputExceededException')

        with pytest.raises(ServiceError) as exc_info:
            gateway.put_item(Item={'userId': 'user-1'})

        assert exc_info.value.code == 'ProvisionedThroughputExceededException'
        mock_table.put_item.assert_called_once()

    def test_botocore_error_is_connection_error(self, gateway, mock_table):
        mock_table.get_item.side_effect = EndpointConnectionError(endpoint_url="http://localhost:8000")

        with pytest.raises(ConnectionError, match="Could not reach DynamoDB") as exc_info:
            gateway.get_item(Key={'userId': 'user-1'})

        assert exc_info.value.operation == "GetItem"
        assert exc_info.value.table_name == "test_users"

    def test_read_timeout_is_connection_error(self, gateway, mock_table):
        mock_table.put_item.side_effect = ReadTimeoutError(endpoint_url="http://localhost:8000")

        with pytest.raises(ConnectionError):
            gateway.put_item(Item={'userId': 'user-1'})

    def test_parameter_validation_is_service_error(self, gateway, mock_table):
        mock_table.get_item.side_effect = ParamValidationError(report="Invalid type for parameter Key.userId, value: None")

        with pytest.raises(ServiceError, match="Request rejected by botocore") as exc_info:
            gateway.get_item(Key={'userId': None})

        assert not isinstance(exc_info.value, ConnectionError)
        assert exc_info.value.code is None
        assert isinstance(exc_info.value.__cause__, ParamValidationError)


class TestMapServiceError:
    """Test ClientError classification."""

    def test_conditional_check(self):
        error = map_service_error(client_error('ConditionalCheckFailedException'), "PutItem", "test_users", "user-1")

        assert isinstance(error, ConditionalCheckFailedError)
        assert error.message == "Conditional check failed: Something went wrong"
        assert error.context == {
            'code': 'ConditionalCheckFailedException',
            'resource_id': 'user-1',
            'operation': 'PutItem',
            'table_name': 'test_users',
        }
        assert str(error) == (
            "Conditional check failed: Something went wrong "
            "[code=ConditionalCheckFailedException; resource_id=user-1; operation=PutItem; table_name=test_users]"
        )

    @pytest.mark.parametrize("code", ['AccessDeniedException', 'UnrecognizedClientException', 'ExpiredTokenException'])
    def test_credential_errors(self, code):
        error = map_service_error(client_error(code), "GetItem", "test_users")

        assert isinstance(error, ConnectionError)
        assert isinstance(error, ServiceError)

    @pytest.mark.parametrize("code", ['ValidationException', 'ResourceNotFoundException', 'InternalServerError'])
    def test_other_errors_keep_code(self, code):
        error = map_service_error(client_error(code), "UpdateItem", "test_users")

        assert type(error) is ServiceError
        assert error.code == code
        assert error.context['code'] == code
        assert isinstance(error.original_error, ClientError)
