"""
Thin DynamoDB Table Gateway

Submits prepared request payloads to a boto3 Table handle and turns botocore
failures into datasource exceptions. The gateway builds no payloads itself
and never retries: whatever DynamoDB reports is passed on, classified by
error code and chained to the original botocore exception.
"""

import logging
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from ..exceptions import ConditionalCheckFailedError, ConnectionError, ServiceError

logger = logging.getLogger(__name__)

_CONNECTION_ERROR_CODES = {
    'UnrecognizedClientException',
    'AccessDeniedException',
    'InvalidSignatureException',
    'IncompleteSignatureException',
    'ExpiredTokenException',
}


def map_service_error(
    error: ClientError,
    operation: str,
    table_name: str,
    resource_id: Optional[Any] = None
) -> ServiceError:
    """Map a DynamoDB ClientError to a datasource exception.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetItem", "PutItem")
        table_name: The DynamoDB table name
        resource_id: Optional primary key value the request was about

    Returns:
        ConditionalCheckFailedError for failed conditions, ConnectionError
        for credential problems, ServiceError for everything else. The
        operation and table are recorded in the error context.
    """
    error_code = error.response.get('Error', {}).get('Code')
    error_message = error.response.get('Error', {}).get('Message', str(error))

    if error_code == 'ConditionalCheckFailedException':
        mapped = ConditionalCheckFailedError(f"Conditional check failed: {error_message}", resource_id, original_error=error)
    elif error_code in _CONNECTION_ERROR_CODES:
        mapped = ConnectionError(f"Authentication/authorization failed: {error_message}", original_error=error)
    else:
        if not error_code:
            logger.warning(f"DynamoDB error without error code during {operation} on {table_name}")
        mapped = ServiceError(f"DynamoDB operation failed: {error_message}", error_code, original_error=error)
    return mapped.add_context(resource_id=resource_id, operation=operation, table_name=table_name)


def map_botocore_error(error: BotoCoreError, operation: str, table_name: str) -> ServiceError:
    """Map a client-side botocore failure to a datasource exception.

    Only network failures (no connection, timeouts, dropped connections)
    become ConnectionError. Anything else botocore raises before or after
    the request, such as parameter validation, is a ServiceError.
    """
    if isinstance(error, (BotoConnectionError, HTTPClientError)):
        mapped = ConnectionError(f"Could not reach DynamoDB: {error}", error)
    else:
        mapped = ServiceError(f"Request rejected by botocore: {error}", None, error)
    return mapped.add_context(operation=operation, table_name=table_name)


class TableGateway:
    """
    Gateway for one DynamoDB table.

    Each method takes the keyword arguments of the matching boto3 Table
    method and returns the raw response.
    """

    def __init__(self, table, primary_key: str):
        """Initialize table gateway.

        Args:
            table: boto3 DynamoDB Table resource
            primary_key: Name of the table's partition key attribute
        """
        self.table = table
        self.primary_key = primary_key

    @property
    def table_name(self) -> str:
        return self.table.name

    def _call(self, operation: str, method, payload: Dict[str, Any], resource_id: Optional[Any]) -> Dict[str, Any]:
        try:
            return method(**payload)
        except ClientError as e:
            raise map_service_error(e, operation, self.table_name, resource_id) from e
        except BotoCoreError as e:
            logger.error(f"{operation} on {self.table_name} failed: {e}")
            raise map_botocore_error(e, operation, self.table_name) from e

    def _resource_id(self, payload: Dict[str, Any]) -> Optional[Any]:
        source = payload.get('Key') or payload.get('Item') or {}
        return source.get(self.primary_key)

    def put_item(self, **payload) -> Dict[str, Any]:
        """Execute DynamoDB PutItem."""
        response = self._call("PutItem", self.table.put_item, payload, self._resource_id(payload))
        logger.info(f"Put item in {self.table_name}: {self._resource_id(payload)}")
        return response

    def get_item(self, **payload) -> Dict[str, Any]:
        """Execute DynamoDB GetItem."""
        return self._call("GetItem", self.table.get_item, payload, self._resource_id(payload))

    def update_item(self, **payload) -> Dict[str, Any]:
        """Execute DynamoDB UpdateItem."""
        response = self._call("UpdateItem", self.table.update_item, payload, self._resource_id(payload))
        logger.info(f"Updated item in {self.table_name}: {self._resource_id(payload)}")
        return response

    def delete_item(self, **payload) -> Dict[str, Any]:
        """Execute DynamoDB DeleteItem."""
        response = self._call("DeleteItem", self.table.delete_item, payload, self._resource_id(payload))
        logger.info(f"Deleted item from {self.table_name}: {self._resource_id(payload)}")
        return response
