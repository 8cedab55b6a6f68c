"""
Core infrastructure for DynamoDB access.

- TableGateway: submits payloads to a boto3 Table handle
- map_service_error: botocore ClientError to datasource exception mapping
- map_botocore_error: client-side botocore failures (network, parameters)
"""

from .table_gateway import TableGateway, map_botocore_error, map_service_error

__all__ = [
    "TableGateway",
    "map_botocore_error",
    "map_service_error",
]
