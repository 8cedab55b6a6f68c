"""
Datasource Facade

Entry point of the library. A Datasource owns the boto3 DynamoDB resource
and hands out Models whose table names carry the configured prefix.

Example:
    datasource = Datasource(region_name='us-east-1', table_prefix='myapp_')
    users = datasource.model('users', 'userId', {
        'name': {'type': 'string', 'required': True},
        'age': {'type': 'number'},
    })
    user = users.insert({'name': 'Ann'})
"""

import logging
from typing import Any, Dict, Optional, Union

import boto3
from botocore.config import Config
from pydantic import ValidationError as PydanticValidationError

from .config import DatasourceConfig
from .exceptions import ConfigurationError, ConnectionError
from .model import Model
from .schema import Schema

logger = logging.getLogger(__name__)

_PACKAGE_LOGGER = "dynamodb_datasource"


class Datasource:
    """
    Factory for Models sharing one DynamoDB resource.

    The resource is created once, at construction, and shared read-only by
    every Model. Nothing here performs I/O; the first request happens when a
    Model operation runs.
    """

    Schema = Schema

    def __init__(self, config: Optional[DatasourceConfig] = None, **options):
        """Initialize datasource.

        Args:
            config: Complete configuration; when omitted, one is built from
                ``options`` with environment variables filling the gaps
            **options: DatasourceConfig fields, e.g. region_name, table_prefix

        Raises:
            ConfigurationError: Region or table prefix missing, or options invalid
            ConnectionError: boto3 session or resource could not be created
        """
        if config is None:
            try:
                config = DatasourceConfig(**options)
            except PydanticValidationError as e:
                messages = "; ".join(error['msg'] for error in e.errors())
                raise ConfigurationError(f"Invalid datasource configuration: {messages}", original_error=e) from e
        elif options:
            raise ConfigurationError("Pass either a config or keyword options, not both")

        self.config = config
        if config.enable_debug_logging:
            logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.DEBUG)

        self._dynamodb = self._create_resource()

    def _create_resource(self):
        try:
            session = boto3.Session(
                aws_access_key_id=self.config.aws_access_key_id,
                aws_secret_access_key=self.config.aws_secret_access_key,
                region_name=self.config.region_name
            )

            resource_kwargs = {
                'region_name': self.config.region_name,
                'config': Config(
                    retries={'max_attempts': self.config.retries},
                    max_pool_connections=self.config.max_pool_connections,
                    read_timeout=self.config.timeout_seconds,
                    connect_timeout=self.config.timeout_seconds
                )
            }
            if self.config.endpoint_url:
                resource_kwargs['endpoint_url'] = self.config.endpoint_url

            resource = session.resource('dynamodb', **resource_kwargs)
        except Exception as e:
            logger.error(f"Failed to create DynamoDB resource: {e}")
            error = ConnectionError(f"Failed to connect to DynamoDB: {e}", e)
            raise error.add_context(region_name=self.config.region_name, endpoint_url=self.config.endpoint_url) from e

        logger.debug(f"Created DynamoDB resource in {self.config.region_name}")
        return resource

    @property
    def dynamodb(self):
        """The shared boto3 DynamoDB resource (``.meta.client`` is the low-level client)."""
        return self._dynamodb

    def get_table_name(self, table_name: str) -> str:
        """Return ``table_name`` with the configured prefix."""
        return self.config.get_table_name(table_name)

    def model(self, table_name: str, primary_key: str, schema: Union[Schema, Dict[str, Any]]) -> Model:
        """
        Create a Model for a table.

        Args:
            table_name: Table name without prefix
            primary_key: Name of the partition key attribute
            schema: Schema instance or raw schema definition

        Returns:
            Model bound to the prefixed table

        Raises:
            ConfigurationError: Table name, primary key or schema missing or invalid
        """
        if not table_name:
            raise ConfigurationError("Table name is required")
        full_table_name = self.get_table_name(table_name)
        return Model(full_table_name, primary_key, schema, self._dynamodb.Table(full_table_name))
