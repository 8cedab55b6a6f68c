"""
DynamoDB Datasource

A lightweight object-mapping layer over DynamoDB: declare a table's primary
key and field schema, then insert, find, update and delete entities with
type-tag validation and automatic createdOn/updatedOn timestamps.
"""

from .config import DatasourceConfig
from .datasource import Datasource
from .exceptions import (
    ConditionalCheckFailedError,
    ConfigurationError,
    ConnectionError,
    DatasourceError,
    ServiceError,
    ValidationError,
)
from .model import Model
from .schema import FieldDefinition, FieldType, Schema, UpdateFields

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "DatasourceConfig",

    # Facade and models
    "Datasource",
    "Model",

    # Schema
    "Schema",
    "FieldType",
    "FieldDefinition",
    "UpdateFields",

    # Exceptions
    "DatasourceError",
    "ConfigurationError",
    "ValidationError",
    "ServiceError",
    "ConditionalCheckFailedError",
    "ConnectionError",
]
