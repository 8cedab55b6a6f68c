"""
Table Model

A Model is bound to one DynamoDB table: its (prefixed) name, the name of its
partition key attribute and the Schema of its entities. It builds the request
payloads for PutItem, GetItem, UpdateItem and DeleteItem and submits them
through a TableGateway.

Every operation runs the same fixed pipeline: validate, build payload,
submit. Validation failures are raised before anything is sent; service
failures come back as ServiceError subclasses.
"""

import logging
import re
from typing import Any, Dict, Optional, Union

from .core import TableGateway
from .exceptions import ConfigurationError, ValidationError
from .schema import SET_TYPES, Schema
from .utils import CREATED_ON, UPDATED_ON, entity_to_item, epoch_millis, generate_id, item_to_entity, to_dynamodb_value

logger = logging.getLogger(__name__)

_PLACEHOLDER_INVALID = re.compile(r'[^0-9A-Za-z_]')


def _placeholder(name: str, used: set) -> str:
    """Return a unique expression placeholder token for an attribute name."""
    token = _PLACEHOLDER_INVALID.sub('_', name) or '_'
    candidate = token
    suffix = 1
    while candidate in used:
        candidate = f"{token}_{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


class Model:
    """
    CRUD access to one DynamoDB table.

    Models are created by Datasource.model() and hold no mutable state, so a
    single instance can be shared by any number of callers.
    """

    def __init__(self, table_name: str, primary_key: str, schema: Union[Schema, Dict[str, Any]], table):
        """Initialize model.

        Args:
            table_name: Full (prefixed) DynamoDB table name
            primary_key: Name of the partition key attribute
            schema: Schema instance or raw schema definition
            table: boto3 DynamoDB Table resource for table_name

        Raises:
            ConfigurationError: Any argument is missing
        """
        if not table_name:
            raise ConfigurationError("Table name is required")
        if not primary_key:
            raise ConfigurationError("Primary key is required", context={'table_name': table_name})
        if not schema:
            raise ConfigurationError("Schema definition is required", context={'table_name': table_name})
        if table is None:
            raise ConfigurationError("Table resource is required", context={'table_name': table_name})

        self.table_name = table_name
        self.primary_key = primary_key
        self.schema = schema if isinstance(schema, Schema) else Schema(schema)
        self.gateway = TableGateway(table, primary_key)

    def __repr__(self) -> str:
        return f"Model(table_name={self.table_name!r}, primary_key={self.primary_key!r})"

    def _is_empty_set(self, name: str, value: Any) -> bool:
        # DynamoDB cannot store an empty set
        details = self.schema.fields.get(name)
        return details is not None and details.type in SET_TYPES and value is not None and not value

    def _validate(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self.schema.validate(entity)
        except ValidationError as e:
            e.add_context(table_name=self.table_name)
            raise

    def _key(self, id: Any) -> Dict[str, Any]:
        return {self.primary_key: to_dynamodb_value(id)}

    # =========================================================================
    # Request payloads
    # =========================================================================

    def build_insert_payload(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        """
        Build PutItem parameters for a new entity.

        A fresh UUID4 is assigned to the primary key (replacing anything the
        caller put there) and createdOn/updatedOn are set to the same epoch
        millisecond timestamp. Empty set-typed values are left out of the
        item. The write is conditioned on the key not existing yet, so an
        insert can never overwrite a record.

        Args:
            entity: Validated entity; left unmodified

        Returns:
            Keyword arguments for Table.put_item
        """
        timestamp = epoch_millis()
        item = {name: value for name, value in entity.items() if not self._is_empty_set(name, value)}
        item.update({self.primary_key: generate_id(), CREATED_ON: timestamp, UPDATED_ON: timestamp})
        pk_token = _placeholder(self.primary_key, set())
        return {
            'Item': entity_to_item(item),
            'ConditionExpression': f"attribute_not_exists(#{pk_token})",
            'ExpressionAttributeNames': {f"#{pk_token}": self.primary_key},
            'ReturnConsumedCapacity': 'NONE'
        }

    def build_update_payload(self, id: Any, entity: Dict[str, Any]) -> Dict[str, Any]:
        """
        Build UpdateItem parameters for a partial update of record ``id``.

        Produces ``SET #updatedOn = :updatedOn[, #f = :f ...][ REMOVE #g, ...]``
        with every attribute name bound through ExpressionAttributeNames.
        The update only applies to an existing record and returns the record
        as it is after the update.

        Raises:
            ValidationError: A required field is present with a falsy value
        """
        fields = self.schema.build_update_fields(entity)

        used = set()
        pk_token = _placeholder(self.primary_key, used)
        updated_token = _placeholder(UPDATED_ON, used)
        names = {f"#{pk_token}": self.primary_key, f"#{updated_token}": UPDATED_ON}
        values = {f":{updated_token}": fields.updated_on}
        assignments = [f"#{updated_token} = :{updated_token}"]

        for name, value in fields.set_fields:
            token = _placeholder(name, used)
            names[f"#{token}"] = name
            values[f":{token}"] = to_dynamodb_value(value)
            assignments.append(f"#{token} = :{token}")

        update_expression = "SET " + ", ".join(assignments)

        if fields.remove_fields:
            removals = []
            for name in fields.remove_fields:
                token = _placeholder(name, used)
                names[f"#{token}"] = name
                removals.append(f"#{token}")
            update_expression += " REMOVE " + ", ".join(removals)

        return {
            'Key': self._key(id),
            'UpdateExpression': update_expression,
            'ExpressionAttributeNames': names,
            'ExpressionAttributeValues': values,
            'ConditionExpression': f"attribute_exists(#{pk_token})",
            'ReturnValues': 'ALL_NEW',
            'ReturnConsumedCapacity': 'NONE'
        }

    def build_get_payload(self, id: Any) -> Dict[str, Any]:
        """Build strongly consistent GetItem parameters for record ``id``."""
        return {
            'Key': self._key(id),
            'ConsistentRead': True,
            'ReturnConsumedCapacity': 'NONE'
        }

    def build_delete_payload(self, id: Any) -> Dict[str, Any]:
        """Build DeleteItem parameters for record ``id``, which must exist."""
        pk_token = _placeholder(self.primary_key, set())
        return {
            'Key': self._key(id),
            'ConditionExpression': f"attribute_exists(#{pk_token})",
            'ExpressionAttributeNames': {f"#{pk_token}": self.primary_key},
            'ReturnValues': 'ALL_OLD',
            'ReturnConsumedCapacity': 'NONE'
        }

    # =========================================================================
    # Operations
    # =========================================================================

    def insert(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new entity.

        Args:
            entity: Entity data; the primary key is always generated

        Returns:
            The stored entity, including primary key and timestamps

        Raises:
            ValidationError: Entity does not satisfy the schema
            ConditionalCheckFailedError: Generated key already exists
            ServiceError: DynamoDB rejected the request
        """
        validated = self._validate(entity)
        payload = self.build_insert_payload(validated)
        logger.debug(f"PutItem payload for {self.table_name}: {payload}")
        self.gateway.put_item(**payload)
        return item_to_entity(payload['Item'])

    def find_by_id(self, id: Any) -> Optional[Dict[str, Any]]:
        """
        Find an entity by primary key.

        Returns:
            The entity, or None if no record has this key
        """
        payload = self.build_get_payload(id)
        response = self.gateway.get_item(**payload)
        item = response.get('Item')
        if item is None:
            logger.debug(f"No item in {self.table_name} for {self.primary_key}={id}")
            return None
        return item_to_entity(item)

    def update(self, id: Any, entity: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update an existing entity.

        The entity is validated against the whole schema first, so required
        fields have to be supplied even when they are not being changed.

        Args:
            id: Primary key of the record to update
            entity: Fields to assign; falsy optional fields are removed

        Returns:
            The record as stored after the update

        Raises:
            ValidationError: Entity does not satisfy the schema
            ConditionalCheckFailedError: No record with this key
            ServiceError: DynamoDB rejected the request
        """
        validated = self._validate(entity)
        payload = self.build_update_payload(id, validated)
        logger.debug(f"UpdateItem payload for {self.table_name}: {payload}")
        response = self.gateway.update_item(**payload)
        return item_to_entity(response.get('Attributes', {}))

    def delete(self, id: Any) -> Dict[str, Any]:
        """
        Delete an existing entity.

        Returns:
            The deleted record

        Raises:
            ConditionalCheckFailedError: No record with this key
            ServiceError: DynamoDB rejected the request
        """
        payload = self.build_delete_payload(id)
        response = self.gateway.delete_item(**payload)
        return item_to_entity(response.get('Attributes', {}))
