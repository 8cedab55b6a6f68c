#!/usr/bin/env python3
"""
Basic usage example for the DynamoDB datasource.

Runs against DynamoDB Local (http://localhost:8000) and expects a table
named 'local_users' with partition key 'userId' (string):

    aws dynamodb create-table --endpoint-url http://localhost:8000 \
        --table-name local_users \
        --attribute-definitions AttributeName=userId,AttributeType=S \
        --key-schema AttributeName=userId,KeyType=HASH \
        --billing-mode PAY_PER_REQUEST
"""

import logging

from dynamodb_datasource import (
    ConditionalCheckFailedError,
    Datasource,
    DatasourceConfig,
    FieldType,
    ValidationError,
)


def main():
    """Walk through insert, find, update and delete."""
    logging.basicConfig(level=logging.INFO)

    # 1. Configure the datasource
    print("1. Setting up the datasource...")
    datasource = Datasource(DatasourceConfig.for_local_development())
    # From environment variables instead:
    # datasource = Datasource(DatasourceConfig.from_env("myapp_"))

    # 2. Declare a model
    users = datasource.model('users', 'userId', {
        'name': {'type': FieldType.STRING, 'required': True},
        'age': {'type': FieldType.NUMBER},
        'tags': {'type': 'string-set'},
    })

    # 3. Insert
    print("2. Inserting a user...")
    user = users.insert({'name': 'Ann', 'tags': ['admin']})
    print(f"   Inserted {user['userId']} at {user['createdOn']}")

    try:
        users.insert({'age': 5})
    except ValidationError as e:
        print(f"   Rejected: {e.message}")

    # 4. Find
    print("3. Finding the user...")
    print(f"   {users.find_by_id(user['userId'])}")

    # 5. Update: assign age, then clear it again
    print("4. Updating the user...")
    user = users.update(user['userId'], {'name': 'Ann', 'age': 31})
    print(f"   age={user.get('age')} updatedOn={user['updatedOn']}")
    user = users.update(user['userId'], {'name': 'Ann', 'age': None})
    print(f"   age cleared: {'age' not in user}")

    # 6. Delete
    print("5. Deleting the user...")
    users.delete(user['userId'])
    try:
        users.delete(user['userId'])
    except ConditionalCheckFailedError:
        print("   Second delete rejected: record no longer exists")


if __name__ == "__main__":
    main()
