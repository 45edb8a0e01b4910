"""DynamoDB-backed key/value storage for client preferences."""
import logging
from typing import Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class DynamoDBStorage:
    """
    Per-client key/value storage in a DynamoDB table.

    Items are keyed by ``client_id`` (hash) and ``storage_key`` (range) and
    hold the stored string in ``value``.
    """

    def __init__(self, table_name: str, client_id: str):
        """
        Initialize DynamoDB resource and table reference.

        Args:
            table_name: Name of the DynamoDB table
            client_id: Identity of the client owning the stored values
        """
        self.table_name = table_name
        self.client_id = client_id
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBStorage for table: {table_name}")

    def get_item(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Args:
            key: Storage key

        Returns:
            Stored string, or None if absent

        Raises:
            ClientError: If the read fails
        """
        try:
            response = self.table.get_item(
                Key={'client_id': self.client_id, 'storage_key': key}
            )
        except ClientError as e:
            logger.error(f"Error reading '{key}' from DynamoDB: {e}")
            raise

        item = response.get('Item')
        if not item:
            return None
        return item.get('value')

    def set_item(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            ClientError: If the write fails
        """
        try:
            self.table.put_item(
                Item={
                    'client_id': self.client_id,
                    'storage_key': key,
                    'value': value
                }
            )
        except ClientError as e:
            logger.error(f"Error writing '{key}' to DynamoDB: {e}")
            raise
