import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()


class DatasourceConfig(BaseModel):
    """Configuration for the DynamoDB connection and table naming."""

    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    region_name: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"),
        validate_default=True,
        description="AWS region name"
    )

    # DynamoDB specific settings
    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="DynamoDB endpoint URL (for local development)"
    )

    # Table configuration
    table_prefix: Optional[str] = Field(
        default=None,
        validate_default=True,
        description="Prefix prepended to every table name"
    )

    # Connection settings, handed to botocore as-is
    max_pool_connections: int = Field(
        default=10,
        description="Maximum number of connections in the botocore connection pool"
    )

    retries: int = Field(
        default=3,
        description="Number of attempts botocore makes for a failed request"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Connect and read timeout in seconds"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: os.getenv("DYNAMODB_DEBUG_LOGGING", "false").lower() == "true",
        description="Enable debug logging for datasource operations"
    )

    @field_validator('region_name')
    @classmethod
    def validate_region(cls, v):
        """Validate AWS region name."""
        if not v:
            raise ValueError("AWS region is required")
        return v

    @field_validator('table_prefix')
    @classmethod
    def validate_table_prefix(cls, v):
        """Validate table name prefix."""
        if not v:
            raise ValueError("table_prefix is required")
        return v

    def get_table_name(self, base_name: str) -> str:
        """Get the full table name with the configured prefix.

        Args:
            base_name: Base table name

        Returns:
            Prefixed table name
        """
        return f"{self.table_prefix}{base_name}"

    @classmethod
    def from_env(cls, table_prefix: str) -> 'DatasourceConfig':
        """Create configuration from environment variables.

        The table prefix is never read from the environment.

        Args:
            table_prefix: Prefix for table names

        Returns:
            DatasourceConfig instance
        """
        return cls(table_prefix=table_prefix)

    @classmethod
    def for_local_development(cls, table_prefix: str = "local_") -> 'DatasourceConfig':
        """Create configuration for DynamoDB Local.

        Args:
            table_prefix: Prefix for table names

        Returns:
            DatasourceConfig instance configured for local development
        """
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            endpoint_url="http://localhost:8000",
            table_prefix=table_prefix,
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        validate_assignment=True
    )
