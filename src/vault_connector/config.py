"""
Configuration classes for Vault Connector.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ClientConfig(BaseModel):
    """Transport configuration for the HTTP connector."""
    model_config = ConfigDict(extra="forbid")

    timeout: Optional[float] = Field(30.0, description="Request timeout in seconds")
    max_connections: int = Field(10, description="Maximum number of connections")
    max_retries: int = Field(0, ge=0, description="Retries on connection errors and 5xx responses")
    retry_backoff_factor: float = Field(0.5, ge=0, description="Retry backoff factor in seconds")
    retry_max_delay: float = Field(10.0, ge=0, description="Upper bound for a single retry delay")
    verify_ssl: bool = Field(True, description="Whether to verify SSL certificates")
    ca_bundle: Optional[str] = Field(None, description="Path to CA bundle file")

    # Logging configuration
    log_requests: bool = Field(False, description="Whether to log HTTP method and status code")
