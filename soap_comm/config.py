"""
Configuration settings for SOAP clients
"""
import os
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

_TRUE_STRINGS = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_STRINGS


@dataclass
class TransportConfig:
    """Configuration for the HTTP transport"""
    timeout_seconds: float = 30.0
    verify_tls: bool = True
    user_agent: Optional[str] = None

    @classmethod
    def from_env(cls) -> "TransportConfig":
        """Create config from environment variables"""
        return cls(
            timeout_seconds=float(os.getenv("SOAP_TIMEOUT_SECONDS", "30")),
            verify_tls=_env_flag("SOAP_VERIFY_TLS", True),
            user_agent=os.getenv("SOAP_USER_AGENT"),
        )


@dataclass
class ClientConfig:
    """Main configuration for a SOAP client"""
    endpoint: str
    transport: TransportConfig = field(default_factory=TransportConfig)

    # Telemetry configuration
    service_name: str = "soap_comm.client"
    enable_tracing: bool = True

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create config from environment variables

        Raises:
            ValueError: SOAP_ENDPOINT is not set
        """
        endpoint = os.getenv("SOAP_ENDPOINT")
        if not endpoint:
            raise ValueError("SOAP_ENDPOINT environment variable is required")

        return cls(
            endpoint=endpoint,
            transport=TransportConfig.from_env(),
            service_name=os.getenv("SOAP_SERVICE_NAME", "soap_comm.client"),
            enable_tracing=_env_flag("SOAP_ENABLE_TRACING", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging"""
        return {
            "endpoint": self.endpoint,
            "timeout_seconds": self.transport.timeout_seconds,
            "verify_tls": self.transport.verify_tls,
            "service_name": self.service_name,
            "enable_tracing": self.enable_tracing,
        }
