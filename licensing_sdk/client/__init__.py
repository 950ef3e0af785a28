"""Remote licensing service client."""

from .remote_service_client import RemoteServiceClient

__all__ = ["RemoteServiceClient"]
