"""
Shared aioboto3 client handling for the AWS adapters.
"""
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional, Type

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from phototag.core.config import settings
from phototag.core.exceptions import PhotoTaggingError
from phototag.core.logging import get_logger

logger = get_logger(__name__)


def client_error_code(error: ClientError) -> str:
    """Return the AWS error code carried by a ClientError."""
    return error.response.get("Error", {}).get("Code", "")


class AioBotoService:
    """Base class for adapters that open a short-lived aioboto3 client per call."""

    service_name: str = ""
    error_class: Type[PhotoTaggingError] = PhotoTaggingError

    def __init__(
        self,
        region_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        session: Optional[Any] = None,
    ):
        """Store configuration but do not open a client yet."""
        self.region_name = region_name or settings.AWS_REGION
        self.access_key_id = access_key_id or settings.AWS_ACCESS_KEY_ID
        self.secret_access_key = secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self._session = session or aioboto3.Session()

    def _client_args(self) -> Dict[str, Any]:
        client_args = {"region_name": self.region_name or "us-east-1"}
        if self.access_key_id and self.secret_access_key:
            logger.debug("Using explicit AWS credentials from config", service=self.service_name)
            client_args["aws_access_key_id"] = self.access_key_id
            client_args["aws_secret_access_key"] = self.secret_access_key
        return client_args

    @asynccontextmanager
    async def _get_client(self) -> AsyncGenerator[Any, None]:
        """Async context manager yielding a client for ``service_name``.

        Only client creation is guarded here; errors raised by calls made with the
        client propagate to the caller unchanged.
        """
        async with AsyncExitStack() as stack:
            try:
                client = await stack.enter_async_context(
                    self._session.client(self.service_name, **self._client_args())
                )
            except NoCredentialsError as e:
                logger.error("AWS credentials not found", service=self.service_name)
                raise self.error_class(
                    f"AWS credentials not found for {self.service_name}") from e
            except (ClientError, BotoCoreError) as e:
                logger.error("Failed to initialize AWS client",
                             service=self.service_name, error=str(e))
                raise self.error_class(
                    f"Failed to initialize {self.service_name} client: {e}") from e
            yield client
