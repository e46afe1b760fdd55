"""Content store client (Sanity HTTP API).

Provides the read/write contract the rest of the application depends on:
- ``fetch``: run a GROQ query with parameters
- ``create``: create one document through the mutations endpoint

Reads can go through the API CDN; writes always hit the live API and
require a token. The token is kept server-side and never logged.
"""

from typing import Any, Protocol

import httpx
import orjson
import structlog

from src.config.settings import Settings


logger = structlog.get_logger(__name__)


# ==============================================================================
# Errors
# ==============================================================================


class ContentStoreError(Exception):
    """Base error for content store operations."""

    def __init__(
        self,
        message: str,
        code: str = "content_store_error",
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for an API response body."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ContentStoreNotConfiguredError(ContentStoreError):
    """Project, dataset or token missing."""

    def __init__(self, message: str = "Content store is not configured") -> None:
        super().__init__(message, "content_store_not_configured")


class ContentStoreRequestError(ContentStoreError):
    """The store answered with a non-2xx status."""

    def __init__(self, status_code: int, details: Any = None) -> None:
        description = None
        if isinstance(details, dict):
            error = details.get("error")
            if isinstance(error, dict):
                description = error.get("description") or error.get("message")
            elif isinstance(error, str):
                description = details.get("message") or error
        message = description or f"Content store returned HTTP {status_code}"
        super().__init__(message, "content_store_request_failed", status_code, details)


class ContentStoreTimeoutError(ContentStoreError):
    """The store did not answer in time."""

    def __init__(self, message: str = "Content store request timed out") -> None:
        super().__init__(message, "content_store_timeout")


class ContentStoreUnavailableError(ContentStoreError):
    """The store could not be reached."""

    def __init__(self, message: str = "Content store is unavailable") -> None:
        super().__init__(message, "content_store_unavailable")


# ==============================================================================
# Contract
# ==============================================================================


class ContentStore(Protocol):
    """Narrow read/write interface over the content store."""

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        """Run a query and return its ``result``."""
        ...

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Create a document and return it as stored."""
        ...


# ==============================================================================
# HTTP implementation
# ==============================================================================


def encode_query_params(
    query: str, params: dict[str, Any] | None = None
) -> dict[str, str]:
    """Build query string parameters for a GROQ request.

    Each parameter is sent as ``$name`` with a JSON-encoded value, so
    ``{"slug": "hello"}`` becomes ``$slug="hello"``.
    """
    encoded = {"query": query}
    for name, value in (params or {}).items():
        encoded[f"${name}"] = orjson.dumps(value).decode()
    return encoded


class SanityClient:
    """HTTP client for a Sanity project/dataset."""

    API_HOST = "api.sanity.io"
    CDN_HOST = "apicdn.sanity.io"

    def __init__(
        self,
        project_id: str,
        dataset: str,
        *,
        token: str | None = None,
        api_version: str = "2021-08-11",
        use_cdn: bool = False,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            project_id: Project identifier (subdomain of the API host).
            dataset: Dataset name.
            token: API token, required for writes.
            api_version: Dated API version, without the leading ``v``.
            use_cdn: Read through the API CDN.
            timeout: Request timeout in seconds.
            http_client: Optional pre-built client (tests inject a mock transport).
        """
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.removeprefix("v")
        self.use_cdn = use_cdn
        self._token = token
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> "SanityClient":
        """Build a client from application settings.

        Raises:
            ContentStoreNotConfiguredError: If project or dataset is missing.
        """
        if not settings.content_store_configured:
            raise ContentStoreNotConfiguredError(
                "Content store is not configured. "
                "Please set SANITY_PROJECT_ID and SANITY_DATASET."
            )
        return cls(
            project_id=settings.sanity_project_id or "",
            dataset=settings.sanity_dataset,
            token=settings.sanity_api_token,
            api_version=settings.sanity_api_version,
            use_cdn=bool(settings.sanity_use_cdn),
            timeout=settings.sanity_timeout,
            http_client=http_client,
        )

    def _base_url(self, *, cdn: bool) -> str:
        host = self.CDN_HOST if cdn else self.API_HOST
        return f"https://{self.project_id}.{host}/v{self.api_version}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @property
    def query_url(self) -> str:
        """URL used for reads."""
        return f"{self._base_url(cdn=self.use_cdn)}/data/query/{self.dataset}"

    @property
    def mutate_url(self) -> str:
        """URL used for writes (never the CDN)."""
        return f"{self._base_url(cdn=False)}/data/mutate/{self.dataset}"

    async def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        """Run a GROQ query.

        Args:
            query: GROQ query string.
            params: Query parameters, referenced as ``$name`` in the query.

        Returns:
            The ``result`` member of the response (``None`` when nothing matched).

        Raises:
            ContentStoreError: If the request fails.
        """
        response = await self._send(
            "GET",
            self.query_url,
            params=encode_query_params(query, params),
        )
        return response.get("result")

    async def create(self, document: dict[str, Any]) -> dict[str, Any]:
        """Create a document.

        Args:
            document: Document body; must contain ``_type``.

        Returns:
            The created document as returned by the store.

        Raises:
            ContentStoreNotConfiguredError: If no API token is configured.
            ContentStoreError: If the request fails.
        """
        if not self._token:
            raise ContentStoreNotConfiguredError(
                "Content store token is missing. Please set SANITY_API_TOKEN."
            )

        response = await self._send(
            "POST",
            self.mutate_url,
            params={"returnIds": "true", "returnDocuments": "true"},
            content=orjson.dumps({"mutations": [{"create": document}]}),
        )

        results = response.get("results") or []
        if not results:
            return dict(document)
        first = results[0]
        created = first.get("document")
        if created is None:
            created = {**document, "_id": first.get("id")}
        return created

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> dict[str, Any]:
        headers = self._headers()
        if content is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = await self._http.request(
                method, url, params=params, content=content, headers=headers
            )
        except httpx.TimeoutException as e:
            logger.error("content_store_timeout", method=method, url=url, error=str(e))
            raise ContentStoreTimeoutError from e
        except httpx.RequestError as e:
            logger.error(
                "content_store_unreachable", method=method, url=url, error=str(e)
            )
            raise ContentStoreUnavailableError(
                f"Content store is unavailable: {e}"
            ) from e

        if not response.is_success:
            try:
                details: Any = response.json()
            except ValueError:
                details = response.text[:500]
            logger.error(
                "content_store_request_failed",
                method=method,
                url=url,
                status_code=response.status_code,
            )
            raise ContentStoreRequestError(response.status_code, details)

        return response.json()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()
