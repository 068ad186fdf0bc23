from typing import Any, Callable

import httpx

from bookswap.client.config import ClientConfig, config as default_config
from bookswap.client.errors import AuthError, InvalidResponseError, NetworkError, error_from_response


class ApiTransport:
    """
    BookSwap REST API 传输层

    凭据只读：通过 credentials() 取当前 Token，由 SessionStore 负责写入。
    携带 Token 的请求收到 401 时回调 on_unauthorized，让会话层清掉失效凭据。
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or default_config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.credentials: Callable[[], str | None] = lambda: None
        self.on_unauthorized: Callable[[], None] | None = None

    @property
    def base_url(self) -> str:
        return self.config.api_url.rstrip("/")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    async def request(self, method: str, path: str, *, auth: bool = True, **kwargs) -> Any:
        token = self.credentials() if auth else None
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self.client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f"Network error on {method} {path}: {e}") from e

        if response.status_code == 204:
            return None
        if response.status_code >= 400:
            error = error_from_response(response)
            if isinstance(error, AuthError) and token and self.on_unauthorized is not None:
                self.on_unauthorized()
            raise error
        try:
            return response.json()
        except ValueError as e:
            content_type = response.headers.get("content-type", "unknown")
            raise InvalidResponseError(
                f"Invalid response from {method} {path}: expected JSON, got {content_type}",
                status_code=response.status_code,
            ) from e

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
