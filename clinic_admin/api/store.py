"""
Remote store

- RemoteStore is the asynchronous interface the controllers depend on
- HttpRemoteStore talks to the clinic REST API through httpx
- Every failure is normalized into a RemoteError with a display message,
  so controllers never look at status codes themselves
"""
import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from clinic_admin.api.resources import UPLOAD_PATH, Resource
from clinic_admin.core import config
from clinic_admin.core.errors import ConflictError, NetworkError, NotFoundError, RemoteError
from clinic_admin.models.schemas import UploadedAsset

logger = logging.getLogger(__name__)

INVALID_RESPONSE = "Respuesta inválida del servidor"


class RemoteStore(Protocol):
    async def fetch_collection(self, resource: Resource) -> List[BaseModel]: ...

    async def fetch_one(self, resource: Resource, entity_id: str) -> BaseModel: ...

    async def create(self, resource: Resource, payload: Dict[str, Any]) -> BaseModel: ...

    async def update(self, resource: Resource, entity_id: str, payload: Dict[str, Any]) -> BaseModel: ...

    async def upload_asset(
        self,
        content: bytes,
        kind: str,
        filename: str = "upload",
        content_type: str = "application/octet-stream",
    ) -> UploadedAsset: ...

    async def deactivate(self, resource: Resource, entity_id: str) -> None: ...

    async def reactivate(self, resource: Resource, entity_id: str) -> None: ...


def error_message(response: httpx.Response) -> str:
    """
    Pick the most useful message out of an error response

    The clinic API answers {"message": ...}; FastAPI answers {"detail": ...},
    where detail may be a list of validation errors.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, list) and value and isinstance(value[0], dict) and value[0].get("msg"):
                return str(value[0]["msg"])
    return f"Error del servidor ({response.status_code})"


def error_for_response(response: httpx.Response) -> RemoteError:
    message = error_message(response)
    if response.status_code == 404:
        return NotFoundError(message, response.status_code)
    if response.status_code == 409:
        return ConflictError(message, response.status_code)
    return NetworkError(message, response.status_code)


class HttpRemoteStore:
    """
    RemoteStore backed by an httpx.AsyncClient

    Pass `client` to reuse an existing client (tests hand in one wired to an
    ASGI transport); otherwise a client is created from configuration and
    closed by `aclose()`.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or config.API_BASE_URL,
            timeout=timeout if timeout is not None else config.API_TIMEOUT_SECONDS,
            headers=headers,
        )

    async def __aenter__(self) -> "HttpRemoteStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning(f"Timeout calling {method} {url}")
            raise NetworkError("Tiempo de espera agotado al contactar el servidor")
        except httpx.HTTPError as e:
            logger.warning(f"Error calling {method} {url}: {str(e)}")
            raise NetworkError("No se pudo conectar con el servidor")

        if response.status_code >= 400:
            error = error_for_response(response)
            logger.warning(f"{method} {url} returned status {response.status_code}: {error.message}")
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise NetworkError(INVALID_RESPONSE, response.status_code)

    @staticmethod
    def _unwrap(body: Any, key: Optional[str]) -> Any:
        if key is None:
            return body
        if not isinstance(body, dict) or key not in body:
            raise NetworkError(INVALID_RESPONSE)
        return body[key]

    @staticmethod
    def _parse(resource: Resource, data: Any) -> BaseModel:
        try:
            return resource.model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Invalid {resource.name} payload from server: {e.error_count()} error(s)")
            raise NetworkError(INVALID_RESPONSE) from e

    async def fetch_collection(self, resource: Resource) -> List[BaseModel]:
        body = await self._request("GET", resource.path)
        items = self._unwrap(body, resource.collection_key)
        if not isinstance(items, list):
            raise NetworkError(INVALID_RESPONSE)
        return [self._parse(resource, item) for item in items]

    async def fetch_one(self, resource: Resource, entity_id: str) -> BaseModel:
        body = await self._request("GET", resource.url_for(entity_id))
        data = self._unwrap(body, resource.item_key)
        if data is None:
            raise NotFoundError("No se encontró el registro solicitado")
        return self._parse(resource, data)

    async def create(self, resource: Resource, payload: Dict[str, Any]) -> BaseModel:
        body = await self._request("POST", resource.path, json=payload)
        return self._parse(resource, self._unwrap(body, resource.item_key))

    async def update(self, resource: Resource, entity_id: str, payload: Dict[str, Any]) -> BaseModel:
        body = await self._request("PUT", resource.url_for(entity_id), json=payload)
        return self._parse(resource, self._unwrap(body, resource.item_key))

    async def upload_asset(
        self,
        content: bytes,
        kind: str,
        filename: str = "upload",
        content_type: str = "application/octet-stream",
    ) -> UploadedAsset:
        body = await self._request(
            "POST",
            UPLOAD_PATH,
            files={"file": (filename, content, content_type)},
            data={"tipo": kind},
        )
        data = self._unwrap(body, "archivo")
        try:
            return UploadedAsset.model_validate(data)
        except ValidationError as e:
            raise NetworkError(INVALID_RESPONSE) from e

    async def deactivate(self, resource: Resource, entity_id: str) -> None:
        await self._request("DELETE", resource.url_for(entity_id))

    async def reactivate(self, resource: Resource, entity_id: str) -> None:
        await self._request("PUT", f"{resource.url_for(entity_id)}/activar")
