"""Servicio de Notion para interactuar con la API.

Notion funciona como document store: cada colección (recordatorios,
pendientes) es un data source y cada documento es una página.

IMPORTANTE: Los nombres de propiedades corresponden EXACTAMENTE a los
definidos en los data sources de Notion - NO modificar sin actualizar
el schema.
"""

import logging
from datetime import datetime
from typing import Any

import httpx
from notion_client import AsyncClient
from notion_client.errors import HTTPResponseError, NotionClientErrorBase

from app.config import get_settings
from app.utils.errors import NotionAPIError, retry_notion
from app.utils.timezone import parse_iso_datetime, to_iso

logger = logging.getLogger(__name__)
settings = get_settings()

# Máximo permitido por Notion por página de resultados / bloque de texto
NOTION_PAGE_SIZE = 100
NOTION_TEXT_LIMIT = 2000


# ==================== PROPERTY BUILDERS ====================


def title_property(text: str) -> dict[str, Any]:
    return {"title": [{"text": {"content": text[:NOTION_TEXT_LIMIT]}}]}


def rich_text_property(text: str | None) -> dict[str, Any]:
    if not text:
        return {"rich_text": []}
    return {"rich_text": [{"text": {"content": text[:NOTION_TEXT_LIMIT]}}]}


def select_property(name: str) -> dict[str, Any]:
    return {"select": {"name": name}}


def checkbox_property(value: bool) -> dict[str, Any]:
    return {"checkbox": bool(value)}


def email_property(value: str) -> dict[str, Any]:
    return {"email": value}


def date_property(value: datetime | None) -> dict[str, Any]:
    if value is None:
        return {"date": None}
    return {"date": {"start": to_iso(value)}}


# ==================== PROPERTY READERS ====================


def _plain_text(items: list[dict[str, Any]]) -> str:
    return "".join(
        item.get("plain_text") or item.get("text", {}).get("content", "")
        for item in items
    )


def read_title(properties: dict[str, Any], name: str) -> str:
    return _plain_text(properties.get(name, {}).get("title", []))


def read_rich_text(properties: dict[str, Any], name: str) -> str:
    return _plain_text(properties.get(name, {}).get("rich_text", []))


def read_select(properties: dict[str, Any], name: str) -> str | None:
    select = properties.get(name, {}).get("select")
    return select.get("name") if select else None


def read_checkbox(properties: dict[str, Any], name: str) -> bool:
    return bool(properties.get(name, {}).get("checkbox", False))


def read_email(properties: dict[str, Any], name: str) -> str:
    return properties.get(name, {}).get("email") or ""


def read_date(properties: dict[str, Any], name: str) -> datetime | None:
    date = properties.get(name, {}).get("date")
    if not date:
        return None
    return parse_iso_datetime(date.get("start"))


def _wrap_error(error: Exception, operation: str) -> NotionAPIError:
    """Traduce errores del cliente de Notion al error de la aplicación."""
    status = error.status if isinstance(error, HTTPResponseError) else None
    return NotionAPIError(
        f"{operation}: {error}",
        status=status,
        details={"operation": operation, "error_type": type(error).__name__},
    )


class NotionService:
    """Cliente para interactuar con Notion API."""

    def __init__(self, client: AsyncClient | None = None):
        self.client = client or AsyncClient(
            auth=settings.notion_api_key,
            timeout_ms=settings.notion_timeout_ms,
        )

    # ==================== QUERIES ====================

    @retry_notion()
    async def _query_page(
        self,
        data_source_id: str,
        **params: Any,
    ) -> dict[str, Any]:
        return await self.client.data_sources.query(
            data_source_id=data_source_id,
            **params,
        )

    async def query_all(
        self,
        data_source_id: str,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Consulta un data source recorriendo todas las páginas de resultados.

        Args:
            data_source_id: ID del data source
            filter: Filtro de Notion (opcional)
            sorts: Ordenamiento (opcional)
            limit: Máximo de resultados; None lee todo

        Returns:
            Lista de páginas

        Raises:
            NotionAPIError: si la consulta falla después de los reintentos
        """
        results: list[dict[str, Any]] = []
        start_cursor: str | None = None

        try:
            while True:
                params: dict[str, Any] = {"page_size": NOTION_PAGE_SIZE}
                if filter:
                    params["filter"] = filter
                if sorts:
                    params["sorts"] = sorts
                if start_cursor:
                    params["start_cursor"] = start_cursor
                if limit is not None:
                    params["page_size"] = min(NOTION_PAGE_SIZE, limit - len(results))

                response = await self._query_page(data_source_id, **params)
                results.extend(response.get("results", []))

                if limit is not None and len(results) >= limit:
                    return results[:limit]
                if not response.get("has_more"):
                    return results
                start_cursor = response.get("next_cursor")
        except (NotionClientErrorBase, httpx.HTTPError) as e:
            raise _wrap_error(e, "query_all") from e

    # ==================== PAGES ====================

    @retry_notion()
    async def _create_page(self, data_source_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        return await self.client.pages.create(
            parent={"type": "data_source_id", "data_source_id": data_source_id},
            properties=properties,
        )

    async def create_page(self, data_source_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        """Crea una página (documento) en el data source."""
        try:
            response = await self._create_page(data_source_id, properties)
            logger.info(f"Página creada en {data_source_id}: {response.get('id')}")
            return response
        except (NotionClientErrorBase, httpx.HTTPError) as e:
            raise _wrap_error(e, "create_page") from e

    @retry_notion()
    async def _update_page(self, page_id: str, **params: Any) -> dict[str, Any]:
        return await self.client.pages.update(page_id=page_id, **params)

    async def update_page(self, page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        """Actualiza propiedades de una página."""
        try:
            return await self._update_page(page_id, properties=properties)
        except (NotionClientErrorBase, httpx.HTTPError) as e:
            raise _wrap_error(e, "update_page") from e

    async def archive_page(self, page_id: str) -> bool:
        """Manda una página a la papelera (equivalente a borrar)."""
        try:
            await self._update_page(page_id, in_trash=True)
            logger.info(f"Página {page_id} enviada a la papelera")
            return True
        except (NotionClientErrorBase, httpx.HTTPError) as e:
            error = _wrap_error(e, "archive_page")
            if error.is_not_found:
                return False
            raise error from e

    @retry_notion()
    async def _retrieve_page(self, page_id: str) -> dict[str, Any]:
        return await self.client.pages.retrieve(page_id=page_id)

    async def get_page(self, page_id: str) -> dict[str, Any] | None:
        """Obtiene una página por ID; None si no existe o está en la papelera."""
        try:
            page = await self._retrieve_page(page_id)
        except (NotionClientErrorBase, httpx.HTTPError) as e:
            error = _wrap_error(e, "get_page")
            if error.is_not_found:
                return None
            raise error from e
        if page.get("in_trash") or page.get("archived"):
            return None
        return page

    # ==================== UTILS ====================

    async def test_connection(self) -> bool:
        """Verifica la conexión con Notion."""
        try:
            await self.client.users.me()
            logger.info("Conexión con Notion exitosa")
            return True
        except (NotionClientErrorBase, httpx.HTTPError) as e:
            logger.error(f"Error de conexión con Notion: {e}")
            return False


# Singleton
_notion_service: NotionService | None = None


def get_notion_service() -> NotionService:
    """Obtiene la instancia del servicio de Notion."""
    global _notion_service
    if _notion_service is None:
        _notion_service = NotionService()
    return _notion_service
