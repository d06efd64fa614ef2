"""
Notion client for the NBMon content catalog.

Three Notion databases back the catalog:
- NBPedia: one page per genus (`Official Name` title, `Types` and `Mutations`
  multi-selects, descriptive rich-text/select fields)
- Passives: one page per passive (`Name` title)
- Types: one page per attacking type (`Atk (Y) /Def (X)` title) with one
  rich-text column per defending type holding a percentage
"""

import httpx
from typing import Any, Dict, List, Optional

from src.core.exceptions.base import (
    InconsistentStateError,
    InvalidArgumentError,
    NotFoundError,
    ServiceErrorCode,
    UpstreamFailureError,
)
from src.core.http_client import create_client
from src.core.logger.logger import get_logger
from src.core.service.catalog.models import GenusEntry, NBMonData
from src.core.service.effectiveness.types import ALL_TYPES, TypeMatrix
from src.infra.config.settings import get_settings

logger = get_logger(__name__)
settings = get_settings()

GENUS_TITLE_PROPERTY = "Official Name"
PASSIVE_TITLE_PROPERTY = "Name"
TYPE_TITLE_PROPERTY = "Atk (Y) /Def (X)"
BASE_STATS_PROPERTY = "Base Stats (Range: 3 ~ 8, Max 35?)"


def _title_text(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    if not prop or not prop.get("title"):
        return None
    return prop["title"][0].get("plain_text") or None


def _rich_text(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    if not prop or not prop.get("rich_text"):
        return None
    return prop["rich_text"][0].get("plain_text") or None


def _multi_select_names(prop: Optional[Dict[str, Any]]) -> List[Optional[str]]:
    if not prop or not prop.get("multi_select"):
        return []
    return [option.get("name") or None for option in prop["multi_select"]]


def _select_name(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    if not prop or not prop.get("select"):
        return None
    return prop["select"].get("name") or None


class NotionCatalogClient:
    """Client for querying the NBMon catalog databases in Notion"""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        token: Optional[str] = None,
        nbpedia_database_id: Optional[str] = None,
        passives_database_id: Optional[str] = None,
        types_database_id: Optional[str] = None,
    ):
        self.http_client = http_client or create_client("notion")
        self.token = token or settings.NOTION_TOKEN
        self.nbpedia_database_id = nbpedia_database_id or settings.NBPEDIA_DATABASE_ID
        self.passives_database_id = passives_database_id or settings.PASSIVES_DATABASE_ID
        self.types_database_id = types_database_id or settings.TYPES_DATABASE_ID

    async def close(self) -> None:
        await self.http_client.aclose()

    def _headers(self) -> Dict[str, str]:
        return {
            "Notion-Version": settings.NOTION_VERSION,
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    async def query_database(self, database_id: Optional[str]) -> List[Dict[str, Any]]:
        """
        Return every page of a Notion database, following pagination.

        Raises:
            UpstreamFailureError: on timeout, connection failure or a non-200 reply
        """
        if not database_id:
            raise UpstreamFailureError(
                "Notion database is not configured",
                code=ServiceErrorCode.SERVICE_UNAVAILABLE,
            )

        url = f"{settings.NOTION_API_URL}/databases/{database_id}/query"
        results: List[Dict[str, Any]] = []
        body: Dict[str, Any] = {}

        while True:
            try:
                response = await self.http_client.post(url, json=body, headers=self._headers())
            except httpx.TimeoutException as e:
                logger.error(f"Notion query timed out: {e}", extra={"database_id": database_id})
                raise UpstreamFailureError("Notion query timed out", code=ServiceErrorCode.TIMEOUT) from e
            except httpx.RequestError as e:
                logger.error(f"Notion connection error: {e}", extra={"database_id": database_id})
                raise UpstreamFailureError(
                    f"Notion connection failed: {e}",
                    code=ServiceErrorCode.NOTION_ERROR,
                ) from e

            if response.status_code != 200:
                try:
                    message = response.json().get("message", response.text)
                except ValueError:
                    message = response.text
                logger.error(
                    "Notion query failed",
                    extra={
                        "database_id": database_id,
                        "status_code": response.status_code,
                        "error": message
                    }
                )
                raise UpstreamFailureError(
                    f"Notion error: {message}",
                    code=ServiceErrorCode.NOTION_ERROR,
                    details={"status_code": response.status_code},
                )

            payload = response.json()
            results.extend(payload.get("results", []))

            if not payload.get("has_more") or not payload.get("next_cursor"):
                break
            body = {"start_cursor": payload["next_cursor"]}

        return results

    def _parse_genus(self, page: Dict[str, Any]) -> Optional[GenusEntry]:
        props = page.get("properties", {})
        name = _title_text(props.get(GENUS_TITLE_PROPERTY))
        if not name:
            return None
        return GenusEntry(
            genus=name,
            types=[t for t in _multi_select_names(props.get("Types")) if t],
            mutations=_multi_select_names(props.get("Mutations")),
            summary=_rich_text(props.get("Summary")),
            species=_select_name(props.get("Species")),
            behavior=_select_name(props.get("Behavior")),
            habitat=[h for h in _multi_select_names(props.get("Habitat")) if h],
            intended_playstyle=_rich_text(props.get("Intended Playstyle")),
            base_stats=_rich_text(props.get(BASE_STATS_PROPERTY)),
        )

    async def find_genus_entry(self, genus: str) -> Optional[GenusEntry]:
        """Case-insensitive lookup of a genus in NBPedia; None when absent."""
        pages = await self.query_database(self.nbpedia_database_id)
        wanted = genus.strip().lower()
        for page in pages:
            entry = self._parse_genus(page)
            if entry and entry.genus.lower() == wanted:
                return entry
        return None

    async def get_genus_entry(self, genus: str) -> GenusEntry:
        if not genus or not genus.strip():
            raise InvalidArgumentError("Please specify a genus")

        entry = await self.find_genus_entry(genus)
        if entry is None:
            raise NotFoundError(
                f"Genus {genus} not found in NBPedia",
                code=ServiceErrorCode.CATALOG_ENTRY_NOT_FOUND,
            )
        return entry

    async def get_genus_types(self, genus: str) -> List[str]:
        """
        The one or two types of a genus.

        Raises:
            InconsistentStateError: the catalog lists no types or more than two
        """
        entry = await self.get_genus_entry(genus)
        return self._validated_types(entry)

    def _validated_types(self, entry: GenusEntry) -> List[str]:
        if not entry.types:
            raise InconsistentStateError(
                f"{entry.genus} does not have any types in the catalog. Please add at least 1 type.",
                code=ServiceErrorCode.CATALOG_INCONSISTENT,
            )
        if len(entry.types) > 2:
            raise InconsistentStateError(
                f"{entry.genus} has more than 2 types in the catalog. An NBMon cannot have more than 2 types.",
                code=ServiceErrorCode.CATALOG_INCONSISTENT,
            )
        return entry.types

    async def get_genus_mutations(self, genus: str) -> List[Optional[str]]:
        """Mutation options of a genus; empty when the genus is absent or lists none."""
        entry = await self.find_genus_entry(genus)
        return entry.mutations if entry else []

    async def get_genus_data(self, genus: Optional[str]) -> NBMonData:
        """Descriptive genus data, with placeholders for fields not filled in yet."""
        if not genus or not genus.strip():
            return NBMonData()

        entry = await self.get_genus_entry(genus)
        return NBMonData(
            genus=entry.genus,
            types=self._validated_types(entry),
            summary=entry.summary or "No summary specified yet.",
            species=entry.species or "No species specified yet.",
            behavior=entry.behavior or "No behavior specified yet.",
            habitat=entry.habitat,
            intended_playstyle=entry.intended_playstyle or "No intended playstyle specified yet.",
            base_stats=entry.base_stats or "No base stats specified yet.",
        )

    async def get_passive_names(self) -> List[Optional[str]]:
        """Names of every passive; None where a passive has no name."""
        pages = await self.query_database(self.passives_database_id)
        return [_title_text(page.get("properties", {}).get(PASSIVE_TITLE_PROPERTY)) for page in pages]

    async def get_type_matrix(self) -> TypeMatrix:
        """The attack multiplier matrix; missing rows or cells are neutral."""
        pages = await self.query_database(self.types_database_id)
        rows: Dict[str, Dict[str, Optional[str]]] = {}
        for page in pages:
            props = page.get("properties", {})
            attacker = _title_text(props.get(TYPE_TITLE_PROPERTY))
            if not attacker:
                continue
            rows[attacker] = {defender: _rich_text(props.get(defender)) for defender in ALL_TYPES}

        matrix = TypeMatrix.from_percentages(rows)
        logger.debug("Type matrix loaded", extra={"rows": len(rows), "cells": len(matrix)})
        return matrix
