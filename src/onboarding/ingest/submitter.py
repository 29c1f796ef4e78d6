"""Send a validated entity batch to the import endpoint."""

import logging
import time
from http import HTTPStatus
from urllib.parse import quote
from uuid import UUID

import aiohttp
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from onboarding.errors import AuthorizationError, DeserializationError, TransportError
from onboarding.models import (
    DynamicEntity,
    ImportBatchResult,
    ImportOutcome,
    serialize_entities,
)

logger = logging.getLogger(__name__)

IMPORT_ENDPOINT = "import"
UNAUTHORIZED_STATUSES = frozenset({401, 403})

_result_adapter = TypeAdapter(ImportBatchResult | None)


def parse_batch_result(body: bytes | str) -> ImportBatchResult | None:
    """
    Deserialize an import response body.

    An empty body or a JSON null yields None. Bytes that are not valid UTF-8
    count as malformed.

    Raises:
        DeserializationError: If the body is not a JSON object
    """
    if not body.strip():
        return None
    try:
        return _result_adapter.validate_json(body)
    except PydanticValidationError as e:
        raise DeserializationError(
            "Import response did not match the expected batch result", cause=e
        ) from e


class ImportSubmitter:
    """
    POSTs {"Entities": [...]} to import/{data_source} with a bearer token.

    401 and 403 raise AuthorizationError. Every other status, success or not,
    is returned as an ImportOutcome so callers can inspect soft failures.
    """

    def __init__(self, session: aiohttp.ClientSession, base_url: str):
        self._session = session
        self.base_url = base_url.rstrip("/")

    def import_url(self, data_source: str) -> str:
        return f"{self.base_url}/{IMPORT_ENDPOINT}/{quote(data_source, safe='')}"

    async def submit(
        self,
        data_source: str,
        entities: list[DynamicEntity],
        token: str,
        correlation_id: UUID | None = None,
    ) -> ImportOutcome:
        """
        Submit one batch.

        Args:
            data_source: Target data source name
            entities: Validated entities
            token: Bearer token
            correlation_id: Sent as the correlationId query parameter when given

        Returns:
            ImportOutcome with status code, reason phrase and batch result

        Raises:
            AuthorizationError: On 401/403
            DeserializationError: If the response body is malformed
            TransportError: On connection failure or timeout
        """
        url = self.import_url(data_source)
        params = {"correlationId": str(correlation_id)} if correlation_id is not None else None
        headers = {"Authorization": f"Bearer {token}"}
        endpoint = f"{IMPORT_ENDPOINT}/{data_source}"

        start_time = time.perf_counter()
        try:
            async with self._session.post(
                url,
                params=params,
                json=serialize_entities(entities),
                headers=headers,
            ) as response:
                duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
                reason = response.reason

                if response.status in UNAUTHORIZED_STATUSES:
                    logger.warning(
                        "Import rejected",
                        extra={
                            "api_endpoint": endpoint,
                            "http_status": response.status,
                            "duration_ms": duration_ms,
                        },
                    )
                    phrase = reason or HTTPStatus(response.status).phrase
                    raise AuthorizationError(
                        f"{phrase}. Check your data provider details and data source name",
                        status_code=response.status,
                        context={"data_source": data_source},
                    )

                body = await response.read()
                status = response.status
        except (TimeoutError, aiohttp.ClientError) as e:
            logger.warning(
                f"HTTP error during import: {e}",
                extra={"api_endpoint": endpoint, "batch_size": len(entities)},
            )
            raise TransportError(f"Import request to '{data_source}' failed", cause=e) from e

        outcome = ImportOutcome(
            status_code=status,
            message=reason,
            result=parse_batch_result(body),
        )

        logger.log(
            logging.INFO if outcome.is_success else logging.WARNING,
            "Import submitted" if outcome.is_success else "Import returned non-success status",
            extra={
                "api_endpoint": endpoint,
                "http_status": status,
                "reason": reason,
                "batch_size": len(entities),
                "duration_ms": duration_ms,
            },
        )
        return outcome


__all__ = [
    "IMPORT_ENDPOINT",
    "ImportSubmitter",
    "UNAUTHORIZED_STATUSES",
    "parse_batch_result",
]
