"""HTTP client for the external ML server that ingests manuals and answers questions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Final, Protocol

import httpx

from ..config import get_settings
from ..errors import ExternalProcessingError
from ..security.secrets import usable_secret

logger = logging.getLogger(__name__)

API_KEY_HEADER: Final[str] = "x-api-key"
UPLOAD_PATH: Final[str] = "/manuals/upload"
CHAT_PATH: Final[str] = "/chat/manual"
ACCEPTED_UPLOAD_MESSAGES: Final[frozenset[str]] = frozenset({"completed", "pdf uploaded successfully"})


class ProcessingFailedError(ExternalProcessingError):
    """Raised when the ML server does not confirm that a manual was processed."""


class MLServerCommunicationError(ExternalProcessingError):
    """Raised when the ML server cannot be reached or returns an unusable reply."""


class NoResponseError(MLServerCommunicationError):
    """Raised when the ML server answers a question with an empty body."""


@dataclass(slots=True)
class Answer:
    message: str | None
    answer: str | None
    # Order matches the citation order inside ``answer``.
    images: list[str] = field(default_factory=list)


class ManualProcessingClient(Protocol):
    def submit(self, data: bytes, *, filename: str, content_type: str, doc_name: str) -> None:
        """Upload a manual for processing; raise on anything but confirmed success."""
        ...

    def ask(self, doc_name: str, question: str) -> Answer:
        """Ask a question about a previously submitted manual."""
        ...


def is_upload_success(message: Any) -> bool:
    return isinstance(message, str) and message.strip().lower() in ACCEPTED_UPLOAD_MESSAGES


def _default_timeout() -> httpx.Timeout:
    settings = get_settings()
    connect = float(settings.ml_server_connect_timeout or 30.0)
    read = float(settings.ml_server_read_timeout or 300.0)
    return httpx.Timeout(connect=connect, read=read, write=read, pool=connect)


class MLServerClient:
    """Synchronous client for the ML server's upload and chat endpoints."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: httpx.Timeout | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.ml_server_url).rstrip("/")
        self._api_key = api_key if api_key is not None else usable_secret(settings.ml_server_api_key)
        self._client = httpx.Client(timeout=timeout or _default_timeout(), transport=transport)
        self._warned_missing_key = False

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict[str, str]:
        if self._api_key:
            return {API_KEY_HEADER: self._api_key}
        if not self._warned_missing_key:
            logger.warning("ML_SERVER_API_KEY is not configured; ML server requests are sent unauthenticated.")
            self._warned_missing_key = True
        return {}

    def submit(self, data: bytes, *, filename: str, content_type: str, doc_name: str) -> None:
        url = f"{self._base_url}{UPLOAD_PATH}"
        logger.info(
            "ML upload started | url=%s doc_name=%s filename=%s size=%d content_type=%s",
            url,
            doc_name,
            filename,
            len(data),
            content_type,
        )

        try:
            response = self._client.post(
                url,
                files={"file": (filename, data, content_type)},
                data={"doc_name": doc_name},
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.error("ML upload rejected | doc_name=%s status=%s", doc_name, status_code or "unknown")
            raise ProcessingFailedError(f"ML server rejected the manual (status {status_code})") from exc
        except httpx.HTTPError as exc:
            logger.error("ML upload transport error | doc_name=%s error=%s", doc_name, type(exc).__name__)
            raise MLServerCommunicationError("Unable to reach the ML server") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("ML upload returned a non-JSON body | doc_name=%s", doc_name)
            raise ProcessingFailedError("ML server returned an unreadable response") from exc

        message = payload.get("message") if isinstance(payload, dict) else None
        if not is_upload_success(message):
            logger.error("ML upload failed | doc_name=%s message=%r", doc_name, message)
            raise ProcessingFailedError(f"ML server did not complete processing: {message or 'no message'}")

        logger.info("ML upload completed | doc_name=%s message=%s", doc_name, message)

    def ask(self, doc_name: str, question: str) -> Answer:
        url = f"{self._base_url}{CHAT_PATH}"
        logger.info("ML chat request | url=%s doc_name=%s", url, doc_name)

        try:
            response = self._client.post(
                url,
                json={"doc_name": doc_name, "question": question},
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.error("ML chat HTTP status error | doc_name=%s status=%s", doc_name, status_code or "unknown")
            raise MLServerCommunicationError(f"ML server chat request failed (status {status_code})") from exc
        except httpx.HTTPError as exc:
            logger.error("ML chat transport error | doc_name=%s error=%s", doc_name, type(exc).__name__)
            raise MLServerCommunicationError("Unable to reach the ML server") from exc

        if not response.content or not response.content.strip():
            raise NoResponseError("ML server returned no response")

        try:
            payload = response.json()
        except ValueError as exc:
            raise MLServerCommunicationError("ML server chat response was not valid JSON") from exc

        if payload is None:
            raise NoResponseError("ML server returned no response")
        if not isinstance(payload, dict):
            raise MLServerCommunicationError("Invalid ML server chat response format")

        images_raw = payload.get("images") or []
        if not isinstance(images_raw, list):
            raise MLServerCommunicationError("Invalid ML server chat response format")

        images = [image for image in images_raw if isinstance(image, str)]
        if len(images) != len(images_raw):
            logger.warning(
                "Dropped %d non-string image entries from ML chat response | doc_name=%s",
                len(images_raw) - len(images),
                doc_name,
            )

        answer = Answer(message=payload.get("message"), answer=payload.get("answer"), images=images)
        logger.info(
            "ML chat response | doc_name=%s message=%s answer_length=%d images=%d",
            doc_name,
            answer.message,
            len(answer.answer or ""),
            len(answer.images),
        )
        return answer


_ml_client: ManualProcessingClient | None = None


def set_ml_client(client: ManualProcessingClient | None) -> None:
    """Override the ML client used by the ingestion and chat services."""

    global _ml_client
    _ml_client = client


def get_ml_client() -> ManualProcessingClient:
    global _ml_client
    if _ml_client is None:
        _ml_client = MLServerClient()
    return _ml_client


__all__ = [
    "ACCEPTED_UPLOAD_MESSAGES",
    "API_KEY_HEADER",
    "Answer",
    "ManualProcessingClient",
    "MLServerClient",
    "MLServerCommunicationError",
    "NoResponseError",
    "ProcessingFailedError",
    "get_ml_client",
    "is_upload_success",
    "set_ml_client",
]
