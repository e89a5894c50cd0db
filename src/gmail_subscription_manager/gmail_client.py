"""Gmail API client functions for fetching and deleting messages."""

from __future__ import annotations

import logging

import httplib2
from googleapiclient.errors import HttpError

from gmail_subscription_manager.constants import MAX_MESSAGES, PAGE_SIZE, SUBSCRIPTION_QUERY
from gmail_subscription_manager.exceptions import AuthError, DetailFetchError, ListFetchError
from gmail_subscription_manager.models import BodyPart, RawMessage

logger = logging.getLogger(__name__)

# Transport failures raised by execute() before any HTTP status is available
_NETWORK_ERRORS = (OSError, httplib2.HttpLib2Error)


def _is_auth_http_error(exc: HttpError) -> bool:
    return exc.resp.status == 401


def _collect_parts(payload: dict) -> list[BodyPart]:
    """Flatten the payload's parts and their direct sub-parts."""
    parts: list[BodyPart] = []
    for part in payload.get("parts") or []:
        parts.append(
            BodyPart(
                mime_type=part.get("mimeType", ""),
                data=(part.get("body") or {}).get("data", ""),
            )
        )
        for sub in part.get("parts") or []:
            parts.append(
                BodyPart(
                    mime_type=sub.get("mimeType", ""),
                    data=(sub.get("body") or {}).get("data", ""),
                )
            )
    return parts


def message_from_api(resource: dict) -> RawMessage:
    """Convert a Gmail API message resource (format=full) to a RawMessage.

    Headers that are missing or not a list leave ``headers`` as None.
    """
    payload = resource.get("payload") or {}
    raw_headers = payload.get("headers")

    headers: list[tuple[str, str]] | None = None
    if isinstance(raw_headers, list):
        headers = [
            (h["name"], h.get("value", ""))
            for h in raw_headers
            if isinstance(h, dict) and isinstance(h.get("name"), str)
        ]

    return RawMessage(
        id=str(resource.get("id") or ""),
        headers=headers,
        parts=_collect_parts(payload),
        body_data=(payload.get("body") or {}).get("data", ""),
    )


def list_message_ids(
    service,
    query: str | None = SUBSCRIPTION_QUERY,
    max_results: int | None = MAX_MESSAGES,
) -> list[str]:
    """List message IDs matching the query, handling pagination.

    Raises ListFetchError (or AuthError on 401) when a page cannot be listed.
    """
    ids: list[str] = []
    page_token: str | None = None

    while True:
        kwargs: dict = {"userId": "me", "maxResults": PAGE_SIZE, "fields": "messages/id,nextPageToken"}
        if query:
            kwargs["q"] = query
        if page_token:
            kwargs["pageToken"] = page_token

        try:
            resp = service.users().messages().list(**kwargs).execute()
        except HttpError as exc:
            if _is_auth_http_error(exc):
                raise AuthError(f"Gmail rejected the credential: {exc}") from exc
            raise ListFetchError(f"Failed to list messages: {exc}") from exc
        except _NETWORK_ERRORS as exc:
            raise ListFetchError(f"Failed to list messages: {exc}") from exc

        for msg in resp.get("messages", []):
            ids.append(msg["id"])
            if max_results and len(ids) >= max_results:
                return ids[:max_results]

        page_token = resp.get("nextPageToken")
        if not page_token:
            break

    return ids


def get_message(service, message_id: str) -> RawMessage:
    """Fetch a full message.

    Raises DetailFetchError (or AuthError on 401) when it cannot be retrieved.
    """
    try:
        resource = service.users().messages().get(userId="me", id=message_id, format="full").execute()
    except HttpError as exc:
        if _is_auth_http_error(exc):
            raise AuthError(f"Gmail rejected the credential: {exc}") from exc
        raise DetailFetchError(message_id, str(exc)) from exc
    except _NETWORK_ERRORS as exc:
        raise DetailFetchError(message_id, str(exc)) from exc
    return message_from_api(resource)


def delete_message(service, message_id: str) -> None:
    """Permanently delete a message."""
    service.users().messages().delete(userId="me", id=message_id).execute()


class GmailMailSource:
    """Mail source backed by the Gmail API, used by the scanner."""

    def __init__(
        self,
        service,
        query: str | None = SUBSCRIPTION_QUERY,
        max_results: int | None = MAX_MESSAGES,
    ) -> None:
        self.service = service
        self.query = query
        self.max_results = max_results

    def list_message_ids(self) -> list[str]:
        ids = list_message_ids(self.service, query=self.query, max_results=self.max_results)
        logger.info("Listed %d messages for query %r", len(ids), self.query)
        return ids

    def get_message(self, message_id: str) -> RawMessage:
        return get_message(self.service, message_id)
