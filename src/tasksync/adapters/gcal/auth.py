"""Service account bearer tokens for the Calendar API."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from google.auth.transport.requests import Request
from google.oauth2 import service_account

from tasksync.config.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

log = getLogger(__name__)


def decode_service_account_info(raw: str) -> dict[str, object]:
    """Accept the key file contents either as plain JSON or base64 encoded JSON."""

    text = raw.strip()
    if not text.startswith("{"):
        try:
            text = base64.b64decode(text, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ConfigurationError("Service account key is neither JSON nor base64") from exc
    try:
        info = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("Service account key is not valid JSON") from exc
    if not isinstance(info, dict):
        raise ConfigurationError("Service account key must be a JSON object")
    return info


@dataclass(slots=True)
class ServiceAccountTokenSource:
    service_account_json: str
    scopes: Sequence[str]
    _credentials: service_account.Credentials | None = field(default=None, init=False, repr=False)

    async def __call__(self) -> str:
        credentials = self._load()
        if not credentials.valid:
            log.debug("Refreshing service account token for %s", credentials.service_account_email)
            # google-auth refreshes synchronously over requests
            await asyncio.to_thread(credentials.refresh, Request())
        token = credentials.token
        if not token:
            raise ConfigurationError("Service account token refresh returned no token")
        return token

    def _load(self) -> service_account.Credentials:
        if self._credentials is None:
            info = decode_service_account_info(self.service_account_json)
            try:
                self._credentials = service_account.Credentials.from_service_account_info(
                    info,
                    scopes=list(self.scopes),
                )
            except ValueError as exc:
                raise ConfigurationError(f"Invalid service account key: {exc}") from exc
        return self._credentials
