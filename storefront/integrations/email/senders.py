"""
Email transports.

- LoggingEmailSender: default; logs and keeps an in-memory outbox
- ResendEmailSender: Resend HTTP API, used when RESEND_API_KEY is set
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import httpx

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com"
DEFAULT_FROM = "Mawu Foundation <noreply@mawufoundation.org>"


class EmailDeliveryError(Exception):
    pass


@dataclass
class SentEmail:
    to: str
    subject: str
    text: str


class EmailSender(ABC):
    name: str = "email"

    @abstractmethod
    async def send(self, to: str, subject: str, text: str) -> None:
        ...

    @abstractmethod
    async def verify(self) -> bool:
        ...


class LoggingEmailSender(EmailSender):
    name = "Logging (mock)"

    def __init__(self) -> None:
        self.outbox: List[SentEmail] = []

    async def send(self, to: str, subject: str, text: str) -> None:
        self.outbox.append(SentEmail(to=to, subject=subject, text=text))
        logger.info("[MOCK EMAIL] to=%s subject=%s", to, subject)

    async def verify(self) -> bool:
        return True


class ResendEmailSender(EmailSender):
    name = "Resend"

    def __init__(
        self,
        api_key: Optional[str] = None,
        from_address: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key or os.getenv("RESEND_API_KEY", "")
        self.from_address = from_address or os.getenv("EMAIL_FROM", DEFAULT_FROM)
        self.base_url = (base_url or RESEND_API_URL).rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _headers(self):
        return {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

    async def send(self, to: str, subject: str, text: str) -> None:
        payload = {"from": self.from_address, "to": [to], "subject": subject, "text": text}
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            try:
                response = await client.post(f"{self.base_url}/emails", json=payload, headers=self._headers())
            except httpx.HTTPError as e:
                raise EmailDeliveryError(f"Resend request failed: {e}") from e
        if response.is_error:
            raise EmailDeliveryError(f"Resend returned HTTP {response.status_code}: {response.text[:200]}")
        logger.info("Email sent to %s via Resend", to)

    async def verify(self) -> bool:
        if not self.api_key:
            return False
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            try:
                response = await client.get(f"{self.base_url}/domains", headers=self._headers())
            except httpx.HTTPError as e:
                logger.error("Email service connection failed: %s", e)
                return False
        if response.is_error:
            logger.error("Email service connection failed: HTTP %d", response.status_code)
            return False
        return True
