from __future__ import annotations

from typing import Optional

from fastapi import Request

from data_audit.config import get_settings


class FixedAuditorResolver:
    """Resolves every write to the same auditor."""

    def __init__(self, auditor: Optional[str] = None) -> None:
        self.auditor = auditor if auditor is not None else get_settings().default_auditor

    def __call__(self) -> str:
        return self.auditor

    def __repr__(self) -> str:
        return f"FixedAuditorResolver({self.auditor!r})"


class HeaderAuditorResolver:
    """Resolves the auditor from a request header, falling back to a fixed auditor."""

    def __init__(self, header_value: Optional[str], fallback: FixedAuditorResolver) -> None:
        self.header_value = header_value
        self.fallback = fallback

    def __call__(self) -> str:
        if self.header_value and self.header_value.strip():
            return self.header_value.strip()
        return self.fallback()


def get_auditor_resolver(request: Request) -> HeaderAuditorResolver:
    settings = get_settings()
    return HeaderAuditorResolver(
        request.headers.get(settings.auditor_header),
        FixedAuditorResolver(settings.default_auditor),
    )
