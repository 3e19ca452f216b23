"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3

from trace_api.config.settings import settings


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
) -> boto3.client:
    """Instantiate a boto3 client using configured credentials if available."""

    client_kwargs: dict[str, Any] = {"region_name": region_name or settings.polly.region}
    if settings.polly.access_key and settings.polly.secret_key:
        client_kwargs["aws_access_key_id"] = settings.polly.access_key
        client_kwargs["aws_secret_access_key"] = settings.polly.secret_key
    return boto3.client(service_name, **client_kwargs)


__all__ = ["create_boto3_client"]
