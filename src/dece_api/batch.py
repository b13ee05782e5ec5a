"""Deferred dispatch of request descriptors."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .constants import RpcMethod
from .exceptions import DeceProtocolError
from .transport import Transport
from .types import RequestDescriptor
from .utils import format_transaction_payload

logger = logging.getLogger(__name__)


class RequestBatch:
    """Queue contract requests and dispatch them together."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._requests: list[RequestDescriptor] = []

    def __len__(self) -> int:
        return len(self._requests)

    def add(self, request: RequestDescriptor) -> None:
        self._requests.append(request)

    def execute(self) -> list[Any]:
        """Dispatch every queued request in order.

        Each request's callback receives ``(error, value)``. Failures are
        returned in place of the value.
        """
        requests, self._requests = self._requests, []
        logger.debug("Executing batch of %d request(s)", len(requests))

        results: list[Any] = []
        for request in requests:
            params = [
                format_transaction_payload(param) if isinstance(param, Mapping) else param
                for param in request.params
            ]
            try:
                value = self._transport.request(request.method, params)
                if request.method == RpcMethod.CALL.value:
                    value = request.format(value)
            except DeceProtocolError as exc:
                if request.callback is not None:
                    request.callback(exc, None)
                results.append(exc)
                continue

            if request.callback is not None:
                request.callback(None, value)
            results.append(value)
        return results
