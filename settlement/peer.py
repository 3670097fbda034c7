"""Outbound calls from one service to its peer."""
import logging
from typing import Optional, Type, TypeVar

import httpx
from opentelemetry import trace
from opentelemetry.trace import SpanKind
from pydantic import BaseModel

from settlement.errors import ConfigError, DecodeError, DownstreamError
from settlement.tracing import inject_headers, traced

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class PeerClient:
    """
    Synchronous JSON client for a peer service.

    No retries and no timeout beyond the transport's default: a slow peer
    stalls the calling request for the duration of the call.

    Args:
        peer_name: Name of the peer, used in span names and error messages
        base_url: Peer base URL; ``None`` when the environment leaves it unset
        env_var: Environment variable that configures ``base_url``
        http: httpx client used for every call
        tracer: Tracer for the CLIENT span wrapped around each call
    """

    def __init__(
        self,
        peer_name: str,
        base_url: Optional[str],
        env_var: str,
        http: httpx.Client,
        tracer: trace.Tracer,
    ):
        self.peer_name = peer_name
        self.base_url = base_url
        self.env_var = env_var
        self.http = http
        self.tracer = tracer

    def url_for(self, path: str) -> str:
        if not self.base_url:
            raise ConfigError(f"{self.env_var} is not set")
        return f"{self.base_url.rstrip('/')}{path}"

    def request(self, method: str, path: str, expected_status: int = 200, **kwargs) -> httpx.Response:
        url = self.url_for(path)

        with traced(
            self.tracer,
            f"{self.peer_name} {method} {path}",
            kind=SpanKind.CLIENT,
            **{"http.method": method, "http.url": url, "peer.service": self.peer_name},
        ) as span:
            # Injected inside the client span so the peer's server span is its child
            headers = inject_headers(kwargs.pop("headers", None))
            try:
                response = self.http.request(method, url, headers=headers, **kwargs)
            except httpx.HTTPError as exc:
                logger.error(f"{self.peer_name} request {method} {url} failed: {exc}")
                raise DownstreamError(f"{self.peer_name} request failed: {exc}") from exc

            span.set_attribute("http.status_code", response.status_code)
            if response.status_code != expected_status:
                logger.error(f"{self.peer_name} returned {response.status_code} for {method} {url}")
                raise DownstreamError(
                    f"{self.peer_name} returned {response.status_code}",
                    downstream_status=response.status_code,
                )
            return response

    def decode(self, response: httpx.Response, model: Type[ModelT]) -> ModelT:
        try:
            return model.model_validate(response.json())
        except ValueError as exc:
            raise DecodeError(f"Malformed response from {self.peer_name}: {exc}") from exc
