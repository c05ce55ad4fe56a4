"""Reachability probes for the two model providers.

Purely diagnostic: results are logged and recorded on the pipeline state,
failures become warnings, nothing here aborts provisioning. Reachability is
recomputed on every call.
"""

import logging
from typing import Optional

import httpx

from devsetup.config import Settings
from devsetup.state import EndpointKind, PipelineState, ProviderCredential, ServiceEndpoint

logger = logging.getLogger(__name__)


def _describe_status(code: int) -> str:
    if code == 401:
        return "Invalid API key (401 Unauthorized)"
    if code == 403:
        return "Access denied (403 Forbidden)"
    if code == 404:
        return "Not found (404)"
    return f"HTTP {code}"


def probe(
    url: str,
    timeout: float,
    headers: Optional[dict[str, str]] = None,
    client: Optional[httpx.Client] = None,
) -> tuple[bool, str]:
    """GET ``url`` once. Any 2xx counts as reachable; no body parsing.

    Returns (reachable, detail).
    """
    try:
        if client is None:
            with httpx.Client(timeout=timeout) as owned:
                response = owned.get(url, headers=headers)
        else:
            response = client.get(url, headers=headers, timeout=timeout)
    except httpx.HTTPError as e:
        return False, str(e) or type(e).__name__
    if response.is_success:
        return True, f"HTTP {response.status_code}"
    return False, _describe_status(response.status_code)


def local_tags_url(settings: Settings) -> str:
    return f"{settings.ollama_base_url.rstrip('/')}/api/tags"


def remote_models_url(settings: Settings) -> str:
    return f"{settings.openai_api_base_url.rstrip('/')}/models"


def check_endpoint(
    endpoint: ServiceEndpoint,
    settings: Settings,
    credential: Optional[ProviderCredential] = None,
    client: Optional[httpx.Client] = None,
) -> ServiceEndpoint:
    headers = None
    if endpoint.kind is EndpointKind.REMOTE_API and credential is not None:
        headers = {"Authorization": f"Bearer {credential.key}"}
    reachable, detail = probe(endpoint.url, settings.probe_timeout, headers=headers, client=client)
    return ServiceEndpoint(url=endpoint.url, kind=endpoint.kind, reachable=reachable, detail=detail)


def verify(
    state: PipelineState,
    settings: Settings,
    client: Optional[httpx.Client] = None,
) -> PipelineState:
    """Probe both providers and record the outcome."""
    targets = [
        ("Ollama", ServiceEndpoint(local_tags_url(settings), EndpointKind.LOCAL_INFERENCE)),
        ("OpenAI API", ServiceEndpoint(remote_models_url(settings), EndpointKind.REMOTE_API)),
    ]
    checked = []
    for label, endpoint in targets:
        result = check_endpoint(endpoint, settings, state.credential, client=client)
        checked.append(result)
        if result.reachable:
            logger.info("✓ %s connection successful", label)
        else:
            note = " (check your API key)" if result.kind is EndpointKind.REMOTE_API else ""
            logger.warning("✗ %s connection failed: %s%s", label, result.detail, note)
            state = state.warn(f"{label} unreachable at {result.url}: {result.detail}")
    return state.evolve(endpoints=tuple(checked))
