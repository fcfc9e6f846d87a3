"""
Shared types for the external food-data providers.

Every provider is a plain descriptor holding a name and an async fetch
function returning an AuthoritativeProduct or None. The cascade never calls
fetch directly, it goes through run_provider which turns the result into a
tagged Hit / Miss / Error outcome.
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import aiohttp

from env import PROVIDER_TIMEOUT, USER_AGENT
from interfaces.productModels import AuthoritativeProduct
from logger_manager import log_debug, log_warning, log_error


class ProviderHTTPError(Exception):
    def __init__(self, url: str, status: int):
        super().__init__(f"{url} returned HTTP {status}")
        self.url = url
        self.status = status


@dataclass(frozen=True)
class Hit:
    product: AuthoritativeProduct


@dataclass(frozen=True)
class Miss:
    reason: str = "not found"


@dataclass(frozen=True)
class Error:
    detail: str


ProviderOutcome = Union[Hit, Miss, Error]

FetchFunction = Callable[[str], Awaitable[Optional[AuthoritativeProduct]]]


@dataclass(frozen=True)
class ProductProvider:
    name: str
    fetch: FetchFunction


async def run_provider(provider: ProductProvider, key: str) -> ProviderOutcome:
    """Call one provider and classify the result, never raises."""
    try:
        product = await provider.fetch(key)
    except Exception as e:
        log_error(f"Error fetching from {provider.name}: {e}", e)
        return Error(detail=f"{type(e).__name__}: {e}")

    if product is None:
        log_debug(f"{provider.name} has no product for {key}")
        return Miss(reason=f"{provider.name} returned no product")
    return Hit(product=product)


def default_headers() -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }


async def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    missing_statuses=(404,),
) -> Optional[Any]:
    """
    GET a JSON document.

    Returns None for statuses listed in missing_statuses, raises
    ProviderHTTPError for any other non-2xx status.
    """
    request_headers = default_headers()
    if headers:
        request_headers.update(headers)

    timeout = aiohttp.ClientTimeout(total=PROVIDER_TIMEOUT)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        async with session.get(url, params=params, headers=request_headers) as response:
            if response.status in missing_statuses:
                log_debug(f"{url} returned {response.status}, treating as not found")
                return None
            if response.status >= 400:
                log_warning(f"{url} returned status: {response.status}")
                raise ProviderHTTPError(url, response.status)
            # some public endpoints answer with text/html content types
            return await response.json(content_type=None)


def first_item(data: Optional[Dict[str, Any]], key: str) -> Optional[Dict[str, Any]]:
    """Return data[key][0] when the list is present and non-empty."""
    if not isinstance(data, dict):
        return None
    items = data.get(key)
    if not items or not isinstance(items, list):
        return None
    return items[0]


def first_of(values) -> Optional[str]:
    if not values or not isinstance(values, list):
        return None
    return values[0]


def build_product(barcode: str, data_source: str, **fields) -> AuthoritativeProduct:
    """Create a provider record, empty strings from upstream become None."""
    cleaned = {key: (value if value != "" else None) for key, value in fields.items()}
    return AuthoritativeProduct(barcode=barcode, data_source=data_source, **cleaned)
