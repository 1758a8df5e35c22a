"""HTTP client for the café REST API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

import requests

from tableorder.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS
from tableorder.data import Category
from tableorder.errors import ApiError, AuthenticationError, MalformedResponseError, NotFoundError
from tableorder.models import MenuItem, Order, OrderStatus

logger = logging.getLogger(__name__)

AUTH_HEADER = "x-auth-token"

T = TypeVar("T")


def _error_message(resp: requests.Response) -> str | None:
    try:
        payload = resp.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        for key in ("error", "message"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def _parse(parser: Callable[[Any], T], payload: Any) -> T:
    try:
        return parser(payload)
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.warning("Unexpected payload from API: %s", exc)
        raise MalformedResponseError(str(exc)) from exc


def _parse_list(parser: Callable[[Any], T], payload: Any) -> list[T]:
    if not isinstance(payload, list):
        raise MalformedResponseError(f"expected a list, got {type(payload).__name__}")
    return [_parse(parser, entry) for entry in payload]


def _parse_category(payload: dict[str, Any]) -> Category:
    return Category(category_id=str(payload.get("id") or payload["_id"]), name=str(payload["name"]))


class CafeApiClient:
    """Thin request/response wrapper; every failure surfaces as ApiError."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, token: str | None = None, **kwargs: Any) -> Any:
        url = self._url(path)
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers[AUTH_HEADER] = token
        logger.debug("api_request method=%s url=%s", method, url)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, headers=headers, **kwargs)
        except requests.RequestException as exc:
            logger.warning("Network error calling %s %s: %s", method, url, exc)
            raise ApiError(0) from exc

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning("HTTP %s calling %s %s: %s", resp.status_code, method, url, message)
            if resp.status_code == 404:
                raise NotFoundError(resp.status_code, message)
            if resp.status_code in (401, 403):
                raise AuthenticationError(resp.status_code, message)
            raise ApiError(resp.status_code, message)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            logger.warning("Non-JSON body from %s %s (HTTP %s)", method, url, resp.status_code)
            raise MalformedResponseError(str(exc)) from exc

    # Customer endpoints

    def get_menu(self) -> list[MenuItem]:
        return _parse_list(MenuItem.from_api, self._request("GET", "/menu"))

    def get_categories(self) -> list[Category]:
        return _parse_list(_parse_category, self._request("GET", "/categories"))

    def create_order(self, draft: dict[str, Any]) -> Order:
        return _parse(Order.from_api, self._request("POST", "/orders", json=draft))

    def get_order(self, order_id: str) -> Order:
        return _parse(Order.from_api, self._request("GET", f"/orders/status/{order_id}"))

    def list_table_orders(self, table_id: str) -> list[Order]:
        return _parse_list(Order.from_api, self._request("GET", "/orders", params={"tableNumber": table_id}))

    # Admin endpoints

    def admin_login(self, email: str, password: str) -> str:
        payload = self._request("POST", "/admin/login", json={"email": email, "password": password})
        token = payload.get("token") if isinstance(payload, dict) else None
        if not token:
            raise MalformedResponseError("login response without token")
        return str(token)

    def admin_orders(self, token: str) -> list[Order]:
        return _parse_list(Order.from_api, self._request("GET", "/admin/orders", token=token))

    def save_item(self, token: str, fields: dict[str, str], image_path: str | None = None, item_id: str | None = None) -> None:
        """Create (no `item_id`) or update a menu item as multipart form data."""
        files: dict[str, Any] = {key: (None, value) for key, value in fields.items()}
        method, path = ("PUT", f"/admin/items/{item_id}") if item_id else ("POST", "/admin/items")
        if image_path is None:
            self._request(method, path, token=token, files=files)
            return
        image = Path(image_path)
        with image.open("rb") as fh:
            files["image"] = (image.name, fh)
            self._request(method, path, token=token, files=files)

    def delete_item(self, token: str, item_id: str) -> None:
        self._request("DELETE", f"/admin/items/{item_id}", token=token)

    def set_order_time(self, token: str, order_id: str, minutes: float) -> None:
        self._request("PUT", f"/admin/orders/{order_id}/time", token=token, json={"time": minutes})

    def set_order_status(self, token: str, order_id: str, status: OrderStatus) -> None:
        self._request("PUT", f"/admin/orders/{order_id}/status", token=token, json={"status": status.value})

    def delete_order(self, token: str, order_id: str) -> None:
        self._request("DELETE", f"/admin/orders/{order_id}", token=token)
