"""HTTP client for the Winestro shop API."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from winestro.customer import Customer, parse_customers
from winestro.product import Product, ProductOptions, parse_products

HOST = "https://weinstore.net/xml/v22.0/wbo-API.php"
DEFAULT_TIMEOUT = 10.0

_ATOI_RE = re.compile(r"[+-]?[0-9]+\Z")


class ApiError(Exception):
    """A request to the API failed or its answer could not be decoded."""


def _atoi(name: str, text: str) -> int:
    if not _ATOI_RE.match(text):
        raise ValueError(f"{name}: invalid integer {text!r}")
    return int(text)


@dataclass
class Config:
    """Credentials identifying a tenant, its API user and its shop."""

    uid: int
    user: str
    code: str = field(repr=False)
    shop_id: int

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Read WBO_UID, WBO_API_USER, WBO_API_CODE and WBO_SHOP_ID.

        Raises ValueError when the tenant or shop ID is missing or not an integer.
        """
        env = os.environ if environ is None else environ
        uid = _atoi("WBO_UID", env.get("WBO_UID", ""))
        shop_id = _atoi("WBO_SHOP_ID", env.get("WBO_SHOP_ID", ""))
        return cls(
            uid=uid,
            user=env.get("WBO_API_USER", ""),
            code=env.get("WBO_API_CODE", ""),
            shop_id=shop_id,
        )


class Client:
    """Sends authenticated actions to the API and decodes the answers."""

    def __init__(self, config: Config, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session if session is not None else requests.Session()
        self.timeout = DEFAULT_TIMEOUT

    @classmethod
    def from_credentials(cls, uid: int, user: str, code: str, shop_id: int) -> "Client":
        """Build a client from the individual credentials."""
        return cls(Config(uid=uid, user=user, code=code, shop_id=shop_id))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Client":
        """Build a client from the WBO_* environment variables."""
        return cls(Config.from_env(environ))

    def request(self, action: str, params: Mapping[str, str] | None = None) -> bytes | None:
        """POST one action and return the raw body, or None for 204 No Content."""
        query: list[tuple[str, str]] = [
            ("UID", str(self.config.uid)),
            ("apiUSER", self.config.user),
            ("apiCODE", self.config.code),
            ("apiShopID", str(self.config.shop_id)),
            ("apiACTION", action),
            ("output", "xml"),
        ]
        query.extend((params or {}).items())
        query.sort(key=lambda item: item[0])
        try:
            response = self.session.post(HOST, params=query, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"{action}: {exc}") from exc
        try:
            if response.status_code == 204:
                return None
            return response.content
        finally:
            response.close()

    def fetch_customers_for_group(self, group_id: int) -> list[Customer]:
        """All customers of one customer group."""
        body = self.request("getKundenGruppe", {"id_grp": str(group_id)})
        if body is None:
            return []
        try:
            return parse_customers(body)
        except ValueError as exc:
            raise ApiError(str(exc)) from exc

    def fetch_products(self, options: ProductOptions | None = None) -> list[Product]:
        """Products matching the given filters."""
        options = options if options is not None else ProductOptions()
        try:
            body = self.request("getArtikel", options.to_params())
            return parse_products(body) if body is not None else []
        except (ApiError, ValueError) as exc:
            raise ApiError(f"failed to fetch products: {exc}") from exc

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()