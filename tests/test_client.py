from unittest.mock import Mock
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
import responses

from winestro.client import HOST, ApiError, Client, Config
from winestro.product import ProductOptions

PRODUCTS_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<items>
  <item>
    <artikel_nr>6%2B2025</artikel_nr>
    <artikel_name>2025er Ros&amp;eacute; trocken</artikel_name>
    <artikel_warengruppen><warengruppe>Wein</warengruppe></artikel_warengruppen>
    <artikel_speisen_items>
      <artikel_speisen_item><artikel_speisen_name>Fisch</artikel_speisen_name></artikel_speisen_item>
      <artikel_speisen_item><artikel_speisen_name>Salat</artikel_speisen_name></artikel_speisen_item>
    </artikel_speisen_items>
  </item>
</items>
"""

CUSTOMERS_XML = b"""<items>
  <item>
    <adr_id>7</adr_id>
    <adr_nr>K-7</adr_nr>
    <adr_vorname>Anna</adr_vorname>
    <adr_nachname>Muster</adr_nachname>
    <adr_email>anna@example.com</adr_email>
  </item>
</items>
"""


def _config():
    return Config(uid=1000, user="apiuser-1000", code="secret", shop_id=1)


def _query(rsps, index=0):
    return parse_qs(urlsplit(rsps.calls[index].request.url).query)


def test_config_from_env_mapping():
    env = {
        "WBO_UID": "1000",
        "WBO_API_USER": "apiuser-1000",
        "WBO_API_CODE": "secret",
        "WBO_SHOP_ID": "1",
    }
    assert Config.from_env(env) == _config()


def test_config_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("WBO_UID", "1000")
    monkeypatch.setenv("WBO_API_USER", "apiuser-1000")
    monkeypatch.setenv("WBO_API_CODE", "secret")
    monkeypatch.setenv("WBO_SHOP_ID", "1")
    assert Client.from_env().config == _config()


@pytest.mark.parametrize(
    "env",
    [
        {"WBO_SHOP_ID": "1"},
        {"WBO_UID": "abc", "WBO_SHOP_ID": "1"},
        {"WBO_UID": "1000"},
        {"WBO_UID": "1000", "WBO_SHOP_ID": " 1"},
    ],
)
def test_config_from_env_rejects_bad_ids(env):
    with pytest.raises(ValueError):
        Config.from_env(env)


def test_from_credentials_builds_config():
    client = Client.from_credentials(1000, "apiuser-1000", "secret", 1)
    assert client.config == _config()
    assert client.timeout == 10.0


def test_request_sends_credentials_and_action():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, body=b"<items/>")
        body = client.request("getArtikel", {"artikelnr": "6+2025"})
        query = _query(rsps)
        url = rsps.calls[0].request.url
    assert body == b"<items/>"
    assert query["UID"] == ["1000"]
    assert query["apiUSER"] == ["apiuser-1000"]
    assert query["apiCODE"] == ["secret"]
    assert query["apiShopID"] == ["1"]
    assert query["apiACTION"] == ["getArtikel"]
    assert query["output"] == ["xml"]
    assert query["artikelnr"] == ["6+2025"]
    keys = [part.split("=", 1)[0] for part in urlsplit(url).query.split("&")]
    assert keys == sorted(keys)


def test_request_no_content_returns_none():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, status=204)
        assert client.request("getArtikel") is None


def test_request_transport_error_raises_api_error():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, body=requests.ConnectionError("unreachable"))
        with pytest.raises(ApiError):
            client.request("getArtikel")


def test_fetch_products_parses_and_filters():
    client = Client(_config())
    options = ProductOptions(group_id=3, query="Rose", include_company_stock=True)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, body=PRODUCTS_XML)
        products = client.fetch_products(options)
        query = _query(rsps)
    assert query["apiACTION"] == ["getArtikel"]
    assert query["id_grp"] == ["3"]
    assert query["suchstring"] == ["Rose"]
    assert query["firmenverbund"] == ["true"]
    assert "artikelnr" not in query
    assert len(products) == 1
    assert products[0].sku == "6+2025"
    assert products[0].name == "2025er Rosé trocken"
    assert products[0].product_groups == ["Wein"]
    assert len(products[0].food_pairing_items) == 2


def test_fetch_products_no_content_is_empty():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, status=204)
        assert client.fetch_products() == []


def test_fetch_products_malformed_body_raises():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, body=b"not xml")
        with pytest.raises(ApiError, match="failed to fetch products"):
            client.fetch_products()


def test_fetch_products_transport_error_is_wrapped():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, body=requests.ConnectionError("unreachable"))
        with pytest.raises(ApiError, match="failed to fetch products"):
            client.fetch_products()


def test_fetch_customers_for_group():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, body=CUSTOMERS_XML)
        customers = client.fetch_customers_for_group(5)
        query = _query(rsps)
    assert query["apiACTION"] == ["getKundenGruppe"]
    assert query["id_grp"] == ["5"]
    assert [c.id for c in customers] == [7]
    assert customers[0].full_name() == "Anna Muster"
    assert customers[0].email == "anna@example.com"


def test_fetch_customers_wrong_root_raises():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, body=b"<error>denied</error>")
        with pytest.raises(ApiError):
            client.fetch_customers_for_group(5)


def test_fetch_customers_no_content_is_empty():
    client = Client(_config())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, HOST, status=204)
        assert client.fetch_customers_for_group(5) == []


def test_context_manager_closes_session():
    session = Mock()
    with Client(_config(), session) as client:
        assert client.session is session
        session.close.assert_not_called()
    session.close.assert_called_once_with()