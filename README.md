# winestro

A small Python client for the Winestro wine shop XML API. It fetches the
product catalogue and the customers of a customer group, and turns the XML
responses into dataclasses.

## Installation

```
pip install winestro
```

## Credentials

The client needs four values: the tenant user ID, the API user name, the API
code and the shop ID. They can be given directly:

```python
from winestro.client import Client

client = Client.from_credentials(1000, "apiuser-1000", "placeholder", 1)
```

or read from the environment variables `WBO_UID`, `WBO_API_USER`,
`WBO_API_CODE` and `WBO_SHOP_ID`:

```python
client = Client.from_env()
```

`Client.from_env` and `Config.from_env` raise `ValueError` when `WBO_UID` or
`WBO_SHOP_ID` is missing or not an integer. Both also accept a mapping to read
from instead of `os.environ`.

A `Config` can also be built and passed to `Client` yourself, together with an
optional `requests.Session`. Requests time out after 10 seconds; change
`client.timeout` to use another value. A client is a context manager and
closes its session on exit, or call `client.close()`.

## Fetching products

```python
from winestro.client import Client
from winestro.product import ProductOptions

with Client.from_env() as client:
    products = client.fetch_products(ProductOptions(query="Riesling"))
    for product in products:
        print(product.sku, product.name, product.price)
```

`ProductOptions` filters by product group (`group_id`, used when greater than
zero), search text (`query`), article number (`sku`), and can ask for the
stock of the whole company group (`include_company_stock`). Without options,
all products are requested.

Each `Product` carries the wine's details, images, bundle items
(`BundleItem`), nuances (`ProductNuance`), awards (`ProductAward`), food
pairings (`ProductFoodPairing`), product groups and its last modification
time as a UTC `datetime`. The SKU is URL-decoded and the name and nutrition
values are HTML-unescaped while parsing. `Product.to_dict()` gives a
JSON-ready dictionary with empty optional fields left out and the
modification time written as an RFC 3339 string.

## Fetching customers

```python
with Client.from_env() as client:
    for customer in client.fetch_customers_for_group(42):
        print(customer.full_name(), customer.email)
        print(customer.full_salutation())
```

`full_name()` returns first and last name, or the company when both are
empty. `full_salutation()` strips a trailing comma from the salutation and
appends the first name (salutation type 0), the last name (type 1) or
nothing (any other type). `Customer.to_dict()` works like `Product.to_dict()`.

An answer of `204 No Content` yields an empty list for both fetch methods.
`client.request(action, params)` sends any other action and returns the raw
response body, or `None` for `204`.

## Parsing responses yourself

XML read from elsewhere can be parsed with `winestro.product.parse_products`
and `winestro.customer.parse_customers`; they take a `str` or `bytes`
`<items>` document and raise `ValueError` when it is malformed.
`winestro.timestamps.parse_timestamp` reads the API's
`YYYY-MM-DD hh:mm:ss` timestamps and `format_timestamp` writes a `datetime`
as RFC 3339.

## Errors

Transport failures and undecodable responses from the fetch methods raise
`winestro.client.ApiError`.

## What it does not do

The package covers only the product and customer-group actions listed above.
It has no command-line tool, and it does not write orders, customers or
products back to the shop.

## Running the tests

```
pip install -e ".[test]"
pytest
```