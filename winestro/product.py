"""Products returned by the Winestro API."""

from __future__ import annotations

import html
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import unquote_plus

from winestro.customer import (
    _decode_fields,
    _element_text,
    _encode_fields,
    _nested,
    _parse_bool,
    _parse_document,
    _parse_float,
    _parse_int,
    _scalar,
)
from winestro.timestamps import format_timestamp, parse_timestamp

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

_HTML_ESCAPED_FIELDS = (
    "name",
    "fat",
    "unsaturated_fat",
    "carbohydrates",
    "salt",
    "fibre",
    "vitamins",
    "sulfuric_acids",
    "free_sulfuric_acids",
    "histamine",
    "glycerin",
    "protein",
    "calories",
)


def _query_unescape(text: str) -> str:
    bad = _BAD_ESCAPE.search(text)
    if bad is not None:
        raise ValueError(f"invalid URL escape {text[bad.start():bad.start() + 3]!r}")
    return unquote_plus(text)


@dataclass
class BundleItem:
    """One product contained in a bundle."""

    sku: str = _scalar("artikel_sort_item_weinnr", "sku", omitempty=False)
    quantity: float = _scalar("artikel_sort_item_anzahl", "quantity", _parse_float, omitempty=False)

    @classmethod
    def from_xml(cls, element: ET.Element) -> "BundleItem":
        return cls(**_decode_fields(cls, element))

    def to_dict(self) -> dict[str, Any]:
        return _encode_fields(self)


@dataclass
class ProductNuance:
    """A taste nuance of a product."""

    name: str = _scalar("artikel_nuancen_item_name", "name", omitempty=False)
    image: str = _scalar("artikel_nuancen_item_image", "image")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "ProductNuance":
        return cls(**_decode_fields(cls, element))

    def to_dict(self) -> dict[str, Any]:
        return _encode_fields(self)


@dataclass
class ProductAward:
    """An award a product has received."""

    name: str = _scalar("artikel_auszeichnungen_name", "name", omitempty=False)
    image: str = _scalar("artikel_auszeichnungen_image", "image")

    @classmethod
    def from_xml(cls, element: ET.Element) -> "ProductAward":
        return cls(**_decode_fields(cls, element))

    def to_dict(self) -> dict[str, Any]:
        return _encode_fields(self)


@dataclass
class ProductFoodPairing:
    """A dish the product goes well with."""

    name: str = _scalar("artikel_speisen_name", "name", omitempty=False)

    @classmethod
    def from_xml(cls, element: ET.Element) -> "ProductFoodPairing":
        return cls(**_decode_fields(cls, element))

    def to_dict(self) -> dict[str, Any]:
        return _encode_fields(self)


@dataclass
class Product:
    """An article of the shop."""

    sku: str = _scalar("artikel_nr", "sku", omitempty=False)
    name: str = _scalar("artikel_name", "name", omitempty=False)
    description: str = _scalar("artikel_beschreibung", "description")
    vintage: str = _scalar("artikel_jahrgang", "vintage")
    variety: str = _scalar("artikel_sorte", "variety")
    quality: str = _scalar("artikel_qualitaet", "quality")
    taste: str = _scalar("artikel_geschmack", "taste")
    sugar: str = _scalar("artikel_zucker", "sugar")
    alcohol: str = _scalar("artikel_alkohol", "alcohol")
    acid: str = _scalar("artikel_saeure", "acid")
    volume_liter: float = _scalar("artikel_liter", "volume_liter", _parse_float)
    weight_kg: float = _scalar("artikel_gewicht", "weight", _parse_float)
    sulfites: bool = _scalar("artikel_sulfite", "sulfites", _parse_bool)
    image: str = _scalar("artikel_bild", "image")
    image_large: str = _scalar("artikel_bild_big", "image_large")
    image_2: str = _scalar("artikel_bild_2", "image_2")
    image_2_large: str = _scalar("artikel_bild_big_2", "image_2_large")
    image_3: str = _scalar("artikel_bild_3", "image_3")
    image_3_large: str = _scalar("artikel_bild_big_3", "image_3_large")
    image_4: str = _scalar("artikel_bild_4", "image_4")
    image_4_large: str = _scalar("artikel_bild_big_4", "image_4_large")
    shipping_quantity: int = _scalar("artikel_versandmenge", "shipping_quantity", _parse_int)
    bundle_items: list[BundleItem] = _nested(
        "artikel_sort_items", "artikel_sort_item", "bundle_items", BundleItem.from_xml
    )
    price: float = _scalar("artikel_preis", "price", _parse_float)
    price_liter: float = _scalar("artikel_literpreis", "price_liter", _parse_float)
    vat: float = _scalar("artikel_mwst", "vat", _parse_float)
    calories: str = _scalar("artikel_brennwert", "calories")
    protein: str = _scalar("artikel_eiweiss", "protein")
    free_shipping: bool = _scalar("artikel_versandfrei", "free_shipping", _parse_bool)
    hide_price_liter: bool = _scalar("artikel_keinliterpreis", "hide_price_liter", _parse_bool)
    fill_weight_gram: int = _scalar("artikel_fuellgewicht", "fill_weight_gram", _parse_int)
    price_kg: float = _scalar("artikel_kilopreis", "price_kg", _parse_float)
    out_of_stock: bool = _scalar("artikel_ausgetrunken", "out_of_stock", _parse_bool)
    apnr: str = _scalar("artikel_apnr", "apnr")
    vineyard: str = _scalar("artikel_lage", "vineyard")
    expertise: str = _scalar("artikel_expertise", "expertise")
    type_name: str = _scalar("artikel_typ", "type_name")
    type_id: int = _scalar("artikel_typ_id", "type_id", _parse_int)
    color: str = _scalar("artikel_farbe", "color")
    drink_temperature: str = _scalar("artikel_trinktemperatur", "drink_temperature")
    storage_temperature: str = _scalar("artikel_lagertemperatur", "storage_temperature")
    elaboration: str = _scalar("artikel_ausbau", "elaboration")
    soil: str = _scalar("artikel_boden", "soil")
    storable_years: str = _scalar("artikel_lagerfaehigkeit", "storable_years")
    video_url: str = _scalar("artikel_video", "video_url")
    country: str = _scalar("artikel_land", "country")
    region: str = _scalar("artikel_region", "region")
    appellation: str = _scalar("artikel_anbaugebiet", "appellation")
    stock_warning_level: int = _scalar("artikel_bestand_warnung_ab", "stock_warning_level", _parse_int)
    producer_id: int = _scalar("artikel_erzeuger", "producer_id", _parse_int)
    producer_name: str = _scalar("artikel_erzeuger_name", "producer_name")
    producer_number: str = _scalar("artikel_erzeuger_nr", "producer_number")
    category: str = _scalar("artikel_kategorie", "category")
    packaging_id: int = _scalar("artikel_verpackung", "packaging_id", _parse_int)
    packaging_name: str = _scalar("artikel_verpackung_bezeichnung", "packaging_name")
    packaging_quantity: int = _scalar("artikel_verpackung_inhalt", "packaging_quantity", _parse_int)
    ean13: str = _scalar("artikel_ean13", "ean13")
    ean13_packaging: str = _scalar("artikel_ean13_kiste", "ean13_packaging")
    ingredients: str = _scalar("artikel_zutaten", "ingredients")
    best_by_date: str = _scalar("artikel_mhd", "best_by_date")
    fat: str = _scalar("artikel_fett", "fat")
    unsaturated_fat: str = _scalar("artikel_fetts", "unsaturated_fat")
    carbohydrates: str = _scalar("artikel_kohlenhydrate", "carbohydrates")
    salt: str = _scalar("artikel_salz", "salt")
    fibre: str = _scalar("artikel_ballast", "fibre")
    vitamins: str = _scalar("artikel_vitamine", "vitamins")
    sulfuric_acids: str = _scalar("artikel_gesamt_schwefelsaeure", "sulfuric_acids")
    free_sulfuric_acids: str = _scalar("artikel_frei_schwefelsaeure", "free_sulfuric_acids")
    histamine: str = _scalar("artikel_histamin", "histamine")
    glycerin: str = _scalar("artikel_glycerin", "glycerin")
    elabel_text: str = _scalar("artikel_labeltext", "elabel_text")
    elabel_url: str = _scalar("artikel_labellink", "elabel_url")
    product_groups: list[str] = _nested(
        "artikel_warengruppen", "warengruppe", "product_groups", _element_text
    )
    stock: float = _scalar("artikel_bestand", "stock", _parse_float)
    company_stock: float = _scalar("artikel_bestand_firmenverbund", "company_stock", _parse_float)
    webshop_stock: float = _scalar("artikel_bestand_webshop", "webshop_stock", _parse_float)
    last_modified_date: datetime | None = field(
        default=None,
        metadata={
            "xml": "artikel_last_modified",
            "json": "last_modified_date",
            "parse": parse_timestamp,
            "format": format_timestamp,
            "omitempty": True,
        },
    )
    nuance_items: list[ProductNuance] = _nested(
        "artikel_nuancen_items", "artikel_nuancen_item", "nuance_items", ProductNuance.from_xml
    )
    award_items: list[ProductAward] = _nested(
        "artikel_auszeichnungen", "artikel_auszeichnungen_item", "award_items", ProductAward.from_xml
    )
    food_pairing_items: list[ProductFoodPairing] = _nested(
        "artikel_speisen_items", "artikel_speisen_item", "food_pairing_items", ProductFoodPairing.from_xml
    )

    @classmethod
    def from_xml(cls, element: ET.Element) -> "Product":
        """Build a product from an ``<item>`` element.

        The SKU arrives URL-encoded and the name and nutrition values
        HTML-escaped; both are decoded here.
        """
        values = _decode_fields(cls, element)
        values["sku"] = _query_unescape(values.get("sku", ""))
        for name in _HTML_ESCAPED_FIELDS:
            if name in values:
                values[name] = html.unescape(values[name])
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; empty optional fields are left out."""
        return _encode_fields(self)


@dataclass
class ProductOptions:
    """Filters for a product query."""

    group_id: int = 0
    query: str = ""
    sku: str = ""
    include_company_stock: bool = False

    def to_params(self) -> dict[str, str]:
        """Request parameters for the filters that are set."""
        params: dict[str, str] = {}
        if self.group_id > 0:
            params["id_grp"] = str(self.group_id)
        if self.query:
            params["suchstring"] = self.query
        if self.sku:
            params["artikelnr"] = self.sku
        if self.include_company_stock:
            params["firmenverbund"] = "true"
        return params


def parse_products(data: str | bytes) -> list[Product]:
    """Decode a product list document."""
    return _parse_document(data, Product.from_xml)