"""Customer records returned by the Winestro API."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Callable

_INT_RE = re.compile(r"[+-]?[0-9]+\Z")
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_TRAILING_COMMA = re.compile(r",[\t\n\f\r ]*\Z")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _element_text(element: ET.Element) -> str:
    """Character data directly inside an element, without nested elements' text."""
    return (element.text or "") + "".join(child.tail or "" for child in element)


def _int_parser(bits: int) -> Callable[[str], int]:
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1

    def parse(text: str) -> int:
        if not text:
            return 0
        stripped = text.strip()
        if not _INT_RE.match(stripped):
            raise ValueError(f"invalid integer {text!r}")
        value = int(stripped)
        if not low <= value <= high:
            raise ValueError(f"integer {stripped} out of range")
        return value

    return parse


_parse_int = _int_parser(64)
_parse_int32 = _int_parser(32)


def _parse_float(text: str) -> float:
    if not text:
        return 0.0
    stripped = text.strip()
    try:
        if "_" in stripped:
            raise ValueError
        return float(stripped)
    except ValueError:
        raise ValueError(f"invalid number {text!r}") from None


def _parse_bool(text: str) -> bool:
    if not text:
        return False
    stripped = text.strip()
    if stripped in _TRUE:
        return True
    if stripped in _FALSE:
        return False
    raise ValueError(f"invalid boolean {text!r}")


def _scalar(tag: str, key: str, parse: Callable[[str], Any] = str, *, omitempty: bool = True):
    """A field read from the text of one child element."""
    return field(
        default=parse(""),
        metadata={"xml": tag, "json": key, "parse": parse, "omitempty": omitempty},
    )


def _nested(container: str, item: str, key: str, decode: Callable[[ET.Element], Any]):
    """A list field read from ``<container><item/>...</container>``."""
    return field(
        default_factory=list,
        metadata={"xml": container, "item": item, "json": key, "decode": decode, "omitempty": True},
    )


def _decode_fields(cls: type, element: ET.Element) -> dict[str, Any]:
    specs = {f.metadata["xml"]: f for f in fields(cls) if "xml" in f.metadata}
    values: dict[str, Any] = {}
    for child in element:
        spec = specs.get(_local_name(child.tag))
        if spec is None:
            continue
        meta = spec.metadata
        if "item" in meta:
            values.setdefault(spec.name, []).extend(
                meta["decode"](sub) for sub in child if _local_name(sub.tag) == meta["item"]
            )
        else:
            values[spec.name] = meta["parse"](_element_text(child))
    return values


def _encode_fields(obj: Any) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for f in fields(obj):
        meta = f.metadata
        if "json" not in meta:
            continue
        value = getattr(obj, f.name)
        if meta["omitempty"] and not value:
            continue
        if "format" in meta:
            value = meta["format"](value)
        elif isinstance(value, list):
            value = [_encode_fields(v) if is_dataclass(v) else v for v in value]
        result[meta["json"]] = value
    return result


def _parse_document(data: str | bytes, decode_item: Callable[[ET.Element], Any]) -> list:
    """Decode an ``<items><item/>...</items>`` document."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"malformed XML: {exc}") from None
    name = _local_name(root.tag)
    if name != "items":
        raise ValueError(f"expected element type <items> but have <{name}>")
    return [decode_item(child) for child in root if _local_name(child.tag) == "item"]


@dataclass
class Customer:
    """One address record of a customer group."""

    id: int = _scalar("adr_id", "id", _parse_int32, omitempty=False)
    number: str = _scalar("adr_nr", "number", omitempty=False)
    first_name: str = _scalar("adr_vorname", "first_name")
    last_name: str = _scalar("adr_nachname", "last_name")
    company: str = _scalar("adr_firma", "company")
    zip: str = _scalar("adr_plz", "zip")
    city: str = _scalar("adr_ort", "city")
    www: str = _scalar("adr_www", "www")
    email: str = _scalar("adr_email", "email")
    street: str = _scalar("adr_str", "street")
    house_number: str = _scalar("adr_str_nr", "house_number")
    country: str = _scalar("adr_land", "country")
    landline: str = _scalar("adr_festnetz", "landline")
    mobile: str = _scalar("adr_mobil", "mobile")
    fax: str = _scalar("adr_fax", "fax")
    note1: str = _scalar("adr_note1", "note1")
    note2: str = _scalar("adr_note2", "note2")
    note3: str = _scalar("adr_note3", "note3")
    note4: str = _scalar("adr_note4", "note4")
    discount: float = _scalar("adr_rabatt", "discount", _parse_float)
    price_category: int = _scalar("adr_id_preiskategorie", "price_category", _parse_int)
    newsletter_active: bool = _scalar("adr_newsletter_aktiv", "newsletter_active", _parse_bool)
    tax_type: int = _scalar("adr_kunden_mwst", "tax_type", _parse_int)
    salutation: str = _scalar("adr_anrede", "salutation")
    salutation_type: int = _scalar("adr_anredenart", "salutation_type", _parse_int)
    payment_type: int = _scalar("adr_id_zahlungsart", "payment_type", _parse_int)

    @classmethod
    def from_xml(cls, element: ET.Element) -> "Customer":
        """Build a customer from an ``<item>`` element."""
        return cls(**_decode_fields(cls, element))

    def full_name(self) -> str:
        """First and last name, or the company when both names are empty."""
        if not self.first_name and not self.last_name:
            return self.company
        return f"{self.first_name} {self.last_name}"

    def full_salutation(self) -> str:
        """The salutation followed by the first or last name, as the salutation type asks."""
        salutation = _TRAILING_COMMA.sub("", self.salutation).strip()
        if self.salutation_type == 0:
            return f"{salutation} {self.first_name.strip()}"
        if self.salutation_type == 1:
            return f"{salutation} {self.last_name.strip()}"
        return salutation

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; empty optional fields are left out."""
        return _encode_fields(self)


def parse_customers(data: str | bytes) -> list[Customer]:
    """Decode a customer list document."""
    return _parse_document(data, Customer.from_xml)