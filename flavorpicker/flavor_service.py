# flavor_service.py
import json
import logging
import plistlib
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
from xml.parsers.expat import ExpatError

import httpx

from flavorpicker.flavor_models import (
    DecodeError, Flavor, FlavorList, InvalidFlavorRecord, TransportError
)

logger = logging.getLogger(__name__)

DEFAULT_FLAVORS_URL = "https://www.raywenderlich.com/downloads/Flavors.plist"
DEFAULT_TIMEOUT = 10.0

RESPONSE_FORMATS = ("auto", "plist", "json")

ACCEPT_HEADER = "application/x-plist, application/xml;q=0.9, application/json;q=0.9, */*;q=0.5"

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def _normalize_color(record: Mapping[str, str], key: str) -> Optional[str]:
    raw = (record.get(key) or "").strip()
    if not raw:
        return None
    m = _HEX_COLOR.match(raw)
    if not m:
        raise InvalidFlavorRecord(f"'{key}' is not a hex color: {raw!r}")
    return "#" + m.group(1).upper()


def decode_flavor(record: Mapping[str, str]) -> Flavor:
    """Map one string-keyed record onto a Flavor, or raise InvalidFlavorRecord."""
    name = (record.get("name") or "").strip()
    if not name:
        raise InvalidFlavorRecord(f"Record has no 'name': {dict(record)!r}")
    return Flavor(
        name=name,
        top_color=_normalize_color(record, "topColor"),
        bottom_color=_normalize_color(record, "bottomColor"),
    )


def decode_flavors(records: Iterable[Mapping[str, str]]) -> FlavorList:
    """Decode every valid record, in order. Invalid records are logged and skipped."""
    flavors: List[Flavor] = []
    for i, record in enumerate(records):
        try:
            flavors.append(decode_flavor(record))
        except InvalidFlavorRecord as e:
            logger.warning("Skipping flavor record %d: %s", i, e)
    return tuple(flavors)


def _looks_like_plist(body: bytes, content_type: str) -> bool:
    if "plist" in content_type.lower():
        return True
    head = body.lstrip()[:16]
    return head.startswith(b"<") or head.startswith(b"bplist")


def _check_records(data: Any) -> List[Dict[str, str]]:
    if not isinstance(data, list):
        raise DecodeError(f"Expected a list of records, got {type(data).__name__}.")
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise DecodeError(f"Record {i} is a {type(item).__name__}, not a map.")
        for k, v in item.items():
            if not isinstance(k, str) or not isinstance(v, str):
                raise DecodeError(f"Record {i} has a non-string entry: {k!r}={v!r}")
    return data


class FlavorService:
    def __init__(
        self,
        url: str = DEFAULT_FLAVORS_URL,
        timeout: float = DEFAULT_TIMEOUT,
        response_format: str = "auto",
        client: Optional[httpx.Client] = None,
    ) -> None:
        if response_format not in RESPONSE_FORMATS:
            raise ValueError(f"response_format must be one of {RESPONSE_FORMATS}, got {response_format!r}")
        self.url = url
        self.timeout = float(timeout)
        self.response_format = response_format
        self._client = client or httpx.Client(follow_redirects=True, timeout=self.timeout)

    def close(self) -> None:
        self._client.close()

    def fetch_body(self) -> Tuple[bytes, str]:
        """GET the flavors resource; returns (body, content_type) or raises TransportError."""
        logger.debug("GET %s", self.url)
        try:
            response = self._client.get(self.url, headers={"Accept": ACCEPT_HEADER})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransportError(f"Server returned HTTP {status} for {self.url}", status_code=status) from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {self.url} timed out.") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {self.url} failed: {e}") from e
        return response.content, response.headers.get("content-type", "")

    def decode_records(self, body: bytes, content_type: str = "") -> List[Dict[str, str]]:
        """
        Parse the body into a list of flat string-keyed records.

        'auto' picks plist when the content type says so or the body looks like
        XML / binary plist, JSON otherwise. Anything that is not a list of
        string->string maps is rejected as a whole.
        """
        fmt = self.response_format
        if fmt == "auto":
            fmt = "plist" if _looks_like_plist(body, content_type) else "json"

        try:
            if fmt == "plist":
                # plistlib only sniffs XML that opens exactly with <?xml or <plist
                stripped = body.lstrip()
                plist_fmt = plistlib.FMT_BINARY if stripped.startswith(b"bplist") else plistlib.FMT_XML
                data = plistlib.loads(stripped, fmt=plist_fmt)
            else:
                data = json.loads(body)
        except (ValueError, ExpatError) as e:
            raise DecodeError(f"Could not parse {fmt} body: {e}") from e

        return _check_records(data)

    def fetch_flavors(self) -> FlavorList:
        body, content_type = self.fetch_body()
        records = self.decode_records(body, content_type)
        flavors = decode_flavors(records)
        logger.info("Decoded %d of %d flavor records", len(flavors), len(records))
        return flavors
