import plistlib

import httpx
import pytest

from flavorpicker.flavor_service import FlavorService, decode_flavor, decode_flavors
from flavorpicker.flavor_models import (
    DecodeError, Flavor, InvalidFlavorRecord, TransportError
)

URL = "https://flavors.test/Flavors.plist"

# Trimmed version of the real Flavors.plist
PLIST_BODY = b"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<array>
  <dict>
    <key>name</key><string>Vanilla</string>
    <key>topColor</key><string>#F3E5AB</string>
    <key>bottomColor</key><string>#E8D48B</string>
  </dict>
  <dict>
    <key>name</key><string>Chocolate</string>
    <key>topColor</key><string>6b3e26</string>
    <key>bottomColor</key><string>#4A2A1A</string>
  </dict>
</array>
</plist>
"""

def make_service(handler, **kwargs):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return FlavorService(url=URL, client=client, **kwargs)

def respond(status=200, content=b"", content_type="application/json"):
    return lambda request: httpx.Response(status, content=content, headers={"content-type": content_type})


# ---------- record decoding ----------
def test_decode_flavor_normalizes_colors():
    flavor = decode_flavor({"name": " Mint ", "topColor": "a8e6cf", "bottomColor": "#3B7A57"})
    assert flavor == Flavor("Mint", "#A8E6CF", "#3B7A57")

def test_decode_flavor_name_only():
    assert decode_flavor({"name": "Vanilla"}) == Flavor("Vanilla")

def test_decode_flavor_rejects_missing_name():
    with pytest.raises(InvalidFlavorRecord):
        decode_flavor({"topColor": "#FFFFFF"})

def test_decode_flavor_rejects_bad_color():
    with pytest.raises(InvalidFlavorRecord, match="topColor"):
        decode_flavor({"name": "Odd", "topColor": "pinkish"})

def test_decode_flavors_skips_invalid_and_keeps_order():
    flavors = decode_flavors([
        {"name": "Strawberry"},
        {"name": ""},
        {"name": "Pistachio", "bottomColor": "nope"},
        {"name": "Mango"},
    ])
    assert [f.name for f in flavors] == ["Strawberry", "Mango"]


# ---------- body decoding ----------
def test_decode_records_plist_sniffed_from_body():
    svc = make_service(respond())
    records = svc.decode_records(PLIST_BODY, "application/octet-stream")
    assert [r["name"] for r in records] == ["Vanilla", "Chocolate"]

def test_decode_records_plist_with_leading_whitespace():
    svc = make_service(respond(content=b"\n  " + PLIST_BODY, content_type="application/x-plist"))
    assert [f.name for f in svc.fetch_flavors()] == ["Vanilla", "Chocolate"]

def test_decode_records_plist_opening_with_doctype():
    body = PLIST_BODY.split(b"\n", 1)[1]
    assert body.startswith(b"<!DOCTYPE plist")
    svc = make_service(respond(content=body, content_type="text/plain"))
    assert [f.name for f in svc.fetch_flavors()] == ["Vanilla", "Chocolate"]

def test_decode_records_binary_plist():
    svc = make_service(respond())
    body = plistlib.dumps([{"name": "Lemon"}], fmt=plistlib.FMT_BINARY)
    assert svc.decode_records(body, "") == [{"name": "Lemon"}]

def test_decode_records_json():
    svc = make_service(respond())
    assert svc.decode_records(b'[{"name":"Vanilla"}]', "application/json") == [{"name": "Vanilla"}]

def test_decode_records_forced_json_rejects_plist():
    svc = make_service(respond(), response_format="json")
    with pytest.raises(DecodeError):
        svc.decode_records(PLIST_BODY, "application/x-plist")

@pytest.mark.parametrize("body", [
    b'{"name": "Vanilla"}',
    b'[["Vanilla"]]',
    b'[{"name": "Vanilla", "scoops": 2}]',
    b'not json at all',
    b'<plist><array><dict><key>name</key>',
])
def test_decode_records_rejects_wrong_shape(body):
    svc = make_service(respond())
    with pytest.raises(DecodeError):
        svc.decode_records(body, "")

def test_unknown_response_format_is_rejected():
    with pytest.raises(ValueError):
        make_service(respond(), response_format="yaml")


# ---------- fetching ----------
def test_fetch_flavors_from_plist_endpoint():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, content=PLIST_BODY, headers={"content-type": "application/x-plist"})

    svc = make_service(handler)
    flavors = svc.fetch_flavors()

    assert [f.name for f in flavors] == ["Vanilla", "Chocolate"]
    assert flavors[1].top_color == "#6B3E26"
    assert len(seen) == 1
    assert seen[0].method == "GET"
    assert str(seen[0].url) == URL

def test_fetch_flavors_json_scenario():
    svc = make_service(respond(content=b'[{"name":"Vanilla"},{"name":"Chocolate"}]'))
    assert svc.fetch_flavors() == (Flavor("Vanilla"), Flavor("Chocolate"))

def test_fetch_flavors_empty_list():
    svc = make_service(respond(content=b"[]"))
    assert svc.fetch_flavors() == ()

def test_http_500_raises_transport_error():
    svc = make_service(respond(status=500, content=b"oops", content_type="text/plain"))
    with pytest.raises(TransportError) as exc_info:
        svc.fetch_flavors()
    assert exc_info.value.status_code == 500

def test_network_failure_raises_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    svc = make_service(handler)
    with pytest.raises(TransportError) as exc_info:
        svc.fetch_body()
    assert exc_info.value.status_code is None

def test_timeout_raises_transport_error():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    svc = make_service(handler)
    with pytest.raises(TransportError, match="timed out"):
        svc.fetch_body()
