from __future__ import annotations

from cartsync._redact import redact_for_log


def test_redact_for_log_hides_bearer_token() -> None:
    headers = {
        "Authorization": "Bearer abc",
        "accept": "application/json",
        "user-agent": "cartsync/0.1",
    }

    redacted = redact_for_log(headers)
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["accept"] == "application/json"
    assert redacted["user-agent"] == "cartsync/0.1"


def test_redact_for_log_leaves_cart_payload_alone() -> None:
    payload = {"items": {"A": 1, "B": 2}}
    assert redact_for_log(payload) == payload


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_limits_large_carts() -> None:
    items = {f"sku-{i}": 1 for i in range(10)}
    redacted = redact_for_log({"items": items}, max_items=3)
    assert len(redacted["items"]) == 4
    assert redacted["items"]["…"] == "<7 more>"
