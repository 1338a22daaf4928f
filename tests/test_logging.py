"""
Tests for logging helpers and metrics.
"""

import json
import logging

from requests_mock import Mocker

from mpesa_sdk.logging_setup import JsonFormatter, sanitize_for_logging, setup_structured_logger
from mpesa_sdk.exceptions import TimeoutError as MpesaTimeoutError, TransportError
from mpesa_sdk.metrics import (
    REJECTIONS,
    REQUEST_COUNT,
    TRANSPORT_FAILURES,
    metrics_request,
    metrics_transport_failure,
)


def test_sanitize_redacts_credentials():
    payload = {
        "SecurityCredential": "abc==",
        "Amount": 100,
        "nested": {"access_token": "tok", "PartyA": "600496"},
    }

    sanitized = sanitize_for_logging(payload)

    assert sanitized["SecurityCredential"] == "***REDACTED***"
    assert sanitized["Amount"] == 100
    assert sanitized["nested"]["access_token"] == "***REDACTED***"
    assert sanitized["nested"]["PartyA"] == "600496"
    assert payload["SecurityCredential"] == "abc=="


def test_sanitize_passes_non_dicts_through():
    assert sanitize_for_logging(["a"]) == ["a"]


def test_json_formatter():
    record = logging.LogRecord(
        "mpesa_sdk.client", logging.INFO, __file__, 1, "b2c %s", ("accepted",), None
    )
    record.endpoint = "b2c"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["name"] == "mpesa_sdk.client"
    assert payload["level"] == "INFO"
    assert payload["msg"] == "b2c accepted"
    assert payload["endpoint"] == "b2c"


def test_setup_structured_logger():
    setup_structured_logger(logging.DEBUG)
    sdk_logger = logging.getLogger("mpesa_sdk")

    try:
        assert sdk_logger.level == logging.DEBUG
        assert isinstance(sdk_logger.handlers[0].formatter, JsonFormatter)
        assert sdk_logger.propagate is False
    finally:
        sdk_logger.handlers = []
        sdk_logger.propagate = True
        sdk_logger.setLevel(logging.NOTSET)


def test_debug_log_never_contains_credential(client, caplog):
    with Mocker() as m:
        m.get(
            "https://sandbox.safaricom.co.ke/oauth/v1/generate",
            json={"access_token": "tok_abc"},
        )
        m.post(
            "https://sandbox.safaricom.co.ke/mpesa/accountbalance/v1/query",
            json={"ResponseCode": "0"},
        )

        with caplog.at_level(logging.DEBUG, logger="mpesa_sdk"):
            client.account_balance(
                party_a="600496",
                remarks="none",
                initiator_name="collins",
                queue_timeout_url="https://example.com/timeout",
                result_url="https://example.com/result",
            )

        credential = m.last_request.json()["SecurityCredential"]

    assert "***REDACTED***" in caplog.text
    assert credential not in caplog.text


def test_metrics_request_counts():
    before = REQUEST_COUNT.labels(endpoint="unit_test", code="200")._value.get()

    metrics_request("unit_test", 200, 0.01)

    assert REQUEST_COUNT.labels(endpoint="unit_test", code="200")._value.get() == before + 1


def test_transport_failures_are_counted_by_kind():
    timeout = TRANSPORT_FAILURES.labels(endpoint="unit_test", kind="timeout")
    network = TRANSPORT_FAILURES.labels(endpoint="unit_test", kind="network")
    before = (timeout._value.get(), network._value.get())

    metrics_transport_failure("unit_test", MpesaTimeoutError("slow"), 0.5)
    metrics_transport_failure("unit_test", TransportError("reset"), 0.1)

    assert (timeout._value.get(), network._value.get()) == (before[0] + 1, before[1] + 1)


def test_rejected_acknowledgement_is_counted(client):
    rejections = REJECTIONS.labels(endpoint="c2b_simulate", response_code="1")
    before = rejections._value.get()

    with Mocker() as m:
        m.get(
            "https://sandbox.safaricom.co.ke/oauth/v1/generate",
            json={"access_token": "tok_abc"},
        )
        m.post(
            "https://sandbox.safaricom.co.ke/mpesa/c2b/v1/simulate",
            json={"ResponseCode": "1", "ResponseDescription": "Rejected"},
        )

        client.c2b_simulate(amount=1, msisdn="254705583540", short_code="600496")

    assert rejections._value.get() == before + 1
