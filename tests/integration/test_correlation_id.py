"""Correlation id propagation."""

import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


def test_returns_provided_request_id(client):
    custom_id = "my-custom-request-id-123"
    response = client.get("/health", HTTP_X_REQUEST_ID=custom_id)
    assert response["X-Request-ID"] == custom_id


def test_generates_uuid_when_no_request_id(client):
    request_id = client.get("/health")["X-Request-ID"]
    assert str(uuid.UUID(request_id, version=4)) == request_id


def test_api_responses_carry_request_id(api_client_with_correlation):
    client, cid = api_client_with_correlation
    response = client.get("/api/v1/cart/")
    assert response.status_code == 401
    assert response["X-Request-ID"] == cid


def test_correlation_id_reaches_service_logs(customer_client, make_product, caplog):
    custom_id = "checkout-correlation-789"
    product = make_product()
    with caplog.at_level(logging.INFO):
        customer_client.post(
            "/api/v1/cart/items/",
            {"product_id": str(product.id)},
            format="json",
            HTTP_X_REQUEST_ID=custom_id,
        )
    service_records = [
        record for record in caplog.records if record.name == "modules.carts.services"
    ]
    assert service_records
    assert all(custom_id in record.getMessage() for record in service_records)
