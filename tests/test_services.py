import asyncio
import os
import sys
from unittest.mock import AsyncMock

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from glass_pricing.config import Settings
from glass_pricing.schemas.catalog import (
    CuttingRate,
    OperationPriceActiveRequest,
    OperationPriceCreateRequest,
    RateCreateRequest,
)
from glass_pricing.schemas.pricing import (
    GlassLine,
    InvoicePricingRequest,
    LinePricingRequest,
    OperationRequest,
    PaymentRequest,
    PricedLine,
    RemainingBalanceRequest,
)
from glass_pricing.services import CatalogService, InvoicePricingService
from glass_pricing.services.catalog_store import get_catalog_store, reset_catalog_store
from glass_pricing.services.exceptions import (
    CatalogConflictError,
    InvalidDimensionError,
    InvalidOperationError,
    InvalidPaymentError,
    PriceCatalogMissError,
    RateTableError,
    ServiceError,
)


TENANT = "glass-house"
OTHER_TENANT = "mirror-works"


@pytest.fixture(autouse=True)
def _reset_store() -> None:
    reset_catalog_store()
    yield
    reset_catalog_store()


class MockLatencyClient:
    """Client stub that records simulate_latency calls."""

    def __init__(self) -> None:
        self.use_mock_data = True
        self.latency_called = False

    async def simulate_latency(self) -> None:
        self.latency_called = True


def _remote_client(rates=None, prices=None):
    async def fake_get(path, params=None):
        if path == "/cutting-rates":
            return rates if rates is not None else []
        return prices if prices is not None else []

    return type(
        "ClientStub",
        (),
        {
            "use_mock_data": False,
            "get": AsyncMock(side_effect=fake_get),
            "post": AsyncMock(),
        },
    )()


def _shataf_line(**overrides) -> GlassLine:
    values = dict(
        width=200,
        height=150,
        dimension_unit="CM",
        thickness=6,
        operations=[OperationRequest(operation_type="SHATAF", shataf_type="KHARZAN")],
    )
    values.update(overrides)
    return GlassLine(**values)


def test_mock_catalog_seeds_default_rates_per_tenant() -> None:
    client = MockLatencyClient()
    service = CatalogService(client)

    response = asyncio.run(service.list_rates(TENANT))

    assert client.latency_called is True
    assert response.tenant_id == TENANT
    assert response.total == 16

    asyncio.run(
        service.add_rate(
            RateCreateRequest(
                tenant_id=TENANT,
                cutting_type="POLISH",
                min_thickness=0,
                max_thickness=50,
                rate_per_meter=12,
            )
        )
    )
    assert asyncio.run(service.list_rates(TENANT)).total == 17
    assert asyncio.run(service.list_rates(OTHER_TENANT)).total == 16


def test_mock_catalog_refuses_overlapping_rate() -> None:
    service = CatalogService(MockLatencyClient())
    request = RateCreateRequest(tenant_id=TENANT, min_thickness=5.5, max_thickness=7, rate_per_meter=12)

    with pytest.raises(RateTableError):
        asyncio.run(service.add_rate(request))
    assert asyncio.run(service.list_rates(TENANT)).total == 16


def test_mock_operation_prices_round_trip_through_store() -> None:
    service = CatalogService(MockLatencyClient())

    created = asyncio.run(
        service.create_operation_price(
            OperationPriceCreateRequest(
                tenant_id=TENANT,
                operation_type="LASER",
                subtype=" logo ",
                base_price=40,
                name="Logo engraving",
            )
        )
    )
    assert created.subtype == "LOGO"
    assert created.active is True

    disabled = asyncio.run(
        service.set_operation_price_active(
            OperationPriceActiveRequest(
                tenant_id=TENANT, operation_type="LASER", subtype="logo", active=False
            )
        )
    )
    assert disabled.active is False

    snapshot = asyncio.run(service.get_snapshot(TENANT))
    assert len(snapshot.rates) == 16
    assert [price.active for price in snapshot.operation_prices] == [False]
    assert snapshot.fetched_at


def test_toggling_unknown_operation_price_fails() -> None:
    service = CatalogService(MockLatencyClient())
    request = OperationPriceActiveRequest(
        tenant_id=TENANT, operation_type="FARMA", subtype="HOLE", active=False
    )
    with pytest.raises(PriceCatalogMissError):
        asyncio.run(service.set_operation_price_active(request))


def test_snapshots_are_copies() -> None:
    service = CatalogService(MockLatencyClient())
    snapshot = asyncio.run(service.get_snapshot(TENANT))
    snapshot.rates[0].rate_per_meter = 1000

    stored = asyncio.run(get_catalog_store().rates.list(TENANT))
    assert stored[0].rate_per_meter == 5


def test_remote_snapshot_reads_camel_case_rows() -> None:
    client = _remote_client(
        rates=[{"cuttingType": "SHATF", "minThickness": 0, "maxThickness": 50, "ratePerMeter": 10}],
        prices={"items": [{"operationType": "FARMA", "subtype": "HOLE", "basePrice": 12.5}]},
    )
    service = CatalogService(client)

    snapshot = asyncio.run(service.get_snapshot(TENANT))

    client.get.assert_any_await("/cutting-rates", {"tenantId": TENANT})
    client.get.assert_any_await("/operation-prices", {"tenantId": TENANT})
    assert snapshot.rates[0].rate_per_meter == 10
    assert snapshot.operation_prices[0].base_price == 12.5


def test_remote_snapshot_rejects_malformed_rows() -> None:
    client = _remote_client(rates=[{"minThickness": "thick"}])
    service = CatalogService(client)

    with pytest.raises(ServiceError):
        asyncio.run(service.get_snapshot(TENANT))


def test_remote_add_rate_checks_overlap_before_posting() -> None:
    rows = [{"cuttingType": "SHATF", "minThickness": 0, "maxThickness": 50, "ratePerMeter": 10}]
    client = _remote_client(rates=rows)
    service = CatalogService(client)

    with pytest.raises(RateTableError):
        asyncio.run(
            service.add_rate(
                RateCreateRequest(tenant_id=TENANT, min_thickness=4, max_thickness=6, rate_per_meter=9)
            )
        )
    client.post.assert_not_awaited()


def test_remote_create_operation_price_invokes_client_post() -> None:
    client = _remote_client()
    client.post = AsyncMock(
        return_value={"operationType": "LASER", "subtype": "LOGO", "basePrice": 40, "active": True}
    )
    service = CatalogService(client)
    request = OperationPriceCreateRequest(
        tenant_id=TENANT, operation_type="LASER", subtype="LOGO", base_price=40
    )

    response = asyncio.run(service.create_operation_price(request))

    client.post.assert_awaited_once()
    path, payload = client.post.await_args.args
    assert path == "/operation-prices"
    assert payload["tenantId"] == TENANT
    assert payload["subtype"] == "LOGO"
    assert response.base_price == 40


def test_invoice_service_prices_reference_scenario() -> None:
    service = InvoicePricingService(CatalogService(MockLatencyClient()), Settings())
    request = InvoicePricingRequest(
        tenant_id=TENANT,
        lines=[PricedLine(glass_line=_shataf_line(), price_per_meter=100)],
        amount_paid_now=200,
    )

    response = asyncio.run(service.price_invoice(request))

    assert response.total_price == 377.0
    assert response.line_count == 1
    assert response.remaining_balance == 177.0
    assert response.status == "PARTIALLY_PAID"
    assert response.display == {
        "total_price": "377.00 ج.م",
        "tax": "0.00",
        "amount_paid_now": "200.00 ج.م",
        "remaining_balance": "177.00 ج.م",
    }


def test_invoice_service_reports_failing_line() -> None:
    service = InvoicePricingService(CatalogService(MockLatencyClient()), Settings())
    request = InvoicePricingRequest(
        tenant_id=TENANT,
        lines=[
            PricedLine(glass_line=_shataf_line(), price_per_meter=100),
            PricedLine(
                glass_line=_shataf_line(
                    operations=[
                        OperationRequest(operation_type="SHATAF", calculation_method="ZIGZAG")
                    ]
                ),
                price_per_meter=100,
            ),
        ],
    )

    with pytest.raises(InvalidOperationError) as excinfo:
        asyncio.run(service.price_invoice(request))
    assert excinfo.value.line_index == 1


def test_mock_tenant_prices_thick_glass_and_sanding_from_defaults() -> None:
    service = InvoicePricingService(CatalogService(MockLatencyClient()), Settings())
    sanding = OperationRequest(operation_type="SHATAF", shataf_type="SANDING")
    request = InvoicePricingRequest(
        tenant_id=TENANT,
        lines=[
            PricedLine(glass_line=_shataf_line(thickness=60), price_per_meter=0),
            PricedLine(glass_line=_shataf_line(operations=[sanding]), price_per_meter=0),
        ],
    )

    response = asyncio.run(service.price_invoice(request))

    # 7 m of edge at the 12.1-50 band rate, then 3 m2 of sanding at 20
    assert response.lines[0].cutting_price == pytest.approx(126.0)
    assert response.lines[1].cutting_price == pytest.approx(60.0)


def test_invoice_service_requires_lines() -> None:
    service = InvoicePricingService(CatalogService(MockLatencyClient()), Settings())
    with pytest.raises(ServiceError):
        asyncio.run(service.price_invoice(InvoicePricingRequest(tenant_id=TENANT, lines=[])))


def test_inline_snapshot_skips_catalog_fetch() -> None:
    client = _remote_client()
    service = InvoicePricingService(CatalogService(client), Settings())
    request = LinePricingRequest(
        glass_line=_shataf_line(),
        price_per_meter=100,
        rates=[CuttingRate(min_thickness=0, max_thickness=50, rate_per_meter=10)],
        operation_prices=[],
    )

    response = asyncio.run(service.price_line(request))

    client.get.assert_not_awaited()
    assert response.totals.cutting_price == 70.0
    assert response.display["line_total"] == "370.00 ج.م"
    assert response.display["area_m2"] == "3.000"
    assert response.display["dimensions"] == "200 x 150 cm"


def test_missing_unit_uses_configured_default() -> None:
    settings = Settings(default_dimension_unit="mm")
    service = InvoicePricingService(CatalogService(MockLatencyClient()), settings)
    request = LinePricingRequest(
        tenant_id=TENANT,
        glass_line=GlassLine(width=2000, height=1500, thickness=6),
        price_per_meter=100,
    )

    response = asyncio.run(service.price_line(request))
    assert response.totals.area_m2 == 3.0
    assert response.display["dimensions"] == "2000 x 1500 mm"


def test_settings_size_limits_apply() -> None:
    service = InvoicePricingService(CatalogService(MockLatencyClient()), Settings(max_width_m=2))
    request = LinePricingRequest(
        tenant_id=TENANT,
        glass_line=GlassLine(width=250, height=100, thickness=4),
        price_per_meter=10,
    )
    with pytest.raises(InvalidDimensionError):
        asyncio.run(service.price_line(request))


def test_lenient_catalog_setting_prices_missing_operation_at_zero() -> None:
    service = InvoicePricingService(
        CatalogService(MockLatencyClient()), Settings(strict_catalog=False)
    )
    request = LinePricingRequest(
        tenant_id=TENANT,
        glass_line=GlassLine(
            width=100,
            height=100,
            thickness=4,
            operations=[OperationRequest(operation_type="LASER", subtype="LOGO")],
        ),
        price_per_meter=80,
    )

    response = asyncio.run(service.price_line(request))
    assert response.totals.line_total == 80.0
    assert response.totals.warnings


def test_balance_and_payments_through_service() -> None:
    service = InvoicePricingService(CatalogService(MockLatencyClient()), Settings())

    balance = service.remaining_balance(RemainingBalanceRequest(total_price=100, amount_paid_now=150))
    assert balance.remaining_balance == -50
    assert balance.status == "PAID"

    paid = service.record_payment(PaymentRequest(total_price=377, amount_paid=200, amount=177))
    assert paid.status == "PAID"

    reopened = service.reverse_payment(PaymentRequest(total_price=377, amount_paid=377, amount=177))
    assert reopened.status == "PARTIALLY_PAID"

    with pytest.raises(InvalidPaymentError):
        service.record_payment(PaymentRequest(total_price=377, amount_paid=0, amount=500))


def test_duplicate_operation_price_is_refused() -> None:
    service = CatalogService(MockLatencyClient())
    request = OperationPriceCreateRequest(
        tenant_id=TENANT, operation_type="FARMA", subtype="hole", base_price=12.5
    )
    asyncio.run(service.create_operation_price(request))

    duplicate = request.model_copy(update={"subtype": "HOLE ", "base_price": 15})
    with pytest.raises(CatalogConflictError):
        asyncio.run(service.create_operation_price(duplicate))

    prices = asyncio.run(service.list_operation_prices(TENANT))
    assert prices.total == 1
    assert prices.items[0].base_price == 12.5
