"""Integration tests for PV calculation and personal sales totals."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from mlm_system.config.mlm_config import MlmConfiguration, PvCalculation
from mlm_system.services.volume_service import VolumeService

START = datetime(2026, 3, 1, tzinfo=timezone.utc)
END = datetime(2026, 4, 1, tzinfo=timezone.utc)


def at(day, month=3):
    return datetime(2026, month, day, 8, 30, tzinfo=timezone.utc)


class TestCalculatePv:

    def test_percentage_of_amount(self):
        assert VolumeService.calculatePv(Decimal("999.99"), Decimal("10"), MlmConfiguration()) == Decimal("500.00")

    def test_fixed_product_pv(self):
        configuration = MlmConfiguration(pvCalculation=PvCalculation.FIXED)
        assert VolumeService.calculatePv(Decimal("999.99"), Decimal("30"), configuration) == Decimal("30")


class TestPersonalTotals:

    @pytest.mark.asyncio
    async def test_sales_in_period(self, session, make_member, make_product, make_purchase):
        member = make_member()
        product = make_product(price="120.50")
        make_purchase(member, product, quantity=2, createdAt=at(1))
        make_purchase(member, product, createdAt=at(31))
        make_purchase(member, product, createdAt=at(1, month=4))

        sales = await VolumeService(session).personalSales(member.memberID, START, END)

        assert sales == Decimal("361.50")

    @pytest.mark.asyncio
    async def test_cancelled_purchases_excluded(self, session, make_member, make_product, make_purchase):
        member = make_member()
        product = make_product(price="100.00")
        make_purchase(member, product, createdAt=at(5))
        cancelled = make_purchase(member, product, createdAt=at(6))
        cancelled.status = "cancelled"
        session.commit()

        assert await VolumeService(session).personalSales(member.memberID, START, END) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_personal_pv(self, session, make_member, make_product, make_purchase):
        member = make_member()
        purchase = make_purchase(member, make_product(price="100.00"), createdAt=at(5))
        purchase.totalPV = Decimal("45.50")
        session.commit()

        assert await VolumeService(session).personalPV(member.memberID, START, END) == Decimal("45.50")

    @pytest.mark.asyncio
    async def test_no_purchases(self, session, make_member):
        member = make_member()

        assert await VolumeService(session).personalSales(member.memberID, START, END) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_sales_by_member(self, session, make_member, make_product, make_purchase):
        first, second, idle = make_member(), make_member(), make_member()
        product = make_product(price="10.00")
        make_purchase(first, product, quantity=3, createdAt=at(2))
        make_purchase(second, product, createdAt=at(3))
        make_purchase(first, product, createdAt=at(4))

        rows = await VolumeService(session).salesByMember(START, END)

        assert rows == [
            {"memberId": first.memberID, "sales": Decimal("40.00")},
            {"memberId": second.memberID, "sales": Decimal("10.00")},
        ]
