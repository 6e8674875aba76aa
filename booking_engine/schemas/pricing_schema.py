"""Price and fee value types. Derived and stateless; never persisted by the engine."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class PricingMode(str, Enum):
    DAILY = "daily"
    HOURLY = "hourly"


class PriceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: float = 0
    breakdown: str = ""


class FeeBreakdown(BaseModel):
    """Fee split for a rental. All amounts in dollars, cent-rounded."""

    model_config = ConfigDict(frozen=True)

    subtotal: float
    renter_fee: float
    host_fee: float
    customer_total: float
    seller_payout: float
    deposit: float = 0

    @property
    def platform_fee(self) -> float:
        return round(self.renter_fee + self.host_fee, 2)


class RentalQuote(BaseModel):
    """What the checkout summary shows for the current selection."""

    model_config = ConfigDict(frozen=True)

    mode: PricingMode
    duration: int
    duration_label: str
    base_price: float
    breakdown: str
    service_fee: float
    total_with_fees: float
    fees: FeeBreakdown

    @property
    def is_payable(self) -> bool:
        return self.base_price > 0
