# src/coinsms/schemas/admin.py
"""Administrative request/response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .account import ProfileResponse


class AdminUsersResponse(BaseModel):
    users: list[ProfileResponse]


class AddCreditsRequest(BaseModel):
    """Coin adjustment for one account, addressed by id or e-mail."""

    user_id: str | None = Field(None, alias="userId")
    email: str | None = None
    amount: int = Field(..., description="Coins to add; negative to subtract")
    package_name: str | None = Field(None, alias="packageName")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _check_target(self) -> "AddCreditsRequest":
        if not self.user_id and not self.email:
            raise ValueError("Missing required fields: userId or email, and amount")
        if self.amount == 0:
            raise ValueError("Invalid amount")
        return self


class AddCreditsResponse(BaseModel):
    success: bool = True
    new_balance: int = Field(..., serialization_alias="newBalance")
    message: str


class BanRequest(BaseModel):
    banned: bool


class BanResponse(BaseModel):
    success: bool = True
    banned: bool
    message: str


class GatewayBalanceResponse(BaseModel):
    """Balance of the operator's gateway account."""

    balance: float
    currency: str = "USD"
    status: str
    message: str | None = None
    raw: dict[str, Any] | None = None


class CountryRate(BaseModel):
    country: str
    country_code: str
    min_price: float
    operators: int


class RateStats(BaseModel):
    total_countries: int = Field(..., serialization_alias="totalCountries")
    total_operators: int = Field(..., serialization_alias="totalOperators")
    avg_price: float = Field(..., serialization_alias="avgPrice")
    min_price: float | None = Field(None, serialization_alias="minPrice")
    max_price: float | None = Field(None, serialization_alias="maxPrice")


class RatesReport(BaseModel):
    """Provider rate sheet summarized per country."""

    countries: list[CountryRate]
    stats: RateStats
    total_records: int = Field(..., serialization_alias="totalRecords")
