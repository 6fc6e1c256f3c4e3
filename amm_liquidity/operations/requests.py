"""Request-scoped value objects for liquidity flows"""

from fractions import Fraction
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .quotes import validate_tolerance


class _Request(BaseModel):
    """Immutable, validated on construction. Amounts are strict ints in base units."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    recipient: str = Field(..., min_length=1)
    deadline: int = Field(..., gt=0, strict=True, description="Unix timestamp")


class _Tolerant(_Request):
    tolerance: Fraction

    @field_validator("tolerance", mode="before")
    @classmethod
    def normalise_tolerance(cls, v):
        """Exact Fraction in [0, 1); InvalidToleranceError otherwise"""
        return validate_tolerance(v)


def _require_distinct(token_a, token_b):
    if token_a.lower() == token_b.lower():
        raise ValueError(f"Pair tokens must differ, got {token_a} twice")


class LiquidityRequest(_Tolerant):
    """Token/token liquidity addition"""

    token_a: str = Field(..., min_length=1)
    token_b: str = Field(..., min_length=1)
    amount_a_desired: int = Field(..., gt=0, strict=True)
    amount_b_desired: int = Field(..., gt=0, strict=True)

    @model_validator(mode="after")
    def distinct_tokens(self):
        _require_distinct(self.token_a, self.token_b)
        return self


class NativeLiquidityRequest(_Tolerant):
    """
    Token/native liquidity addition.

    amount_native_desired is attached as transaction value; the native leg's
    floor is min_native_amount, supplied by the caller rather than derived.
    """

    token: str = Field(..., min_length=1)
    amount_token_desired: int = Field(..., gt=0, strict=True)
    amount_native_desired: int = Field(..., gt=0, strict=True)
    min_native_amount: int = Field(..., ge=0, strict=True)

    @model_validator(mode="after")
    def native_floor_within_value(self):
        if self.min_native_amount > self.amount_native_desired:
            raise ValueError(
                f"min_native_amount {self.min_native_amount} exceeds attached "
                f"value {self.amount_native_desired}"
            )
        return self


class WithdrawalRequest(_Request):
    """Liquidity removal; token_b is the wrapped native token for native removals"""

    token_a: str = Field(..., min_length=1)
    token_b: str = Field(..., min_length=1)
    liquidity_desired: int = Field(..., gt=0, strict=True)
    min_a: int = Field(0, ge=0, strict=True)
    min_b: int = Field(0, ge=0, strict=True)

    @model_validator(mode="after")
    def distinct_tokens(self):
        _require_distinct(self.token_a, self.token_b)
        return self


class BalanceSnapshot(BaseModel):
    """Liquidity-token balance of `owner` at one point in time. Never persisted."""

    model_config = ConfigDict(frozen=True)

    pair: str
    owner: str
    balance: int = Field(..., ge=0)
    block_number: Optional[int] = None
