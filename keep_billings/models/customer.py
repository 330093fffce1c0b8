"""Customer model loaded from the customers file"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    """
    A staking customer whose operator rewards are attributed.

    Field aliases follow the customers file layout:
        Name, Operator, Beneficiary, CustomerSharePercentage,
        InitialOperatorEthBalance (optional, in ETH)
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., alias="Name")
    operator: str = Field(..., alias="Operator")
    beneficiary: str = Field(..., alias="Beneficiary")
    share_percentage: int = Field(..., alias="CustomerSharePercentage", ge=0, le=100)
    initial_operator_balance: Optional[Decimal] = Field(None, alias="InitialOperatorEthBalance")
