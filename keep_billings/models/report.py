"""Report records handed to the document renderer"""
from typing import List, Optional

from pydantic import BaseModel

from keep_billings.models.customer import Customer


class TransactionEntry(BaseModel):
    """An outbound operator transaction with its gas cost"""
    block: int
    hash: str
    method: str = ""
    gas_price: str  # gwei, 9 fractional digits
    gas_used: int
    fee: str  # ETH, 9 fractional digits


class CohortSummary(BaseModel):
    """Operator slots held in one active cohort"""
    cohort: str
    slots: str


class Report(BaseModel):
    """
    Billing report common to both report types.

    Amounts are fixed-precision decimal text: stake has no fractional
    digits, balances and shares have 6.

    Attributes:
        accumulated_rewards: Unclaimed ETH rewards attributable to the operator
        operational_costs: initial minus current operator balance, only when
            the customer declares an initial operator balance
        anomaly: Name of the recoverable condition that clamped coin shares
    """
    customer: Customer
    stake: str
    operator_balance: str
    beneficiary_eth_balance: str
    beneficiary_keep_balance: str
    accumulated_rewards: str
    operational_costs: Optional[str] = None

    customer_eth_share: str
    provider_eth_share: str
    customer_keep_share: str
    provider_keep_share: str
    anomaly: Optional[str] = None

    from_block: Optional[int] = None
    to_block: Optional[int] = None
    transactions: List[TransactionEntry] = []


class BeaconReport(Report):
    """Report for random beacon operators (consensus groups)"""
    groups_count: int
    active_groups_count: int
    active_groups_members_count: int
    inactive_groups_members_count: int
    active_groups_summary: List[CohortSummary] = []


class EcdsaReport(Report):
    """Report for ECDSA keep members (signing keeps)"""
    beneficiary_tbtc_balance: str
    keeps_count: int
    active_keeps_count: int
    active_keeps_members_count: int
    inactive_keeps_members_count: int
    active_keeps_summary: List[str] = []
