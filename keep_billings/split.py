"""Customer and provider shares of rewards and balances"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from keep_billings.numeric import to_decimal

Number = Union[Decimal, int, float, str]

ZERO = Decimal(0)
HUNDRED = Decimal(100)


class Anomaly(Enum):
    """Recoverable conditions that force coin shares to zero"""
    NEGATIVE_OPERATIONAL_COSTS = "negative_operational_costs"
    NEGATIVE_NET_REWARD = "negative_net_reward"


@dataclass(frozen=True)
class SplitResult:
    """Customer and provider parts of one asset class"""
    customer_share: Decimal
    provider_share: Decimal
    anomaly: Optional[Anomaly] = None


class SplitCalculator:
    """
    Applies the customer share percentage to rewards and balances.

    Coin (ETH): the customer gets its percentage of the net accumulated
    rewards plus whatever already sits on the beneficiary account; the
    provider gets the rest of the net rewards.

    Token (KEEP): the beneficiary balance is split as a whole.

    Percentages are applied as `p / 100` on exact decimals. Nothing is
    rounded here.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def _fraction(share_percentage: Number) -> Decimal:
        percentage = to_decimal(share_percentage)
        if percentage < ZERO or percentage > HUNDRED:
            raise ValueError(f"Share percentage must be within [0, 100], got {share_percentage}")
        return percentage / HUNDRED

    def split_coin(
            self,
            share_percentage: Number,
            beneficiary_balance: Number,
            accumulated_reward: Number,
            operational_costs: Optional[Number] = None
    ) -> SplitResult:
        """
        Split accumulated coin rewards between customer and provider.

        Args:
            share_percentage: Customer share, 0 to 100
            beneficiary_balance: Live beneficiary balance, credited to the customer
            accumulated_reward: Unclaimed rewards
            operational_costs: Operator spending deducted from the rewards first

        Returns:
            SplitResult, with both shares zeroed and an anomaly set when the
            operational costs or the net reward are negative
        """
        fraction = self._fraction(share_percentage)
        beneficiary_balance = to_decimal(beneficiary_balance)
        net_reward = to_decimal(accumulated_reward)

        if operational_costs is not None:
            operational_costs = to_decimal(operational_costs)
            if operational_costs < ZERO:
                self.logger.error(
                    f"Operational costs are negative ({operational_costs}); "
                    f"the operator account received external funds, ETH shares set to 0"
                )
                return SplitResult(ZERO, ZERO, Anomaly.NEGATIVE_OPERATIONAL_COSTS)
            net_reward -= operational_costs

        if net_reward < ZERO:
            self.logger.warning(
                f"Net reward is negative ({net_reward}); "
                f"operational costs exceed rewards, ETH shares set to 0"
            )
            return SplitResult(ZERO, ZERO, Anomaly.NEGATIVE_NET_REWARD)

        customer_accumulated_share = net_reward * fraction
        return SplitResult(
            customer_share=customer_accumulated_share + beneficiary_balance,
            provider_share=net_reward - customer_accumulated_share
        )

    def split_token(self, share_percentage: Number, balance: Number) -> SplitResult:
        """Split a whole token balance between customer and provider"""
        balance = to_decimal(balance)
        customer_share = balance * self._fraction(share_percentage)
        return SplitResult(
            customer_share=customer_share,
            provider_share=balance - customer_share
        )
