"""Accumulation of unclaimed operator rewards"""
import logging
from decimal import Decimal
from typing import Iterable, Optional

from keep_billings.membership import MembershipAccountant
from keep_billings.models.cohort import Cohort, CohortKind
from keep_billings.numeric import wei_to_eth


class RewardAccumulator:
    """
    Sums the rewards an operator can still claim across a cohort snapshot.

    Beacon groups pay a fixed reward per member slot until the operator
    withdraws it, so each group not yet withdrawn contributes
    `member reward * operator slots`. ECDSA keeps hold a per-member ETH
    balance which is added for every keep the operator belongs to.

    The sum is kept in wei and converted to ETH once at the end. Data
    source errors are not caught.
    """

    def __init__(
            self,
            data_source,
            accountant: Optional[MembershipAccountant] = None,
            logger: Optional[logging.Logger] = None
    ):
        self.data_source = data_source
        self.accountant = accountant or MembershipAccountant()
        self.logger = logger or logging.getLogger(__name__)

    def accumulate(self, cohorts: Iterable[Cohort], operator: str) -> Decimal:
        """Total unclaimed rewards of the operator in ETH"""
        total_wei = 0

        for cohort in cohorts:
            if cohort.kind == CohortKind.CONSENSUS_GROUP:
                total_wei += self._group_rewards_wei(cohort, operator)
            elif cohort.kind == CohortKind.SIGNING_KEEP:
                total_wei += self._keep_rewards_wei(cohort, operator)
            else:
                raise ValueError(f"Unsupported cohort kind: {cohort.kind}")

        self.logger.debug(f"Accumulated {total_wei} wei of rewards for {operator}")
        return wei_to_eth(total_wei)

    def _group_rewards_wei(self, cohort: Cohort, operator: str) -> int:
        if self.data_source.rewards_withdrawn(operator, cohort.index):
            return 0

        member_rewards = self.data_source.group_member_rewards(cohort.identifier)
        return member_rewards * len(self.accountant.cohort_slots(cohort, operator))

    def _keep_rewards_wei(self, cohort: Cohort, operator: str) -> int:
        if not cohort.has_member(operator):
            return 0

        return self.data_source.keep_member_balance(cohort.identifier, operator)
