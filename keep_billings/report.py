"""Billing report generation"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from keep_billings.cohorts import CohortIndexBuilder
from keep_billings.membership import MembershipAccountant
from keep_billings.models.cohort import Cohort, CohortKind
from keep_billings.models.customer import Customer
from keep_billings.models.report import BeaconReport, CohortSummary, EcdsaReport, TransactionEntry
from keep_billings.numeric import (
    AMOUNT_PLACES,
    GAS_PLACES,
    STAKE_PLACES,
    format_amount,
    wei_to_eth,
    wei_to_gwei,
)
from keep_billings.rewards import RewardAccumulator
from keep_billings.split import Anomaly, SplitCalculator


class ReportGenerator:
    """
    Shared report logic for one batch run.

    `fetch_common_data` builds the cohort snapshot once; every following
    `generate` call reads the same snapshot. A data source error raised while
    generating one customer's report aborts that report only.
    """

    kind: CohortKind

    def __init__(
            self,
            data_source,
            from_block: Optional[int] = None,
            to_block: Optional[int] = None,
            logger: Optional[logging.Logger] = None
    ):
        self.data_source = data_source
        self.from_block = from_block
        self.to_block = to_block
        self.logger = logger or logging.getLogger(__name__)

        self.accountant = MembershipAccountant(logger=self.logger)
        self.accumulator = RewardAccumulator(data_source, self.accountant, logger=self.logger)
        self.calculator = SplitCalculator(logger=self.logger)

        self.cohorts: Optional[Tuple[Cohort, ...]] = None

    def fetch_common_data(self) -> None:
        """Build the cohort snapshot shared by every report of the run"""
        self.cohorts = CohortIndexBuilder(self.data_source, self.kind, logger=self.logger).build()

    def _snapshot(self) -> Tuple[Cohort, ...]:
        if self.cohorts is None:
            raise RuntimeError("Cohorts not fetched. Call fetch_common_data() first.")
        return self.cohorts

    def _base_fields(self, customer: Customer) -> Dict[str, Any]:
        """Balances, accumulated rewards and shares common to both report types"""
        source = self.data_source
        cohorts = self._snapshot()

        stake = source.stake(customer.operator)
        operator_balance = source.eth_balance(customer.operator)
        beneficiary_eth_balance = source.eth_balance(customer.beneficiary)
        beneficiary_keep_balance = source.keep_balance(customer.beneficiary)
        accumulated_rewards = self.accumulator.accumulate(cohorts, customer.operator)

        operational_costs = None
        if customer.initial_operator_balance is not None:
            operational_costs = customer.initial_operator_balance - operator_balance

        eth_split = self.calculator.split_coin(
            customer.share_percentage,
            beneficiary_eth_balance,
            accumulated_rewards,
            operational_costs
        )
        keep_split = self.calculator.split_token(
            customer.share_percentage,
            beneficiary_keep_balance
        )

        if eth_split.anomaly == Anomaly.NEGATIVE_OPERATIONAL_COSTS:
            operational_costs = Decimal(0)

        fields = {
            'customer': customer,
            'stake': format_amount(stake, STAKE_PLACES),
            'operator_balance': format_amount(operator_balance, AMOUNT_PLACES),
            'beneficiary_eth_balance': format_amount(beneficiary_eth_balance, AMOUNT_PLACES),
            'beneficiary_keep_balance': format_amount(beneficiary_keep_balance, AMOUNT_PLACES),
            'accumulated_rewards': format_amount(accumulated_rewards, AMOUNT_PLACES),
            'operational_costs': (
                format_amount(operational_costs, AMOUNT_PLACES)
                if operational_costs is not None else None
            ),
            'customer_eth_share': format_amount(eth_split.customer_share, AMOUNT_PLACES),
            'provider_eth_share': format_amount(eth_split.provider_share, AMOUNT_PLACES),
            'customer_keep_share': format_amount(keep_split.customer_share, AMOUNT_PLACES),
            'provider_keep_share': format_amount(keep_split.provider_share, AMOUNT_PLACES),
            'anomaly': eth_split.anomaly.value if eth_split.anomaly else None,
        }

        if self.from_block is not None and self.to_block is not None:
            fields['from_block'] = self.from_block
            fields['to_block'] = self.to_block
            fields['transactions'] = self._transactions(customer.operator)

        return fields

    def _transactions(self, operator: str) -> List[TransactionEntry]:
        """Outbound operator transactions in the configured block range with their gas cost"""
        source = self.data_source
        blocks = source.outbound_transactions(operator, self.from_block, self.to_block)

        entries = []
        for block_number in sorted(blocks):
            for tx_hash in blocks[block_number]:
                gas_price = source.transaction_gas_price(tx_hash)
                gas_used = source.transaction_gas_used(tx_hash)
                entries.append(TransactionEntry(
                    block=block_number,
                    hash=tx_hash,
                    method=source.transaction_method(tx_hash),
                    gas_price=format_amount(wei_to_gwei(gas_price), GAS_PLACES),
                    gas_used=gas_used,
                    fee=format_amount(wei_to_eth(gas_price * gas_used), GAS_PLACES)
                ))

        return entries


class BeaconReportGenerator(ReportGenerator):
    """Reports for random beacon operators"""

    kind = CohortKind.CONSENSUS_GROUP

    def generate(self, customer: Customer) -> BeaconReport:
        fields = self._base_fields(customer)
        cohorts = self._snapshot()

        slot_counts = self.accountant.count_slots(cohorts, customer.operator)
        summary = [
            CohortSummary(
                cohort=entry.cohort.label,
                slots=", ".join(str(slot) for slot in entry.slots) or "No members"
            )
            for entry in self.accountant.active_summary(cohorts, customer.operator)
        ]

        return BeaconReport(
            **fields,
            groups_count=len(cohorts),
            active_groups_count=sum(1 for cohort in cohorts if cohort.is_active),
            active_groups_members_count=slot_counts.active,
            inactive_groups_members_count=slot_counts.inactive,
            active_groups_summary=summary
        )


class EcdsaReportGenerator(ReportGenerator):
    """Reports for ECDSA keep members"""

    kind = CohortKind.SIGNING_KEEP

    def generate(self, customer: Customer) -> EcdsaReport:
        fields = self._base_fields(customer)
        cohorts = self._snapshot()

        beneficiary_tbtc_balance = self.data_source.tbtc_balance(customer.beneficiary)
        slot_counts = self.accountant.count_slots(cohorts, customer.operator)

        # One entry per held slot
        summary = [
            entry.cohort.label
            for entry in self.accountant.active_summary(cohorts, customer.operator)
            for _ in entry.slots
        ]

        return EcdsaReport(
            **fields,
            beneficiary_tbtc_balance=format_amount(beneficiary_tbtc_balance, AMOUNT_PLACES),
            keeps_count=len(cohorts),
            active_keeps_count=sum(1 for cohort in cohorts if cohort.is_active),
            active_keeps_members_count=slot_counts.active,
            inactive_keeps_members_count=slot_counts.inactive,
            active_keeps_summary=summary
        )


def create_generator(report_type: str, data_source, **kwargs) -> ReportGenerator:
    """Report generator for a configured report type"""
    if report_type == "beacon":
        return BeaconReportGenerator(data_source, **kwargs)
    elif report_type == "ecdsa":
        return EcdsaReportGenerator(data_source, **kwargs)
    raise ValueError(f"Unsupported report type: {report_type}")
