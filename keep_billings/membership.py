"""Operator slot accounting across a cohort snapshot"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from keep_billings.models.cohort import Cohort


@dataclass(frozen=True)
class SlotCounts:
    """Operator slots held in active and inactive cohorts"""
    active: int
    inactive: int

    @property
    def total(self) -> int:
        return self.active + self.inactive


@dataclass(frozen=True)
class ActiveCohortSlots:
    """Slots an operator holds in one active cohort, ascending"""
    cohort: Cohort
    slots: List[int]


class MembershipAccountant:
    """Counts the slots an operator holds; addresses compare case-insensitively"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def cohort_slots(cohort: Cohort, operator: str) -> List[int]:
        """Slot indices held by the operator within a single cohort"""
        operator_address = operator.lower()
        return sorted(
            slot for slot, address in cohort.members
            if address.lower() == operator_address
        )

    def count_slots(self, cohorts: Iterable[Cohort], operator: str) -> SlotCounts:
        """Count every slot held by the operator, split by cohort activity"""
        active = 0
        inactive = 0

        for cohort in cohorts:
            slots = len(self.cohort_slots(cohort, operator))
            if cohort.is_active:
                active += slots
            else:
                inactive += slots

        self.logger.debug(f"Operator {operator} holds {active} active and {inactive} inactive slots")
        return SlotCounts(active=active, inactive=inactive)

    def active_summary(self, cohorts: Iterable[Cohort], operator: str) -> List[ActiveCohortSlots]:
        """
        Matching slots for every active cohort, in cohort index order.

        Cohorts where the operator holds no slot are included with an
        empty slot list.
        """
        return [
            ActiveCohortSlots(cohort=cohort, slots=self.cohort_slots(cohort, operator))
            for cohort in sorted(cohorts, key=lambda c: c.index)
            if cohort.is_active
        ]
