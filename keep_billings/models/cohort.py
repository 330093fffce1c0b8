"""Domain models for reward-bearing cohorts (beacon groups and ECDSA keeps)"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union


class CohortKind(Enum):
    """Which reward-bearing unit a cohort is"""
    CONSENSUS_GROUP = "group"
    SIGNING_KEEP = "keep"


@dataclass(frozen=True)
class Cohort:
    """
    One consensus group or signing keep, as seen at snapshot time.

    Members are (slot index, address) pairs with dense zero-based slots.
    An address may occupy several slots.
    """
    index: int
    kind: CohortKind
    is_active: bool
    identifier: Union[bytes, str]  # group public key or keep address
    members: Tuple[Tuple[int, str], ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        """Short human readable identifier used in report summaries"""
        if isinstance(self.identifier, bytes):
            return "0x" + self.identifier.hex()[:32] + "..."
        return self.identifier.lower()

    def has_member(self, address: str) -> bool:
        operator = address.lower()
        return any(member.lower() == operator for _, member in self.members)


def members_from_addresses(addresses) -> Tuple[Tuple[int, str], ...]:
    """Assign dense zero-based slot indices to an ordered member list"""
    return tuple((slot, address) for slot, address in enumerate(addresses))
