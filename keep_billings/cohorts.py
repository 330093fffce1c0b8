"""Snapshot of reward-bearing cohorts and their membership"""
import logging
from typing import Dict, List, Optional, Tuple

from keep_billings.models.cohort import Cohort, CohortKind, members_from_addresses


class CohortIndexError(Exception):
    """The data source returned an inconsistent cohort index"""
    pass


class CohortIndexBuilder:
    """
    Fetches every cohort of one kind together with its members.

    Groups are enumerated by index up to the number of created groups and
    are active from the first active group index on. Keeps come from the
    data source already split into active and inactive sets keyed by index.

    The result is an immutable tuple ordered by index. Any fetch error
    aborts the build and is re-raised as is.
    """

    def __init__(self, data_source, kind: CohortKind, logger: Optional[logging.Logger] = None):
        self.data_source = data_source
        self.kind = kind
        self.logger = logger or logging.getLogger(__name__)

    def build(self) -> Tuple[Cohort, ...]:
        """Build the cohort snapshot for this run"""
        if self.kind == CohortKind.CONSENSUS_GROUP:
            cohorts = self._build_groups()
        elif self.kind == CohortKind.SIGNING_KEEP:
            cohorts = self._build_keeps()
        else:
            raise ValueError(f"Unsupported cohort kind: {self.kind}")

        active = sum(1 for cohort in cohorts if cohort.is_active)
        self.logger.info(
            f"Fetched {len(cohorts)} {self.kind.value}s ({active} active)"
        )
        return tuple(cohorts)

    def _build_groups(self) -> List[Cohort]:
        source = self.data_source

        try:
            groups_count = source.groups_count()
        except Exception as e:
            self.logger.error(f"Could not get groups count: {e}")
            raise

        try:
            first_active_index = source.first_active_group_index()
        except Exception as e:
            self.logger.error(f"Could not get first active group index: {e}")
            raise

        groups = []
        for index in range(groups_count):
            try:
                public_key = source.group_public_key(index)
            except Exception as e:
                self.logger.error(f"Could not get public key of group with index {index}: {e}")
                raise

            try:
                members = source.group_members(public_key)
            except Exception as e:
                self.logger.error(f"Could not get members of group with index {index}: {e}")
                raise

            groups.append(Cohort(
                index=index,
                kind=CohortKind.CONSENSUS_GROUP,
                is_active=index >= first_active_index,
                identifier=public_key,
                members=members_from_addresses(members)
            ))

        return groups

    def _build_keeps(self) -> List[Cohort]:
        try:
            active_keeps, inactive_keeps = self.data_source.keeps()
        except Exception as e:
            self.logger.error(f"Could not get keeps: {e}")
            raise

        keeps = []
        for index, address, is_active in self._ordered_partition(active_keeps, inactive_keeps):
            try:
                members = self.data_source.keep_members(address)
            except Exception as e:
                state = "active" if is_active else "inactive"
                self.logger.error(f"Could not get members of {state} keep {address}: {e}")
                raise

            keeps.append(Cohort(
                index=index,
                kind=CohortKind.SIGNING_KEEP,
                is_active=is_active,
                identifier=address,
                members=members_from_addresses(members)
            ))

        return keeps

    @staticmethod
    def _ordered_partition(
            active: Dict[int, str],
            inactive: Dict[int, str]
    ) -> List[Tuple[int, str, bool]]:
        """Merge the two disjoint index-keyed sets into one list sorted by index"""
        overlap = set(active) & set(inactive)
        if overlap:
            raise CohortIndexError(
                f"Keeps reported both active and inactive: {sorted(overlap)}"
            )

        entries = [(index, address, True) for index, address in active.items()]
        entries.extend((index, address, False) for index, address in inactive.items())
        return sorted(entries, key=lambda entry: entry[0])
