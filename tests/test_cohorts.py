"""
Tests for the cohort snapshot builder.
"""

import dataclasses
import logging
from unittest.mock import Mock

import pytest

from keep_billings.cohorts import CohortIndexBuilder, CohortIndexError
from keep_billings.models.cohort import Cohort, CohortKind, members_from_addresses

from conftest import OPERATOR, OTHER_OPERATOR, FakeBeaconSource, FakeEcdsaSource, group_key


# ============================================================================
# Groups
# ============================================================================

def test_groups_are_built_in_index_order(beacon_source):
    cohorts = CohortIndexBuilder(beacon_source, CohortKind.CONSENSUS_GROUP).build()

    assert isinstance(cohorts, tuple)
    assert [cohort.index for cohort in cohorts] == [0, 1, 2, 3]
    assert all(cohort.kind == CohortKind.CONSENSUS_GROUP for cohort in cohorts)
    assert cohorts[1].identifier == group_key(1)

    queried = [call[1] for call in beacon_source.calls if call[0] == "group_public_key"]
    assert queried == [0, 1, 2, 3]


def test_group_activity_follows_first_active_index(beacon_source):
    cohorts = CohortIndexBuilder(beacon_source, CohortKind.CONSENSUS_GROUP).build()

    assert [cohort.is_active for cohort in cohorts] == [False, True, True, True]


def test_group_members_get_dense_zero_based_slots(beacon_source):
    cohorts = CohortIndexBuilder(beacon_source, CohortKind.CONSENSUS_GROUP).build()

    assert cohorts[1].members == (
        (0, OPERATOR),
        (1, OTHER_OPERATOR),
        (2, OPERATOR),
    )


def test_no_groups():
    cohorts = CohortIndexBuilder(FakeBeaconSource(), CohortKind.CONSENSUS_GROUP).build()
    assert cohorts == ()


def test_all_groups_active_when_none_expired(beacon_source):
    beacon_source.first_active_index = 0
    cohorts = CohortIndexBuilder(beacon_source, CohortKind.CONSENSUS_GROUP).build()
    assert all(cohort.is_active for cohort in cohorts)


@pytest.mark.parametrize("failing_call", [
    "groups_count",
    "first_active_group_index",
    "group_public_key",
    "group_members",
])
def test_group_fetch_error_aborts_build(beacon_source, failing_call):
    error = ConnectionError("node unavailable")
    beacon_source.failures[failing_call] = error
    log = Mock(spec=logging.Logger)

    with pytest.raises(ConnectionError) as exc_info:
        CohortIndexBuilder(beacon_source, CohortKind.CONSENSUS_GROUP, logger=log).build()

    assert exc_info.value is error
    log.error.assert_called_once()


def test_snapshot_is_immutable(beacon_source):
    cohorts = CohortIndexBuilder(beacon_source, CohortKind.CONSENSUS_GROUP).build()

    with pytest.raises(dataclasses.FrozenInstanceError):
        cohorts[0].is_active = True


# ============================================================================
# Keeps
# ============================================================================

def test_keeps_are_sorted_by_index(ecdsa_source):
    cohorts = CohortIndexBuilder(ecdsa_source, CohortKind.SIGNING_KEEP).build()

    assert [cohort.index for cohort in cohorts] == [0, 1, 2]
    assert [cohort.is_active for cohort in cohorts] == [True, False, True]
    assert all(cohort.kind == CohortKind.SIGNING_KEEP for cohort in cohorts)

    fetched = [call[1] for call in ecdsa_source.calls if call[0] == "keep_members"]
    assert fetched == [cohort.identifier for cohort in cohorts]


def test_keep_in_both_sets_is_rejected():
    keep = "0x1111111111111111111111111111111111111111"
    source = FakeEcdsaSource(active={0: keep}, inactive={0: keep}, members={keep: []})

    with pytest.raises(CohortIndexError):
        CohortIndexBuilder(source, CohortKind.SIGNING_KEEP).build()


def test_keep_members_error_aborts_build(ecdsa_source):
    ecdsa_source.failures["keep_members"] = TimeoutError("timeout")

    with pytest.raises(TimeoutError):
        CohortIndexBuilder(ecdsa_source, CohortKind.SIGNING_KEEP).build()


# ============================================================================
# Cohort model
# ============================================================================

def test_group_label_is_truncated_public_key():
    cohort = Cohort(0, CohortKind.CONSENSUS_GROUP, True, bytes.fromhex("ab" * 64))
    assert cohort.label == "0x" + "ab" * 16 + "..."


def test_keep_label_is_lowercase_address():
    cohort = Cohort(0, CohortKind.SIGNING_KEEP, True, "0xABCDEF0000000000000000000000000000000001")
    assert cohort.label == "0xabcdef0000000000000000000000000000000001"


def test_has_member_ignores_case():
    cohort = Cohort(
        0, CohortKind.SIGNING_KEEP, True, "0x1",
        members=members_from_addresses([OPERATOR.lower()]),
    )
    assert cohort.has_member(OPERATOR)
    assert not cohort.has_member(OTHER_OPERATOR)
