"""
Shared fixtures: in-memory chain data sources for the billing core.
"""

from decimal import Decimal

import pytest

from keep_billings.services.datasource import BeaconDataSource, EcdsaDataSource


OPERATOR = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
OTHER_OPERATOR = "0xAb8483F64d9C6d1EcF9b849Ae677dD3315835cb2"
BENEFICIARY = "0x4B20993Bc481177ec7E8f571ceCaE8A9e22C02db"

ETH = 10 ** 18


class FakeDataSource:
    """Balances and transactions held in dictionaries, with call recording"""

    def __init__(self):
        self.eth_balances = {}
        self.keep_balances = {}
        self.tbtc_balances = {}
        self.stakes = {}
        self.transactions = {}
        self.gas_prices = {}
        self.gas_used = {}
        self.methods = {}
        self.failures = {}
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.failures:
            raise self.failures[name]

    def eth_balance(self, address):
        self._record("eth_balance", address)
        return self.eth_balances.get(address, Decimal(0))

    def keep_balance(self, address):
        self._record("keep_balance", address)
        return self.keep_balances.get(address, Decimal(0))

    def tbtc_balance(self, address):
        self._record("tbtc_balance", address)
        return self.tbtc_balances.get(address, Decimal(0))

    def stake(self, address):
        self._record("stake", address)
        return self.stakes.get(address, Decimal(0))

    def outbound_transactions(self, address, from_block, to_block):
        self._record("outbound_transactions", address, from_block, to_block)
        return {
            block: hashes for block, hashes in self.transactions.items()
            if from_block <= block <= to_block
        }

    def transaction_gas_price(self, tx_hash):
        self._record("transaction_gas_price", tx_hash)
        return self.gas_prices[tx_hash]

    def transaction_gas_used(self, tx_hash):
        self._record("transaction_gas_used", tx_hash)
        return self.gas_used[tx_hash]

    def transaction_method(self, tx_hash):
        self._record("transaction_method", tx_hash)
        return self.methods.get(tx_hash, "")


class FakeBeaconSource(FakeDataSource, BeaconDataSource):
    """Random beacon operator contract state"""

    def __init__(self, groups=None, first_active_index=0):
        super().__init__()
        # list of (public key, members, member reward in wei)
        self.groups = list(groups or [])
        self.first_active_index = first_active_index
        self.withdrawn = set()

    def groups_count(self):
        self._record("groups_count")
        return len(self.groups)

    def first_active_group_index(self):
        self._record("first_active_group_index")
        return self.first_active_index

    def group_public_key(self, index):
        self._record("group_public_key", index)
        return self.groups[index][0]

    def _group(self, public_key):
        for key, members, rewards in self.groups:
            if key == public_key:
                return members, rewards
        raise KeyError(public_key)

    def group_members(self, public_key):
        self._record("group_members", public_key)
        return list(self._group(public_key)[0])

    def group_member_rewards(self, public_key):
        self._record("group_member_rewards", public_key)
        return self._group(public_key)[1]

    def rewards_withdrawn(self, operator, group_index):
        self._record("rewards_withdrawn", operator, group_index)
        return (operator.lower(), group_index) in self.withdrawn


class FakeEcdsaSource(FakeDataSource, EcdsaDataSource):
    """Bonded ECDSA keep factory state"""

    def __init__(self, active=None, inactive=None, members=None, member_balances=None):
        super().__init__()
        self.active = dict(active or {})
        self.inactive = dict(inactive or {})
        self.members = dict(members or {})
        # (keep address, member address lowercased) -> wei
        self.member_balances = dict(member_balances or {})

    def keeps(self):
        self._record("keeps")
        return self.active, self.inactive

    def keep_members(self, address):
        self._record("keep_members", address)
        return list(self.members[address])

    def keep_member_balance(self, keep_address, member_address):
        self._record("keep_member_balance", keep_address, member_address)
        return self.member_balances.get((keep_address, member_address.lower()), 0)


def group_key(number: int) -> bytes:
    """Deterministic 128-byte group public key"""
    return bytes([number]) * 128


@pytest.fixture
def beacon_source():
    """
    Four groups, the first expired:
      0: inactive, operator holds slot 1
      1: active, operator holds slots 0 and 2
      2: active, operator absent
      3: active, operator holds slot 3 (lowercased address)
    """
    return FakeBeaconSource(
        groups=[
            (group_key(0), [OTHER_OPERATOR, OPERATOR, OTHER_OPERATOR], 2 * ETH),
            (group_key(1), [OPERATOR, OTHER_OPERATOR, OPERATOR], ETH // 10),
            (group_key(2), [OTHER_OPERATOR, OTHER_OPERATOR], 5 * ETH),
            (group_key(3), [OTHER_OPERATOR] * 3 + [OPERATOR.lower()], ETH // 4),
        ],
        first_active_index=1,
    )


@pytest.fixture
def ecdsa_source():
    """Three keeps, keep 1 inactive; the dicts are deliberately out of index order"""
    keep_a = "0x1111111111111111111111111111111111111111"
    keep_b = "0x2222222222222222222222222222222222222222"
    keep_c = "0x3333333333333333333333333333333333333333"
    return FakeEcdsaSource(
        active={2: keep_c, 0: keep_a},
        inactive={1: keep_b},
        members={
            keep_a: [OPERATOR, OTHER_OPERATOR, OPERATOR.upper().replace("0X", "0x")],
            keep_b: [OPERATOR, OTHER_OPERATOR],
            keep_c: [OTHER_OPERATOR, OTHER_OPERATOR, OTHER_OPERATOR],
        },
        member_balances={
            (keep_a, OPERATOR.lower()): ETH // 2,
            (keep_b, OPERATOR.lower()): ETH // 5,
            (keep_c, OPERATOR.lower()): 7 * ETH,
        },
    )
