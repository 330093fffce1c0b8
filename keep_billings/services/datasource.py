"""Chain data source interfaces consumed by the billing core"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Tuple


class DataSource(ABC):
    """Balance and transaction queries shared by both report types"""

    @abstractmethod
    def eth_balance(self, address: str) -> Decimal:
        """ETH balance of an address"""

    @abstractmethod
    def keep_balance(self, address: str) -> Decimal:
        """KEEP token balance of an address"""

    @abstractmethod
    def tbtc_balance(self, address: str) -> Decimal:
        """tBTC token balance of an address"""

    @abstractmethod
    def stake(self, address: str) -> Decimal:
        """KEEP staked by an operator"""

    @abstractmethod
    def outbound_transactions(self, address: str, from_block: int, to_block: int) -> Dict[int, List[str]]:
        """Hashes of transactions sent by `address`, keyed by block number"""

    @abstractmethod
    def transaction_gas_price(self, tx_hash: str) -> int:
        """Gas price of a transaction in wei"""

    @abstractmethod
    def transaction_gas_used(self, tx_hash: str) -> int:
        """Gas used by a mined transaction"""

    @abstractmethod
    def transaction_method(self, tx_hash: str) -> str:
        """Name of the contract method called, empty if unknown"""


class BeaconDataSource(DataSource):
    """Random beacon operator contract queries"""

    @abstractmethod
    def groups_count(self) -> int:
        """Number of groups ever created, expired and terminated included"""

    @abstractmethod
    def first_active_group_index(self) -> int:
        """Index of the first group that has not expired"""

    @abstractmethod
    def group_public_key(self, index: int) -> bytes:
        pass

    @abstractmethod
    def group_members(self, public_key: bytes) -> List[str]:
        """Member addresses in slot order; an address can repeat"""

    @abstractmethod
    def group_member_rewards(self, public_key: bytes) -> int:
        """Unclaimed reward per member slot in wei"""

    @abstractmethod
    def rewards_withdrawn(self, operator: str, group_index: int) -> bool:
        pass


class EcdsaDataSource(DataSource):
    """Bonded ECDSA keep factory and keep queries"""

    @abstractmethod
    def keeps(self) -> Tuple[Dict[int, str], Dict[int, str]]:
        """Active and inactive keep addresses, each keyed by keep index"""

    @abstractmethod
    def keep_members(self, address: str) -> List[str]:
        pass

    @abstractmethod
    def keep_member_balance(self, keep_address: str, member_address: str) -> int:
        """ETH held by the keep for a member, in wei"""
