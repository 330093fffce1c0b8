"""Ethereum chain data source backed by web3"""
import logging
import time
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

import requests
from web3 import Web3
from web3.exceptions import BlockNotFound, Web3Exception

from keep_billings.config import EthereumSettings
from keep_billings.numeric import wei_to_eth
from keep_billings.services.abi import (
    BONDED_ECDSA_KEEP_ABI,
    BONDED_ECDSA_KEEP_FACTORY_ABI,
    ERC20_ABI,
    KEEP_RANDOM_BEACON_OPERATOR_ABI,
    METHOD_LOOKUP_ABIS,
    TOKEN_STAKING_ABI,
)
from keep_billings.services.datasource import BeaconDataSource, EcdsaDataSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EthereumClient(BeaconDataSource, EcdsaDataSource):
    """Handles all contract and node queries with consistent retries"""

    def __init__(self, config: EthereumSettings, w3: Optional[Web3] = None):
        self.config = config
        self.w3 = w3 or self._connect(config)

        self.keep_token = self._contract(config.keep_token, ERC20_ABI)
        self.tbtc_token = self._contract(config.tbtc_token, ERC20_ABI)
        self.token_staking = self._contract(config.token_staking, TOKEN_STAKING_ABI)
        self.operator_contract = self._contract(
            config.keep_random_beacon_operator,
            KEEP_RANDOM_BEACON_OPERATOR_ABI
        )
        self.keep_factory = self._contract(
            config.bonded_ecdsa_keep_factory,
            BONDED_ECDSA_KEEP_FACTORY_ABI
        )
        self.method_lookup = [self.w3.eth.contract(abi=abi) for abi in METHOD_LOOKUP_ABIS]

    @staticmethod
    def _connect(config: EthereumSettings) -> Web3:
        session = requests.Session()
        session.headers.update({'Accept': 'application/json'})
        if config.api_key:
            session.headers.update({'Authorization': f'Bearer {config.api_key}'})

        provider = Web3.HTTPProvider(
            config.url,
            request_kwargs={'timeout': config.request_timeout},
            session=session
        )
        return Web3(provider)

    def _contract(self, address: Optional[str], abi: list):
        if not address:
            return None
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    @staticmethod
    def _require(contract, name: str):
        if contract is None:
            raise ValueError(f"{name} contract address not configured")
        return contract

    def _call(self, description: str, fn: Callable[..., T], *args) -> T:
        """Run a chain query with retries"""
        attempts = max(self.config.request_retries, 1)
        for attempt in range(attempts):
            try:
                return fn(*args)
            except BlockNotFound:
                raise
            except Exception as e:
                if attempt == attempts - 1:  # Last attempt
                    raise
                logger.warning(f"Retrying {description} after error: {e}")
                time.sleep(1)  # Wait before retry

    # Balances

    def eth_balance(self, address: str) -> Decimal:
        wei = self._call(
            f"ETH balance of {address}",
            self.w3.eth.get_balance,
            Web3.to_checksum_address(address)
        )
        return wei_to_eth(wei)

    def _token_balance(self, contract, name: str, address: str) -> Decimal:
        token = self._require(contract, name)
        balance = self._call(
            f"{name} balance of {address}",
            lambda: token.functions.balanceOf(Web3.to_checksum_address(address)).call()
        )
        # ERC-20 tokens here use the same 18 decimals as ETH
        return wei_to_eth(balance)

    def keep_balance(self, address: str) -> Decimal:
        return self._token_balance(self.keep_token, "KEEP token", address)

    def tbtc_balance(self, address: str) -> Decimal:
        return self._token_balance(self.tbtc_token, "tBTC token", address)

    def stake(self, address: str) -> Decimal:
        return self._token_balance(self.token_staking, "TokenStaking", address)

    # Transactions

    def outbound_transactions(self, address: str, from_block: int, to_block: int) -> Dict[int, List[str]]:
        """Scan blocks for transactions sent by the address, stopping at the chain head"""
        if from_block > to_block:
            raise ValueError("from_block could not be greater than to_block")

        sender = address.lower()
        blocks_transactions = {}
        span = max(to_block - from_block, 1)

        for block_number in range(from_block, to_block + 1):
            progress = (block_number - from_block) * 100 // span
            logger.info(f"[{progress}%] getting block {block_number}")
            try:
                block = self._call(
                    f"block {block_number}",
                    lambda: self.w3.eth.get_block(block_number, full_transactions=True)
                )
            except BlockNotFound:
                break

            blocks_transactions[block_number] = [
                Web3.to_hex(tx['hash'])
                for tx in block['transactions']
                if str(tx['from']).lower() == sender
            ]

        return blocks_transactions

    def transaction_gas_price(self, tx_hash: str) -> int:
        transaction = self._call(f"transaction {tx_hash}", self.w3.eth.get_transaction, tx_hash)
        return transaction['gasPrice']

    def transaction_gas_used(self, tx_hash: str) -> int:
        receipt = self._call(f"receipt of {tx_hash}", self.w3.eth.get_transaction_receipt, tx_hash)
        return receipt['gasUsed']

    def transaction_method(self, tx_hash: str) -> str:
        transaction = self._call(f"transaction {tx_hash}", self.w3.eth.get_transaction, tx_hash)
        data = transaction['input']
        if isinstance(data, str):
            data = Web3.to_bytes(hexstr=data)
        if len(data) < 4:  # plain transfer
            return ""

        for contract in self.method_lookup:
            try:
                function, _ = contract.decode_function_input(data)
            except (ValueError, Web3Exception):
                continue
            return function.fn_name
        return ""

    # Random beacon groups

    def groups_count(self) -> int:
        operator = self._require(self.operator_contract, "KeepRandomBeaconOperator")
        return self._call(
            "number of created groups",
            operator.functions.getNumberOfCreatedGroups().call
        )

    def first_active_group_index(self) -> int:
        operator = self._require(self.operator_contract, "KeepRandomBeaconOperator")
        return self._call(
            "first active group index",
            operator.functions.getFirstActiveGroupIndex().call
        )

    def group_public_key(self, index: int) -> bytes:
        operator = self._require(self.operator_contract, "KeepRandomBeaconOperator")
        return bytes(self._call(
            f"public key of group {index}",
            operator.functions.getGroupPublicKey(index).call
        ))

    def group_members(self, public_key: bytes) -> List[str]:
        operator = self._require(self.operator_contract, "KeepRandomBeaconOperator")
        addresses = self._call(
            f"members of group 0x{public_key.hex()[:16]}",
            operator.functions.getGroupMembers(public_key).call
        )
        return [Web3.to_checksum_address(address) for address in addresses]

    def group_member_rewards(self, public_key: bytes) -> int:
        operator = self._require(self.operator_contract, "KeepRandomBeaconOperator")
        return self._call(
            f"member rewards of group 0x{public_key.hex()[:16]}",
            operator.functions.getGroupMemberRewards(public_key).call
        )

    def rewards_withdrawn(self, operator: str, group_index: int) -> bool:
        contract = self._require(self.operator_contract, "KeepRandomBeaconOperator")
        return self._call(
            f"withdrawal status of group {group_index}",
            contract.functions.hasWithdrawnRewards(
                Web3.to_checksum_address(operator),
                group_index
            ).call
        )

    # ECDSA keeps

    def _keep(self, address: str):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=BONDED_ECDSA_KEEP_ABI
        )

    def keeps(self) -> Tuple[Dict[int, str], Dict[int, str]]:
        factory = self._require(self.keep_factory, "BondedECDSAKeepFactory")
        keep_count = self._call("keep count", factory.functions.getKeepCount().call)

        active_keeps = {}
        inactive_keeps = {}
        for index in range(keep_count):
            address = self._call(
                f"address of keep {index}",
                factory.functions.getKeepAtIndex(index).call
            )
            is_active = self._call(
                f"status of keep {address}",
                self._keep(address).functions.isActive().call
            )
            if is_active:
                active_keeps[index] = address
            else:
                inactive_keeps[index] = address

        return active_keeps, inactive_keeps

    def keep_members(self, address: str) -> List[str]:
        members = self._call(
            f"members of keep {address}",
            self._keep(address).functions.getMembers().call
        )
        return [Web3.to_checksum_address(member) for member in members]

    def keep_member_balance(self, keep_address: str, member_address: str) -> int:
        return self._call(
            f"member balance of {member_address} in keep {keep_address}",
            self._keep(keep_address).functions.getMemberETHBalance(
                Web3.to_checksum_address(member_address)
            ).call
        )
