"""Application configuration and environment settings"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReportType(str, Enum):
    """Which operator contract the billing reports cover"""
    BEACON = "beacon"
    ECDSA = "ecdsa"


class EthereumSettings(BaseModel):
    """Ethereum node and contract settings"""
    url: str = Field(..., description="Ethereum JSON-RPC endpoint")
    api_key: Optional[str] = Field(None, description="Bearer token for the endpoint")
    keep_token: Optional[str] = None
    tbtc_token: Optional[str] = None
    token_staking: Optional[str] = None
    keep_random_beacon_operator: Optional[str] = None
    bonded_ecdsa_keep_factory: Optional[str] = None
    request_retries: int = 3
    request_timeout: int = 30


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Ethereum node
    ETH_URL: str = Field("http://localhost:8545", description="Ethereum JSON-RPC endpoint")
    ETH_API_KEY: Optional[str] = Field(None, description="Bearer token for the endpoint")

    # Contract addresses
    KEEP_TOKEN_ADDRESS: Optional[str] = Field(None, description="KEEP ERC-20 token")
    TBTC_TOKEN_ADDRESS: Optional[str] = Field(None, description="tBTC ERC-20 token")
    TOKEN_STAKING_ADDRESS: Optional[str] = Field(None, description="TokenStaking contract")
    KEEP_RANDOM_BEACON_OPERATOR_ADDRESS: Optional[str] = Field(None, description="KeepRandomBeaconOperator contract")
    BONDED_ECDSA_KEEP_FACTORY_ADDRESS: Optional[str] = Field(None, description="BondedECDSAKeepFactory contract")

    # Request settings
    REQUEST_RETRIES: int = Field(3, description="Attempts per chain call")
    REQUEST_TIMEOUT: int = Field(30, description="HTTP timeout in seconds")

    # Billing settings
    REPORT_TYPE: ReportType = Field(ReportType.BEACON, description="beacon or ecdsa")
    CUSTOMERS_FILE: str = Field("./configs/customers.json", description="JSON list of customers")
    OUTPUT_DIR: str = Field("./reports", description="Directory for generated reports")

    # Optional block range for the outbound transactions section
    FROM_BLOCK: Optional[int] = Field(None, description="First block scanned for operator transactions")
    TO_BLOCK: Optional[int] = Field(None, description="Last block scanned for operator transactions")

    @property
    def ethereum_settings(self) -> EthereumSettings:
        """Get Ethereum settings as a separate model"""
        return EthereumSettings(
            url=self.ETH_URL,
            api_key=self.ETH_API_KEY,
            keep_token=self.KEEP_TOKEN_ADDRESS,
            tbtc_token=self.TBTC_TOKEN_ADDRESS,
            token_staking=self.TOKEN_STAKING_ADDRESS,
            keep_random_beacon_operator=self.KEEP_RANDOM_BEACON_OPERATOR_ADDRESS,
            bonded_ecdsa_keep_factory=self.BONDED_ECDSA_KEEP_FACTORY_ADDRESS,
            request_retries=self.REQUEST_RETRIES,
            request_timeout=self.REQUEST_TIMEOUT
        )

    @property
    def has_block_range(self) -> bool:
        return self.FROM_BLOCK is not None and self.TO_BLOCK is not None

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True
    )

settings = Settings()
