import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from .errors import ConfigError

# Defaults of the original network config: 6M gas, 3 gwei, 2 confirmations
DEFAULT_GAS = 6000000
DEFAULT_GAS_PRICE = 3000000000
DEFAULT_CONFIRMATIONS = 2
DEFAULT_TIMEOUT_BLOCKS = 200


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, kind=int):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return kind(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    return _env_number(name, default, int)


@dataclass
class NetworkConfig:
    rpc_url: str = "http://localhost:8545"
    network: str = "goerli"
    private_keys: List[str] = field(default_factory=list, repr=False)
    chain_id: Optional[int] = None
    gas: int = DEFAULT_GAS
    gas_price: Optional[int] = DEFAULT_GAS_PRICE
    confirmations: int = DEFAULT_CONFIRMATIONS
    timeout_blocks: int = DEFAULT_TIMEOUT_BLOCKS
    poll_interval: float = 2.0
    poa: bool = True
    artifacts_dir: str = "artifacts"
    record_path: Optional[str] = None
    slack_webhook: Optional[str] = None
    log_file: str = "deployment.log"

    @classmethod
    def from_env(cls) -> "NetworkConfig":
        """Build the configuration from the environment (and a .env file)."""
        load_dotenv()

        rpc_url = os.getenv("RPC_URL")
        if not rpc_url and os.getenv("INFURA_ID"):
            rpc_url = "https://goerli.infura.io/v3/" + os.environ["INFURA_ID"]

        # PRIVATE_KEY wins; otherwise the manager key signs and the wallet
        # user key is kept only as a second available account
        keys = [os.getenv("PRIVATE_KEY")] if os.getenv("PRIVATE_KEY") else [
            os.getenv("PK_MANAGER"),
            os.getenv("PK_WALLETUSER"),
        ]

        return cls(
            rpc_url=rpc_url or "http://localhost:8545",
            network=os.getenv("NETWORK", "goerli"),
            private_keys=[key for key in keys if key],
            chain_id=_env_int("CHAIN_ID", None),
            gas=_env_int("GAS", DEFAULT_GAS),
            gas_price=_env_int("GAS_PRICE", DEFAULT_GAS_PRICE),
            confirmations=_env_int("CONFIRMATIONS", DEFAULT_CONFIRMATIONS),
            timeout_blocks=_env_int("TIMEOUT_BLOCKS", DEFAULT_TIMEOUT_BLOCKS),
            poll_interval=_env_number("POLL_INTERVAL", 2.0, float),
            poa=_env_bool("POA_MIDDLEWARE", True),
            artifacts_dir=os.getenv("ARTIFACTS_DIR", "artifacts"),
            record_path=os.getenv("DEPLOYMENT_RECORD") or None,
            slack_webhook=os.getenv("SLACK_WEBHOOK") or None,
            log_file=os.getenv("DEPLOY_LOG", "deployment.log"),
        )
