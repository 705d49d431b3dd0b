import time
import logging
from typing import Any, Dict, List, Optional, Sequence

import requests
from eth_utils import event_abi_to_log_topic, is_hex_address
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception
from web3.middleware import ExtraDataToPOAMiddleware

from .artifacts import ArtifactStore
from .config import NetworkConfig
from .errors import ConfirmationTimeout, IdentityUnavailable, LedgerUnavailable, SubmissionRejected
from .models import ActorIdentity, EventRecord, Receipt

logger = logging.getLogger(__name__)

# What a node (or the HTTP layer under it) raises when it refuses a request
RPC_ERRORS = (Web3Exception, ValueError, requests.exceptions.RequestException)
# Plus what web3 raises locally for an unknown function or mismatched arguments
SUBMISSION_ERRORS = RPC_ERRORS + (TypeError,)


def _reason(error: Exception) -> str:
    """Pull the node's message out of an RPC error."""
    arg = error.args[0] if error.args else error
    if isinstance(arg, dict):
        return str(arg.get('message', arg))
    return str(arg)


def normalize_args(args: Sequence[Any]) -> List[Any]:
    """Checksum every address-shaped string, recursing into lists."""
    normalized = []
    for value in args:
        if isinstance(value, (list, tuple)):
            normalized.append(normalize_args(value))
        elif isinstance(value, str) and is_hex_address(value):
            normalized.append(Web3.to_checksum_address(value))
        else:
            normalized.append(value)
    return normalized


def decode_events(w3: Web3, abi: List[Dict[str, Any]], logs, address: Optional[str] = None) -> List[EventRecord]:
    """
    Decode receipt logs into event records using a contract ABI.

    Logs from other addresses, anonymous events and topics the ABI does not
    know are skipped, so the result only holds events of the target contract.
    """
    contract = w3.eth.contract(abi=abi)
    topics = {
        bytes(event_abi_to_log_topic(item)): item['name']
        for item in abi
        if item.get('type') == 'event' and not item.get('anonymous')
    }

    records = []
    for log in logs:
        if address is not None and log['address'].lower() != address.lower():
            continue
        if not log['topics']:
            continue
        name = topics.get(bytes(HexBytes(log['topics'][0])))
        if name is None:
            continue
        decoded = getattr(contract.events, name)().process_log(log)
        records.append(EventRecord(name=name, fields=dict(decoded['args'])))
    return records


class Ledger:
    """Connection to the chain: balances, signed submissions, receipts and reads."""

    def __init__(self, config: NetworkConfig, w3: Optional[Web3] = None,
                 artifacts: Optional[ArtifactStore] = None):
        self.config = config
        self.artifacts = artifacts or ArtifactStore(config.artifacts_dir)
        self.w3 = w3 if w3 is not None else self._connect()

    def _connect(self) -> Web3:
        """Initialize Web3 connection"""
        w3 = Web3(Web3.HTTPProvider(self.config.rpc_url))
        if self.config.poa:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        if not w3.is_connected():
            raise LedgerUnavailable(f"Could not connect to RPC URL: {self.config.rpc_url}")
        logger.info(f"Connected to {self.config.network} at {self.config.rpc_url}")
        return w3

    # --- Identity ---

    def resolve_identity(self) -> ActorIdentity:
        if not self.config.private_keys:
            raise IdentityUnavailable("no signer key configured (set PRIVATE_KEY or PK_MANAGER)")
        try:
            account = self.w3.eth.account.from_key(self.config.private_keys[0])
        except Exception as e:
            raise IdentityUnavailable(f"signer key is not usable: {e}") from e

        try:
            nonce = self.w3.eth.get_transaction_count(account.address, 'pending')
        except RPC_ERRORS as e:
            raise LedgerUnavailable(_reason(e)) from e
        return ActorIdentity(
            address=account.address,
            balance=self.get_balance(account.address),
            account=account,
            nonce=nonce,
        )

    def get_balance(self, address: str) -> int:
        try:
            return self.w3.eth.get_balance(Web3.to_checksum_address(address))
        except RPC_ERRORS as e:
            raise LedgerUnavailable(_reason(e)) from e

    # --- Submission ---

    def _tx_params(self, identity: ActorIdentity) -> Dict[str, Any]:
        return {
            'from': identity.address,
            'nonce': identity.nonce,
            'gas': self.config.gas,
            'gasPrice': self.config.gas_price or self.w3.eth.gas_price,
            'chainId': self.config.chain_id or self.w3.eth.chain_id,
        }

    def _send(self, identity: ActorIdentity, build) -> str:
        """Build, sign and send one transaction; ``build(params)`` returns the tx dict."""
        try:
            tx = build(self._tx_params(identity))
            signed = identity.account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except SUBMISSION_ERRORS as e:
            raise SubmissionRejected(_reason(e)) from e
        # Only an accepted transaction consumes the nonce
        identity.nonce += 1
        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"Transaction sent: {tx_hash}")
        return tx_hash

    def submit_creation(self, identity: ActorIdentity, contract_name: str, args: Sequence[Any]) -> str:
        factory = self.w3.eth.contract(
            abi=self.artifacts.abi(contract_name),
            bytecode=self.artifacts.bytecode(contract_name),
        )

        def build(params):
            return factory.constructor(*normalize_args(args)).build_transaction(params)
        return self._send(identity, build)

    def submit_call(self, identity: ActorIdentity, address: str, contract_name: str,
                    call_name: str, args: Sequence[Any]) -> str:
        def build(params):
            contract = self.contract_at(address, contract_name)
            function = getattr(contract.functions, call_name)(*normalize_args(args))
            return function.build_transaction(params)
        return self._send(identity, build)

    # --- Confirmation ---

    def _block_number(self) -> int:
        try:
            return self.w3.eth.get_block_number()
        except RPC_ERRORS as e:
            raise LedgerUnavailable(_reason(e)) from e

    def _poll_receipt(self, tx_hash: str):
        try:
            return self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except RPC_ERRORS as e:
            raise LedgerUnavailable(_reason(e)) from e

    def wait_for_receipt(self, tx_hash: str, contract_name: Optional[str] = None,
                         address: Optional[str] = None) -> Receipt:
        """
        Block until the transaction is mined with enough confirmations.

        Waiting is bounded by ``timeout_blocks`` blocks counted from the moment
        we started waiting; past that a ConfirmationTimeout is raised. A
        reverted receipt is returned immediately without waiting for more
        confirmations.
        """
        start_block = self._block_number()
        raw = None
        while True:
            current = self._block_number()
            if raw is None:
                raw = self._poll_receipt(tx_hash)
            if raw is not None:
                if raw['status'] != 1:
                    break
                if current - raw['blockNumber'] + 1 >= self.config.confirmations:
                    break
            waited = current - start_block
            if waited >= self.config.timeout_blocks:
                raise ConfirmationTimeout(waited, tx_hash)
            time.sleep(self.config.poll_interval)

        logger.info(f"Transaction {tx_hash} mined in block {raw['blockNumber']}")
        return self._to_receipt(raw, contract_name, address)

    def _to_receipt(self, raw, contract_name: Optional[str], address: Optional[str]) -> Receipt:
        contract_address = raw.get('contractAddress')
        events: List[EventRecord] = []
        if contract_name is not None and raw['status'] == 1:
            events = decode_events(
                self.w3, self.artifacts.abi(contract_name), raw['logs'], address or contract_address,
            )
        return Receipt(
            tx_hash=Web3.to_hex(raw['transactionHash']),
            status=raw['status'] == 1,
            block_number=raw['blockNumber'],
            events=events,
            contract_address=contract_address,
        )

    # --- Reads ---

    def contract_at(self, address: str, contract_name: str):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=self.artifacts.abi(contract_name),
        )

    def read(self, address: str, contract_name: str, fn_name: str, args: Sequence[Any] = ()) -> Any:
        contract = self.contract_at(address, contract_name)
        return getattr(contract.functions, fn_name)(*normalize_args(args)).call()
