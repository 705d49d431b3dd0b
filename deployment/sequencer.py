"""
Deployment sequencer: turns an ordered list of resource specs into deployed
(or attached) contract instances, threading each address into later specs.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from web3 import Web3

from .errors import (
    CreationFailed,
    DeploymentError,
    InvalidReference,
    LedgerUnavailable,
    SubmissionRejected,
)
from .models import ActorIdentity, Mode, Ref, ResourceInstance, ResourceSpec
from .references import check_refs, iter_refs, resolve_args

logger = logging.getLogger(__name__)


class DeploymentSequencer:
    def __init__(self, ledger, identity: Optional[ActorIdentity] = None):
        self.ledger = ledger
        self.identity = identity

    def resolve_identity(self) -> ActorIdentity:
        """Resolve the signer once; later calls reuse the same identity object."""
        if self.identity is None:
            self.identity = self.ledger.resolve_identity()
            logger.info(f"Deployer: {self.identity.address}")
            logger.info(f"ETH balance of deployer: {Web3.from_wei(self.identity.balance, 'ether')}")
        return self.identity

    def deploy(self, spec: ResourceSpec, resolved_args: Sequence[Any]) -> ResourceInstance:
        if spec.mode is Mode.ATTACH:
            logger.info(f"{spec.name} attached at {spec.target}")
            self._probe(spec)
            return ResourceInstance(name=spec.name, address=spec.target, spec=spec)

        identity = self.resolve_identity()
        logger.info(f"Deploying {spec.name} ({spec.contract_name}) with args {list(resolved_args)}")
        try:
            tx_hash = self.ledger.submit_creation(identity, spec.contract_name, resolved_args)
            receipt = self.ledger.wait_for_receipt(tx_hash, spec.contract_name)
        except (SubmissionRejected, LedgerUnavailable) as e:
            raise CreationFailed(e.message) from e

        if not receipt.status:
            raise CreationFailed(f"transaction {receipt.tx_hash} reverted")
        if not receipt.contract_address:
            raise CreationFailed(f"receipt for {receipt.tx_hash} carries no contract address")

        logger.info(f"{spec.name} deployed to: {receipt.contract_address}")
        return ResourceInstance(name=spec.name, address=receipt.contract_address, spec=spec, receipt=receipt)

    def _probe(self, spec: ResourceSpec):
        """Best-effort read of a known field on an attached contract, for the log only."""
        if not spec.probe:
            return
        try:
            value = self.ledger.read(spec.target, spec.contract_name, spec.probe)
        except Exception as e:
            logger.warning(f"Probe {spec.name}.{spec.probe}() failed: {e}")
            return
        logger.info(f"{spec.name}.{spec.probe}(): {value}")

    def validate(self, specs: Sequence[ResourceSpec]):
        """Check names and references before anything is submitted."""
        seen = set()
        for spec in specs:
            if spec.name in seen:
                raise InvalidReference(spec.name, f"resource name '{spec.name}' is used twice")
            if spec.mode is Mode.CREATE:
                check_refs(spec.constructor_args, seen, spec.name)
                for ref in iter_refs(spec.constructor_args):
                    if ref.field is not None:
                        raise InvalidReference(
                            ref.name, f"'{spec.name}' selects field '{ref.field}' of a resource address",
                        )
            seen.add(spec.name)

    def run(self, specs: Sequence[ResourceSpec]) -> Dict[str, ResourceInstance]:
        self.validate(specs)
        instances: Dict[str, ResourceInstance] = {}

        def lookup(ref: Ref):
            return instances[ref.name].address

        for step, spec in enumerate(specs):
            try:
                args: List[Any] = []
                if spec.mode is Mode.CREATE:
                    args = resolve_args(spec.constructor_args, lookup)
                instances[spec.name] = self.deploy(spec, args)
            except DeploymentError as e:
                logger.error(f"Deployment stopped at step {step} ({spec.name}): {e.message}")
                raise e.at(step, spec.name, dict(instances))
        return instances
