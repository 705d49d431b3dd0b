"""
Configuration invoker: post-deployment calls against deployed or attached
contracts, with receipt decoding and optional read-after-write checks.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import (
    CallFailed,
    DeploymentError,
    InvalidReference,
    LedgerUnavailable,
    SubmissionRejected,
    UnexpectedReceiptShape,
)
from .ledger import RPC_ERRORS
from .models import ActorIdentity, CallResult, ConfigurationCall, ReadBack, Ref, ResourceInstance
from .references import check_refs, iter_refs, resolve_args

logger = logging.getLogger(__name__)


class ConfigurationInvoker:
    def __init__(self, ledger, identity: ActorIdentity, instances: Mapping[str, ResourceInstance]):
        self.ledger = ledger
        self.identity = identity
        self.instances = dict(instances)

    def invoke(self, instance: ResourceInstance, call_name: str, args: Sequence[Any],
               expected_event: Optional[str] = None, verify: Optional[ReadBack] = None,
               call: Optional[ConfigurationCall] = None) -> CallResult:
        """
        Submit ``call_name(*args)`` on ``instance`` and wait for confirmation.

        The first event in the receipt named ``expected_event`` is selected; with
        no event name the first decoded event is used. A successful receipt
        without such an event raises UnexpectedReceiptShape rather than
        CallFailed, since the transaction did land on chain.
        """
        contract_name = instance.spec.contract_name
        logger.info(f"Calling {instance.name}.{call_name}({', '.join(map(str, args))})")
        try:
            tx_hash = self.ledger.submit_call(self.identity, instance.address, contract_name, call_name, args)
            receipt = self.ledger.wait_for_receipt(tx_hash, contract_name, instance.address)
        except (SubmissionRejected, LedgerUnavailable) as e:
            raise CallFailed(e.message) from e

        if not receipt.status:
            raise CallFailed(f"transaction {receipt.tx_hash} reverted")

        event = receipt.first_event(expected_event)
        if event is None:
            raise UnexpectedReceiptShape(expected_event, (e.name for e in receipt.events))
        logger.info(f"{instance.name}.{call_name} confirmed with event {event.name}: {event.fields}")

        verified = None
        if verify is not None:
            try:
                verified = self.ledger.read(instance.address, contract_name, verify.call, verify.args)
            except RPC_ERRORS as e:
                raise CallFailed(f"read-back {verify.call} failed: {e}") from e
            logger.info(f"{instance.name}.{verify.call}(): {verified}")

        if call is None:
            call = ConfigurationCall(instance_ref=instance.name, call=call_name, args=list(args),
                                     event=expected_event, verify=verify)
        return CallResult(call=call, receipt=receipt, event=event, verified=verified)

    def validate(self, calls: Sequence[ConfigurationCall]):
        """Check instance and result references before anything is submitted."""
        known = set(self.instances)
        # result name -> whether that call reads a value back
        read_back: Dict[str, bool] = {}
        for call in calls:
            if call.instance_ref not in self.instances:
                raise InvalidReference(call.instance_ref, f"call '{call.call}' targets unknown instance '{call.instance_ref}'")
            args = list(call.args) + (list(call.verify.args) if call.verify is not None else [])
            check_refs(args, known, call.result_name)
            for ref in iter_refs(args):
                if ref.name in read_back:
                    if ref.field is None and not read_back[ref.name]:
                        raise InvalidReference(
                            ref.name, f"'{call.result_name}' uses the read-back value of '{ref.name}', which has no verify",
                        )
                elif ref.field is not None:
                    raise InvalidReference(
                        ref.name, f"'{call.result_name}' selects field '{ref.field}' of a resource address",
                    )
            if call.result_name in known:
                raise InvalidReference(call.result_name, f"result name '{call.result_name}' is already taken")
            known.add(call.result_name)
            read_back[call.result_name] = call.verify is not None

    def _lookup(self, results: Dict[str, CallResult]):
        def lookup(ref: Ref):
            if ref.name in results:
                result = results[ref.name]
                if ref.field is None:
                    return result.verified
                if ref.field not in result.fields:
                    raise InvalidReference(ref.name, f"event {result.event.name} has no field '{ref.field}'")
                return result.fields[ref.field]
            return self.instances[ref.name].address
        return lookup

    def run_sequence(self, calls: Sequence[ConfigurationCall]) -> List[CallResult]:
        self.validate(calls)
        results: Dict[str, CallResult] = {}
        completed: List[CallResult] = []
        lookup = self._lookup(results)

        for step, call in enumerate(calls):
            try:
                args = resolve_args(call.args, lookup)
                verify = call.verify
                if verify is not None:
                    verify = ReadBack(call=verify.call, args=resolve_args(verify.args, lookup))
                result = self.invoke(self.instances[call.instance_ref], call.call, args,
                                     expected_event=call.event, verify=verify, call=call)
            except DeploymentError as e:
                logger.error(f"Configuration stopped at step {step} ({call.result_name}): {e.message}")
                raise e.at(step, call.result_name, list(completed))
            results[call.result_name] = result
            completed.append(result)
        return completed
