import itertools

import pytest

from deployment.errors import SubmissionRejected
from deployment.models import ActorIdentity, EventRecord, Receipt

DEPLOYER = "0x1111111111111111111111111111111111111111"


class FakeLedger:
    """In-memory ledger: hands out fresh addresses and scripted receipts."""

    def __init__(self, balance=10 ** 18):
        self.balance = balance
        self.submissions = []
        self.reads = []
        self.reject = {}       # contract or call name -> rejection reason
        self.revert = set()    # contract or call names whose receipt fails
        self.events = {}       # call name -> list of EventRecord
        self.values = {}       # read fn name -> value
        self.probe_error = None
        self.identity = None
        self._pending = {}
        self._ids = itertools.count(1)

    def resolve_identity(self):
        self.identity = ActorIdentity(address=DEPLOYER, balance=self.balance, nonce=0)
        return self.identity

    def get_balance(self, address):
        return self.balance

    def _submit(self, identity, key, receipt_kwargs):
        if key in self.reject:
            raise SubmissionRejected(self.reject[key])
        tx_hash = "0x%064x" % next(self._ids)
        identity.nonce += 1
        self._pending[tx_hash] = Receipt(tx_hash=tx_hash, status=key not in self.revert,
                                         block_number=len(self.submissions), **receipt_kwargs)
        return tx_hash

    def submit_creation(self, identity, contract_name, args):
        self.submissions.append(("create", contract_name, list(args)))
        address = "0x%040x" % (0xC0FFEE0000 + next(self._ids))
        return self._submit(identity, contract_name, {"contract_address": address})

    def submit_call(self, identity, address, contract_name, call_name, args):
        self.submissions.append(("call", address, call_name, list(args)))
        return self._submit(identity, call_name, {"events": list(self.events.get(call_name, []))})

    def wait_for_receipt(self, tx_hash, contract_name=None, address=None):
        return self._pending.pop(tx_hash)

    def read(self, address, contract_name, fn_name, args=()):
        self.reads.append((address, fn_name, list(args)))
        if self.probe_error is not None:
            raise self.probe_error
        return self.values.get(fn_name)


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def mapping_added():
    return EventRecord(name="MappingAdded", fields={"key": "0xAAA", "value": "0xBBB"})
