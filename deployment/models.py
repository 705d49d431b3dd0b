"""
Plain data types shared by the sequencer, the invoker and the ledger.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import PlanError


class Mode(Enum):
    CREATE = "create"
    ATTACH = "attach"


@dataclass(frozen=True)
class Ref:
    """Placeholder for the address (or a decoded field) of an earlier step."""

    name: str
    field: Optional[str] = None


@dataclass
class ActorIdentity:
    """The signer every transaction of a run is submitted from."""

    address: str
    balance: int
    account: Any = field(default=None, repr=False)
    nonce: int = 0


@dataclass
class ResourceSpec:
    name: str
    mode: Mode = Mode.CREATE
    constructor_args: List[Any] = field(default_factory=list)
    target: Optional[str] = None
    contract: Optional[str] = None
    probe: Optional[str] = None

    def __post_init__(self):
        if self.mode is Mode.ATTACH and not self.target:
            raise PlanError(f"resource '{self.name}' is ATTACH but has no target address")

    @property
    def contract_name(self) -> str:
        # Artifact name; plans can deploy the same contract under two names
        return self.contract or self.name


@dataclass
class EventRecord:
    name: str
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Receipt:
    tx_hash: str
    status: bool
    block_number: Optional[int] = None
    events: List[EventRecord] = field(default_factory=list)
    contract_address: Optional[str] = None

    def first_event(self, name: Optional[str] = None) -> Optional[EventRecord]:
        """Return the first event called ``name``, or the first event at all."""
        for event in self.events:
            if name is None or event.name == name:
                return event
        return None


@dataclass
class ResourceInstance:
    name: str
    address: str
    spec: ResourceSpec
    receipt: Optional[Receipt] = None

    @property
    def created(self) -> bool:
        return self.receipt is not None


@dataclass
class ReadBack:
    call: str
    args: List[Any] = field(default_factory=list)


@dataclass
class ConfigurationCall:
    instance_ref: str
    call: str
    args: List[Any] = field(default_factory=list)
    event: Optional[str] = None
    verify: Optional[ReadBack] = None
    name: Optional[str] = None

    @property
    def result_name(self) -> str:
        return self.name or self.call


@dataclass
class CallResult:
    call: ConfigurationCall
    receipt: Receipt
    event: EventRecord
    verified: Any = None

    @property
    def fields(self) -> Dict[str, Any]:
        return self.event.fields
