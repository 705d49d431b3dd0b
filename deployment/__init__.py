"""
Escrow Deployment
=================

Deployment and bootstrap orchestration for the escrow contracts:
- CompoundRegistry: underlying asset to cToken mapping
- Compound: reads the registry
- LFGlobalEscrow: depends on Compound

The sequencer creates or attaches contracts in the order given and threads
their addresses forward; the invoker makes post-deployment calls and
decodes their receipts.
"""

from .errors import (
    CallFailed,
    ConfirmationTimeout,
    CreationFailed,
    DeploymentError,
    IdentityUnavailable,
    InvalidReference,
    UnexpectedReceiptShape,
)
from .invoker import ConfigurationInvoker
from .models import ConfigurationCall, Mode, ReadBack, Ref, ResourceSpec
from .sequencer import DeploymentSequencer

__version__ = "1.0.0"

__all__ = [
    'CallFailed',
    'ConfigurationCall',
    'ConfigurationInvoker',
    'ConfirmationTimeout',
    'CreationFailed',
    'DeploymentError',
    'DeploymentSequencer',
    'IdentityUnavailable',
    'InvalidReference',
    'Mode',
    'ReadBack',
    'Ref',
    'ResourceSpec',
    'UnexpectedReceiptShape',
]
