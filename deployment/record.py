import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from .models import ActorIdentity, CallResult, ResourceInstance


def build_record(network: str, identity: ActorIdentity, instances: Mapping[str, ResourceInstance],
                 results: List[CallResult]) -> Dict[str, Any]:
    return {
        'network': network,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'roles': {'deployer': identity.address},
        'contracts': {name: instance.address for name, instance in instances.items()},
        'created': [name for name, instance in instances.items() if instance.created],
        'calls': [
            {
                'call': result.call.result_name,
                'tx': result.receipt.tx_hash,
                'event': result.event.name,
                'verified': result.verified,
            }
            for result in results
        ],
    }


def write_record(path: str, record: Dict[str, Any]):
    """Write the run's addresses to ``path``. Nothing reads this back."""
    with open(path, 'w') as f:
        json.dump(record, f, indent=2, default=str)
