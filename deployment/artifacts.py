import os
import json
import glob
from typing import Any, Dict, List, Optional

from .errors import ArtifactNotFound


class ArtifactStore:
    """Hardhat build artifacts, looked up by contract name."""

    def __init__(self, artifacts_dir: str = "artifacts"):
        self.artifacts_dir = artifacts_dir
        self._cache: Dict[str, Dict[str, Any]] = {}

    def path_for(self, contract_name: str) -> Optional[str]:
        # Hardhat layout first: artifacts/contracts/<Name>.sol/<Name>.json
        default = os.path.join(self.artifacts_dir, 'contracts', f'{contract_name}.sol', f'{contract_name}.json')
        if os.path.exists(default):
            return default
        pattern = os.path.join(self.artifacts_dir, '**', f'{contract_name}.json')
        matches = sorted(glob.glob(pattern, recursive=True))
        return matches[0] if matches else None

    def load(self, contract_name: str) -> Dict[str, Any]:
        if contract_name not in self._cache:
            path = self.path_for(contract_name)
            if path is None:
                raise ArtifactNotFound(f"no build artifact for {contract_name} under {self.artifacts_dir}")
            with open(path, 'r') as f:
                self._cache[contract_name] = json.load(f)
        return self._cache[contract_name]

    def abi(self, contract_name: str) -> List[Dict[str, Any]]:
        return self.load(contract_name)['abi']

    def bytecode(self, contract_name: str) -> str:
        bytecode = self.load(contract_name).get('bytecode')
        if not bytecode or bytecode == '0x':
            raise ArtifactNotFound(f"artifact for {contract_name} has no deployable bytecode")
        return bytecode
