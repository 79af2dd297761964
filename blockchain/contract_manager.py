"""
Contract Manager
Resolves contract interfaces and build metadata from compiled artifacts
"""

import json
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from orchestrator.errors import AmbiguousArtifact, ArtifactNotFound
from orchestrator.models import KnownInterface


class ContractManager:
    """
    Reads Hardhat-layout artifacts:

    - artifacts/contracts/<File>.sol/<Name>.json      abi + bytecode
    - artifacts/contracts/<File>.sol/<Name>.dbg.json  pointer to build-info
    - artifacts/build-info/<id>.json                  solc version + standard JSON input
    """

    def __init__(self, artifacts_dir: str = "artifacts"):
        """
        Initialize Contract Manager

        Args:
            artifacts_dir: Root of the compiled artifacts
        """
        self.artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, KnownInterface] = {}

    def _find_artifact(self, contract: str) -> Path:
        # Fully qualified names look like contracts/Token.sol:Token
        if ':' in contract:
            source_name, name = contract.rsplit(':', 1)
            path = self.artifacts_dir / source_name / f"{name}.json"
            if path.is_file():
                return path
            raise ArtifactNotFound(f"Contract artifact not found: {path}")

        if not self.artifacts_dir.is_dir():
            raise ArtifactNotFound(f"Artifacts directory not found: {self.artifacts_dir}")

        matches = [
            path for path in self.artifacts_dir.rglob(f"{contract}.json")
            if 'build-info' not in path.parts
        ]

        if not matches:
            raise ArtifactNotFound(f"Contract artifact not found for {contract}")

        if len(matches) > 1:
            options = ", ".join(
                f"{path.parent.relative_to(self.artifacts_dir).as_posix()}:{contract}"
                for path in sorted(matches)
            )
            raise AmbiguousArtifact(
                f"Multiple artifacts named {contract}; use a fully qualified name ({options})"
            )

        return matches[0]

    def load_interface(self, contract: str) -> KnownInterface:
        """
        Load the ABI and bytecode of a compiled contract

        Args:
            contract: Contract name or fully qualified name

        Returns:
            KnownInterface
        """
        if contract in self._cache:
            return self._cache[contract]

        path = self._find_artifact(contract)

        with open(path, 'r') as f:
            artifact = json.load(f)

        if 'abi' not in artifact:
            raise ArtifactNotFound(f"Artifact {path} has no ABI")

        interface = KnownInterface(
            name=artifact.get('contractName', path.stem),
            abi=tuple(artifact['abi']),
            bytecode=artifact.get('bytecode'),
            source_name=artifact.get('sourceName'),
        )

        self._cache[contract] = interface
        logger.debug(f"Loaded {interface.name} from {path}")
        return interface

    def load_build_info(self, contract: str) -> Dict:
        """
        Load the build-info record a contract was compiled from

        Args:
            contract: Contract name or fully qualified name

        Returns:
            Build-info dict (solcVersion, solcLongVersion, input)
        """
        artifact_path = self._find_artifact(contract)
        dbg_path = artifact_path.with_name(f"{artifact_path.stem}.dbg.json")

        if not dbg_path.is_file():
            raise ArtifactNotFound(f"Debug file not found: {dbg_path}")

        with open(dbg_path, 'r') as f:
            dbg = json.load(f)

        build_info_path = (dbg_path.parent / dbg['buildInfo']).resolve()

        if not build_info_path.is_file():
            raise ArtifactNotFound(f"Build info not found: {build_info_path}")

        with open(build_info_path, 'r') as f:
            return json.load(f)

        for path in sorted(self.artifacts_dir.rglob("*.json")):
            if 'build-info' in path.parts or path.name.endswith('.dbg.json'):
                continue
            names.append(path.stem)

        return names

    def qualified_name(self, contract: str) -> Optional[str]:
        """`<sourceName>:<contractName>` as explorers expect it"""
        interface = self.load_interface(contract)
        if not interface.source_name:
            return None
        return f"{interface.source_name}:{interface.name}"
