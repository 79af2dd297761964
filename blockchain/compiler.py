"""
Contract Compiler
Compiles Solidity sources with solc (py-solc-x) into Hardhat-layout artifacts
"""

import hashlib
import json
from pathlib import Path
from typing import Dict, List, Optional

from solcx import (
    compile_standard,
    get_installed_solc_versions,
    get_solc_version,
    install_solc,
    set_solc_version,
)
from solcx.exceptions import SolcError
from loguru import logger

from orchestrator.errors import CompilationError


class ContractCompiler:
    """
    Compile step of the deploy pipeline

    Writes the same files Hardhat does, so artifacts produced by either
    toolchain are interchangeable.
    """

    def __init__(
        self,
        contracts_dir: str = "contracts",
        artifacts_dir: str = "artifacts",
        solc_version: str = "0.8.24",
        optimizer_runs: Optional[int] = 200,
    ):
        """
        Initialize Contract Compiler

        Args:
            contracts_dir: Directory holding *.sol sources
            artifacts_dir: Output directory for artifacts
            solc_version: solc release to compile with
            optimizer_runs: Optimizer runs, None disables the optimizer
        """
        self.contracts_dir = Path(contracts_dir)
        self.artifacts_dir = Path(artifacts_dir)
        self.solc_version = solc_version
        self.optimizer_runs = optimizer_runs
        self.base_path = self.contracts_dir.resolve().parent

    def _source_name(self, path: Path) -> str:
        return path.resolve().relative_to(self.base_path).as_posix()

    def _ensure_solc(self):
        installed = {str(version) for version in get_installed_solc_versions()}
        if self.solc_version not in installed:
            logger.info(f"Installing solc {self.solc_version}...")
            install_solc(self.solc_version)
        set_solc_version(self.solc_version)

    def build_input(self, sources: List[Path]) -> Dict:
        """Standard JSON input for the given source files"""
        settings = {
            "outputSelection": {"*": {"*": ["abi", "evm.bytecode.object"]}},
        }
        if self.optimizer_runs is not None:
            settings["optimizer"] = {"enabled": True, "runs": self.optimizer_runs}

        return {
            "language": "Solidity",
            "sources": {
                self._source_name(path): {"content": path.read_text()}
                for path in sources
            },
            "settings": settings,
        }

    def _read_import(self, source_name: str) -> Optional[str]:
        for root in (self.base_path, self.base_path / "node_modules"):
            candidate = root / source_name
            if candidate.is_file():
                return candidate.read_text()
        return None

    def compile(self) -> List[str]:
        """
        Compile every source under the contracts directory

        Returns:
            Names of the contracts written to the artifacts directory
        """
        if not self.contracts_dir.is_dir():
            logger.warning(
                f"No contracts directory at {self.contracts_dir}, using existing artifacts"
            )
            return []

        sources = sorted(self.contracts_dir.rglob("*.sol"))
        if not sources:
            logger.warning(f"No Solidity sources in {self.contracts_dir}")
            return []

        self._ensure_solc()
        input_json = self.build_input(sources)

        try:
            output = compile_standard(
                input_json,
                base_path=str(self.base_path),
                allow_paths=[str(self.base_path), str(self.base_path / "node_modules")],
                solc_version=self.solc_version,
            )
        except SolcError as e:
            raise CompilationError(f"Compilation failed: {e}") from e

        for error in output.get('errors', []):
            if error.get('severity') == 'warning':
                logger.warning(error.get('formattedMessage', error.get('message', '')).strip())

        # Imported files are resolved by solc from disk; keep them for verification
        for source_name in output.get('sources', {}):
            if source_name not in input_json['sources']:
                content = self._read_import(source_name)
                if content is not None:
                    input_json['sources'][source_name] = {"content": content}

        build_info_path = self._write_build_info(input_json)
        return self._write_artifacts(output, build_info_path)

    def _write_build_info(self, input_json: Dict) -> Path:
        encoded = json.dumps(input_json, sort_keys=True).encode()
        build_id = hashlib.sha256(self.solc_version.encode() + encoded).hexdigest()[:32]

        build_info = {
            "_format": "hh-sol-build-info-1",
            "id": build_id,
            "solcVersion": self.solc_version,
            "solcLongVersion": str(get_solc_version(with_commit_hash=True)),
            "input": input_json,
        }

        path = self.artifacts_dir / "build-info" / f"{build_id}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(build_info, f, indent=2)

        return path

    def _write_artifacts(self, output: Dict, build_info_path: Path) -> List[str]:
        written = []

        for source_name, contracts in output.get('contracts', {}).items():
            for name, compiled in contracts.items():
                directory = self.artifacts_dir / source_name
                directory.mkdir(parents=True, exist_ok=True)

                bytecode = compiled.get('evm', {}).get('bytecode', {}).get('object', '')
                artifact = {
                    "_format": "hh-sol-artifact-1",
                    "contractName": name,
                    "sourceName": source_name,
                    "abi": compiled.get('abi', []),
                    "bytecode": f"0x{bytecode}",
                }

                with open(directory / f"{name}.json", 'w') as f:
                    json.dump(artifact, f, indent=2)

                dbg = {
                    "_format": "hh-sol-dbg-1",
                    "buildInfo": Path(
                        *([".."] * len(Path(source_name).parts)),
                        "build-info",
                        build_info_path.name,
                    ).as_posix(),
                }
                with open(directory / f"{name}.dbg.json", 'w') as f:
                    json.dump(dbg, f, indent=2)

                written.append(name)

        logger.debug(f"Wrote artifacts for {len(written)} contract(s)")
        return written
