"""
contract-ops - Main Entry Point
Deploy contracts and call state-changing methods with a confirmed preview
"""

import argparse
import asyncio
import sys
from typing import Callable, List, Optional

from loguru import logger

from blockchain import ContractCompiler, ContractManager, EtherscanVerifier, Web3ChainProvider
from orchestrator import (
    ConfirmationGate,
    TransactionOrchestrator,
    Verifier,
    resolve_deploy_request,
    resolve_write_request,
)
from orchestrator.errors import OrchestrationError
from orchestrator.models import OrchestrationResult
from utils.config import DEFAULT_CONFIG_PATH, AppConfig, load_config

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def configure_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Console sink on stderr, plus a rotating file sink when configured"""
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level="DEBUG" if verbose else "INFO")

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            format=FILE_FORMAT,
            level="DEBUG",
        )


def build_orchestrator(config: AppConfig) -> TransactionOrchestrator:
    """
    Wire the orchestrator to the configured network

    Args:
        config: Loaded configuration

    Returns:
        TransactionOrchestrator
    """
    network = config.network
    provider = Web3ChainProvider.from_network_config(network)
    contracts = ContractManager(config.artifacts_dir)

    explorer = None
    if network.explorer_api_url:
        explorer = EtherscanVerifier(
            network.explorer_api_url,
            network.explorer_api_key,
            contracts,
            chain_id=network.chain_id,
        )

    compiler = ContractCompiler(
        config.contracts_dir,
        config.artifacts_dir,
        config.solc_version,
        config.optimizer_runs,
    )

    return TransactionOrchestrator(
        provider,
        contracts,
        ConfirmationGate(),
        verifier=Verifier(explorer, network.name),
        compiler=compiler,
        poll_interval=config.poll_interval,
        confirmation_timeout=config.confirmation_timeout,
        tx_overrides=config.tx_overrides,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contract-ops",
        description="Deploy contracts and execute write methods with a confirmed preview",
    )
    parser.add_argument("--network", help="Network name from the config file")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the JSON config")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p_deploy = sub.add_parser("deploy", help="Deploy a contract with constructor arguments")
    p_deploy.add_argument("--contract", required=True, help="The contract name to deploy")
    p_deploy.add_argument(
        "constructor_args", nargs="*", default=[],
        help="Constructor arguments for the contract (optional)",
    )
    p_deploy.add_argument("--account", default="0", help="The account index to use for deployment")
    p_deploy.add_argument("--noconfirm", action="store_true", help="Skip deployment confirmation")
    p_deploy.add_argument("--noverify", action="store_true", help="Skip contract verification")
    p_deploy.add_argument(
        "--confirmations", default="5", help="Number of block confirmations to wait for",
    )

    p_write = sub.add_parser("write", help="Execute a write method on a smart contract")
    p_write.add_argument("--contract", required=True, help="The contract name or address")
    p_write.add_argument("--address", required=True, help="The contract address")
    p_write.add_argument("--method", required=True, help="The method name to call")
    p_write.add_argument("args", nargs="*", default=[], help="Method arguments (optional)")
    p_write.add_argument("--account", default="0", help="The account index to use for transaction")
    p_write.add_argument("--noconfirm", action="store_true", help="Skip transaction confirmation")

    return parser


def _print_result(result: OrchestrationResult):
    if result.cancelled:
        return

    if result.contract_address:
        print(f"Contract {result.request.contract_name} deployed to: {result.contract_address}")
        print(f"Transaction hash: {result.pending.tx_hash}")
        if result.verification is not None:
            reason = f" ({result.verification.reason})" if result.verification.reason else ""
            print(f"Verification: {result.verification.status.value}{reason}")
        return

    receipt = result.receipt
    print(f"Transaction hash: {receipt.tx_hash}")
    print(f"Block: {receipt.confirmed_block}")
    print(f"Gas used: {receipt.gas_used}")


def main(
    argv: Optional[List[str]] = None,
    orchestrator_factory: Callable[[AppConfig], TransactionOrchestrator] = build_orchestrator,
) -> int:
    """
    Run one CLI command

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, args.network)
        configure_logging(args.verbose, config.log_file)

        if args.command == "deploy":
            request = resolve_deploy_request(
                args.contract,
                args.constructor_args,
                account=args.account,
                noconfirm=args.noconfirm,
                noverify=args.noverify,
                confirmations=args.confirmations,
            )
        else:
            request = resolve_write_request(
                args.contract,
                args.address,
                args.method,
                args.args,
                account=args.account,
                noconfirm=args.noconfirm,
            )

        orchestrator = orchestrator_factory(config)

        if args.command == "deploy":
            result = asyncio.run(orchestrator.deploy(request))
        else:
            result = asyncio.run(orchestrator.write(request))

    except OrchestrationError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    _print_result(result)
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
