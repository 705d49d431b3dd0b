#!/usr/bin/env python3
"""
Run a deployment plan: deploy or attach its resources, then make its
configuration calls. Exits 0 when every step landed, 1 otherwise.
"""

import os
import sys
import logging
from typing import List, Optional

from .config import NetworkConfig
from .errors import DeploymentError
from .invoker import ConfigurationInvoker
from .ledger import Ledger
from .notify import send_slack_alert
from .plan import load_plan
from .record import build_record, write_record
from .sequencer import DeploymentSequencer

logger = logging.getLogger(__name__)

PLANS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'scripts', 'plans')


def configure_logging(log_file: str):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def run_plan(plan_path: str, config: NetworkConfig, ledger: Optional[Ledger] = None):
    """Execute one plan end to end and return (instances, call results)."""
    plan = load_plan(plan_path)
    logger.info(f"Loaded plan {plan_path}: {len(plan.resources)} resources, {len(plan.calls)} calls")

    ledger = ledger or Ledger(config)
    sequencer = DeploymentSequencer(ledger)
    identity = sequencer.resolve_identity()
    instances = sequencer.run(plan.resources)
    for name, instance in instances.items():
        logger.info(f"{name}: {instance.address}")

    results = []
    if plan.calls:
        invoker = ConfigurationInvoker(ledger, identity, instances)
        results = invoker.run_sequence(plan.calls)

    if config.record_path:
        write_record(config.record_path, build_record(config.network, identity, instances, results))
        logger.info(f"Deployment record written to {config.record_path}")
    return instances, results


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        config = NetworkConfig.from_env()
    except DeploymentError as e:
        configure_logging(os.getenv("DEPLOY_LOG", "deployment.log"))
        logger.error(f"Invalid configuration: {e}")
        return 1
    configure_logging(config.log_file)

    plan_path = argv[0] if argv else os.getenv("DEPLOY_PLAN", os.path.join(PLANS_DIR, 'deploy.json'))
    try:
        instances, results = run_plan(plan_path, config)
    except DeploymentError as e:
        logger.error(f"Run aborted ({type(e).__name__}): {e}")
        if e.completed:
            logger.error(f"Completed before the failure: {e.completed}")
        send_slack_alert(config.slack_webhook, f"{os.path.basename(plan_path)} aborted: {e}", config.network)
        return 1

    summary = ", ".join(f"{name}={instance.address}" for name, instance in instances.items())
    logger.info(f"Run finished: {summary}; {len(results)} calls confirmed")
    send_slack_alert(config.slack_webhook, f"{os.path.basename(plan_path)} finished: {summary}", config.network)
    return 0


if __name__ == "__main__":
    sys.exit(main())
