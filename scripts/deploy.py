#!/usr/bin/env python3
"""
Deploys Compound against the live CompoundRegistry, then LFGlobalEscrow
against the new Compound. Set DEPLOY_FRESH_REGISTRY=true to deploy a new
CompoundRegistry first instead of attaching to the known one.
"""

import os
import sys

from deployment.cli import PLANS_DIR, main

DEPLOY_PLAN = os.path.join(PLANS_DIR, 'deploy.json')
FRESH_REGISTRY_PLAN = os.path.join(PLANS_DIR, 'deploy_fresh.json')


def plan_path() -> str:
    if os.getenv("DEPLOY_FRESH_REGISTRY", "").lower() in ("1", "true", "yes"):
        return FRESH_REGISTRY_PLAN
    return DEPLOY_PLAN


if __name__ == "__main__":
    sys.exit(main([plan_path()]))
