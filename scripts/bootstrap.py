#!/usr/bin/env python3
"""
Registers cETH as the cToken for the ETH placeholder token on the deployed
CompoundRegistry and reads the mapping back.
"""

import os
import sys

from deployment.cli import PLANS_DIR, main

BOOTSTRAP_PLAN = os.path.join(PLANS_DIR, 'bootstrap.json')

if __name__ == "__main__":
    sys.exit(main([BOOTSTRAP_PLAN]))
