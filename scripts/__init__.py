"""
Deployment and Bootstrap Scripts
================================

Entry points for deploying and configuring the escrow contracts.

Structure:
- deploy.py: attach the live CompoundRegistry, deploy Compound and LFGlobalEscrow
- bootstrap.py: register the ETH/cETH mapping on the CompoundRegistry
- plans/: JSON deployment plans consumed by both scripts
"""

__version__ = "1.0.0"
