import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)


def send_slack_alert(webhook: Optional[str], message: str, network: str = "") -> bool:
    """Post a run summary to Slack. Failures are logged, never raised."""
    if not webhook:
        return False

    payload = {
        "text": f"Escrow deployment ({network}): {message}" if network else f"Escrow deployment: {message}",
    }
    try:
        response = requests.post(webhook, json=payload, timeout=10)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send Slack alert: {e}")
        return False
    return True
