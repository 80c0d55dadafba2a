#!/usr/bin/env python
"""
SOAP Client Example

Demonstrates how to call a SOAP endpoint with SOAPClient. The endpoint comes from
SOAP_ENDPOINT (see soap_comm.config.ClientConfig).
"""

import logging
import sys
from dataclasses import dataclass

from soap_comm import ClientConfig, FaultError, SOAPClient, SOAPError
from soap_comm.telemetry import setup_metrics, setup_tracer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@dataclass
class GetStatus:
    ID: int = 0


@dataclass
class StatusResponse:
    State: str = ""


def main() -> int:
    config = ClientConfig.from_env()
    logger.info(f"Client configuration: {config.to_dict()}")

    if config.enable_tracing:
        setup_tracer(config.service_name)
        setup_metrics(config.service_name)

    with SOAPClient.from_config(config) as client:
        try:
            status = client.do("GetStatus", GetStatus(ID=42), StatusResponse())
        except FaultError as e:
            logger.error(f"Service returned fault {e.code}: {e.message}")
            return 2
        except SOAPError as e:
            logger.error(f"Call failed: {e}")
            return 1

    logger.info(f"Service state: {status.State}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
