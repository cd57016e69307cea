#!/usr/bin/env python
"""
RPC Client Example

Connects to an RPC server, loads its service manifest and makes a few calls through
the generic call entry point.

Server address and client name are read from SEAM_RPC_HOST, SEAM_RPC_PORT and
SEAM_RPC_NAME.
"""

import logging
import time

from seam_rpc import Client, ClientConfig, RemoteProcedureError
from seam_rpc.telemetry.metrics import setup_metrics
from seam_rpc.telemetry.tracer import setup_tracer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_catalog(client: Client):
    """Log every procedure signature the server exposes"""
    for service in client.catalog.services():
        logger.info(f"Service {service}: {client.catalog.documentation(service) or 'no documentation'}")
        for procedure in client.catalog.procedures(service):
            logger.info(f"  {procedure.signature}")


def main():
    """Run RPC client example"""
    config = ClientConfig.from_env()
    if config.enable_tracing:
        setup_tracer(config.service_name)
        setup_metrics(config.service_name)

    try:
        with Client(config) as client:
            start_time = time.time()
            count = client.load_services()
            logger.info(f"Loaded {count} procedures in {time.time() - start_time:.3f} seconds")

            print_catalog(client)

            status = client.call("KRPC", "GetStatus")
            logger.info(f"Server status: {status}")

            if ("SpaceCenter", "get_ActiveVessel") in client.catalog:
                vessel = client.call("SpaceCenter", "get_ActiveVessel")
                if vessel is None:
                    logger.info("No active vessel")
                else:
                    name = client.call("SpaceCenter", "Vessel_get_Name", vessel)
                    logger.info(f"Active vessel: {name} ({vessel!r})")

    except RemoteProcedureError as e:
        logger.error(f"Server reported an error: {e.description}")
    except ConnectionError as e:
        logger.error(f"Could not talk to the server at {config.host}:{config.rpc_port}: {e}")

    logger.info("Client exited")


if __name__ == "__main__":
    main()
