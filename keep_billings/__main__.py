"""Entry point for billing report generation"""
import json
import logging
import sys
import traceback

from keep_billings.config import settings
from keep_billings.report import create_generator
from keep_billings.services.customers import load_customers
from keep_billings.services.ethereum import EthereumClient
from keep_billings.services.exporter import JsonExporter

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


def generate_billings(generator, customers, exporter) -> int:
    """
    Generate and export one report per customer.

    A failing customer is logged and skipped so the rest of the batch still
    gets its reports.

    Returns:
        int: number of customers whose report could not be produced
    """
    failures = 0

    for customer in customers:
        logger.info(f"Generating billing for {customer.name}")

        try:
            report = generator.generate(customer)
        except Exception as e:
            logger.error(f"Could not generate billing report for customer {customer.name}: {e}")
            failures += 1
            continue

        try:
            exporter.export(report)
        except OSError as e:
            logger.error(f"Could not write billing report for customer {customer.name}: {e}")
            failures += 1
            continue

        logger.info(f"Completed billing for {customer.name}")

    return failures


def run() -> None:
    """Generate billing reports for all configured customers."""
    try:
        # Log config (excluding sensitive data)
        safe_config = settings.model_dump(mode='json', exclude={'ETH_API_KEY'})
        logger.info("Using configuration:")
        logger.info(json.dumps(safe_config, indent=2))

        customers = load_customers(settings.CUSTOMERS_FILE)

        client = EthereumClient(settings.ethereum_settings)
        generator = create_generator(
            settings.REPORT_TYPE,
            client,
            from_block=settings.FROM_BLOCK,
            to_block=settings.TO_BLOCK
        )

        # Every report of this run shares one snapshot
        generator.fetch_common_data()

        failures = generate_billings(generator, customers, JsonExporter(settings.OUTPUT_DIR))
        logger.info(f"Billing generation complete: {len(customers) - failures}/{len(customers)} reports")

    except Exception as e:
        logger.error(f"Error during billing generation: {e}")
        traceback.print_exc()
        sys.exit(1)

if __name__ == "__main__":
    run()
