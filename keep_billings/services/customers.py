"""Customers file loading"""
import json
import logging
from typing import List

from pydantic import TypeAdapter, ValidationError

from keep_billings.models.customer import Customer

logger = logging.getLogger(__name__)


class CustomersFileError(Exception):
    """The customers file is missing or malformed"""
    pass


def load_customers(path: str) -> List[Customer]:
    """Load and validate the JSON list of customers"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw_customers = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read customers file {path}: {e}")
        raise CustomersFileError(f"Could not read customers file {path}: {str(e)}")

    try:
        customers = TypeAdapter(List[Customer]).validate_python(raw_customers)
    except ValidationError as e:
        logger.error(f"Invalid customers file {path}: {e}")
        raise CustomersFileError(f"Invalid customers file {path}: {str(e)}")

    logger.info(f"Loaded {len(customers)} customers from {path}")
    return customers
