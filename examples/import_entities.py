#!/usr/bin/env python3
"""
Example importing a small entity batch into a data source.

Credentials come from the environment (or a .env file in the working
directory):

    ONBOARDING_DATA_PROVIDER_ID=...
    ONBOARDING_DATA_PROVIDER_SECRET=...

Usage:
    python examples/import_entities.py products
"""

import asyncio
import logging
import sys
import uuid

from onboarding import (
    DynamicEntity,
    DynamicProperty,
    OnboardingError,
    OnboardingServiceClient,
    load_config,
)
from onboarding.logging import setup_logging


async def main(data_source: str) -> int:
    setup_logging(level=logging.INFO)
    config = load_config(load_env_file=True)

    entities = [
        DynamicEntity(
            key="sku-1",
            properties=[
                DynamicProperty(id="name", language="en", value="Chair"),
                DynamicProperty(id="name", language="sv", value="Stol"),
            ],
        ),
        DynamicEntity(
            key="sku-2",
            properties=[DynamicProperty(id="name", language="en", value="Table")],
        ),
    ]

    async with OnboardingServiceClient.from_config(config) as client:
        try:
            outcome = await client.start_entity_import(
                data_source, entities, correlation_id=uuid.uuid4()
            )
        except OnboardingError as e:
            print(f"Import failed: {e}")
            return 1

    print(f"{outcome.status_code} {outcome.message}")
    if outcome.result is not None:
        print(outcome.result.model_dump_json(indent=2))
    return 0 if outcome.is_success else 1


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1])))
