"""
Onboarding client: authenticate against the onboarding service and import
entity batches into its data sources.

Modules:
    validation  - Batch validation run before any network call
    auth        - Credential exchange and single-token cache
    ingest      - Import submission and response mapping
    client      - OnboardingServiceClient facade (async and blocking calls)
    errors      - Exception hierarchy
    logging     - Structured JSON/console logging with correlation ids
    config      - YAML/environment configuration

Basic Usage:
    from onboarding import DynamicEntity, DynamicProperty, OnboardingServiceClient

    entities = [
        DynamicEntity(key="sku-1", properties=[DynamicProperty(id="name", value="Chair")]),
    ]
    async with OnboardingServiceClient(provider_id, provider_secret) as client:
        outcome = await client.start_entity_import("products", entities)
"""

from onboarding.client import OnboardingServiceClient
from onboarding.config import OnboardingConfig, load_config
from onboarding.errors import (
    AuthenticationError,
    AuthorizationError,
    DeserializationError,
    OnboardingError,
    OperationCancelledError,
    PreconditionError,
    TransportError,
    ValidationError,
)
from onboarding.models import (
    DynamicEntity,
    DynamicProperty,
    ImportBatchResult,
    ImportOutcome,
)
from onboarding.validation import validate_import

__version__ = "0.1.0"

__all__ = [
    "OnboardingServiceClient",
    "OnboardingConfig",
    "load_config",
    "DynamicEntity",
    "DynamicProperty",
    "ImportBatchResult",
    "ImportOutcome",
    "validate_import",
    "OnboardingError",
    "PreconditionError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "DeserializationError",
    "TransportError",
    "OperationCancelledError",
]
