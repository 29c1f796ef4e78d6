"""
Entity batch validation.

Runs before any network call. Checks, in order, failing on the first
violation:

1. the entity collection is present (PreconditionError)
2. the data source name is non-blank (PreconditionError)
3. None entries are dropped
4. missing properties containers are normalized to []
5. every entity has a non-blank key (ValidationError)
6. keys are unique across the batch (ValidationError)
7. (id, language) pairs are unique within each entity (ValidationError)
"""

import logging
from collections import Counter
from collections.abc import Sequence

from onboarding.errors import PreconditionError, ValidationError
from onboarding.models import DynamicEntity

logger = logging.getLogger(__name__)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def check_preconditions(
    data_source: str | None, entities: Sequence[DynamicEntity | None] | None
) -> None:
    """
    Reject caller misuse before the batch is inspected.

    Raises:
        PreconditionError: If entities is None or data_source is blank
    """
    if entities is None:
        raise PreconditionError("Value cannot be null.", argument="entities")
    if _is_blank(data_source):
        raise PreconditionError(
            "Value cannot be null or whitespace.", argument="data_source"
        )


def validate_entities(
    entities: Sequence[DynamicEntity | None],
) -> list[DynamicEntity]:
    """
    Drop None entries, normalize properties and check key/property uniqueness.

    Entities whose properties are None get an empty list assigned in place;
    nothing else on the entity is touched.

    Returns:
        Surviving entities in input order

    Raises:
        ValidationError: On a missing key, duplicate keys or duplicate properties
    """
    valid = [entity for entity in entities if entity is not None]
    for entity in valid:
        if entity.properties is None:
            entity.properties = []

    dropped = len(entities) - len(valid)
    if dropped:
        logger.debug(
            "Dropped null entities from batch",
            extra={"dropped_entities": dropped, "batch_size": len(valid)},
        )

    if any(_is_blank(entity.key) for entity in valid):
        raise ValidationError("Entities must not have null or empty Key identifiers.")

    key_counts = Counter(entity.key for entity in valid)
    duplicate_keys = [key for key, count in key_counts.items() if count > 1]
    if duplicate_keys:
        raise ValidationError(
            f"Collection contains duplicate keys: {','.join(duplicate_keys)}.",
            keys=duplicate_keys,
        )

    offending = [
        entity.key
        for entity in valid
        if any(
            count > 1
            for count in Counter(prop.identity for prop in entity.properties).values()
        )
    ]
    if offending:
        raise ValidationError(
            f"Entities: {','.join(offending)} contain duplicated properties",
            keys=offending,
        )

    return valid


def validate_import(
    data_source: str | None, entities: Sequence[DynamicEntity | None] | None
) -> list[DynamicEntity]:
    """Run the precondition and batch checks together."""
    check_preconditions(data_source, entities)
    return validate_entities(entities)


__all__ = ["check_preconditions", "validate_entities", "validate_import"]
