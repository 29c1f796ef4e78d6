"""Import submission to the onboarding service."""

from onboarding.ingest.submitter import (
    IMPORT_ENDPOINT,
    UNAUTHORIZED_STATUSES,
    ImportSubmitter,
    parse_batch_result,
)

__all__ = [
    "IMPORT_ENDPOINT",
    "ImportSubmitter",
    "UNAUTHORIZED_STATUSES",
    "parse_batch_result",
]
