"""Update-queue constants."""

from newbridge.models.enums import AvailabilityStatus

# Recorded as the reviewer when the resolving principal has no e-mail (admin password session)
SYSTEM_REVIEWER_EMAIL = "system"

# Recorded as the submitter for an admin password session without an e-mail
ADMIN_SUBMITTER_EMAIL = "admin"

VALID_AVAILABILITY_STATUSES = {status.value for status in AvailabilityStatus}
