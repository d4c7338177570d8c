"""
Error taxonomy for the plan pipeline.

Every failure the service can surface derives from PlanServiceError, which
carries the client-facing code and the HTTP status the API layer maps it to.
Messages of model and storage failures are generic on purpose; the underlying
exception is chained and logged, never returned.
"""


class PlanServiceError(Exception):
    code = "internal"
    status_code = 500
    default_message = "Failed to generate travel plan"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(PlanServiceError):
    code = "unauthenticated"
    status_code = 401
    default_message = "User must be authenticated"


class InvalidArgument(PlanServiceError):
    code = "invalid-argument"
    status_code = 400
    default_message = "Invalid request"


class RateLimitExceeded(PlanServiceError):
    code = "resource-exhausted"
    status_code = 429
    default_message = "Rate limit exceeded. Max 10 requests per hour."


class ModelUnavailable(PlanServiceError):
    code = "unavailable"
    status_code = 503
    default_message = "Travel plan generator is unavailable, please retry later"


class MalformedModelOutput(PlanServiceError):
    code = "internal"
    status_code = 500
    default_message = "Failed to generate travel plan"


class StorageError(PlanServiceError):
    code = "aborted"
    status_code = 500
    default_message = "Failed to save travel plan, please retry"


class PlanNotFound(PlanServiceError):
    code = "not-found"
    status_code = 404
    default_message = "Plan not found"
