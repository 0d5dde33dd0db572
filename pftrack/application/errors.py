"""
Error taxonomy shared by retrieval, aggregation and the HTTP layer.
"""


class ValidationError(ValueError):
    """Malformed required input (HTTP 400)"""
    pass


class NotFoundError(LookupError):
    """Id-scoped lookup found nothing for this owner (HTTP 404)"""
    pass


class StorageUnavailable(RuntimeError):
    """Record store unreachable, failed or timed out (HTTP 500). Never retried here."""
    pass


class PartialAggregationGap(Exception):
    """
    A secondary source (categories, one month's budgets) failed while the
    rest of the summary succeeded. Collected into the summary's `gaps`
    instead of being raised to the client.
    """

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason

    def as_dict(self) -> dict:
        return {"source": self.source, "reason": self.reason}
