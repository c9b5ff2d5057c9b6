"""Errors surfaced by the federated search core."""


class InvalidArgumentError(ValueError):
    """The search request is malformed (e.g. blank query); no source was queried."""
