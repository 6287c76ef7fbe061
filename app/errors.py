from __future__ import annotations

from typing import Iterable


class InputValidationError(Exception):
    """Raised at the HTTP boundary when a validator rejected the request body."""

    status_code = 400

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
