from __future__ import annotations

from shared.domain.exceptions import EntityNotFound


class CartElementNotFound(EntityNotFound):
    """The cart holds no line for the requested product."""
