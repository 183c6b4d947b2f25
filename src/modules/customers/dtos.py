"""Customer DTOs.

``RequesterDTO`` is what the authentication collaborator hands to the
ordering core on every request: who is asking, and whether they hold
admin rights.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class RequesterDTO(BaseModel):
    """Immutable identity of the caller of a service operation."""

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    user_id: Optional[int] = None
    is_admin: bool = False

    def owns(self, customer_id: UUID) -> bool:
        return self.customer_id == customer_id

    def can_access(self, customer_id: UUID) -> bool:
        return self.is_admin or self.owns(customer_id)
