"""Client profile persistence interface."""

from typing import Protocol
from uuid import UUID

from nutrition_planner.domain.profiles import ClientProfile


class ClientProfileRepository(Protocol):
    """Persistence interface for normalized client profiles."""

    def create_profile(self, profile: ClientProfile) -> UUID:
        """Store a profile and return its id."""

    def get_profile(self, client_id: UUID) -> ClientProfile | None:
        """Return a stored profile, if present."""
