"""Protocol definitions for wallet pass clients.

This module defines the protocol that platform clients implement, so code
that only creates, reads, updates and retires passes does not depend on a
specific provider.
"""

from typing import Protocol, TypeVar

PassObjectT = TypeVar("PassObjectT")


class PassClient(Protocol[PassObjectT]):
    """Protocol for pass CRUD on a wallet platform.

    ``PassObjectT`` is the platform's own object type; convert unified passes
    before calling these methods.
    """

    async def create_pass(self, pass_object: PassObjectT) -> PassObjectT:
        """Create a pass and return the stored version."""
        ...

    async def get_pass(self, pass_id: str) -> PassObjectT:
        """Fetch a pass by its id."""
        ...

    async def update_pass(self, pass_id: str, pass_object: PassObjectT) -> PassObjectT:
        """Replace a pass and return the stored version."""
        ...

    async def delete_pass(self, pass_id: str) -> None:
        """Retire a pass.

        Platforms without deletion may expire the pass instead.
        """
        ...
