"""Licensing registry client protocol.

Retrieval and authentication against the licensing registry live outside
this package. Clients implement this protocol and surface transport and
authentication failures as :class:`~licencewatch.registry.types.RegistryError`
subclasses, typically built with
:func:`~licencewatch.registry.types.error_for_status`.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .types import LicenceEnquiry


@runtime_checkable
class RegistryClient(Protocol):
    """Interface a licensing registry client must implement.

    Example implementation:
        class HttpRegistryClient:
            async def fetch_licence(self, enquiry: LicenceEnquiry) -> Mapping[str, Any]:
                response = await self._client.post(
                    "/full-driver-enquiry/v1/driving-licences/retrieve",
                    json=enquiry.to_payload(),
                )
                if response.status_code >= 400:
                    raise error_for_status(response.status_code, response.json())
                return response.json()

            async def health_check(self) -> bool:
                ...
    """

    async def fetch_licence(self, enquiry: LicenceEnquiry) -> Mapping[str, Any]:
        """Retrieve the raw licence record for an enquiry.

        Args:
            enquiry: Licence number and optional CPC/tachograph flags.

        Returns:
            Decoded registry response body.

        Raises:
            RegistryError: If the registry cannot be reached or rejects the enquiry.
        """
        ...

    async def health_check(self) -> bool:
        """Check that the registry accepts our credentials.

        Returns:
            True if authentication succeeds.
        """
        ...
