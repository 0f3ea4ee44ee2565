from typing import Callable, Protocol, runtime_checkable

from filesearch.core.cancellation import CancellationToken
from filesearch.core.models import RootOptions

Accept = Callable[[str], None]


@runtime_checkable
class ListingBackend(Protocol):
    """
    Lists candidate files under one root.

    `accept` receives each path relative to the root, in emission order, on the
    event loop thread. The coroutine returns once the listing is exhausted or
    cancelled and raises RootSearchError when the root cannot be listed.
    """

    name: str

    async def search(
        self,
        root_uri: str,
        options: RootOptions,
        accept: Accept,
        token: CancellationToken,
    ) -> None: ...
