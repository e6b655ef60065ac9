"""Services subpackage — search client and viewport synchronization."""

from geoconnect.services.coordinator import (
    CoordinatorState,
    SearchAttempt,
    SearchTrigger,
    ViewportSearchCoordinator,
)
from geoconnect.services.debounce import Debouncer
from geoconnect.services.guards import FitPolicy, SequenceGuard, SuppressionLatch
from geoconnect.services.markers import Marker, MarkerLayer, markers_from_posts
from geoconnect.services.search_client import (
    PostSearchClient,
    SearchError,
    SearchResponseError,
    SearchTransportError,
)

__all__ = [
    "CoordinatorState",
    "Debouncer",
    "FitPolicy",
    "Marker",
    "MarkerLayer",
    "PostSearchClient",
    "SearchAttempt",
    "SearchError",
    "SearchResponseError",
    "SearchTransportError",
    "SearchTrigger",
    "SequenceGuard",
    "SuppressionLatch",
    "ViewportSearchCoordinator",
    "markers_from_posts",
]
