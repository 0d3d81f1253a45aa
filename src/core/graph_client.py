"""
MS Graph client used for sending invoice mail.

One client per process, created on first use from the app-only credentials.
"""

from azure.identity import ClientSecretCredential
from msgraph import GraphServiceClient

from core.config import Settings
from core.errors import DeliveryError

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]

_graph_client: GraphServiceClient | None = None


def get_graph_client(settings: Settings) -> GraphServiceClient:
    global _graph_client
    if _graph_client is not None:
        return _graph_client

    if not settings.graph_configured:
        raise DeliveryError("MS Graph credentials not configured")

    credential = ClientSecretCredential(
        tenant_id=settings.graph_tenant_id,
        client_id=settings.graph_app_id,
        client_secret=settings.graph_client_secret,
    )
    _graph_client = GraphServiceClient(credentials=credential, scopes=GRAPH_SCOPES)
    return _graph_client
