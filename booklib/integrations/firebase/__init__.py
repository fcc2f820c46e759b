"""Firebase integration: Identity Toolkit accounts and Firestore documents."""

from .auth import IdentityProviderClient
from .firestore import FirestoreClient
from .models import FirebaseAuthResponse

__all__ = [
    "IdentityProviderClient",
    "FirestoreClient",
    "FirebaseAuthResponse",
]
