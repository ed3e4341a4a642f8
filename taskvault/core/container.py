from dataclasses import dataclass

from ..application.services.auth_guard import AuthGuard
from ..application.services.auth_service import AuthService
from ..application.services.credential_service import CredentialService
from ..application.services.session_manager import SessionManager
from ..application.services.task_service import TaskService
from ..domain.ports.persistence import PersistenceGateway
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    credential_service: CredentialService
    session_manager: SessionManager
    auth_guard: AuthGuard
    auth_service: AuthService
    task_service: TaskService
