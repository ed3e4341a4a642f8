from fastapi import Depends, Request

from .container import ApplicationContainer


def get_container(request: Request) -> ApplicationContainer:
    container = getattr(request.app.state, "container", None)
    if not container:
        raise RuntimeError("Application container not initialised.")
    return container


def get_settings(container: ApplicationContainer = Depends(get_container)):
    return container.settings


def get_auth_service(container: ApplicationContainer = Depends(get_container)):
    return container.auth_service


def get_auth_guard(container: ApplicationContainer = Depends(get_container)):
    return container.auth_guard


def get_task_service(container: ApplicationContainer = Depends(get_container)):
    return container.task_service
