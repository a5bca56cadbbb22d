from fastapi import Depends, HTTPException, Request, status

from schoollife.schemas.school import SchoolSelection
from schoollife.services.neis import NeisClient
from schoollife.services.override_store import OverrideStore
from schoollife.services.preferences import load_selection
from schoollife.services.shared_store import SharedStore

# objects are built once at startup (see schoollife.main) and parked on app.state


def get_shared_store(request: Request) -> SharedStore:
    return request.app.state.shared_store


def get_override_store(request: Request) -> OverrideStore:
    return request.app.state.override_store


def get_neis_client(request: Request) -> NeisClient:
    return request.app.state.neis_client


def get_selection(store: SharedStore = Depends(get_shared_store)) -> SchoolSelection:
    return load_selection(store)


def require_selection(selection: SchoolSelection = Depends(get_selection)) -> SchoolSelection:
    if not selection.is_configured:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="no school selected")
    return selection
