from fastapi import APIRouter, Depends, Query

from schoollife.api.deps import get_neis_client, get_selection, get_shared_store
from schoollife.schemas.school import (
    ClassSelectionIn,
    School,
    SchoolSelection,
    SchoolSelectionIn,
    ThemeIn,
)
from schoollife.services import preferences
from schoollife.services.neis import NeisClient
from schoollife.services.shared_store import SharedStore

router = APIRouter(prefix="/schools", tags=["schools"])


@router.get("/search", response_model=list[School])
def search_schools(
    q: str = Query(..., min_length=1, description="School name (partial)"),
    client: NeisClient = Depends(get_neis_client),
):
    return client.search_schools(q)


@router.get("/selection", response_model=SchoolSelection)
def get_current_selection(selection: SchoolSelection = Depends(get_selection)):
    return selection


@router.put("/selection", response_model=SchoolSelection)
def select_school(payload: SchoolSelectionIn, store: SharedStore = Depends(get_shared_store)):
    return preferences.save_school(store, payload.office_code, payload.school_code, payload.school_name)


@router.put("/selection/class", response_model=SchoolSelection)
def select_class(payload: ClassSelectionIn, store: SharedStore = Depends(get_shared_store)):
    return preferences.save_class(store, payload.grade, payload.class_number)


@router.put("/selection/theme", response_model=SchoolSelection)
def select_theme(payload: ThemeIn, store: SharedStore = Depends(get_shared_store)):
    return preferences.set_dark_mode(store, payload.dark_mode)
