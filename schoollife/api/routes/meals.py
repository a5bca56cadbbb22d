from datetime import date

from fastapi import APIRouter, Depends, Query

from schoollife.api.deps import get_neis_client, get_selection
from schoollife.schemas.school import Meal, SchoolSelection
from schoollife.services.neis import NeisClient

router = APIRouter(prefix="/meals", tags=["meals"])


@router.get("", response_model=list[Meal])
def list_meals(
    day: date | None = Query(None, description="Defaults to today"),
    selection: SchoolSelection = Depends(get_selection),
    client: NeisClient = Depends(get_neis_client),
):
    if not selection.is_configured:
        return []
    return client.fetch_meals(selection.office_code, selection.school_code, day or date.today())
