"""
Pikecape Backend - Duck Route Handlers
=======================================

What:  The five REST endpoints of the duck resource.
How:   Each handler pulls plain values out of the request, calls the
       injected DuckRepository and returns the result with the right status.
Who:   Any HTTP client of the API.

Route Table:
    GET    /api/ducks          → find_all       → 200 list
    GET    /api/ducks/{uid}    → find_by_uid    → 200 duck or null
    POST   /api/ducks          → create         → 201 created duck
    PUT    /api/ducks/{uid}    → update         → 200 UpdateOutcome
    DELETE /api/ducks/{uid}    → delete_by_uid  → 204 (X-Deleted-Count header)

Error Handling:
    Handlers contain no try/except. DataAccessError and unexpected exceptions
    are turned into responses by the global handlers in main.py.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from pikecape.database import get_duck_repository
from pikecape.repositories.duck_repository import DuckRepository
from pikecape.schemas.duck import DuckCreate, DuckResponse, DuckUpdate, UpdateOutcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ducks", tags=["Ducks"])

ERROR_RESPONSES = {
    500: {"description": "Database failure; body is the error message"},
}


@router.get(
    "",
    response_model=List[DuckResponse],
    responses=ERROR_RESPONSES,
    summary="List all ducks",
)
async def list_ducks(
    repository: DuckRepository = Depends(get_duck_repository),
):
    """Returns every stored duck in the store's natural order."""
    return await repository.find_all()


@router.get(
    "/{uid}",
    response_model=Optional[DuckResponse],
    responses=ERROR_RESPONSES,
    summary="Get a single duck by ID",
    description="Returns the duck, or null (still 200) when no duck has that ID.",
)
async def get_duck(
    uid: str,
    repository: DuckRepository = Depends(get_duck_repository),
):
    return await repository.find_by_uid(uid)


@router.post(
    "",
    status_code=201,
    response_model=DuckResponse,
    responses=ERROR_RESPONSES,
    summary="Create a duck",
)
async def create_duck(
    duck: DuckCreate,
    repository: DuckRepository = Depends(get_duck_repository),
):
    """
    Persist a new duck and return it with its generated `_id`.

    Fields beyond `name` are stored as sent.
    """
    return await repository.create(duck.to_document())


@router.put(
    "/{uid}",
    response_model=UpdateOutcome,
    responses=ERROR_RESPONSES,
    summary="Partially update a duck",
    description=(
        "Overwrites only the fields present in the body. Returns the store's "
        "acknowledgement; matchedCount is 0 when no duck has that ID."
    ),
)
async def update_duck(
    uid: str,
    changes: DuckUpdate,
    repository: DuckRepository = Depends(get_duck_repository),
) -> UpdateOutcome:
    return await repository.update(uid, changes.to_document())


@router.delete(
    "/{uid}",
    status_code=204,
    response_class=Response,
    responses=ERROR_RESPONSES,
    summary="Delete a duck",
    description=(
        "Removes the duck. A 204 carries no body, so the number of deleted "
        "documents (0 or 1) is returned in the X-Deleted-Count header."
    ),
)
async def delete_duck(
    uid: str,
    repository: DuckRepository = Depends(get_duck_repository),
) -> Response:
    outcome = await repository.delete_by_uid(uid)
    return Response(
        status_code=204,
        headers={
            "X-Deleted-Count": str(outcome.deleted_count),
            "X-Acknowledged": str(outcome.acknowledged).lower(),
        },
    )
