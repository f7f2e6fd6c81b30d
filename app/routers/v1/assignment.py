from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status, Response

from app.core import messages
from app.core.clock import Clock
from app.core.deps import get_cache, get_clock, get_repository
from app.core.errors import NotFoundError, StoreUnavailableError, ValidationError
from app.database.assignment_repo import AssignmentRepo
from app.schemas.assignment import (
    AssignmentBoard,
    AssignmentCreate,
    AssignmentResult,
    AssignmentUpdate,
    AssignmentView,
)
from app.schemas.context import UserContext
from app.services.assignment_service import AssignmentService
from app.services.auth_service import AuthService
from app.services.board import annotate_all, build_board
from app.services.list_cache import AssignmentListCache


router = APIRouter()

RepoDep = Annotated[AssignmentRepo, Depends(get_repository)]
CacheDep = Annotated[AssignmentListCache, Depends(get_cache)]
ClockDep = Annotated[Clock, Depends(get_clock)]
UserDep = Annotated[UserContext, Depends(AuthService.get_current_user)]


def _store_unavailable(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


@router.get("/assignments", response_model=list[AssignmentView])
async def list_assignments_endpoint(user: UserDep, repo: RepoDep, cache: CacheDep, clock: ClockDep):
    try:
        items = await AssignmentService.list_assignments(user.user_id, repo, cache)
    except StoreUnavailableError as e:
        raise _store_unavailable(messages.LOAD_FAILED) from e
    return annotate_all(items, clock.now())


@router.get("/assignments/board", response_model=AssignmentBoard)
async def assignment_board_endpoint(user: UserDep, repo: RepoDep, cache: CacheDep, clock: ClockDep):
    try:
        items = await AssignmentService.list_assignments(user.user_id, repo, cache)
    except StoreUnavailableError as e:
        raise _store_unavailable(messages.LOAD_FAILED) from e
    return build_board(items, clock.now())


@router.post("/assignments", status_code=status.HTTP_201_CREATED, response_model=AssignmentResult)
async def create_assignment_endpoint(
    assignment: AssignmentCreate,
    user: UserDep,
    repo: RepoDep,
    cache: CacheDep,
    clock: ClockDep,
    response: Response,
):
    try:
        # zona vera (non l'offset di adesso): i naive oltre il cambio d'ora restano corretti
        created = await AssignmentService.create_assignment(
            user.user_id, assignment, repo, cache, tz=clock.zone
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StoreUnavailableError as e:
        raise _store_unavailable(messages.CREATE_FAILED) from e

    response.headers["Location"] = f"/api/v1/assignments/{created.id}"
    title, description = messages.CREATED
    return AssignmentResult(title=title, description=description, assignment=created)


@router.patch("/assignments/{assignment_id}", response_model=AssignmentResult)
async def update_assignment_endpoint(
    assignment_id: str,
    payload: AssignmentUpdate,
    user: UserDep,
    repo: RepoDep,
    cache: CacheDep,
):
    try:
        updated = await AssignmentService.set_completed(
            user.user_id, assignment_id, payload.completed, repo, cache
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail=messages.UPDATE_FAILED)
    except StoreUnavailableError as e:
        raise _store_unavailable(messages.UPDATE_FAILED) from e

    title, description = messages.COMPLETED if updated.completed else messages.REOPENED
    return AssignmentResult(title=title, description=description, assignment=updated)


@router.delete("/assignments/{assignment_id}", response_model=AssignmentResult)
async def delete_assignment_endpoint(
    assignment_id: str,
    user: UserDep,
    repo: RepoDep,
    cache: CacheDep,
):
    try:
        await AssignmentService.delete_assignment(user.user_id, assignment_id, repo, cache)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=messages.DELETE_FAILED)
    except StoreUnavailableError as e:
        raise _store_unavailable(messages.DELETE_FAILED) from e

    title, description = messages.DELETED
    return AssignmentResult(title=title, description=description)
