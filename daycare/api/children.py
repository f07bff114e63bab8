"""Roster - children and parent contact emails."""
from fastapi import APIRouter, HTTPException, status

from daycare.api.deps import CurrentSession, Store
from daycare.models.child import ChildCreate
from daycare.services.store import CHILDREN, StoreError

router = APIRouter()


@router.get("/")
async def list_children(session: CurrentSession):
    return [kid.model_dump() for kid in sorted(session.snapshot.roster, key=lambda k: k.name.casefold())]


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_child(data: ChildCreate, store: Store, session: CurrentSession):
    if session.snapshot.child(data.name):
        raise HTTPException(status_code=400, detail=f"{data.name} is already on the roster")
    try:
        child_id = await store.create_document(CHILDREN, data.model_dump())
    except StoreError as e:
        raise HTTPException(status_code=502, detail=f"Failed to add child: {e}")
    await session.load_roster()
    return {"id": child_id, **data.model_dump()}
