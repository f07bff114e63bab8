"""Theme of the week / day and the common note for parents."""
from fastapi import APIRouter, HTTPException

from daycare.api.deps import CurrentSession, Store
from daycare.models.theme_config import THEME_CONFIG_ID, ThemeConfigUpdate
from daycare.services.store import APP_CONFIG, StoreError
from daycare.services.themes import ThemeOverview, parse_tags, theme_overview
from daycare.services.time_format import day_stamp

router = APIRouter()


@router.get("/themes", response_model=ThemeOverview)
async def get_themes(session: CurrentSession):
    return theme_overview(session.theme_config, session.day)


@router.put("/themes", response_model=ThemeOverview)
async def update_themes(data: ThemeConfigUpdate, store: Store, session: CurrentSession):
    note = data.common_parents_note.strip()
    fields = {
        "theme": parse_tags(data.theme),
        "theme_of_the_day": parse_tags(data.theme_of_the_day),
        "common_parents_note": note,
        # The note is only shown on the day it was written
        "common_parents_note_date": day_stamp(session.day) if note else "",
    }
    try:
        existing = await store.get_document(APP_CONFIG, THEME_CONFIG_ID)
        if existing:
            if not await store.update_document(APP_CONFIG, THEME_CONFIG_ID, fields):
                raise StoreError(f"{THEME_CONFIG_ID} disappeared during update")
        else:
            await store.create_document(APP_CONFIG, fields, doc_id=THEME_CONFIG_ID)
    except StoreError as e:
        raise HTTPException(status_code=502, detail=f"Failed to save themes: {e}")

    await session.load_config()
    return theme_overview(session.theme_config, session.day)
