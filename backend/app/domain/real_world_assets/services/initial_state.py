from __future__ import annotations

from app.domain.real_world_assets.schemas.state import RealWorldAssetsState
from app.domain.real_world_assets.schemas.strands import AddFileInput


def create_initial_state(add_file: AddFileInput) -> RealWorldAssetsState:
    """
    Initial global state of a portfolio document added to a drive.

    ADD_FILE may embed the document being added; its `state.global` wins.
    Otherwise a new portfolio document starts empty.
    """
    document = add_file.document or {}
    state = document.get("state")
    global_state = state.get("global") if isinstance(state, dict) else None
    return RealWorldAssetsState.model_validate(global_state or {})
