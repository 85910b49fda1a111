from __future__ import annotations

from fastapi import APIRouter, Depends

from messenger.api.deps import get_current_user_id
from messenger.schemas.auth import ProfileOut


router = APIRouter(prefix='/api', tags=['profile'])


@router.get('/profile', response_model=ProfileOut)
def profile(user_id: str = Depends(get_current_user_id)) -> ProfileOut:
    return ProfileOut(message='Profile accessed successfully', userId=user_id)
