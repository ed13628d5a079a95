"""Contact sync endpoint used to resolve subscription notification recipients."""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_user_repository
from app.infrastructure.repositories.user_repository import UserRepository
from app.presentation.api.dependencies import require_service_auth
from app.presentation.api.schemas.user_schemas import UserContactRequest, UserContactResponse

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(require_service_auth)])


@router.put("/{user_id}/contact", response_model=UserContactResponse)
async def sync_user_contact(
    user_id: str,
    request: UserContactRequest,
    users: UserRepository = Depends(get_user_repository),
) -> UserContactResponse:
    user = users.upsert(
        user_id=user_id,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
    )
    return UserContactResponse.model_validate(user)
