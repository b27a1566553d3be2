from fastapi import APIRouter

from deskly_web.schemas.auth import ErrorResponse, MeResponse
from deskly_web.utils.auth import CurrentClaims

router = APIRouter(tags=["Users"])


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse}},
)
async def get_me(claims: CurrentClaims) -> MeResponse:
    return MeResponse(user=claims)
