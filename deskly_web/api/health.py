from fastapi import APIRouter

from deskly_web.config import get_settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy", "auth_mode": get_settings().get_auth_mode()}
