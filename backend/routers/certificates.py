"""Certificate endpoints. Lookups are always scoped to one user."""
from fastapi import APIRouter, Depends

from dependencies import get_certificate_issuer, get_current_caller, get_fluency_manager
from schemas.certificate import Certificate
from services.auth import Caller
from services.certificates import CertificateIssuer
from services.fluency import FluencyLevelManager

router = APIRouter(prefix="/certificates", tags=["certificates"])


@router.get("/{user_id}", response_model=list[Certificate])
async def list_certificates(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
    issuer: CertificateIssuer = Depends(get_certificate_issuer),
):
    await manager.get_profile(user_id)
    return await issuer.list_for_user(user_id)


@router.get("/{user_id}/{certificate_id}", response_model=Certificate)
async def get_certificate(
    user_id: str,
    certificate_id: str,
    caller: Caller = Depends(get_current_caller),
    issuer: CertificateIssuer = Depends(get_certificate_issuer),
):
    return await issuer.get_one(user_id, certificate_id)
