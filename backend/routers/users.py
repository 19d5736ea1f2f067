"""Account endpoints: signup, own profile, user list and fluency backfill."""
from fastapi import APIRouter, Depends

from dependencies import get_current_caller, get_fluency_manager
from schemas.fluency import MigrationResult
from schemas.user import ProfileResponse, SignupRequest, SignupResponse, UserList
from services.auth import Caller, IdentityProvider, get_identity_provider
from services.fluency import FluencyLevelManager

router = APIRouter(tags=["users"])


@router.post("/signup", response_model=SignupResponse)
async def signup(
    data: SignupRequest,
    provider: IdentityProvider = Depends(get_identity_provider),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
):
    identity = await provider.create_user(data.email, data.password, data.name, data.role)
    profile = await manager.register(identity.user_id, data.email, data.name, data.role)
    return SignupResponse(user=profile)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
):
    # Profiles created before fluency tracking get their A1 assignment here.
    profile = await manager.get_profile(caller.user_id, migrate=True)
    return ProfileResponse(profile=profile)


@router.get("/users", response_model=UserList)
async def list_users(
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
):
    return UserList(users=await manager.list_profiles(caller.user_id))


@router.post("/migrate-fluency-levels", response_model=MigrationResult)
async def migrate_fluency_levels(
    caller: Caller = Depends(get_current_caller),
    manager: FluencyLevelManager = Depends(get_fluency_manager),
):
    return await manager.bulk_migrate(caller.user_id)
