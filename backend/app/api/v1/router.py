"""API v1 router aggregator.

All v1 endpoint routers are included here; main.py mounts this router at
/api/v1.
"""

from fastapi import APIRouter

from app.api.v1 import account_deletion

router = APIRouter()

# =============================================================================
# Account deletion (public, identity-verified)
# =============================================================================

router.include_router(account_deletion.router, tags=["account-deletion"])
