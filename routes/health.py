from fastapi import APIRouter

from schemas.job_contract import CONTRACT_VERSION

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health():
    return {
        "status": "OK",
        "contract_version": CONTRACT_VERSION,
    }
