"""
Comptes endpoints: balance, intra-bank transfers and aliases

Route names follow the PI-SPI operationIds.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status

from .dependencies import get_account_use_cases
from .schemas import CreateAliasRequest, TransferRequest
from ..security import require_scope
from ..use_cases import AccountUseCases


router = APIRouter()


# Static /transactions routes must be declared before /{numero}
@router.get(
    "/transactions",
    name="compteTransfertIntraLister",
    dependencies=[Depends(require_scope("compte_transaction.read"))]
)
async def list_transfers(
    page: int = Query(1),
    size: Optional[int] = Query(None),
    sort: str = Query("-dateCreation"),
    statut: Optional[str] = Query(None),
    use_cases: AccountUseCases = Depends(get_account_use_cases)
):
    """List recorded transfers with filtering, sorting and pagination"""
    return use_cases.list_transactions(page=page, size=size, sort=sort, statut=statut)


@router.post(
    "/transactions",
    name="compteTransfertIntraCreer",
    dependencies=[Depends(require_scope("compte_transaction.write"))]
)
async def create_transfer(
    request: TransferRequest,
    use_cases: AccountUseCases = Depends(get_account_use_cases)
):
    """Create an intra-bank transfer"""
    return use_cases.create_transfer(request.model_dump())


@router.get(
    "/{numero}",
    name="compteSoldeConsulter",
    dependencies=[Depends(require_scope("compte.read"))]
)
async def consult_balance(
    numero: str,
    use_cases: AccountUseCases = Depends(get_account_use_cases)
):
    """Get account balance"""
    return use_cases.consult_balance(numero)


@router.get(
    "/{numero}/alias",
    name="aliasLister",
    dependencies=[Depends(require_scope("alias.read"))]
)
async def list_aliases(
    numero: str,
    use_cases: AccountUseCases = Depends(get_account_use_cases)
):
    return use_cases.list_aliases(numero)


@router.post(
    "/{numero}/alias",
    name="aliasCreer",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_scope("alias.write"))]
)
async def create_alias(
    numero: str,
    request: CreateAliasRequest,
    use_cases: AccountUseCases = Depends(get_account_use_cases)
):
    return use_cases.create_alias(numero, request.type)


@router.delete(
    "/{numero}/alias/{cle}",
    name="aliasSupprimer",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_scope("alias.delete"))]
)
async def delete_alias(
    numero: str,
    cle: str,
    use_cases: AccountUseCases = Depends(get_account_use_cases)
):
    use_cases.delete_alias(numero, cle)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
