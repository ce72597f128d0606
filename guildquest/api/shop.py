"""Shop API endpoints."""

from fastapi import APIRouter, Depends

from guildquest.api.deps import (
    get_identity_service,
    get_shop_service,
    raise_for_error,
    require_guildmaster,
)
from guildquest.api.schemas import (
    ErrorResponse,
    PurchaseInfo,
    PurchaseRequest,
    PurchaseResponse,
    ShopItemCreateRequest,
    ShopItemInfo,
)
from guildquest.core.shop.models import Cost
from guildquest.services.identity_service import IdentityService
from guildquest.services.shop_service import ShopService

router = APIRouter(prefix="/shop", tags=["shop"])


@router.post(
    "/items",
    response_model=ShopItemInfo,
    status_code=201,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def create_item(
    request: ShopItemCreateRequest,
    service: ShopService = Depends(get_shop_service),
    identity: IdentityService = Depends(get_identity_service),
) -> ShopItemInfo:
    """Stock the guild shop. Guildmaster only."""
    require_guildmaster(identity, request.member_id, request.guild_id)
    result = service.create_item(
        guild_id=request.guild_id,
        name=request.name,
        cost=Cost(request.denomination, request.amount),
        stock=request.stock,
        description=request.description,
    )
    if not result.ok:
        raise_for_error(result.error)
    return ShopItemInfo.from_core(result.value)


@router.get("/items", response_model=list[ShopItemInfo])
def list_items(
    guild_id: str,
    service: ShopService = Depends(get_shop_service),
) -> list[ShopItemInfo]:
    return [ShopItemInfo.from_core(i) for i in service.list_items(guild_id)]


@router.post(
    "/purchase",
    response_model=PurchaseResponse,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def purchase(
    request: PurchaseRequest,
    service: ShopService = Depends(get_shop_service),
) -> PurchaseResponse:
    """
    Buy an item

    Refused with shop_blocked while a restriction effect is active,
    insufficient_funds when the balance of the item's denomination is
    short, and out_of_stock for exhausted limited items.
    """
    result = service.purchase(request.character_id, request.item_id, request.quantity)
    if not result.ok:
        raise_for_error(result.error)

    receipt = result.value
    return PurchaseResponse(
        purchase_id=receipt.purchase_id,
        character_id=receipt.character_id,
        item_id=receipt.item_id,
        quantity=receipt.quantity,
        denomination=receipt.total.denomination,
        total_amount=receipt.total.amount,
        balance_after=receipt.balance_after,
        stock_after=receipt.stock_after,
    )


@router.get("/purchases", response_model=list[PurchaseInfo])
def list_purchases(
    character_id: str,
    service: ShopService = Depends(get_shop_service),
) -> list[PurchaseInfo]:
    """Purchase history of one character, newest first."""
    return [PurchaseInfo.from_core(p) for p in service.list_purchases(character_id)]
