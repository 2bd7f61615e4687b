from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from core.config import settings
from core.context import SalesChannelContext, get_sales_channel_context
from core.criteria import Criteria, RequestCriteriaBuilder
from core.events import event_dispatcher
from core.exceptions import InvalidCriteriaError
from core.logging_config import get_logger
from core.model import CustomerWishlist
from core.repository import EntityRepository, SalesChannelProductRepository
from core.system_config import SystemConfigService
from core.wishlist import LoadWishlistRoute
from db.session import get_db
from schemas.wishlist import build_load_wishlist_response, check_associations

wishlist_logger = get_logger("routers.wishlist")

router = APIRouter()


def api_version(version: int) -> int:
    if version not in settings.SUPPORTED_API_VERSIONS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"API version v{version} not found")
    return version


async def get_request_criteria(request: Request) -> Criteria:
    """Decode the search criteria from the query string (GET) or JSON body (POST)"""
    builder = RequestCriteriaBuilder(max_limit=settings.MAX_LIMIT, default_limit=settings.DEFAULT_LIMIT)

    if request.method == "GET":
        return builder.from_query_params(dict(request.query_params))

    body = await request.body()
    if not body:
        return builder.handle_request({})
    try:
        data = await request.json()
    except ValueError:
        raise InvalidCriteriaError("Request body is not valid JSON")
    if not isinstance(data, dict):
        raise InvalidCriteriaError("Request body must be a JSON object")
    return builder.handle_request(data)


def get_load_wishlist_route(db: Session = Depends(get_db)) -> LoadWishlistRoute:
    return LoadWishlistRoute(
        wishlist_repository=EntityRepository(db, CustomerWishlist, "customer_wishlist"),
        product_repository=SalesChannelProductRepository(db),
        event_dispatcher=event_dispatcher,
        system_config_service=SystemConfigService(db),
    )


@router.api_route("/v{version}/customer/wishlist", methods=["GET", "POST"])
async def load_wishlist(
    request: Request,
    version: int = Depends(api_version),
    context: SalesChannelContext = Depends(get_sales_channel_context),
    criteria: Criteria = Depends(get_request_criteria),
    route: LoadWishlistRoute = Depends(get_load_wishlist_route),
):
    wishlist_logger.debug(
        f"Loading wishlist - fields: {criteria.get_fields()}, limit: {criteria.limit}",
        extra={"sales_channel_id": context.sales_channel_id, "customer_id": context.customer_id}
    )

    check_associations(criteria.associations)
    response = route.load(request, context, criteria)
    payload = build_load_wishlist_response(response.wishlist, response.products)

    return {
        "success": True,
        "message": "Wishlist retrieved successfully",
        "data": payload.model_dump(mode="json", by_alias=True),
    }
