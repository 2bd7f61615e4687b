from fastapi import Request

from core.context import SalesChannelContext
from core.criteria import Criteria, EqualsFilter, FieldSorting, MultiFilter
from core.events import (
    EventDispatcher,
    CustomerWishlistLoaderCriteriaEvent,
    CustomerWishlistProductListingResultEvent,
)
from core.exceptions import (
    CustomerNotLoggedInError,
    CustomerWishlistNotActivatedError,
    CustomerWishlistNotFoundError,
)
from core.logging_config import get_logger
from core.model import Customer, CustomerWishlist
from core.repository import EntityRepository, EntitySearchResult
from core.system_config import SystemConfigService

logger = get_logger("core.wishlist")

WISHLIST_ENABLED_CONFIG = "core.cart.wishlistEnabled"


class LoadWishlistRouteResponse:
    def __init__(self, wishlist: CustomerWishlist, products: EntitySearchResult):
        self.wishlist = wishlist
        self.products = products


class LoadWishlistRoute:
    """Loads the logged in customer's wishlist and its products"""

    def __init__(
        self,
        wishlist_repository: EntityRepository,
        product_repository: EntityRepository,
        event_dispatcher: EventDispatcher,
        system_config_service: SystemConfigService,
    ):
        self.wishlist_repository = wishlist_repository
        self.product_repository = product_repository
        self.event_dispatcher = event_dispatcher
        self.system_config_service = system_config_service

    def load(self, request: Request, context: SalesChannelContext, criteria: Criteria) -> LoadWishlistRouteResponse:
        if not self.system_config_service.get(WISHLIST_ENABLED_CONFIG, context.sales_channel_id):
            raise CustomerWishlistNotActivatedError()

        customer = context.customer
        if customer is None:
            raise CustomerNotLoggedInError()

        wishlist = self._load_wishlist(context, customer)
        products = self._load_products(wishlist.id, criteria, context, request)

        logger.info(
            f"Loaded wishlist with {len(products)} product(s)",
            extra={
                "wishlist_id": wishlist.id,
                "customer_id": customer.id,
                "sales_channel_id": context.sales_channel_id,
            }
        )
        return LoadWishlistRouteResponse(wishlist, products)

    def _load_wishlist(self, context: SalesChannelContext, customer: Customer) -> CustomerWishlist:
        criteria = Criteria()
        criteria.set_limit(1)
        criteria.add_filter(MultiFilter(MultiFilter.CONNECTION_AND, [
            EqualsFilter("customerId", customer.id),
            EqualsFilter("salesChannelId", customer.sales_channel_id),
        ]))

        wishlist = self.wishlist_repository.search(criteria, context).first()
        if wishlist is None:
            raise CustomerWishlistNotFoundError()

        return wishlist

    def _load_products(
        self, wishlist_id: str, criteria: Criteria, context: SalesChannelContext, request: Request
    ) -> EntitySearchResult:
        criteria.add_filter(EqualsFilter("wishlists.wishlistId", wishlist_id))
        criteria.add_sorting(FieldSorting("wishlists.createdAt", FieldSorting.DESCENDING))

        event = self.event_dispatcher.dispatch(CustomerWishlistLoaderCriteriaEvent(criteria, context))

        products = self.product_repository.search(event.criteria, context)

        event = self.event_dispatcher.dispatch(
            CustomerWishlistProductListingResultEvent(request, products, context))

        return event.result
