from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from core.auth import InvalidContextTokenError, decode_context_token
from core.exceptions import SalesChannelNotFoundError
from core.logging_config import get_logger
from core.model import Customer, SalesChannel
from db.session import get_db

logger = get_logger("core.context")

bearer_scheme = HTTPBearer(auto_error=False)


class SalesChannelContext:
    """Sales channel and, once logged in, the customer a request runs for"""

    def __init__(self, sales_channel: SalesChannel, customer: Optional[Customer] = None):
        self.sales_channel = sales_channel
        self.customer = customer

    @property
    def sales_channel_id(self) -> str:
        return self.sales_channel.id

    @property
    def customer_id(self) -> Optional[str]:
        return self.customer.id if self.customer else None


def _resolve_customer(db: Session, token: str, sales_channel: SalesChannel) -> Optional[Customer]:
    # A bad token leaves the request as a guest; routes decide whether that is an error
    try:
        payload = decode_context_token(token)
    except InvalidContextTokenError as e:
        logger.warning(f"Ignoring invalid context token: {e}")
        return None

    if payload.get("sales_channel_id") != sales_channel.id:
        logger.warning("Context token was issued for another sales channel",
                       extra={"customer_id": payload["sub"], "sales_channel_id": sales_channel.id})
        return None

    customer = db.query(Customer).filter(Customer.id == payload["sub"]).first()
    if customer is None or not customer.active:
        logger.warning("Context token refers to an unknown or inactive customer",
                       extra={"customer_id": payload["sub"]})
        return None

    if customer.sales_channel_id != sales_channel.id:
        logger.warning("Customer is not bound to the requested sales channel",
                       extra={"customer_id": customer.id, "sales_channel_id": sales_channel.id})
        return None
    return customer


def get_sales_channel_context(
    request: Request,
    access_key: Optional[str] = Header(None, alias="sw-access-key"),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> SalesChannelContext:
    if not access_key:
        raise SalesChannelNotFoundError("Header sw-access-key is required.")

    sales_channel = (
        db.query(SalesChannel)
        .filter(SalesChannel.access_key == access_key, SalesChannel.active.is_(True))
        .first()
    )
    if sales_channel is None:
        raise SalesChannelNotFoundError()

    customer = _resolve_customer(db, credentials.credentials, sales_channel) if credentials else None

    request.state.sales_channel_id = sales_channel.id
    request.state.customer_id = customer.id if customer else None

    return SalesChannelContext(sales_channel, customer)
