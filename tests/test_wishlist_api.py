import json
from datetime import timedelta

from core.auth import create_context_token
from core.criteria import EqualsFilter
from core.events import CustomerWishlistLoaderCriteriaEvent, CustomerWishlistProductListingResultEvent
from core.system_config import SystemConfigService
from core.wishlist import WISHLIST_ENABLED_CONFIG

import factories

URL = "/store-api/v3/customer/wishlist"


def product_names(body):
    return [product["name"] for product in body["data"]["products"]["elements"]]


def test_returns_wishlist_with_most_recently_wishlisted_first(client, store, auth_headers):
    response = client.get(URL, headers=auth_headers(store.s1, store.c1))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["wishlist"]["id"] == store.w1.id
    assert body["data"]["wishlist"]["customerId"] == store.c1.id
    assert body["data"]["wishlist"]["salesChannelId"] == store.s1.id
    assert product_names(body) == ["P1", "P2"]
    assert body["data"]["products"]["entity"] == "product"
    assert body["data"]["products"]["total"] == 2
    assert response.headers["X-Request-ID"]


def test_post_body_criteria(client, store, auth_headers):
    response = client.post(
        URL,
        headers=auth_headers(store.s1, store.c1),
        json={"limit": 1, "page": 2, "total-count-mode": 1},
    )

    assert response.status_code == 200
    products = response.json()["data"]["products"]
    assert [p["name"] for p in products["elements"]] == ["P2"]
    assert products["total"] == 2
    assert products["page"] == 2
    assert products["limit"] == 1


def test_caller_filters_are_combined_with_the_wishlist_filter(client, store, auth_headers):
    response = client.get(
        URL,
        headers=auth_headers(store.s1, store.c1),
        params={"filter": json.dumps([{"type": "equals", "field": "name", "value": "P2"}])},
    )

    assert product_names(response.json()) == ["P2"]


def test_requested_associations_are_serialized(client, store, auth_headers):
    response = client.post(
        URL,
        headers=auth_headers(store.s1, store.c1),
        json={"associations": {"wishlists": {}}},
    )

    first = response.json()["data"]["products"]["elements"][0]
    assert [w["wishlistId"] for w in first["wishlists"]] == [store.w1.id]
    assert first["visibilities"] is None


def test_disabled_feature_is_reported_even_for_guests(client, db_session, store, auth_headers):
    SystemConfigService(db_session).set(WISHLIST_ENABLED_CONFIG, False, store.s1.id)

    for headers in (auth_headers(store.s1), auth_headers(store.s1, store.c1)):
        response = client.get(URL, headers=headers)
        assert response.status_code == 403
        assert response.json()["data"]["code"] == "CHECKOUT__WISHLIST_IS_NOT_ACTIVATED"


def test_feature_without_config_is_disabled(client, store, auth_headers):
    response = client.get(URL, headers=auth_headers(store.s2))

    assert response.status_code == 403
    assert response.json()["data"]["code"] == "CHECKOUT__WISHLIST_IS_NOT_ACTIVATED"


def test_guest_is_rejected(client, store, auth_headers):
    response = client.get(URL, headers=auth_headers(store.s1))

    assert response.status_code == 403
    assert response.json()["success"] is False
    assert response.json()["data"]["code"] == "CHECKOUT__CUSTOMER_NOT_LOGGED_IN"


def test_invalid_or_expired_token_counts_as_guest(client, store):
    expired = create_context_token(store.c1.id, store.s1.id, expires_delta=timedelta(minutes=-5))

    for token in ("not-a-jwt", expired):
        response = client.get(URL, headers={
            "sw-access-key": store.s1.access_key,
            "Authorization": f"Bearer {token}",
        })
        assert response.status_code == 403
        assert response.json()["data"]["code"] == "CHECKOUT__CUSTOMER_NOT_LOGGED_IN"


def test_token_of_unknown_or_inactive_customer_counts_as_guest(client, db_session, store, auth_headers):
    inactive = factories.create_customer(db_session, sales_channel=store.s1, active=False)
    factories.create_wishlist(db_session, customer=inactive, products=((store.p3, store.w1.created_at),))
    db_session.commit()
    unknown = create_context_token("deadbeef" * 4, store.s1.id)

    for headers in (auth_headers(store.s1, inactive),
                    {"sw-access-key": store.s1.access_key, "Authorization": f"Bearer {unknown}"}):
        response = client.get(URL, headers=headers)
        assert response.status_code == 403
        assert response.json()["data"]["code"] == "CHECKOUT__CUSTOMER_NOT_LOGGED_IN"


def test_customer_of_another_sales_channel_counts_as_guest(client, db_session, store, auth_headers):
    # S2 has the feature off; its customer must not reach their wishlist through S1's key
    c2 = factories.create_customer(db_session, sales_channel=store.s2)
    factories.create_wishlist(db_session, customer=c2, products=((store.p3, store.w1.created_at),))
    db_session.commit()
    SystemConfigService(db_session).set(WISHLIST_ENABLED_CONFIG, False, store.s2.id)

    s2_token = create_context_token(c2.id, store.s2.id)
    for headers in (auth_headers(store.s1, c2),
                    {"sw-access-key": store.s1.access_key, "Authorization": f"Bearer {s2_token}"}):
        response = client.get(URL, headers=headers)
        assert response.status_code == 403
        assert response.json()["data"]["code"] == "CHECKOUT__CUSTOMER_NOT_LOGGED_IN"


def test_token_issued_for_another_sales_channel_counts_as_guest(client, store):
    token = create_context_token(store.c1.id, store.s2.id)

    response = client.get(URL, headers={
        "sw-access-key": store.s1.access_key,
        "Authorization": f"Bearer {token}",
    })

    assert response.status_code == 403
    assert response.json()["data"]["code"] == "CHECKOUT__CUSTOMER_NOT_LOGGED_IN"


def test_customer_without_wishlist_gets_not_found(client, db_session, store, auth_headers):
    customer = factories.create_customer(db_session, sales_channel=store.s1)
    db_session.commit()

    response = client.get(URL, headers=auth_headers(store.s1, customer))

    assert response.status_code == 404
    assert response.json()["data"]["code"] == "CHECKOUT__WISHLIST_NOT_FOUND"


def test_wishlist_of_another_sales_channel_is_not_used(client, db_session, store, auth_headers):
    customer = factories.create_customer(db_session, sales_channel=store.s1)
    factories.create_wishlist(db_session, customer=customer, sales_channel=store.s2,
                              products=((store.p3, store.w1.created_at),))
    db_session.commit()

    response = client.get(URL, headers=auth_headers(store.s1, customer))

    assert response.status_code == 404


def test_missing_or_unknown_access_key(client, store):
    assert client.get(URL).status_code == 401

    response = client.get(URL, headers={"sw-access-key": "SWUNKNOWN"})
    assert response.status_code == 401
    assert response.json()["data"]["code"] == "FRAMEWORK__API_SALES_CHANNEL_ACCESS_KEY_NOT_FOUND"


def test_unsupported_api_version(client, store, auth_headers):
    response = client.get("/store-api/v1/customer/wishlist", headers=auth_headers(store.s1, store.c1))

    assert response.status_code == 404


def test_invalid_criteria(client, store, auth_headers):
    headers = auth_headers(store.s1, store.c1)

    too_many = client.post(URL, headers=headers, json={"limit": 500})
    unknown_field = client.post(URL, headers=headers, json={"sort": "-colour"})
    not_json = client.post(URL, headers={**headers, "Content-Type": "application/json"}, content=b"{")

    for response in (too_many, unknown_field, not_json):
        assert response.status_code == 400
        assert response.json()["data"]["code"] == "FRAMEWORK__INVALID_CRITERIA"


def test_listeners_can_shape_query_and_result(client, store, auth_headers, dispatcher):
    @dispatcher.listen(CustomerWishlistLoaderCriteriaEvent)
    def exclude_p2(event):
        event.criteria.add_filter(EqualsFilter("name", "P1"))

    @dispatcher.listen(CustomerWishlistProductListingResultEvent)
    def annotate(event):
        assert event.request.url.path == URL
        assert event.context.customer.id == store.c1.id
        event.result.remove(store.p1.id)

    response = client.get(URL, headers=auth_headers(store.s1, store.c1))

    assert response.status_code == 200
    assert product_names(response.json()) == []


def test_associations_without_a_response_field_are_rejected(client, store, auth_headers):
    headers = auth_headers(store.s1, store.c1)

    nested = client.post(URL, headers=headers,
                         json={"associations": {"wishlists": {"associations": {"product": {}}}}})
    unknown = client.post(URL, headers=headers, json={"associations": {"reviews": {}}})

    for response in (nested, unknown):
        assert response.status_code == 400
        assert response.json()["data"]["code"] == "FRAMEWORK__INVALID_CRITERIA"
    assert "wishlists.product" in nested.json()["message"]
