import pytest

from app.crud import review as review_crud
from app.models import Product, Review


@pytest.fixture
def purchased(buyer, admin, make_product, submit_transaction, verify_payment):
    """Producto que `buyer` compró y cuyo pago ya fue verificado."""
    candle = make_product()
    order_id = submit_transaction(buyer, [(candle, 1, 100)]).json()["orderId"]
    assert verify_payment(admin, order_id).status_code == 200
    return candle


def post_review(client, headers, product_id, rating, comment="Smells lovely"):
    return client.post(
        f"/api/reviews/{product_id}", json={"rating": rating, "comment": comment}, headers=headers
    )


def test_review_without_purchase_is_forbidden(client, buyer, make_product, auth_headers):
    candle = make_product()

    response = post_review(client, auth_headers(buyer), candle.id, 5)

    assert response.status_code == 403
    assert response.json()["detail"] == "You can only review products you have purchased and received."


def test_review_with_unverified_payment_is_forbidden(
    client, buyer, make_product, auth_headers, submit_transaction
):
    candle = make_product()
    submit_transaction(buyer, [(candle, 1, 100)])

    response = post_review(client, auth_headers(buyer), candle.id, 4)

    assert response.status_code == 403


def test_review_after_verified_purchase(db, client, buyer, auth_headers, purchased):
    response = post_review(client, auth_headers(buyer), purchased.id, 4, comment="Burns evenly")

    assert response.status_code == 201
    body = response.json()
    assert body["rating"] == 4
    assert body["comment"] == "Burns evenly"
    assert body["userId"] == buyer.id
    assert body["reviewerName"] == buyer.name

    db.refresh(purchased)
    assert purchased.rating == pytest.approx(4.0)


def test_review_allowed_once_delivered(client, buyer, auth_headers, purchased):
    orders = client.get("/api/orders", headers=auth_headers(buyer)).json()
    client.put(f"/api/orders/{orders[0]['id']}/status", json={"status": "delivered"}, headers=auth_headers(buyer))

    response = post_review(client, auth_headers(buyer), purchased.id, 5)

    assert response.status_code == 201


def test_second_review_by_same_user_is_rejected(client, buyer, auth_headers, purchased):
    assert post_review(client, auth_headers(buyer), purchased.id, 5).status_code == 201

    response = post_review(client, auth_headers(buyer), purchased.id, 1)

    assert response.status_code == 400
    assert response.json()["detail"] == "You have already reviewed this product."


def test_simultaneous_duplicate_review_is_rejected_by_unique_constraint(
    db, client, buyer, auth_headers, purchased, monkeypatch
):
    assert post_review(client, auth_headers(buyer), purchased.id, 5).status_code == 201
    # La segunda petición no ve la primera reseña al consultar
    monkeypatch.setattr(review_crud, "get_by_user_and_product", lambda db, **kwargs: None)

    response = post_review(client, auth_headers(buyer), purchased.id, 1)

    assert response.status_code == 400
    assert response.json()["detail"] == "You have already reviewed this product."
    assert db.query(Review).filter(Review.product_id == purchased.id).count() == 1
    db.refresh(purchased)
    assert purchased.rating == pytest.approx(5.0)


def test_rating_is_mean_of_all_reviews(
    db, client, make_user, admin, make_product, auth_headers, submit_transaction, verify_payment
):
    candle = make_product()
    ratings = [5, 4, 4]
    for rating in ratings:
        reviewer = make_user()
        order_id = submit_transaction(reviewer, [(candle, 1, 100)]).json()["orderId"]
        verify_payment(admin, order_id)
        assert post_review(client, auth_headers(reviewer), candle.id, rating).status_code == 201

    db.expire_all()
    assert db.get(Product, candle.id).rating == pytest.approx(sum(ratings) / len(ratings))


def test_review_rating_out_of_range(client, buyer, auth_headers, purchased):
    assert post_review(client, auth_headers(buyer), purchased.id, 6).status_code == 422
    assert post_review(client, auth_headers(buyer), purchased.id, 0).status_code == 422


def test_review_unknown_product(client, buyer, auth_headers):
    assert post_review(client, auth_headers(buyer), 31337, 5).status_code == 404


def test_list_reviews(client, buyer, auth_headers, purchased):
    post_review(client, auth_headers(buyer), purchased.id, 3, comment="Okay")

    response = client.get(f"/api/reviews/{purchased.id}")

    assert response.status_code == 200
    assert [(r["reviewerName"], r["rating"]) for r in response.json()] == [(buyer.name, 3)]


def test_list_reviews_unknown_product(client):
    assert client.get("/api/reviews/31337").status_code == 404
