PREFIX = "/api/v1/payments"


def create(client, headers, intent="pi_1", **overrides):
    body = {
        "userId": "user-1",
        "subscriptionId": "a" * 24,
        "stripePaymentIntentId": intent,
        "status": "pending",
        "paymentMethod": "card",
        "amount": 2000,
    }
    body.update(overrides)
    return client.post(PREFIX, json=body, headers=headers)


def test_create_and_fetch(client, auth_headers):
    response = create(client, auth_headers, paymentMethod="sepa_debit")

    assert response.status_code == 201
    created = response.json()
    assert created["currency"] == "eur"
    assert created["refundedAmount"] == 0
    assert created["isTrial"] is False
    assert created["paymentMethod"] == "sepa_debit"

    by_id = client.get(f"{PREFIX}/{created['id']}", headers=auth_headers)
    by_intent = client.get(f"{PREFIX}/stripe-payment-intent/pi_1", headers=auth_headers)
    assert by_id.json() == created
    assert by_intent.json()["id"] == created["id"]


def test_lists_by_user_and_subscription(client, auth_headers):
    create(client, auth_headers, intent="pi_1")
    create(client, auth_headers, intent="pi_2")
    create(client, auth_headers, intent="pi_3", userId="user-2", subscriptionId="b" * 24)

    by_user = client.get(f"{PREFIX}/user/user-1", headers=auth_headers).json()
    by_subscription = client.get(f"{PREFIX}/subscription/{'b' * 24}", headers=auth_headers).json()
    everything = client.get(PREFIX, headers=auth_headers).json()

    assert [item["stripePaymentIntentId"] for item in by_user] == ["pi_1", "pi_2"]
    assert [item["stripePaymentIntentId"] for item in by_subscription] == ["pi_3"]
    assert len(everything) == 3


def test_status_and_webhook_updates(client, auth_headers):
    created = create(client, auth_headers).json()

    succeeded = client.put(f"{PREFIX}/{created['id']}/status", json={"status": "succeeded"}, headers=auth_headers)
    refunded = client.put(
        f"{PREFIX}/stripe-payment-intent/pi_1",
        json={"status": "refunded", "refundedAmount": 2000},
        headers=auth_headers,
    )

    assert succeeded.json()["status"] == "succeeded"
    assert refunded.json()["status"] == "refunded"
    assert refunded.json()["refundedAmount"] == 2000
    assert refunded.json()["amount"] == 2000


def test_missing_payment(client, auth_headers):
    missing = "f" * 24

    assert client.get(f"{PREFIX}/{missing}", headers=auth_headers).status_code == 404
    assert client.get(f"{PREFIX}/stripe-payment-intent/pi_missing", headers=auth_headers).status_code == 404
    assert client.put(f"{PREFIX}/{missing}", json={"amount": 1}, headers=auth_headers).status_code == 404
    assert client.delete(f"{PREFIX}/{missing}", headers=auth_headers).status_code == 404


def test_invalid_payment_is_bad_request(client, auth_headers):
    assert create(client, auth_headers, amount=-5).status_code == 400
    assert create(client, auth_headers, paymentMethod="cash").status_code == 400


def test_delete(client, auth_headers):
    created = create(client, auth_headers).json()

    assert client.delete(f"{PREFIX}/{created['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"{PREFIX}/{created['id']}", headers=auth_headers).status_code == 404


def test_zero_limit_lists_everything(client, auth_headers):
    create(client, auth_headers, intent="pi_1")
    create(client, auth_headers, intent="pi_2")

    response = client.get(PREFIX, params={"limit": 0}, headers=auth_headers)

    assert response.status_code == 200
    assert len(response.json()) == 2
