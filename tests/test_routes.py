from conftest import raw_account, raw_transaction

from app.config import get_settings

COOKIE = get_settings().SESSION_COOKIE_NAME


def sign_up(client, email="ann@example.com", password="s3cret", first_name="Ann"):
    return client.post(
        "/sign-up",
        data={"first_name": first_name, "last_name": "Lee", "email": email, "password": password},
        follow_redirects=False,
    )


def link_bank(client, fake_plaid, transactions, public_token="public-1", access_token="access-1"):
    fake_plaid.add_item(
        access_token,
        accounts=[raw_account(account_id="acc-1", name="Everyday Checking", balances={"available": 90, "current": 125.5})],
        transaction_pages=[transactions],
    )
    fake_plaid.public_tokens[public_token] = (access_token, "item-1")
    resp = client.post("/banks/exchange-public-token", json={"public_token": public_token})
    assert resp.status_code == 200
    return resp.json()


def twelve_transactions():
    txs = [
        raw_transaction(transaction_id=f"t{i}", name=f"Shop {i}", amount=-1, date=f"2024-05-{i:02d}")
        for i in range(1, 12)
    ]
    txs.append(
        raw_transaction(transaction_id="coffee", name="Coffee Shop!!", amount="42.50", type="debit", date="2024-05-30")
    )
    return txs


# ---------------------------------------------------------------------------
# Health & auth
# ---------------------------------------------------------------------------


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_home_requires_sign_in(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/sign-in"


def test_sign_in_page_renders(client):
    resp = client.get("/sign-in")
    assert resp.status_code == 200
    assert "Sign in" in resp.text


def test_sign_up_sets_session_cookie(client):
    resp = sign_up(client)

    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    cookie = resp.headers["set-cookie"].lower()
    assert cookie.startswith(f"{COOKIE}=")
    assert "httponly" in cookie
    assert "samesite=lax" in cookie
    assert "; secure" not in cookie


def test_home_without_banks_shows_empty_state(client):
    sign_up(client)

    resp = client.get("/")

    assert resp.status_code == 200
    assert "Welcome, <span class=\"highlight\">Ann</span>" in resp.text
    assert "You have no linked bank accounts yet" in resp.text
    assert "Bank Accounts: 0" in resp.text


def test_signed_in_user_skips_auth_pages(client):
    sign_up(client)
    resp = client.get("/sign-in", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/"


def test_bad_sign_in_rerenders_form(client):
    sign_up(client)
    client.cookies.clear()

    resp = client.post("/sign-in", data={"email": "ann@example.com", "password": "wrong"})

    assert resp.status_code == 400
    assert "Invalid email or password" in resp.text
    assert COOKIE not in resp.cookies


def test_sign_in_after_sign_up(client):
    sign_up(client)
    client.cookies.clear()

    resp = client.post(
        "/sign-in",
        data={"email": "ann@example.com", "password": "s3cret"},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    assert COOKIE in resp.headers["set-cookie"]


def test_logout_ends_the_session(client):
    sign_up(client)

    resp = client.post("/logout", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/sign-in"

    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 303


# ---------------------------------------------------------------------------
# Bank linking
# ---------------------------------------------------------------------------


def test_link_token_requires_sign_in(client):
    resp = client.post("/banks/link-token")
    assert resp.status_code == 401


def test_link_token(client, fake_plaid):
    sign_up(client)
    resp = client.post("/banks/link-token")
    assert resp.status_code == 200
    assert resp.json() == {"link_token": fake_plaid.link_token}


def test_link_token_provider_failure(client, fake_plaid):
    sign_up(client)
    fake_plaid.fail("/link/token/create")
    assert client.post("/banks/link-token").status_code == 502


def test_exchange_requires_sign_in(client):
    resp = client.post("/banks/exchange-public-token", json={"public_token": "public-1"})
    assert resp.status_code == 401


def test_exchange_bad_token(client):
    sign_up(client)
    resp = client.post("/banks/exchange-public-token", json={"public_token": "expired"})
    assert resp.status_code == 502


def test_exchange_stores_bank(client, fake_plaid):
    sign_up(client)
    body = link_bank(client, fake_plaid, [])
    assert body["status"] == "linked"
    assert isinstance(body["bank_id"], int)
    assert body["sharable_id"]


# ---------------------------------------------------------------------------
# Home with a linked bank
# ---------------------------------------------------------------------------


def test_home_lists_balances_and_first_page(client, fake_plaid):
    sign_up(client)
    link_bank(client, fake_plaid, twelve_transactions())

    resp = client.get("/")
    text = resp.text

    assert resp.status_code == 200
    assert "Bank Accounts: 1" in text
    assert "$125.50" in text
    assert "Everyday Checking" in text
    assert "1 / 2" in text
    # newest first, name cleaned, debit signed
    assert "Coffee Shop<" in text
    assert "-$42.50" in text
    assert "Shop 11" in text
    assert "Shop 1<" not in text


def test_home_second_page(client, fake_plaid):
    sign_up(client)
    body = link_bank(client, fake_plaid, twelve_transactions())

    resp = client.get(f"/?id={body['bank_id']}&page=2")

    assert "2 / 2" in resp.text
    assert "Shop 1<" in resp.text
    assert "Shop 2<" in resp.text
    assert "Coffee Shop" not in resp.text


def test_home_bad_page_falls_back_to_first(client, fake_plaid):
    sign_up(client)
    link_bank(client, fake_plaid, twelve_transactions())

    resp = client.get("/?page=abc")

    assert resp.status_code == 200
    assert "1 / 2" in resp.text


def test_home_unknown_bank(client, fake_plaid):
    sign_up(client)
    link_bank(client, fake_plaid, [])

    resp = client.get("/?id=999")

    assert resp.status_code == 200
    assert "Bank not found for id: 999" in resp.text


def test_home_when_accounts_fail(client, fake_plaid):
    sign_up(client)
    link_bank(client, fake_plaid, [])
    fake_plaid.fail("/accounts/get")

    resp = client.get("/")

    assert resp.status_code == 200
    assert "Failed to load your accounts." in resp.text
