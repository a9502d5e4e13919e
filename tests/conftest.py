"""
Pytest configuration and fixtures for testing

The backend REST API is replaced by an in-process fake served through
httpx.MockTransport, so every test exercises the real HTTP client.
"""
import copy
import json
import pytest
import httpx

from app_context import build_context
from config.settings import Settings
from storage import InMemoryStorage

API_URL = "http://backend.test/api/v1"

PLANS = [
    {
        "id": 1,
        "slug": "starter-pilot",
        "name": "Starter Pilot",
        "description": "Try the platform",
        "price": 0,
        "price_cents": 0,
        "price_formatted": "$0",
        "billing_period": "one_time",
        "is_featured": False,
        "features": ["1,000 annotations"],
        "stripe_price_id": None,
    },
    {
        "id": 2,
        "slug": "growth",
        "name": "Growth",
        "description": "For growing teams",
        "price": 499.0,
        "price_cents": 49900,
        "price_formatted": "$499/mo",
        "billing_period": "monthly",
        "is_featured": True,
        "badge": "Most Popular",
        "features": ["25,000 annotations", "Priority support"],
        "stripe_price_id": "price_growth",
    },
    {
        "id": 3,
        "slug": "scale",
        "name": "Scale",
        "description": "For production workloads",
        "price": 1999.0,
        "price_cents": 199900,
        "price_formatted": "$1,999/mo",
        "billing_period": "monthly",
        "is_featured": False,
        "features": ["150,000 annotations", "Dedicated reviewer"],
        "stripe_price_id": "price_scale",
    },
    {
        "id": 4,
        "slug": "enterprise",
        "name": "Enterprise",
        "description": "Custom contracts",
        "price": None,
        "price_formatted": "Custom",
        "billing_period": None,
        "is_featured": False,
        "features": ["Unlimited annotations"],
        "stripe_price_id": None,
    },
]


def plan_by_slug(slug):
    for plan in PLANS:
        if plan["slug"] == slug:
            return copy.deepcopy(plan)
    return None


class FakeBackend:
    """
    Minimal stand-in for the auth, plans and subscriptions services.

    Flags switch individual endpoints into failure mode.
    """

    def __init__(self):
        self.accounts = {}
        self.tokens = {}
        self.requests = []
        self.checkout_requests = []
        self.pending_subscriptions = {}
        self.fail_logout = False
        self.fail_sync = False
        self.fail_checkout = False
        self.fail_portal = False
        self.network_down = False
        self._next_id = 1
        self._token_seq = 0

    @property
    def transport(self):
        return httpx.MockTransport(self.handle)

    def add_user(self, email, password, admin=False, first_name="Ada", subscription=None):
        user = {
            "id": self._next_id,
            "email": email,
            "first_name": first_name,
            "last_name": "Lovelace",
            "full_name": f"{first_name} Lovelace",
            "admin": admin,
            "company_name": "Analytical Engines",
            "created_at": "2025-01-15T10:00:00Z",
            "subscription": subscription or {"status": "inactive", "current_plan": None, "current_period_end": None},
        }
        self._next_id += 1
        self.accounts[email] = {"password": password, "user": user}
        return user

    def activate_on_sync(self, email, slug, status="active"):
        self.pending_subscriptions[email] = {
            "status": status,
            "current_plan": plan_by_slug(slug),
            "current_period_end": "2026-11-18T00:00:00Z",
        }

    def count(self, method, path):
        return sum(1 for m, p, _ in self.requests if m == method and p == path)

    # ------------------------------------------------------------------

    def _json(self, status, body=None):
        return httpx.Response(status, json=body if body is not None else {})

    def _current_email(self, request):
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.tokens.get(header[len("Bearer "):])

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.network_down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if path.startswith("/api/v1"):
            path = path[len("/api/v1"):]
        body = json.loads(request.content) if request.content else None
        method = request.method
        self.requests.append((method, path, body))

        if method == "POST" and path == "/auth/sign_up":
            fields = body["user"]
            if fields["email"] in self.accounts:
                return self._json(422, {"errors": ["Email has already been taken"]})
            if len(fields.get("password", "")) < 6:
                return self._json(422, {"errors": {"password": ["is too short (minimum is 6 characters)"]}})
            self.add_user(fields["email"], fields["password"], first_name=fields.get("first_name") or "New")
            return self._json(201, {"message": "Signed up successfully."})

        if method == "POST" and path == "/auth/sign_in":
            creds = body["user"]
            account = self.accounts.get(creds["email"])
            if account is None or account["password"] != creds["password"]:
                return self._json(401, {"error": "Invalid email or password"})
            self._token_seq += 1
            token = f"token-{self._token_seq}"
            self.tokens[token] = creds["email"]
            return self._json(200, {"token": token, "user": copy.deepcopy(account["user"])})

        if method == "GET" and path == "/plans":
            return self._json(200, {"plans": copy.deepcopy(PLANS)})

        if method == "GET" and path.startswith("/plans/"):
            plan = plan_by_slug(path[len("/plans/"):])
            if plan is None:
                return self._json(404, {"error": "Plan not found"})
            return self._json(200, {"plan": plan})

        email = self._current_email(request)
        if email is None:
            return self._json(401, {"error": "You need to sign in or sign up before continuing."})
        account = self.accounts[email]

        if method == "DELETE" and path == "/auth/sign_out":
            if self.fail_logout:
                return self._json(500, {"error": "Internal Server Error"})
            self.tokens = {t: e for t, e in self.tokens.items() if e != email}
            return httpx.Response(204)

        if method == "GET" and path == "/users/me":
            return self._json(200, {"user": copy.deepcopy(account["user"])})

        if method == "PATCH" and path == "/users/me":
            account["user"].update(body["user"])
            return self._json(200, {"user": copy.deepcopy(account["user"])})

        if method == "POST" and path == "/subscriptions/checkout":
            self.checkout_requests.append(body["plan_slug"])
            if self.fail_checkout:
                return self._json(422, {"error": "Plan is not available for checkout"})
            return self._json(200, {"checkout_url": f"https://checkout.stripe.test/c/{body['plan_slug']}"})

        if method == "POST" and path == "/subscriptions/portal":
            if self.fail_portal:
                return self._json(422, {"error": "No billing account"})
            return self._json(200, {"portal_url": "https://billing.stripe.test/p/session"})

        if method == "POST" and path == "/subscriptions/sync":
            if self.fail_sync:
                return self._json(502, {"error": "Payment provider unavailable"})
            if email in self.pending_subscriptions:
                account["user"]["subscription"] = self.pending_subscriptions.pop(email)
            return self._json(200, {"ok": True})

        if method == "GET" and path == "/subscriptions/status":
            return self._json(200, {"subscription": copy.deepcopy(account["user"]["subscription"])})

        return self._json(404, {"error": f"No route for {method} {path}"})


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def backend():
    backend = FakeBackend()
    backend.add_user("ada@example.com", "correct-horse")
    backend.add_user("root@example.com", "admin-pass", admin=True, first_name="Grace")
    return backend


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def context(backend, storage, clock):
    """
    Fully wired client core talking to the fake backend.
    """
    config = Settings(API_URL=API_URL, CHECKOUT_BANNER_SECONDS=5)
    ctx = build_context(config, storage=storage, transport=backend.transport, clock=clock)
    yield ctx
    await ctx.aclose()


@pytest.fixture
def store(context):
    return context.session_store


@pytest.fixture
def handoff(context):
    return context.handoff
