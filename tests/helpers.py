"""Request builders shared by the API tests."""

import json
from typing import Any, Dict, Optional

from fastapi.testclient import TestClient

from agriloop.models.auth import CurrentUser


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, role: str, email: str, name: Optional[str] = None) -> Dict[str, Any]:
    """Register through the API; returns the response body (token and user)."""
    response = client.post("/api/auth/register", json={
        "name": name or email.split("@")[0].title(),
        "email": email,
        "password": "secret123",
        "role": role,
        "phone": "+919812345678",
        "location": {"address": "Kochi, Kerala"},
    })
    assert response.status_code == 201, response.text
    return response.json()


def listing_form(**overrides: Any) -> Dict[str, str]:
    """Multipart fields for ``POST /api/waste``."""
    form = {
        "title": "Coconut shells, 200 kg",
        "description": "Dry shells from this week's harvest",
        "condition": "raw",
        "quantity": json.dumps({"amount": 200, "unit": "kg"}),
        "price": json.dumps({"amount": 15}),
        "location": json.dumps({
            "address": "Thrissur, Kerala",
            "coordinates": {"latitude": 10.5276, "longitude": 76.2144},
        }),
    }
    form.update(overrides)
    return form


def create_listing(client: TestClient, token: str, **overrides: Any) -> Dict[str, Any]:
    response = client.post("/api/waste", data=listing_form(**overrides), headers=bearer(token))
    assert response.status_code == 201, response.text
    return response.json()["listing"]


async def make_user(user_repo, role: str, name: str, email: str) -> CurrentUser:
    """Insert a user directly and return it as the authenticated caller."""
    user = await user_repo.create_user(
        name=name,
        email=email,
        password_hash="not-a-real-hash",
        role=role,
        phone="+919800000000",
        location={"address": "Thrissur, Kerala"},
    )
    return CurrentUser.model_validate(user)
