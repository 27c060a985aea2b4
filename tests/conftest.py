import unittest.mock

import pytest

from api import ApiClient
from context import AppContext


def membership_data(**overrides):
    data = {
        "id": 7,
        "client_id": "C-001",
        "client_name": "Ana López",
        "service_name": "Netflix",
        "provider": "Proveedor A",
        "duration": 3,
        "purchase_date": "2024-01-31",
        "expiration_date": "2024-04-30",
        "purchase_price": "25.00",
        "sale_price": "40.00",
        "profit": "15.00",
        "access_email": "ana@example.com",
        "access_password": "s3cret<b>",
        "security_pin": None,
        "profile_name": "Perfil 2",
        "whatsapp_number": "50255550000",
        "status": "active",
    }
    data.update(overrides)
    return data


@pytest.fixture
def api():
    return unittest.mock.MagicMock(spec=ApiClient)


@pytest.fixture
def ctx(api):
    return AppContext(api=api)


@pytest.fixture
def form():
    return {}


@pytest.fixture
def make_membership():
    return membership_data
