import json

import pytest

from main import create_app
from tripilot.api.actions.function_handler import FunctionHandler
from tripilot.api.actions.session_manager import SessionManager
from tripilot.api.models import Activity, ItineraryDay, LatLng, Trip
from tripilot.api.services.store import TripStore
from tripilot.routes import NAMESPACE


class FakeTimer:
    """threading.Timer stand-in that only fires when told to."""

    instances = []

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        FakeTimer.instances.append(self)

    def start(self):
        self.started = True

    def fire(self):
        self.function()


@pytest.fixture
def fake_timer():
    FakeTimer.instances = []
    return FakeTimer


@pytest.fixture
def store():
    return TripStore()


@pytest.fixture
def sample_store():
    return TripStore.with_sample_data()


@pytest.fixture
def handler(store):
    return FunctionHandler(store, offline_search=False)


@pytest.fixture
def session_manager():
    return SessionManager(seed_sample_data=True, offline_search=False, start_cleanup=False)


@pytest.fixture
def app(session_manager, monkeypatch):
    monkeypatch.setenv("FLASK_SECRET_KEY", "test-secret")
    # Checkout payments settle immediately unless a test opts out
    monkeypatch.setenv("TRIPILOT_CHECKOUT_DELAY", "0")
    return create_app(session_manager=session_manager, testing=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socketio(app):
    return app.extensions["socketio"]


@pytest.fixture
def socket_client(app, client, socketio):
    # Establish the session cookie first so REST calls and the socket share a planner
    client.get("/travel/health")
    ws = socketio.test_client(app, namespace=NAMESPACE, flask_test_client=client)
    yield ws
    if ws.is_connected(NAMESPACE):
        ws.disconnect(namespace=NAMESPACE)


def make_trip(trip_id="t-test", days=2, **overrides):
    day_list = tuple(
        ItineraryDay(
            day=n,
            date=f"2026-05-{n:02d}",
            title=f"Day {n}",
            activities=(
                Activity("09:00", f"Walk {n}", "Old Town", LatLng(48.85 + n / 100, 2.35), "sightseeing"),
                Activity("13:00", f"Lunch {n}", "Market", LatLng(48.86, 2.34 + n / 100), "food"),
            ),
        )
        for n in range(1, days + 1)
    )
    fields = dict(
        id=trip_id,
        destination="Paris",
        country="France",
        coords=LatLng(48.8566, 2.3522),
        start_date="2026-05-01",
        end_date=f"2026-05-{max(days, 1):02d}",
        days=day_list,
        total_budget=1500,
    )
    fields.update(overrides)
    return Trip(**fields)


def tokyo_days_json(days=3):
    return json.dumps([
        {
            "day": n,
            "date": f"2026-06-{n:02d}",
            "title": f"Tokyo day {n}",
            "activities": [
                {"time": "09:00", "activity": "Senso-ji", "location": "Asakusa",
                 "lat": 35.7148, "lng": 139.7967, "type": "sightseeing"},
                {"time": "19:00", "activity": "Ramen", "location": "Shinjuku",
                 "lat": 35.6938, "lng": 139.7034, "type": "food"},
            ],
        }
        for n in range(1, days + 1)
    ])


def plan_trip_args(**overrides):
    args = {
        "destination": "Tokyo",
        "country": "Japan",
        "lat": 35.6762,
        "lng": 139.6503,
        "startDate": "2026-06-01",
        "endDate": "2026-06-03",
        "totalBudget": 3200,
        "daysJson": tokyo_days_json(3),
    }
    args.update(overrides)
    return args


@pytest.fixture
def tokyo_args():
    return plan_trip_args()
