import time

from conftest import plan_trip_args


def wait_for_step(client, step, timeout=2.0):
    deadline = time.time() + timeout
    while time.time() < deadline:
        checkout = client.get("/travel/api/checkout").get_json()["checkout"]
        if checkout["step"] == step:
            return checkout
        time.sleep(0.02)
    raise AssertionError(f"checkout never reached '{step}'")


def test_health(client):
    assert client.get("/travel/health").get_json() == {"status": "ok", "service": "travel"}


def test_debug(client):
    data = client.get("/debug").get_json()
    assert data["status"] == "ok"
    assert data["endpoints"]["websocket_namespace"] == "/travel/ws"


def test_config(client):
    data = client.get("/travel/api/config").get_json()
    assert data["map"]["default_zoom"] == 2.5
    assert data["assistant"]["title"] == "Tripilot AI"
    assert data["namespace"] == "/travel/ws"


def test_initial_state_is_seeded(client):
    state = client.get("/travel/api/state").get_json()
    assert [t["id"] for t in state["trips"]] == ["trip-1"]
    assert len(state["bucketList"]) == 3
    assert state["bookings"] == []
    assert state["activeTab"] == "trips"


def test_sessions_are_isolated(app, client):
    client.post("/travel/api/actions/planTrip", json=plan_trip_args())
    other = app.test_client()
    assert len(other.get("/travel/api/state").get_json()["trips"]) == 1
    assert len(client.get("/travel/api/state").get_json()["trips"]) == 2


def test_destinations_and_actions(client):
    assert len(client.get("/travel/api/destinations").get_json()) == 15
    actions = client.get("/travel/api/actions").get_json()
    assert len(actions) == 7
    assert all(a["type"] == "function" for a in actions)
    assert len(client.get("/travel/api/context").get_json()) == 4


def test_plan_trip_over_rest(client):
    response = client.post("/travel/api/actions/planTrip", json=plan_trip_args(),
                           headers={"X-Call-Id": "abc"})
    result = response.get_json()
    assert response.status_code == 200
    assert result["success"] is True
    assert result["call_id"] == "abc"

    state = client.get("/travel/api/state").get_json()
    assert state["trips"][0]["destination"] == "Tokyo"
    assert state["selectedTripId"] == result["tripId"]

    scene = client.get("/travel/api/map").get_json()
    assert scene["camera"]["center"] == {"lat": 35.6762, "lng": 139.6503}
    assert len(scene["polylines"]) == 1


def test_failed_action_is_reported_not_raised(client):
    result = client.post("/travel/api/actions/planTrip",
                         json=plan_trip_args(daysJson="not json")).get_json()
    assert result["success"] is False
    assert result["error"] == "parse_error"
    assert len(client.get("/travel/api/state").get_json()["trips"]) == 1


def test_unknown_action(client):
    response = client.post("/travel/api/actions/nukeTrips", json={})
    assert response.status_code == 404
    assert response.get_json()["error"] == "unknown_function"


def test_select_and_clear_trip(client):
    trip = client.post("/travel/api/trips/trip-1/select").get_json()
    assert trip["destination"] == "Kyoto"
    assert client.get("/travel/api/state").get_json()["selectedTripId"] == "trip-1"

    client.post("/travel/api/selection/clear")
    assert client.get("/travel/api/state").get_json()["selectedTripId"] is None

    assert client.post("/travel/api/trips/missing/select").status_code == 404


def test_focus_destination(client):
    dest = client.post("/travel/api/destinations/d-2/focus").get_json()
    assert dest["name"] == "Tokyo"
    assert client.get("/travel/api/state").get_json()["flyTo"] == {"lat": 35.6762, "lng": 139.6503}
    assert client.post("/travel/api/destinations/d-404/focus").status_code == 404


def test_set_tab(client):
    assert client.post("/travel/api/tab", json={"tab": "bucket"}).get_json() == {"activeTab": "bucket"}
    assert client.post("/travel/api/tab", json={"tab": "admin"}).status_code == 400


def test_remove_bucket_item(client):
    assert client.delete("/travel/api/bucket/bl-2").get_json() == {"ok": True, "removed": True}
    assert client.delete("/travel/api/bucket/bl-2").get_json() == {"ok": True, "removed": False}
    ids = [b["id"] for b in client.get("/travel/api/state").get_json()["bucketList"]]
    assert ids == ["bl-1", "bl-3"]


def book_jal(client):
    return client.post("/travel/api/actions/bookTrip", json={
        "type": "flight", "itemName": "JAL 001", "price": 890, "details": "NYC -> Tokyo",
    }).get_json()


def test_book_then_confirm(client):
    assert book_jal(client)["needsApproval"] is True
    state = client.get("/travel/api/state").get_json()
    assert state["pendingBooking"]["itemName"] == "JAL 001"
    assert state["bookings"] == []

    booking = client.post("/travel/api/bookings/pending/confirm").get_json()["booking"]
    assert booking["status"] == "confirmed"

    state = client.get("/travel/api/state").get_json()
    assert state["pendingBooking"] is None
    assert state["bookings"] == [booking]
    assert state["activeTab"] == "bookings"


def test_confirm_without_pending(client):
    assert client.post("/travel/api/bookings/pending/confirm").get_json() == {"booking": None}


def test_book_then_decline(client):
    book_jal(client)
    client.post("/travel/api/bookings/pending/cancel")
    state = client.get("/travel/api/state").get_json()
    assert state["pendingBooking"] is None
    assert state["bookings"] == []


def test_checkout_flow(client):
    book_jal(client)
    checkout = client.post("/travel/api/checkout").get_json()["checkout"]
    assert checkout["step"] == "review"
    assert checkout["subtotal"] == 890
    assert checkout["taxes"] == 107
    assert checkout["grandTotal"] == 997

    paid = client.post("/travel/api/checkout/pay").get_json()
    assert paid["checkout"]["step"] in ("processing", "confirmed")

    confirmed = wait_for_step(client, "confirmed")
    assert len(confirmed["confirmationCode"]) == 8

    done = client.post("/travel/api/checkout/complete").get_json()
    assert done["checkout"]["completed"] is True
    assert done["state"]["bookings"][0]["itemName"] == "JAL 001"
    assert done["state"]["pendingBooking"] is None


def test_checkout_cancel(client):
    book_jal(client)
    client.post("/travel/api/checkout")
    result = client.post("/travel/api/checkout/cancel").get_json()
    assert result["checkout"]["cancelled"] is True
    assert result["state"]["pendingBooking"] is None
    assert result["state"]["bookings"] == []


def test_checkout_errors(client):
    assert client.get("/travel/api/checkout").get_json() == {"checkout": None}
    assert client.post("/travel/api/checkout").status_code == 409
    assert client.post("/travel/api/checkout/pay").status_code == 409
    assert client.post("/travel/api/checkout/refund").status_code == 404

    book_jal(client)
    client.post("/travel/api/checkout")
    assert client.post("/travel/api/checkout/complete").status_code == 409


def test_offline_search(client):
    flights = client.get("/travel/api/search/flights?from=NYC&to=Tokyo&date=2026-06-01").get_json()
    assert 4 <= len(flights["flights"]) <= 6
    assert client.get("/travel/api/search/flights?from=NYC").status_code == 400

    hotels = client.get("/travel/api/search/hotels?location=Tokyo").get_json()
    assert 4 <= len(hotels["hotels"]) <= 6
    assert client.get("/travel/api/search/hotels").status_code == 400


def test_capacity(session_manager, client):
    session_manager.config["max_sessions"] = 0
    response = client.get("/travel/api/state")
    assert response.status_code == 503


def test_inline_confirm_blocked_during_checkout(client):
    book_jal(client)
    client.post("/travel/api/checkout")
    assert client.post("/travel/api/bookings/pending/confirm").get_json() == {"booking": None}
    assert client.post("/travel/api/bookings/pending/cancel").get_json() == {"ok": True, "cancelled": False}

    client.post("/travel/api/checkout/pay")
    wait_for_step(client, "confirmed")
    state = client.post("/travel/api/checkout/complete").get_json()["state"]
    assert [b["itemName"] for b in state["bookings"]] == ["JAL 001"]
