# tripilot/api/actions/function_handler.py
"""Handle action calls from the external AI assistant."""

import json
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from tripilot.api.actions.schemas import (
    CardItemPayload,
    DayPayload,
    FlightPayload,
    HotelPayload,
    RestaurantPayload,
    decode_list,
)
from tripilot.api.config import get_store_config
from tripilot.api.data import DESTINATIONS, uid
from tripilot.api.errors import ActionError, ParseError, ValidationError
from tripilot.api.mock_search import generate_flights, generate_hotels
from tripilot.api.models import (
    BOOKING_TYPES,
    DEFAULT_CARD_COLOR,
    Activity,
    BucketListItem,
    CardItem,
    Flight,
    Hotel,
    ItineraryDay,
    LatLng,
    PendingBooking,
    Restaurant,
    Trip,
    TripCard,
    is_valid_latlng,
    normalize_priority,
    to_dicts,
    trip_problems,
)

logger = logging.getLogger(__name__)


def _string(description: str) -> Dict[str, str]:
    return {"type": "string", "description": description}


def _number(description: str) -> Dict[str, str]:
    return {"type": "number", "description": description}


# Action definitions, in the tool shape the assistant is prompted with.
# Parameter names and types are a wire contract: do not rename.
FUNCTION_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "planTrip",
        "description": (
            "Create a detailed day-by-day trip itinerary. Use when the user asks to plan, "
            "create, or suggest a trip. Include real place names, coordinates, activities, "
            "and budget estimates. The trip will appear on the map and in the trips panel."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "destination": _string("Main destination city"),
                "country": _string("Country name"),
                "lat": _number("Latitude of the destination"),
                "lng": _number("Longitude of the destination"),
                "startDate": _string("Start date (YYYY-MM-DD)"),
                "endDate": _string("End date (YYYY-MM-DD)"),
                "totalBudget": _number("Estimated total budget in USD"),
                "daysJson": _string(
                    'JSON array of itinerary days. Each: {"day":1,"date":"YYYY-MM-DD","title":"Day title",'
                    '"activities":[{"time":"09:00","activity":"Description","location":"Place name",'
                    '"lat":0,"lng":0,"type":"sightseeing|food|transport|hotel|activity"}]}'
                ),
            },
            "required": ["destination", "country", "lat", "lng", "startDate", "endDate",
                         "totalBudget", "daysJson"],
        },
    },
    {
        "type": "function",
        "name": "searchFlights",
        "description": (
            "Search for flights between two cities. Provide real flight data from your knowledge: "
            "actual airlines that fly this route, realistic prices, real durations and times. "
            "Return 4-6 options sorted by price."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "from": _string("Departure city"),
                "to": _string("Arrival city"),
                "date": _string("Travel date (YYYY-MM-DD)"),
                "resultsJson": _string(
                    'JSON array of real flights. Each: {"airline":"Delta","from":"NYC","to":"Tokyo",'
                    '"departTime":"14:30","arriveTime":"17:45+1","duration":"14h 15m","stops":0,'
                    '"price":890,"class":"economy"}'
                ),
            },
            "required": ["from", "to", "date", "resultsJson"],
        },
    },
    {
        "type": "function",
        "name": "searchHotels",
        "description": (
            "Search for hotels in a city. Provide real hotel names that exist in that city, "
            "real ratings, realistic nightly prices in USD and actual amenities. Return 4-6 options."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "location": _string("City to search hotels in"),
                "resultsJson": _string(
                    'JSON array of real hotels. Each: {"name":"Park Hyatt Tokyo","location":"Shinjuku",'
                    '"rating":4.8,"stars":5,"pricePerNight":450,"amenities":["Pool","Spa","Gym"]}'
                ),
            },
            "required": ["location", "resultsJson"],
        },
    },
    {
        "type": "function",
        "name": "searchRestaurants",
        "description": (
            "Search for restaurants in a city. Provide real restaurant names, cuisine types, "
            "accurate ratings and realistic price levels. Return 4-6 options."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "location": _string("City to search restaurants in"),
                "cuisine": _string("Cuisine type filter (optional, e.g. 'sushi', 'italian')"),
                "resultsJson": _string(
                    'JSON array of real restaurants. Each: {"name":"Sukiyabashi Jiro","cuisine":"Sushi",'
                    '"location":"Ginza, Tokyo","rating":4.9,"priceLevel":"$$$$",'
                    '"description":"Legendary sushi counter","mustTry":"Omakase tasting menu"}'
                ),
            },
            "required": ["location", "resultsJson"],
        },
    },
    {
        "type": "function",
        "name": "addToBucketList",
        "description": (
            "Add a destination to the user's travel bucket list. Use when the user mentions "
            "wanting to visit, save, or bookmark a place."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "destination": _string("Place name"),
                "country": _string("Country"),
                "lat": _number("Latitude"),
                "lng": _number("Longitude"),
                "notes": _string("Short notes or reason"),
                "priority": _string("Priority: dream, next, or someday"),
            },
            "required": ["destination", "country", "lat", "lng", "priority"],
        },
    },
    {
        "type": "function",
        "name": "bookTrip",
        "description": (
            "Book a flight or hotel. This requires user confirmation before completing "
            "(human-in-the-loop). Use when the user wants to book, reserve, or purchase travel."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "type": _string("flight or hotel"),
                "itemName": _string("Name of the flight/hotel"),
                "price": _number("Total price in USD"),
                "details": _string("Booking details summary"),
            },
            "required": ["type", "itemName", "price", "details"],
        },
    },
    {
        "type": "function",
        "name": "createTripCard",
        "description": (
            "Create a visual comparison or summary card. Use for comparing destinations, trip "
            "summaries, budget breakdowns, or travel tips. Pick the best type: comparison, "
            "summary, budget, or tips."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "type": _string("Card type: comparison, summary, budget, or tips"),
                "title": _string("Card title"),
                "dataJson": _string(
                    'JSON array of items. Each: {"label":"Name","value":"display value",'
                    '"sublabel":"subtitle","color":"#hex"}'
                ),
            },
            "required": ["type", "title", "dataJson"],
        },
    },
]

_DEFINITIONS_BY_NAME = {d["name"]: d for d in FUNCTION_DEFINITIONS}


def _matches_type(value: Any, expected: str) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return True


def validate_arguments(name: str, args: Dict[str, Any]) -> Dict[str, Any]:
    """Check ``args`` against the declared parameter schema of action ``name``.

    Unknown keys are dropped; optional parameters sent as null are treated as
    absent.

    Raises:
        ValidationError: On missing required parameters or wrong types
    """
    params = _DEFINITIONS_BY_NAME[name]["parameters"]
    properties = params["properties"]

    missing = [p for p in params["required"] if args.get(p) is None]
    if missing:
        raise ValidationError(f"Missing required parameters: {', '.join(missing)}", name)

    cleaned = {}
    for key, schema in properties.items():
        value = args.get(key)
        if value is None:
            continue
        if not _matches_type(value, schema["type"]):
            raise ValidationError(
                f"Parameter '{key}' must be a {schema['type']}, got {type(value).__name__}", name
            )
        cleaned[key] = value
    return cleaned


class FunctionHandler:
    """Maps assistant action calls onto one TripStore.

    Search actions are read-only projections of the assistant's own data;
    planTrip, addToBucketList and bookTrip mutate the store. bookTrip only
    stages a pending booking: committing it takes a separate user step.
    """

    def __init__(self, store, offline_search: Optional[bool] = None):
        """Initialize function handler.

        Args:
            store: TripStore the actions apply to
            offline_search: Use the mock generators when the assistant sends
                blank search results (defaults to TRIPILOT_OFFLINE_SEARCH)
        """
        self.store = store
        if offline_search is None:
            offline_search = get_store_config()["offline_search"]
        self.offline_search = offline_search
        self.call_count = 0

        # Function registry
        self.functions: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "planTrip": self._handle_plan_trip,
            "searchFlights": self._handle_search_flights,
            "searchHotels": self._handle_search_hotels,
            "searchRestaurants": self._handle_search_restaurants,
            "addToBucketList": self._handle_add_to_bucket_list,
            "bookTrip": self._handle_book_trip,
            "createTripCard": self._handle_create_trip_card,
        }
        self.function_definitions = FUNCTION_DEFINITIONS

    def handle_function_call(self, call_id: str, name: str, arguments: Any) -> Dict[str, Any]:
        """Handle an action call from the assistant.

        Args:
            call_id: Unique ID for this call
            name: Action name
            arguments: Action arguments, as a dict or a JSON object string

        Returns:
            Result to send back to the assistant; never raises
        """
        logger.info(f"Handling function call: {name} ({call_id})")
        self.call_count += 1

        try:
            if name not in self.functions:
                return {
                    "success": False,
                    "error": "unknown_function",
                    "message": f"Unknown function: {name}",
                    "call_id": call_id,
                    "function": name,
                }

            args = validate_arguments(name, self._coerce_arguments(name, arguments))
            result = self.functions[name](args)
            result.setdefault("success", True)

        except ActionError as e:
            logger.warning(f"Rejected {name} call {call_id}: {e.message}")
            result = {"success": False, "error": e.kind, "message": e.message}

        except Exception as e:
            logger.error(f"Error executing function {name}: {e}")
            result = {"success": False, "error": "internal_error", "message": str(e)}

        # Add metadata
        result["call_id"] = call_id
        result["function"] = name
        return result

    def handle_action(self, name: str, arguments: Any) -> Dict[str, Any]:
        """Convenience wrapper that allocates a call id."""
        return self.handle_function_call(uid("call"), name, arguments)

    @staticmethod
    def _coerce_arguments(name: str, arguments: Any) -> Dict[str, Any]:
        if arguments is None:
            return {}
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as exc:
                raise ParseError(f"Arguments for {name} are not valid JSON: {exc.msg}", name) from exc
        if not isinstance(arguments, dict):
            raise ParseError(f"Arguments for {name} must be a JSON object", name)
        return arguments

    # ------------------------------------------------------------------
    # Trip planning
    # ------------------------------------------------------------------

    def _handle_plan_trip(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Handle the planTrip action.

        Args:
            args: Validated arguments (destination, country, lat, lng,
                startDate, endDate, totalBudget, daysJson)

        Returns:
            Result with the new trip id and day count
        """
        payload = decode_list(args["daysJson"], DayPayload, "itinerary data")

        days = tuple(
            ItineraryDay(
                day=d.day,
                date=d.date,
                title=d.title,
                activities=tuple(
                    Activity(a.time, a.activity, a.location, LatLng(a.lat, a.lng), a.type)
                    for a in d.activities
                ),
            )
            for d in sorted(payload, key=lambda d: d.day)
        )

        trip = Trip(
            id=uid(),
            destination=args["destination"],
            country=args["country"],
            coords=LatLng(float(args["lat"]), float(args["lng"])),
            start_date=args["startDate"],
            end_date=args["endDate"],
            days=days,
            total_budget=args["totalBudget"],
            status="planned",
        )

        problems = trip_problems(trip)
        if problems:
            raise ValidationError(f"Invalid itinerary: {'; '.join(problems)}", "planTrip")

        self.store.add_trip(trip)
        return {
            "ok": True,
            "tripId": trip.id,
            "destination": trip.destination,
            "days": len(trip.days),
        }

    # ------------------------------------------------------------------
    # Searches (read-only)
    # ------------------------------------------------------------------

    def _wants_offline(self, raw: str) -> bool:
        return self.offline_search and not raw.strip()

    def _handle_search_flights(self, args: Dict[str, Any]) -> Dict[str, Any]:
        if self._wants_offline(args["resultsJson"]):
            logger.info(f"No flight data from assistant, using mock search for {args['from']} -> {args['to']}")
            flights = generate_flights(args["from"], args["to"], args["date"])
        else:
            payload = decode_list(args["resultsJson"], FlightPayload, "flight data")
            flights = [
                Flight(
                    id=f"fl-{i}",
                    airline=f.airline,
                    from_city=f.from_city or args["from"],
                    to_city=f.to_city or args["to"],
                    depart_time=f.depart_time,
                    arrive_time=f.arrive_time,
                    duration=f.duration,
                    stops=f.stops,
                    price=f.price,
                    flight_class=f.flight_class,
                )
                for i, f in enumerate(payload)
            ]

        return {
            "flights": to_dicts(flights),
            "from": args["from"],
            "to": args["to"],
            "date": args["date"],
        }

    def _handle_search_hotels(self, args: Dict[str, Any]) -> Dict[str, Any]:
        if self._wants_offline(args["resultsJson"]):
            logger.info(f"No hotel data from assistant, using mock search for {args['location']}")
            hotels = generate_hotels(args["location"])
        else:
            payload = decode_list(args["resultsJson"], HotelPayload, "hotel data")
            hotels = [
                Hotel(
                    id=f"ht-{i}",
                    name=h.name,
                    location=h.location or args["location"],
                    rating=h.rating,
                    stars=h.stars,
                    price_per_night=h.price_per_night,
                    amenities=tuple(h.amenities),
                )
                for i, h in enumerate(payload)
            ]

        return {"hotels": to_dicts(hotels), "location": args["location"]}

    def _handle_search_restaurants(self, args: Dict[str, Any]) -> Dict[str, Any]:
        payload = decode_list(args["resultsJson"], RestaurantPayload, "restaurant data")
        restaurants = [
            Restaurant(
                id=f"rest-{i}",
                name=r.name,
                cuisine=r.cuisine,
                location=r.location or args["location"],
                rating=r.rating,
                price_level=r.price_level,
                description=r.description,
                must_try=r.must_try,
            )
            for i, r in enumerate(payload)
        ]
        return {
            "restaurants": to_dicts(restaurants),
            "location": args["location"],
            "cuisine": args.get("cuisine"),
        }

    # ------------------------------------------------------------------
    # Bucket list and bookings
    # ------------------------------------------------------------------

    def _handle_add_to_bucket_list(self, args: Dict[str, Any]) -> Dict[str, Any]:
        destination = args["destination"].strip()
        country = args["country"].strip()
        if not destination or not country:
            raise ValidationError("destination and country must not be empty", "addToBucketList")

        coords = LatLng(float(args["lat"]), float(args["lng"]))
        if not is_valid_latlng(coords):
            raise ValidationError(f"Coordinates out of range: {coords.lat}, {coords.lng}", "addToBucketList")

        item = BucketListItem(
            id=uid(),
            destination=destination,
            country=country,
            coords=coords,
            added_at=date.today().isoformat(),
            priority=normalize_priority(args.get("priority")),
            notes=args.get("notes"),
        )
        self.store.add_bucket_item(item)
        return {"ok": True, "destination": item.destination, "itemId": item.id}

    def _handle_book_trip(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Handle the bookTrip action.

        Only stages the booking; the user has to approve it in the app.
        """
        booking_type = args["type"].strip().lower()
        if booking_type not in BOOKING_TYPES:
            raise ValidationError(
                f"Booking type must be one of: {', '.join(BOOKING_TYPES)}", "bookTrip"
            )
        if args["price"] < 0:
            raise ValidationError("Booking price must not be negative", "bookTrip")

        pending = PendingBooking(
            type=booking_type,
            item_name=args["itemName"],
            price=args["price"],
            details=args["details"],
        )
        self.store.request_booking(pending)
        return {
            "needsApproval": True,
            "type": pending.type,
            "itemName": pending.item_name,
            "price": pending.price,
        }

    # ------------------------------------------------------------------
    # Visual cards
    # ------------------------------------------------------------------

    def _handle_create_trip_card(self, args: Dict[str, Any]) -> Dict[str, Any]:
        payload = decode_list(args["dataJson"], CardItemPayload, "card data")
        card = TripCard(
            type=args["type"],
            title=args["title"],
            items=tuple(
                CardItem(
                    label=c.label,
                    value=c.value,
                    sublabel=c.sublabel,
                    color=c.color or DEFAULT_CARD_COLOR,
                )
                for c in payload
            ),
        )
        return card.to_dict()

    # ------------------------------------------------------------------
    # Assistant context
    # ------------------------------------------------------------------

    def get_function_definitions(self) -> list:
        """
        Return the action list in the tool shape the assistant expects.

        Each element has top-level keys:
            - type:        always "function"
            - name:        the action name (string)
            - description: short human-readable summary (string)
            - parameters:  JSON-Schema dict describing arguments (dict)
        """
        return [
            {
                "type": "function",
                "name": d["name"],
                "description": d.get("description", ""),
                "parameters": d.get("parameters", {}),
            }
            for d in self.function_definitions
        ]

    def get_context(self) -> List[Dict[str, Any]]:
        """State the assistant can read: trips, bucket list, bookings, destinations."""
        state = self.store.snapshot()
        return [
            {
                "description": (
                    "The user's planned trips. Each trip has: destination, country, coords, "
                    "startDate, endDate, days (itinerary days with activities), totalBudget, "
                    "and status (planned/booked/completed)."
                ),
                "value": state["trips"],
            },
            {
                "description": (
                    "The user's travel bucket list. Each item has: destination, country, coords, "
                    "notes, priority (dream/next/someday)."
                ),
                "value": state["bucketList"],
            },
            {
                "description": (
                    "The user's bookings (flights and hotels). Each has: type, itemName, price, "
                    "status (pending/confirmed/cancelled), details."
                ),
                "value": state["bookings"],
            },
            {
                "description": (
                    "Popular world destinations with coordinates, ratings, and descriptions. "
                    "Use these for suggestions."
                ),
                "value": to_dicts(DESTINATIONS),
            },
        ]


def create_function_handler(store, offline_search: Optional[bool] = None) -> FunctionHandler:
    """Create a function handler bound to ``store``.

    Args:
        store: TripStore instance

    Returns:
        FunctionHandler instance
    """
    return FunctionHandler(store, offline_search=offline_search)
