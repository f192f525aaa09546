"""
Hotel intent taxonomy.

Closed set of guest-request categories. Each entry carries the routing
metadata (department, whether staff must act) attached to a classification.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from concierge.models.intent import UNKNOWN_INTENT, IntentDefinition, IntentPriority

LOW = IntentPriority.LOW
STANDARD = IntentPriority.STANDARD
HIGH = IntentPriority.HIGH
URGENT = IntentPriority.URGENT


def _intent(
    description: str,
    examples: List[str],
    department: Optional[str],
    requires_action: bool,
    priority: IntentPriority,
) -> IntentDefinition:
    return IntentDefinition(
        description=description,
        examples=examples,
        department=department,
        requires_action=requires_action,
        priority=priority,
    )


INTENT_TAXONOMY: Dict[str, IntentDefinition] = {
    # Service requests
    "request.housekeeping.towels": _intent(
        "Request for additional towels",
        ["I need more towels", "Can I get extra towels please?", "Send some towels to my room"],
        "housekeeping", True, STANDARD,
    ),
    "request.housekeeping.cleaning": _intent(
        "Request for room cleaning",
        ["Can you clean my room?", "I need housekeeping", "The room needs cleaning"],
        "housekeeping", True, STANDARD,
    ),
    "request.housekeeping.amenities": _intent(
        "Request for room amenities (toiletries, pillows, etc)",
        ["I need extra pillows", "Can I get more shampoo?", "Need a blanket", "Extra hangers please"],
        "housekeeping", True, STANDARD,
    ),
    "request.maintenance": _intent(
        "Report of something broken or maintenance needed",
        ["The AC is not working", "Toilet is clogged", "Light bulb is out", "Hot water not working"],
        "maintenance", True, HIGH,
    ),
    "request.maintenance.wifi": _intent(
        "WiFi or internet not working, needs technical fix",
        ["WiFi not working", "Internet is down", "I can't connect to the WiFi"],
        "maintenance", True, HIGH,
    ),
    "request.room_service": _intent(
        "Food or beverage order",
        ["I want to order room service", "Can I order breakfast?", "Send a bottle of wine"],
        "room_service", True, STANDARD,
    ),
    "request.concierge": _intent(
        "Concierge requests requiring action (bookings, arrangements, tickets)",
        ["Book a restaurant for tonight", "Arrange a tour", "Can you get me theatre tickets?"],
        "concierge", True, STANDARD,
    ),
    "request.transport": _intent(
        "Transportation requests (taxi, shuttle, airport transfer)",
        ["Call me a taxi", "Arrange a shuttle to the airport", "Book an airport transfer"],
        "concierge", True, STANDARD,
    ),
    "request.wakeup": _intent(
        "Request for a wake-up call",
        ["Wake me up at 6am", "Set a wake-up call for tomorrow", "I need an alarm call"],
        "front_desk", True, STANDARD,
    ),
    "request.luggage": _intent(
        "Luggage storage, delivery, or assistance",
        ["Can I leave my bags after checkout?", "Can someone bring my bags to the room?"],
        "front_desk", True, STANDARD,
    ),
    "request.laundry": _intent(
        "Laundry, dry cleaning, or ironing requests",
        ["Can I get my clothes laundered?", "Do you have dry cleaning?", "I need a shirt ironed"],
        "housekeeping", True, STANDARD,
    ),
    "request.dnd": _intent(
        "Do not disturb or skip housekeeping request",
        ["Don't clean my room today", "No housekeeping please", "Do not disturb"],
        "housekeeping", True, LOW,
    ),
    "request.room_change": _intent(
        "Request to change or switch rooms",
        ["I want to change rooms", "This room is too noisy, can I switch?"],
        "front_desk", True, HIGH,
    ),
    "request.lost_found": _intent(
        "Report of lost item or inquiry about found items",
        ["I lost my wallet", "I left something in my room", "Did anyone find a phone?"],
        "front_desk", True, STANDARD,
    ),
    "request.security": _intent(
        "Security concern or room lockout (non-emergency)",
        ["I am locked out of my room", "My key card is not working", "I feel unsafe"],
        "front_desk", True, HIGH,
    ),
    "request.noise": _intent(
        "Noise complaint about other guests or surroundings",
        ["The room next door is too loud", "There is a party on my floor"],
        "front_desk", True, HIGH,
    ),
    "request.special_occasion": _intent(
        "Special occasion arrangements (birthday, anniversary, surprise)",
        ["It's our anniversary, can you arrange something?", "Can you arrange a cake?"],
        "concierge", True, STANDARD,
    ),
    "request.checkout.late": _intent(
        "Request for late checkout",
        ["Can I get late checkout?", "I need to check out later", "Is late checkout available?"],
        "front_desk", True, STANDARD,
    ),
    "request.checkin.early": _intent(
        "Request for early check-in",
        ["Can I check in early?", "I need early check-in", "Is early check-in available?"],
        "front_desk", True, STANDARD,
    ),
    "request.billing.receipt": _intent(
        "Request for invoice, receipt, or billing document",
        ["Can I get an itemized receipt?", "I need an invoice for my company"],
        "front_desk", True, STANDARD,
    ),
    "request.reservation.modify": _intent(
        "Requests to change, extend, or upgrade a reservation",
        ["Can I extend my stay?", "I want to change my reservation", "Book another night"],
        "front_desk", True, STANDARD,
    ),
    "request.reservation.cancel": _intent(
        "Request to cancel a reservation",
        ["I want to cancel my booking", "Cancel my reservation"],
        "front_desk", True, HIGH,
    ),
    # Inquiries
    "inquiry.checkout": _intent(
        "Questions about checkout time or procedure",
        ["What time is checkout?", "How do I check out?", "When do I need to leave?"],
        None, False, LOW,
    ),
    "inquiry.checkin": _intent(
        "Questions about check-in time or procedure",
        ["What time is check-in?", "How do I check in?", "Where do I go to check in?"],
        None, False, LOW,
    ),
    "inquiry.wifi": _intent(
        "Questions about WiFi password, connection, or availability",
        ["What is the WiFi password?", "How do I connect to WiFi?", "Is there internet?"],
        None, False, LOW,
    ),
    "inquiry.amenity": _intent(
        "Questions about hotel amenities",
        ["Where is the pool?", "What time does the gym open?", "Do you have a spa?"],
        None, False, LOW,
    ),
    "inquiry.dining": _intent(
        "Questions about dining options",
        ["What restaurants do you have?", "What time is breakfast?", "Room service hours?"],
        None, False, LOW,
    ),
    "inquiry.concierge": _intent(
        "Questions seeking recommendations from the concierge",
        ["Can you recommend a good restaurant?", "What is there to do around here?"],
        None, False, LOW,
    ),
    "inquiry.transport": _intent(
        "Questions about transportation options or directions",
        ["How do I get to the airport?", "Is there a shuttle service?"],
        None, False, LOW,
    ),
    "inquiry.location": _intent(
        "Questions about locations (hotel facilities, nearby places)",
        ["Where is the lobby?", "Is there a pharmacy nearby?"],
        None, False, LOW,
    ),
    "inquiry.parking": _intent(
        "Questions about parking options, valet, or fees",
        ["Where can I park?", "How much is parking?", "Do you have valet parking?"],
        None, False, LOW,
    ),
    "inquiry.accessibility": _intent(
        "Questions about accessibility features or disability accommodations",
        ["Do you have accessible rooms?", "Is there a wheelchair ramp?"],
        None, False, LOW,
    ),
    "inquiry.pet_policy": _intent(
        "Questions about pet policies and fees",
        ["Can I bring my dog?", "Is this hotel pet-friendly?", "What's the pet fee?"],
        None, False, LOW,
    ),
    "inquiry.billing": _intent(
        "Questions about charges, bills, or payments",
        ["What's this charge for?", "How do I pay?", "Do you accept credit cards?"],
        "front_desk", False, STANDARD,
    ),
    "inquiry.reservation.status": _intent(
        "Questions about existing reservation details, dates, or confirmation",
        ["Do I have a booking?", "What's my confirmation number?"],
        None, False, LOW,
    ),
    # Feedback
    "feedback.complaint": _intent(
        "Negative feedback or complaint",
        ["I want to complain", "This is unacceptable", "I had a terrible experience"],
        "front_desk", True, HIGH,
    ),
    "feedback.compliment": _intent(
        "Positive feedback or compliment",
        ["Great service!", "The room is amazing", "Best hotel experience"],
        None, False, LOW,
    ),
    # Conversation
    "greeting": _intent("Greeting or hello", ["Hello", "Hi", "Good morning"], None, False, LOW),
    "farewell": _intent("Goodbye or thank you", ["Goodbye", "Thanks", "Bye"], None, False, LOW),
    # Emergency
    "emergency": _intent(
        "Emergency situation requiring immediate attention",
        ["There is a fire", "Medical emergency", "Someone is hurt", "Help!"],
        "front_desk", True, URGENT,
    ),
    UNKNOWN_INTENT: _intent("Unable to classify the intent", [], None, False, LOW),
}


def get_intent_names() -> List[str]:
    return list(INTENT_TAXONOMY)


def get_intent_definition(intent: str) -> Optional[IntentDefinition]:
    return INTENT_TAXONOMY.get(intent)


def get_intents_by_department(department: str) -> List[str]:
    return [name for name, definition in INTENT_TAXONOMY.items() if definition.department == department]


def get_actionable_intents() -> List[str]:
    return [name for name, definition in INTENT_TAXONOMY.items() if definition.requires_action]
