"""
Prompt construction for AI trip-plan generation.

``build_trip_prompt`` is a pure function of the validated form and the
derived trip dates: the same inputs always produce byte-identical text.

Usage:
    from services.prompt_builder import build_trip_prompt, calculate_max_tokens

    prompt = build_trip_prompt(request, trip_dates)
    max_tokens = calculate_max_tokens(trip_dates.days)
"""

import logging
from datetime import date
from typing import Optional

from config.settings import PipelineConfig
from models.trip_plan import TripDates
from schemas.api_models import TripRequest

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "INR"

_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "AUD": "A$",
    "CAD": "C$",
    "NZD": "NZ$",
    "SGD": "S$",
    "HKD": "HK$",
    "CHF": "CHF",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "ISK": "kr",
    "PLN": "zł",
    "CZK": "Kč",
    "HUF": "Ft",
    "RON": "lei",
    "BGN": "лв",
    "TRY": "₺",
    "RUB": "₽",
    "UAH": "₴",
    "ILS": "₪",
    "AED": "د.إ",
    "SAR": "﷼",
    "QAR": "﷼",
    "OMR": "﷼",
    "KWD": "د.ك",
    "BHD": ".د.ب",
    "EGP": "E£",
    "ZAR": "R",
    "NGN": "₦",
    "KES": "KSh",
    "MAD": "د.م.",
    "BRL": "R$",
    "MXN": "Mex$",
    "ARS": "$",
    "CLP": "$",
    "COP": "$",
    "PEN": "S/",
    "KRW": "₩",
    "THB": "฿",
    "VND": "₫",
    "IDR": "Rp",
    "MYR": "RM",
    "PHP": "₱",
    "PKR": "₨",
    "LKR": "Rs",
    "NPR": "₨",
    "BDT": "৳",
    "TWD": "NT$",
}

_PACE_DIRECTIVES = {
    "slow": "Plan fewer activities per day, allow time for relaxation",
    "fast": "Plan more activities, maximize time efficiency",
}

_FOOD_DIRECTIVES = {
    "vegetarian": "Focus on vegetarian restaurants and dishes",
    "vegan": "Focus on vegan-friendly options",
    "local": "Emphasize local cuisine and street food",
}

_ACCOMMODATION_DIRECTIVES = {
    "hostel": "Suggest budget-friendly hostels",
    "airbnb": "Suggest Airbnb options",
    "5star": "Suggest luxury 5-star hotels",
}


def currency_symbol(code: Optional[str]) -> str:
    """Display symbol for an ISO currency code; unknown codes map to themselves."""
    code = (code or DEFAULT_CURRENCY).upper()
    return CURRENCY_SYMBOLS.get(code, code)


def format_date_long(d: date) -> str:
    """``date(2025, 6, 1)`` → ``"June 1, 2025"``."""
    return f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_amount(amount: float) -> str:
    """Thousands separators, no trailing ``.0`` on whole amounts."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}"


def calculate_max_tokens(days: int, config: Optional[PipelineConfig] = None) -> int:
    """Output-token budget for a ``days``-long plan, clamped to the configured range."""
    config = config or PipelineConfig()
    budget = config.base_tokens + days * config.tokens_per_day
    return min(max(budget, config.min_tokens), config.max_tokens)


def build_trip_prompt(
    request: TripRequest,
    dates: TripDates,
    default_currency: str = DEFAULT_CURRENCY,
) -> str:
    """Render the full generation prompt for one trip.

    ``default_currency`` applies when the form names none.
    """
    currency = request.currency or default_currency
    symbol = currency_symbol(currency)
    days = dates.days
    start_long = format_date_long(dates.start)
    end_long = format_date_long(dates.end)

    start_city = request.start_city or "starting point"
    destination = request.destination or "destination"
    adults = request.adults or 1
    children = request.children or 0
    infants = request.infants or 0

    themes = request.travel_themes or []
    budget = request.budget

    logger.debug(
        "Building trip prompt",
        extra={
            "destination": request.destination,
            "days": days,
            "currency": currency,
            "budget": budget,
        },
    )

    if budget:
        budget_line = f"{currency} {format_amount(budget)}"
        per_day_line = (
            f"- Estimated Daily Budget: {currency} {format_amount(round(budget / days, 2))} "
            f"(total budget / {days} days)\n"
        )
        budget_directive = (
            f"Total budget is {currency} {format_amount(budget)} - "
            "make recommendations realistic for this budget"
        )
    else:
        budget_line = "Not specified"
        per_day_line = ""
        budget_directive = "Budget not specified - suggest options across price ranges"

    passenger_line = f"- Passenger Details: {request.passengers}\n" if request.passengers else ""
    themes_line = ", ".join(themes) if themes else "None selected - plan for general exploration"
    themes_directive = (
        "\n".join(f"- {t}" for t in themes) if themes else "- General travel and exploration"
    )
    pace_directive = _PACE_DIRECTIVES.get(request.travel_pace or "", "Balance activities with rest time")
    food_directive = _FOOD_DIRECTIVES.get(request.food or "", "Include diverse food options")
    accommodation_directive = _ACCOMMODATION_DIRECTIVES.get(
        request.accommodation or "", "Suggest variety from budget to luxury"
    )
    specific_request = (
        f"12. SPECIFIC REQUEST: {request.additional_preferences} - "
        "Make sure to incorporate this into the itinerary\n"
        if request.additional_preferences
        else ""
    )
    first_date = dates.date_list[0] if dates.date_list else dates.start.isoformat()

    return f"""You are an expert travel planner with deep knowledge of destinations worldwide. Create a detailed, personalized travel itinerary that matches the exact structure provided below.

**USER TRIP DETAILS:**
- Starting Location: {request.start_city or "Not specified"}
- Destination: {request.destination or "Not specified"}
- Travel Start Date: {start_long}
- Travel End Date: {end_long}
- Trip Duration: {days} days
- Currency Type: {currency} (use this currency for all price references)
- Budget: {budget_line}
{per_day_line}- Number of Travelers: {adults} adult(s), {children} child(ren), {infants} infant(s)
{passenger_line}
**IMPORTANT - CURRENCY INFORMATION:**
- Currency Code: {currency}
- Currency Symbol: {symbol}
- All prices, accommodation costs, and budget recommendations must be in {currency} currency

**USER TRAVEL PREFERENCES:**
- Travel Themes Selected: {themes_line}
- Travel Pace Preference: {request.travel_pace or "Not specified - use balanced pace"}
- Preferred Weather: {request.weather or "Not specified - plan for all weather conditions"}
- Accommodation Type: {request.accommodation or "Not specified - suggest variety of options"}
- Food Preferences: {request.food or "Not specified - include diverse culinary experiences"}
- Transportation Mode: {request.transport or "Not specified - suggest appropriate transport"}

**ADDITIONAL USER PREFERENCES:**
{request.additional_preferences or "None specified"}

**CRITICAL REQUIREMENTS - MATCH THIS EXACT JSON STRUCTURE:**

{{
  "tripHighlights": {{
    "title": "Create an engaging title (3-8 words) that captures the essence of this trip based on destination and themes. Examples: 'A Cultural Journey Through Vietnam', 'Adventure Awaits in the Swiss Alps'",
    "description": "Write a compelling paragraph (4-6 sentences) that describes the overall trip experience, highlights what makes it special and mentions key attractions. Make it specific to the destination and user preferences."
  }},
  "itinerary": [
    {{
      "day": 1,
      "date": "{first_date}",
      "title": "For Day 1 use 'Travel Day: Arrival at [Destination]'. For the last day use 'Return Travel: Departure from [Destination]'. For middle days use titles like 'Exploring [Specific Area]'",
      "morning": {{
        "activities": ["2-4 specific, time-stamped activities in 'HH:MM AM/PM - Activity' format, e.g. '07:30 AM - Visit the Old Quarter'"],
        "description": "1-2 sentences describing the morning plan"
      }},
      "afternoon": {{
        "activities": ["2-4 time-stamped activities, e.g. '01:00 PM - Lunch at a local market'"],
        "description": "1-2 sentences describing the afternoon plan"
      }},
      "evening": {{
        "activities": ["2-3 time-stamped activities, e.g. '06:30 PM - Dinner at a rooftop restaurant'"],
        "description": "1-2 sentences describing the evening plan"
      }},
      "night": {{
        "activities": ["Optional - only if relevant, e.g. '09:30 PM - Night market shopping'"],
        "description": "Optional night activities if relevant to destination"
      }},
      "foodRecommendations": ["3-5 specific food recommendations with restaurant names or local dishes"],
      "stayOptions": [
        "Provide 3 accommodation options with realistic price ranges in {currency} based on the user's total trip budget and per-day cost limit.",
        "Determine an estimated daily budget by dividing the total trip budget across the number of trip days ({days}).",
        "Accommodation price must NOT exceed 30-45% of the daily budget allocation unless the destination is known to be expensive.",
        "Match the accommodation preference ({request.accommodation or "any"}) when selecting property types.",
        "Label the options by category like 'Value Stay', 'Comfort Hotel', 'Premium Experience' - all within the user's overall budget."
      ],
      "optionalActivities": ["2-3 optional activities that can be added if time permits"],
      "quickBookings": ["3-4 booking suggestions relevant to the day, e.g. 'Reserve a 07:30 PM table at [Restaurant]'"],
      "tip": "A helpful, practical tip for this specific day (1-2 sentences)"
    }}
    // Generate exactly {days} days - one object for each day
  ],
  "bestTimeToVisit": {{
    "description": "A detailed paragraph (4-5 sentences) explaining the best time to visit {request.destination or "this destination"} based on weather patterns, tourist seasons and festivals.",
    "peakSeason": "Month range, e.g. 'December - March'",
    "shoulderSeason": "Month range, e.g. 'April - June, September - November'",
    "offSeason": "Month range, e.g. 'July - August'"
  }},
  "packingSuggestions": {{
    "clothing": ["5-8 clothing items based on destination, weather preference ({request.weather or "general"}) and trip duration"],
    "essentials": ["4-6 essential items"],
    "toiletries": ["5-7 toiletry items"],
    "electronics": ["4-6 electronic items"],
    "documents": ["4-6 document items"],
    "other": ["3-5 miscellaneous items specific to destination or activities"]
  }}
}}

**CRITICAL INSTRUCTIONS:**
1. Generate exactly {days} itinerary days - one object for each day from day 1 to day {days}
2. Use the exact dates provided: {", ".join(dates.date_list)}
3. **Day 1 ({start_long}):** This is the TRAVEL DAY from {start_city} to {destination}. Include:
   - Morning: Travel from {start_city} (flight/train/bus departure)
   - Afternoon: Arrival at {destination}, check-in to accommodation, settling in
   - Evening: Light exploration near accommodation, early dinner, rest after travel
   - Keep activities minimal as this is primarily a travel/arrival day
4. **Day {days} ({end_long}):** This is the RETURN TRAVEL DAY from {destination} back to {start_city}. Include:
   - Morning: Final activities, last-minute shopping, check-out from accommodation
   - Afternoon: Travel preparation, departure from {destination}
   - Evening: Arrival back at {start_city}
   - Keep activities minimal as this is primarily a travel/departure day
5. Make ALL content specific to {request.destination or "the destination"} - use real place names, attractions and local culture
6. Consider travel pace: {pace_directive}
7. Match food preferences: {food_directive}
8. Match accommodation preference: {accommodation_directive}
9. Incorporate travel themes:
{themes_directive}
10. Stay within budget: {budget_directive}
11. Consider group size: {adults} adults, {children} children, {infants} infants - suggest activities suitable for this group
{specific_request}
**IMPORTANT:**
- Weather information will be provided separately via API - do NOT include weather forecasts in your response
- Focus on creating realistic, actionable plans
- Use specific names of attractions, restaurants and places when possible
- Make activities age-appropriate for the group (consider {children} children and {infants} infants)
- Ensure activities are physically feasible for the travel pace selected

Return ONLY valid JSON matching the exact structure above. No markdown, no code blocks, no explanations - just pure JSON."""
