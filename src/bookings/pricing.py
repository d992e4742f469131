from typing import List, Optional
from decimal import Decimal, ROUND_HALF_UP
from pydantic import BaseModel

from src.events.schemas import EventSnapshot, CityPrice
from src.exceptions import NoPricingForCity, InvalidPriceCalculation

TWO_PLACES = Decimal("0.01")

class PriceQuote(BaseModel):
    """Result of resolving a price for a departure city"""
    city: str
    unit_price: Decimal
    members_count: int
    final_price: Decimal
    discounted: bool
    available_cities: List[str]

def find_city_price(event: EventSnapshot, city: str) -> Optional[CityPrice]:
    """Case-insensitive lookup of a city's pricing tier"""
    wanted = city.strip().lower()
    for entry in event.city_pricing:
        if entry.city.lower() == wanted:
            return entry
    return None

def resolve_price(event: EventSnapshot, city: str, members_count: int) -> PriceQuote:
    """Price a booking: discount price when set (> 0), otherwise base price, times members"""

    available_cities = event.available_cities

    entry = find_city_price(event, city)
    if entry is None:
        raise NoPricingForCity(city, available_cities)

    unit_price = entry.effective_price
    if unit_price is None or unit_price <= 0:
        raise InvalidPriceCalculation(available_cities)

    final_price = (Decimal(unit_price) * members_count).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if final_price <= 0:
        raise InvalidPriceCalculation(available_cities)

    return PriceQuote(
        city=entry.city,
        unit_price=Decimal(unit_price),
        members_count=members_count,
        final_price=final_price,
        discounted=entry.discount_price > 0,
        available_cities=available_cities
    )
