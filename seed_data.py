#!/usr/bin/env python3

from datetime import datetime, timedelta
from decimal import Decimal

from src.database import SessionLocal, init_db
from src.models import Trek, TrekCityPrice, Tour, TourCityPrice, UserBooking

def _trek_pricing(pune, mumbai, sambhajinagar):
    """(price, discount_price) per departure city"""
    return [
        TrekCityPrice(city="Pune", price=Decimal(pune[0]), discount_price=Decimal(pune[1])),
        TrekCityPrice(city="Mumbai", price=Decimal(mumbai[0]), discount_price=Decimal(mumbai[1])),
        TrekCityPrice(city="Chh. Sambhajinagar", price=Decimal(sambhajinagar[0]), discount_price=Decimal(sambhajinagar[1])),
    ]

def create_seed_data():
    init_db()
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for treks and tours...")

        # Clear existing data
        print("Clearing existing data...")
        db.query(UserBooking).delete()
        db.query(TrekCityPrice).delete()
        db.query(TourCityPrice).delete()
        db.query(Trek).delete()
        db.query(Tour).delete()

        today = datetime.now().replace(hour=6, minute=0, second=0, microsecond=0)

        # 1. Treks
        print("Creating treks...")
        treks = [
            Trek(
                name="Ridge Trek",
                location="Sahyadri",
                duration="2 Days",
                difficulty="Moderate",
                start_date=today + timedelta(days=14),
                end_date=today + timedelta(days=15, hours=12),
                city_pricing=_trek_pricing(("2000", "1500"), ("2400", "0"), ("2600", "0"))
            ),
            Trek(
                name="Harishchandragad via Nalichi Vaat",
                location="Ahmednagar",
                duration="2 Days",
                difficulty="Hard",
                start_date=today + timedelta(days=30),
                end_date=today + timedelta(days=31, hours=12),
                city_pricing=_trek_pricing(("3200", "2900"), ("3500", "0"), ("3800", "3400"))
            ),
            Trek(
                name="Kalsubai Night Trek",
                location="Igatpuri",
                duration="1 Day",
                difficulty="Easy",
                start_date=today - timedelta(days=10),
                end_date=today - timedelta(days=9),
                is_active=False,
                city_pricing=_trek_pricing(("1200", "0"), ("1400", "0"), ("1600", "0"))
            ),
        ]
        db.add_all(treks)
        db.flush()

        # 2. Tours
        print("Creating tours...")
        tours = [
            Tour(
                name="Konkan Coastal Tour",
                location="Ratnagiri",
                duration="4 Days",
                difficulty="Easy",
                tour_type="Leisure",
                max_group_size=30,
                is_featured=True,
                start_date=today + timedelta(days=21),
                end_date=today + timedelta(days=24),
                city_pricing=[
                    TourCityPrice(city="Pune", price=Decimal("8500"), discount_price=Decimal("7999")),
                    TourCityPrice(city="Mumbai", price=Decimal("8000"), discount_price=Decimal("0")),
                ]
            ),
            Tour(
                name="Spiti Valley Expedition",
                location="Himachal Pradesh",
                duration="9 Days",
                difficulty="Hard",
                tour_type="Adventure",
                max_group_size=16,
                start_date=today + timedelta(days=60),
                end_date=today + timedelta(days=68),
                city_pricing=[
                    TourCityPrice(city="Pune", price=Decimal("32000"), discount_price=Decimal("0")),
                    TourCityPrice(city="Mumbai", price=Decimal("31500"), discount_price=Decimal("0")),
                    TourCityPrice(city="Chh. Sambhajinagar", price=Decimal("33000"), discount_price=Decimal("0")),
                ]
            ),
        ]
        db.add_all(tours)

        # Commit all changes
        db.commit()
        print("✅ Successfully created seed data!")
        print("Created:")
        print(f"  - {len(treks)} treks")
        print(f"  - {len(tours)} tours")
        for trek in treks:
            print(f"    trek {trek.id}  {trek.name}")
        for tour in tours:
            print(f"    tour {tour.id}  {tour.name}")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
