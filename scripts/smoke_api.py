#!/usr/bin/env python3
"""Simple API smoke script to verify a running service is booking courts."""

import requests
from datetime import datetime, timedelta

BASE_URL = "http://localhost:8000"
ADMIN = {"X-User-Id": "smoke-admin", "X-User-Role": "admin"}
OWNER = {"X-User-Id": "smoke-owner"}
PLAYER = {"X-User-Id": "smoke-player"}

def check_health():
    """Check health endpoint."""
    print("Checking health endpoint...")
    response = requests.get(f"{BASE_URL}/health")
    print(f"  Status: {response.status_code}")
    print(f"  Response: {response.json()}")
    assert response.status_code == 200
    print("  ✓ Health check passed\n")

def create_sport():
    """Create the smoke-test sport, or reuse it."""
    print("Checking sport creation...")
    sport_data = {"name": "Badminton", "sport_type": "badminton", "emoji": "🏸"}

    response = requests.post(f"{BASE_URL}/sports", json=sport_data, headers=ADMIN)
    print(f"  Status: {response.status_code}")

    if response.status_code == 201:
        sport = response.json()
        print(f"  Created sport ID: {sport['id']}")
        print("  ✓ Sport creation passed\n")
        return sport['id']

    print("  ℹ Sport already exists, fetching existing...")
    for sport in requests.get(f"{BASE_URL}/sports").json():
        if sport['sport_type'] == sport_data['sport_type']:
            print(f"  Found existing sport ID: {sport['id']}")
            print("  ✓ Using existing sport\n")
            return sport['id']
    return None

def create_facility(sport_id):
    """Create a facility with two courts for the sport."""
    print("Checking facility creation...")
    facility_data = {"name": "Smoke Test Arena", "city": "Madrid", "timezone": "Europe/Madrid"}

    response = requests.post(f"{BASE_URL}/facilities", json=facility_data, headers=OWNER)
    print(f"  Status: {response.status_code}")
    assert response.status_code == 201
    facility_id = response.json()['id']

    response = requests.patch(
        f"{BASE_URL}/facilities/{facility_id}/status", json={"is_approved": True}, headers=ADMIN
    )
    print(f"  Approval status: {response.status_code}")
    assert response.status_code == 200

    response = requests.put(
        f"{BASE_URL}/facilities/{facility_id}/courts/{sport_id}",
        json={"court_count": 2, "price_per_hour": "12.50"},
        headers=OWNER,
    )
    print(f"  Court config status: {response.status_code}")
    assert response.status_code == 200
    print("  ✓ Facility with 2 courts created\n")
    return facility_id

def book_until_full(facility_id, sport_id):
    """Book the same slot until the facility reports it fully booked."""
    print("Checking court allocation...")
    start = (datetime.now() + timedelta(days=2)).replace(hour=10, minute=0, second=0, microsecond=0)
    slot = {
        "facility_id": facility_id,
        "sport_id": sport_id,
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=1)).isoformat(),
    }

    for expected_court in (1, 2):
        response = requests.post(f"{BASE_URL}/bookings", json=slot, headers=PLAYER)
        assert response.status_code == 201, response.json()
        booking = response.json()
        print(f"  Booked court {booking['court_number']} for {booking['total_amount']}")
        assert booking['court_number'] == expected_court

    response = requests.post(f"{BASE_URL}/bookings", json=slot, headers=PLAYER)
    print(f"  Third booking status: {response.status_code} {response.json()['detail']}")
    assert response.status_code == 409
    print("  ✓ Allocation passed\n")

def main():
    """Run all checks."""
    print("=" * 60)
    print("COURT BOOKING - API SMOKE TEST")
    print("=" * 60)
    print()

    try:
        check_health()
        sport_id = create_sport()
        facility_id = create_facility(sport_id)
        book_until_full(facility_id, sport_id)

        print("=" * 60)
        print("ALL CHECKS PASSED! ✓")
        print("=" * 60)
        print()

    except requests.exceptions.ConnectionError:
        print("\n❌ ERROR: Could not connect to the API")
        print("   Make sure the server is running:")
        print("   uvicorn court_booking.main:app --reload")
        print()
    except AssertionError as e:
        print(f"\n❌ CHECK FAILED: {e}")
        print()

if __name__ == "__main__":
    main()
