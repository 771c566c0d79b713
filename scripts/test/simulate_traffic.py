# scripts/test/simulate_traffic.py
"""Drive a running backend with park / exit / override calls for manual testing."""

import argparse
import random
import string
import requests

BACKEND_URL = "http://127.0.0.1:8080/api/v1"


def random_plate():
    return "".join(random.choices(string.ascii_uppercase, k=3)) + "-" + "".join(random.choices(string.digits, k=4))


def show(label, resp):
    mark = "✅" if resp.ok else "❌"
    print(f"{mark} {label} → HTTP {resp.status_code}: {resp.json()}")


def simulate_park(vehicle_type, plate=None, slot=None, floor=None):
    payload = {"license_plate": plate or random_plate(), "vehicle_type": vehicle_type,
               "preferred_slot": slot, "floor_number": floor}
    show(f"park {payload['license_plate']} ({vehicle_type})",
         requests.post(f"{BACKEND_URL}/parking/park", json=payload, timeout=10))


def simulate_exit(slot, floor=None):
    params = {"slot_number": slot, "floor_number": floor}
    show(f"exit slot {slot}", requests.post(f"{BACKEND_URL}/parking/exit-by-slot", params=params, timeout=10))


def simulate_force_exit(slot, floor, admin):
    show(f"force-exit slot {slot} as {admin}",
         requests.post(f"{BACKEND_URL}/admin/override/force-exit",
                       json={"slot_number": slot, "floor_number": floor},
                       headers={"X-Admin-User": admin}, timeout=10))


def simulate_burst(count, vehicle_type):
    for _ in range(count):
        simulate_park(vehicle_type)
    board = requests.get(f"{BACKEND_URL}/parking/slots", timeout=10).json()
    occupied = sum(1 for s in board if s["occupied"])
    print(f"📊 {occupied}/{len(board)} slots occupied")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate parking traffic for testing")
    parser.add_argument("--action", default="park", choices=["park", "exit", "force-exit", "burst"])
    parser.add_argument("--type", default="CAR")
    parser.add_argument("--plate", default=None)
    parser.add_argument("--slot", type=int, default=None)
    parser.add_argument("--floor", type=int, default=None)
    parser.add_argument("--count", type=int, default=5)
    parser.add_argument("--admin", default="admin")
    args = parser.parse_args()

    if args.action == "park":
        simulate_park(args.type, args.plate, args.slot, args.floor)
    elif args.action == "exit":
        simulate_exit(args.slot or 1, args.floor)
    elif args.action == "force-exit":
        simulate_force_exit(args.slot or 1, args.floor, args.admin)
    else:
        simulate_burst(args.count, args.type)
