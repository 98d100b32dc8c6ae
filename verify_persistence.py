"""
Persistence check against a real server process.

Starts the API with uvicorn, logs a ticket, stops the server with SIGTERM
(graceful shutdown drains the database pool), restarts it and confirms the
ticket survived before deleting it again.
"""

import os
import signal
import subprocess
import sys
import time
import uuid

import httpx

BASE_URL = "http://127.0.0.1:3001"
TICKETS_URL = f"{BASE_URL}/api/tickets"


def start_server():
    return subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "ticket_logger.app.main:app", "--host", "127.0.0.1", "--port", "3001"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": "False"},
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait(timeout=15)


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for _ in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def run_verification():
    trip_id = f"PERSIST-{uuid.uuid4().hex[:8]}"

    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server()
    try:
        if not wait_for_server():
            stdout, stderr = proc.communicate(timeout=2)
            print("Server Stdout:", stdout.decode())
            print("Server Stderr:", stderr.decode())
            raise RuntimeError("Server start failed")

        print("\n--- [Step 2] Creating Ticket ---")
        resp = httpx.post(TICKETS_URL, json={
            "tripId": trip_id,
            "tripDate": "2024-01-15",
            "driverId": 1,
            "reason": "Other",
            "city": "Cairo",
            "serviceType": "Economy",
            "customerPhone": "+201001234567",
            "agentName": "Persistence Check",
        })
        if resp.status_code != 201:
            raise RuntimeError(f"Create failed: {resp.status_code} {resp.text}")
        ticket_id = resp.json()["ticketId"]
        print(f"✅ Ticket {ticket_id} created")
    finally:
        print("\n--- [Step 3] Stopping Server (SIGTERM) ---")
        stop_server(proc)

    time.sleep(2)  # Wait for port release

    print("\n--- [Step 4] Restarting Server ---")
    proc2 = start_server()
    try:
        if not wait_for_server():
            raise RuntimeError("Server restart failed")

        print("\n--- [Step 5] Listing Tickets (Post-Restart) ---")
        resp = httpx.get(TICKETS_URL, params={"reason": "Other", "limit": 100})
        ids = [ticket["id"] for ticket in resp.json().get("tickets", [])] if resp.status_code == 200 else []
        if ticket_id not in ids:
            raise RuntimeError(f"Ticket {ticket_id} missing after restart")
        print("✅ Ticket persisted across restart")

        print("\n--- [Step 6] Cleaning Up ---")
        resp = httpx.delete(f"{TICKETS_URL}/{ticket_id}")
        print(f"Delete: {resp.status_code} {resp.json()}")
    finally:
        print("\n--- [Step 7] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
