import subprocess
import time
import json
import os
import signal
import requests
from datetime import date

# --- Configuration ---
BASE_URL = "http://127.0.0.1:8000"
UVICORN_COMMAND = ["uvicorn", "expense_tracker.main:app"]
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.join(SCRIPT_DIR, "..")

# --- Helper Functions ---
def start_server():
    """Starts the FastAPI server in a subprocess."""
    print("Starting FastAPI server...")
    process = subprocess.Popen(UVICORN_COMMAND, cwd=PROJECT_ROOT, shell=(os.name == 'nt'))
    time.sleep(5)  # Give the server some time to start
    print(f"Server started with PID: {process.pid}")
    return process

def stop_server(process):
    """Shuts down the FastAPI server process."""
    if process:
        print(f"Shutting down server with PID: {process.pid}...")
        if os.name == 'nt':
            subprocess.run(['taskkill', '/F', '/T', '/PID', str(process.pid)], check=True)
        else:
            os.kill(process.pid, signal.SIGTERM)
        try:
            process.wait(timeout=10)
        except subprocess.TimeoutExpired:
            print("Process did not terminate in time.")
        print("Server shut down.")

def run_api_request(method: str, endpoint: str, data: dict = None, user_id: int = None):
    """Makes an API request and returns the JSON response."""
    url = f"{BASE_URL}{endpoint}"
    headers = {}
    if data:
        headers['Content-Type'] = 'application/json'
    if user_id is not None:
        headers['X-User-Id'] = str(user_id)
    try:
        json_data = json.dumps(data, default=str) if data else None
        response = requests.request(method, url, data=json_data, headers=headers, timeout=10)
        response.raise_for_status()
        if not response.text:
            return None
        return response.json()
    except requests.exceptions.HTTPError as e:
        print(f"Error: HTTP {e.response.status_code} for {url}\nResponse: {e.response.text}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"An unexpected error occurred: {e}")
        return None

def add_expense(user_id: int, amount: int, category: str, on: date):
    return run_api_request("POST", "/transactions/", {
        "amount": amount,
        "transaction_type": "expense",
        "category": category,
        "description": f"{category} expense",
        "transaction_date": on.isoformat(),
    }, user_id=user_id)

def print_alerts(user_id: int):
    alerts = run_api_request("GET", "/budgets/alerts", user_id=user_id) or []
    if not alerts:
        print("  No alerts.")
    for alert in alerts:
        print(f"  [{alert['type']}] {alert['budget']['name']}: {alert['progress']}% "
              f"spent={alert['spent']} remaining={alert['remaining']}")

def check_budget_alerts():
    """Walks through a food budget going from warning to exceeded."""
    user = run_api_request("POST", "/users/", {
        "name": "Alert Check",
        "email": f"alert-check-{int(time.time())}@example.com",
        "password": "secret123",
    })
    if not user:
        print("User creation failed.")
        return
    user_id = user["id"]

    budget = run_api_request("POST", "/budgets/", {
        "name": "Food January",
        "amount": 1000,
        "category": "food",
        "start_date": "2024-01-01",
        "end_date": "2024-01-31",
        "alert_threshold": 80,
    }, user_id=user_id)
    print(f"Created budget {budget['id'] if budget else '?'}")

    add_expense(user_id, 850, "food", date(2024, 1, 15))
    add_expense(user_id, 100, "food", date(2024, 2, 1))  # outside the window
    print("\n--- After 850 spent ---")
    print_alerts(user_id)

    add_expense(user_id, 200, "food", date(2024, 1, 20))
    print("\n--- After another 200 spent ---")
    print_alerts(user_id)

if __name__ == "__main__":
    server_process = None
    try:
        server_process = start_server()
        check_budget_alerts()
    except Exception as e:
        print(f"An error occurred during the check: {e}")
    finally:
        if server_process:
            stop_server(server_process)
