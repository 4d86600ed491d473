#!/usr/bin/env python3
"""
MGNREGA Tracker Docker Entrypoint Script
Waits for the database, creates the schema, then starts the API server.
"""
import sys
import time
import os

from backend.database.connection import Database

print("=" * 70)
print("MGNREGA Tracker API Server - Starting...")
print("=" * 70)
print()

database = Database().open()

# [1/3] Wait for the database
print("[1/3] Waiting for database...")
max_attempts = 30
for attempt in range(1, max_attempts + 1):
    try:
        database.ping()
        print("      Database is ready!")
        break
    except Exception:
        print(f"      Waiting... (attempt {attempt}/{max_attempts})")
        time.sleep(2)
else:
    print("ERROR: Database timeout")
    sys.exit(1)

print()

# [2/3] Schema
print("[2/3] Creating tables if missing...")
database.create_schema()
database.close()
print("      Schema ready (seed data is generated on application startup)")

print()

# [3/3] Start API Server
port = os.getenv("API_PORT", "3000")
print("[3/3] Starting API Server...")
print()
print("=" * 70)
print("  MGNREGA Tracker API Server Ready")
print(f"  - Server: http://0.0.0.0:{port}")
print(f"  - Health: http://0.0.0.0:{port}/api/health")
print(f"  - API Docs: http://0.0.0.0:{port}/docs")
print("=" * 70)
print()

if len(sys.argv) < 2:
    print("ERROR: no command given (e.g. gunicorn backend.main_api:app -k uvicorn.workers.UvicornWorker)")
    sys.exit(1)

# Execute the command passed to the entrypoint
os.execvp(sys.argv[1], sys.argv[1:])
