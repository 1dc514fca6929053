# Quick reference commands (run from repo root). These are comments only; copy/paste as needed.

# Install the project with test dependencies (httpx is needed for TestClient)
# python -m pip install -e ".[test]"

# Run the full test suite (Postgres tests in tests/db/ are skipped without DATABASE_URL)
# python -m pytest

# Run focused test files
# python -m pytest tests/test_transform.py tests/test_extract.py
# python -m pytest tests/test_load.py tests/test_etl_process.py
# python -m pytest tests/test_notifier.py tests/test_whatsapp_client.py
# python -m pytest tests/test_scheduler.py
# python -m pytest tests/test_api.py tests/test_security_headers.py
# DATABASE_URL=postgresql://... python -m pytest tests/db

# Start the API locally (also runs the scheduler unless RUN_SCHEDULER=false)
# python -m dotenv run -- python -m uvicorn app.api:app --reload --port 3000

# Run only the scheduler worker (no HTTP API)
# python -m dotenv run -- python main.py

# Run the ETL once by hand
# python -m dotenv run -- python -m scripts.run_etl_once
# python -m scripts.run_etl_once --dry-run

# Trigger the ETL / send to WhatsApp through the API
# curl -X POST -H "X-Admin-Key: $ADMIN_API_KEY" http://localhost:3000/api/admin/etl/run
# curl -X POST -H "Content-Type: application/json" -d '{"to": "5511999999999"}' http://localhost:3000/api/whatsapp/send-open-positions

# Inspect the database (example queries)
# python -m scripts.db_shell
# python -m scripts.db_shell "SELECT original_id, title, deleted_at FROM cold_deleted ORDER BY deleted_at DESC"
