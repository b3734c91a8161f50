"""Run a quick register/login/plan round against the app.

Uses FastAPI's TestClient so no server needs to be running. Point
`DATABASE_URL` at a scratch database before running it.
"""

import os
import sys
import uuid

# Ensure backend folder is on sys.path so `study_planner` can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient  # noqa: E402

from study_planner.database import supervisor  # noqa: E402
from study_planner.main import app  # noqa: E402


def run():
    with TestClient(app) as client:
        if not supervisor.wait(30):
            print('Database not reachable; last error:', supervisor.last_error)
            return 1
        email = f'smoke-{uuid.uuid4().hex[:8]}@example.com'
        r = client.post('/api/register', json={'name': 'Smoke', 'email': email, 'password': 'smoke-pass'})
        print('REGISTER:', r.status_code)
        r = client.post('/api/login', json={'email': email, 'password': 'smoke-pass'})
        print('LOGIN:', r.status_code)
        headers = {'Authorization': f"Bearer {r.json()['token']}"}
        r = client.post('/api/plans', json={'subject': 'Math', 'hours': 2, 'milestone': 'Ch1', 'completed': False}, headers=headers)
        print('PLANS:', r.status_code, r.json())
        r = client.get('/api/health')
        print('HEALTH:', r.status_code, r.json())
    return 0


if __name__ == '__main__':
    sys.exit(run())
