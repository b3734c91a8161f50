MATH = {'subject': 'Math', 'hours': 2, 'milestone': 'Ch1', 'completed': False}
PHYSICS = {'subject': 'Physics', 'hours': 1.5, 'milestone': 'Kinematics', 'completed': True}


def test_create_plan_appends_and_preserves_order(client, register):
    _, headers = register()
    r = client.post('/api/plans', json=MATH, headers=headers)
    assert r.status_code == 201
    assert r.json()[-1] == MATH
    r = client.post('/api/plans', json=PHYSICS, headers=headers)
    assert r.status_code == 201
    plans = r.json()
    assert len(plans) == 2
    assert plans == [MATH, PHYSICS]
    # persisted on the user document
    profile = client.get('/api/user', headers=headers).json()
    assert profile['studyPlans'] == [MATH, PHYSICS]


def test_create_plan_defaults_and_validation(client, register):
    _, headers = register()
    r = client.post('/api/plans', json={'subject': 'History', 'hours': 3}, headers=headers)
    assert r.status_code == 201
    assert r.json() == [{'subject': 'History', 'hours': 3, 'milestone': '', 'completed': False}]
    r = client.post('/api/plans', json={'subject': 'History', 'hours': 'lots'}, headers=headers)
    assert r.status_code == 400
    r = client.post('/api/plans', json={'subject': 'History', 'hours': -1}, headers=headers)
    assert r.status_code == 400
    # failed requests leave the list untouched
    assert len(client.get('/api/user', headers=headers).json()['studyPlans']) == 1


def test_create_plan_requires_auth(client):
    r = client.post('/api/plans', json=MATH)
    assert r.status_code == 401


def test_replace_plans_is_idempotent(client, register):
    _, headers = register()
    client.post('/api/plans', json=MATH, headers=headers)
    first = client.put('/api/plans', json=[PHYSICS, MATH], headers=headers)
    assert first.status_code == 200
    assert first.json()['studyPlans'] == [PHYSICS, MATH]
    assert first.json()['message']
    second = client.put('/api/plans', json=[PHYSICS, MATH], headers=headers)
    assert second.status_code == 200
    assert second.json()['studyPlans'] == first.json()['studyPlans']
    assert client.get('/api/user', headers=headers).json()['studyPlans'] == [PHYSICS, MATH]


def test_replace_plans_with_empty_list(client, register):
    _, headers = register()
    client.post('/api/plans', json=MATH, headers=headers)
    r = client.put('/api/plans', json=[], headers=headers)
    assert r.status_code == 200
    assert r.json()['studyPlans'] == []


def test_plans_are_per_user(client, register):
    _, a_headers = register()
    _, b_headers = register(name='B', email='b@x.com')
    client.post('/api/plans', json=MATH, headers=a_headers)
    assert client.get('/api/user', headers=b_headers).json()['studyPlans'] == []


def test_update_settings_partial(client, register):
    _, headers = register()
    r = client.put('/api/user/settings', json={'avatar': 'https://img.example.com/a.png'}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body['message'] == 'Settings updated'
    assert body['user']['name'] == 'A'
    assert body['user']['avatar'] == 'https://img.example.com/a.png'
    assert 'password' not in body['user']
    r = client.put('/api/user/settings', json={'name': 'Alice'}, headers=headers)
    assert r.json()['user'] == {
        'id': body['user']['id'],
        'name': 'Alice',
        'email': 'a@x.com',
        'avatar': 'https://img.example.com/a.png',
    }


def test_update_target_date(client, register):
    _, headers = register()
    r = client.put('/api/user/target-date', json={'targetDate': '2026-12-01'}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {'message': 'Target date updated', 'targetDate': '2026-12-01'}
    assert client.get('/api/user', headers=headers).json()['targetDate'] == '2026-12-01'
    r = client.put('/api/user/target-date', json={'targetDate': None}, headers=headers)
    assert r.status_code == 200
    assert r.json()['targetDate'] is None


def test_update_target_date_validation(client, register):
    _, headers = register()
    assert client.put('/api/user/target-date', json={}, headers=headers).status_code == 400
    r = client.put('/api/user/target-date', json={'targetDate': 'next tuesday'}, headers=headers)
    assert r.status_code == 400
