from fastapi.testclient import TestClient

from showcase.promote_user import promote
from showcase.models.user import Role


def _auth(token: str) -> dict[str, str]:
    return {'Authorization': f'Bearer {token}'}


def _register(client: TestClient, email: str, name: str = 'Alice', password: str = 'secret1') -> dict:
    response = client.post('/auth/register', json={'name': name, 'email': email, 'password': password})
    assert response.status_code == 201
    return response.json()


def test_root_and_database_health(client: TestClient) -> None:
    assert client.get('/').json()['status'] == 'healthy'
    assert client.get('/health/db').json() == {'status': 'connected'}


def test_register_login_create_and_like_scenario(client: TestClient) -> None:
    registered = _register(client, 'a@x.edu')
    assert registered['token']
    assert registered['user']['email'] == 'a@x.edu'
    assert 'hashedPassword' not in registered['user']

    wrong = client.post('/auth/login', json={'email': 'a@x.edu', 'password': 'not-it'})
    assert wrong.status_code == 401
    assert wrong.json() == {'detail': 'Invalid credentials'}

    token = client.post('/auth/login', json={'email': 'A@X.EDU', 'password': 'secret1'}).json()['token']

    created = client.post(
        '/projects',
        headers=_auth(token),
        json={
            'title': 'Demo',
            'description': 'A demo project',
            'technologies': ['Python'],
            'category': 'Web Development',
            'githubUrl': 'https://github.com/alice/demo',
        },
    )
    assert created.status_code == 201
    project = created.json()['project']
    assert project['author']['id'] == registered['user']['id']
    assert project['githubUrl'] == 'https://github.com/alice/demo'

    liked = client.post(f"/projects/{project['id']}/like", headers=_auth(token))
    assert liked.status_code == 200
    assert liked.json()['isLiked'] is True
    assert liked.json()['likesCount'] == 1

    unliked = client.post(f"/projects/{project['id']}/like", headers=_auth(token))
    assert unliked.json()['isLiked'] is False
    assert unliked.json()['likesCount'] == 0


def test_duplicate_registration_returns_400(client: TestClient) -> None:
    _register(client, 'a@x.edu')

    response = client.post('/auth/register', json={'name': 'Again', 'email': ' A@x.EDU ', 'password': 'secret1'})

    assert response.status_code == 400
    assert response.json() == {'detail': 'User already exists with this email'}


def test_request_validation_errors_return_400(client: TestClient) -> None:
    response = client.post('/auth/register', json={'name': 'Alice', 'email': 'bad', 'password': 'secret1'})

    assert response.status_code == 400
    body = response.json()
    assert body['detail'] == 'Validation error'
    assert body['errors'] == ['email: Please enter a valid email address']


def test_profile_requires_bearer_token(client: TestClient) -> None:
    missing = client.get('/auth/profile')
    garbage = client.get('/auth/profile', headers=_auth('garbage'))

    assert missing.status_code == 401
    assert garbage.status_code == 401
    assert garbage.json() == {'detail': 'Token is not valid'}


def test_profile_update_round_trip(client: TestClient) -> None:
    token = _register(client, 'a@x.edu')['token']

    updated = client.put('/auth/profile', headers=_auth(token), json={'bio': 'Hello', 'year': 3})
    profile = client.get('/auth/profile', headers=_auth(token))

    assert updated.status_code == 200
    assert profile.json()['user']['bio'] == 'Hello'
    assert profile.json()['user']['year'] == 3


def test_comment_endpoint_validates_length(client: TestClient) -> None:
    token = _register(client, 'a@x.edu')['token']
    project_id = client.post(
        '/projects',
        headers=_auth(token),
        json={'title': 'Demo', 'description': 'd', 'technologies': [], 'category': 'Other'},
    ).json()['project']['id']

    accepted = client.post(f'/projects/{project_id}/comment', headers=_auth(token), json={'text': 'x' * 500})
    too_long = client.post(f'/projects/{project_id}/comment', headers=_auth(token), json={'text': 'x' * 501})
    blank = client.post(f'/projects/{project_id}/comment', headers=_auth(token), json={'text': '   '})

    assert accepted.status_code == 201
    assert accepted.json()['totalComments'] == 1
    assert accepted.json()['comment']['user']['name'] == 'Alice'
    assert too_long.status_code == 400
    assert blank.status_code == 400


def test_admin_routes_reject_non_admins_with_role(client: TestClient) -> None:
    token = _register(client, 'a@x.edu')['token']

    response = client.get('/admin/stats', headers=_auth(token))

    assert response.status_code == 403
    assert response.json()['detail']['userRole'] == 'user'


def test_admin_can_moderate_users_and_projects(client: TestClient) -> None:
    admin = _register(client, 'root@x.edu', name='Root')
    alice = _register(client, 'a@x.edu')
    assert promote(client.app.state.session_factory, 'root@x.edu', Role.ADMIN) is not None
    admin_headers = _auth(admin['token'])

    project_id = client.post(
        '/projects',
        headers=_auth(alice['token']),
        json={'title': 'Demo', 'description': 'd', 'technologies': ['Go'], 'category': 'IoT'},
    ).json()['project']['id']

    stats = client.get('/admin/stats', headers=admin_headers)
    assert stats.status_code == 200
    assert stats.json()['stats']['totalAdmins'] == 1
    assert stats.json()['projects'][0]['author']['email'] == 'a@x.edu'

    featured = client.put(f'/admin/projects/{project_id}/feature', headers=admin_headers)
    assert featured.json()['featured'] is True

    bad_role = client.put(f"/admin/users/{alice['user']['id']}/role", headers=admin_headers, json={'role': 'owner'})
    assert bad_role.status_code == 400

    self_delete = client.delete(f"/admin/users/{admin['user']['id']}", headers=admin_headers)
    assert self_delete.status_code == 400

    deleted = client.delete(f"/admin/users/{alice['user']['id']}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get('/projects').json()['count'] == 0
    assert client.get('/auth/profile', headers=_auth(alice['token'])).status_code == 401


def test_profile_update_rejects_null_year(client: TestClient) -> None:
    token = _register(client, 'a@x.edu')['token']

    response = client.put('/auth/profile', headers=_auth(token), json={'year': None})

    assert response.status_code == 400
    assert response.json()['errors'] == ['year: Year cannot be null.']
    assert client.get('/auth/profile', headers=_auth(token)).json()['user']['year'] == 2


def test_deleted_users_token_is_not_reused_by_next_registrant(client: TestClient) -> None:
    admin = _register(client, 'root@x.edu', name='Root')
    promote(client.app.state.session_factory, 'root@x.edu', Role.ADMIN)
    bob = _register(client, 'b@x.edu', name='Bob')

    deleted = client.delete(f"/admin/users/{bob['user']['id']}", headers=_auth(admin['token']))
    carol = _register(client, 'c@x.edu', name='Carol')

    assert deleted.status_code == 200
    assert carol['user']['id'] != bob['user']['id']
    stale = client.get('/auth/profile', headers=_auth(bob['token']))
    assert stale.status_code == 401
    assert stale.json() == {'detail': 'Token is not valid'}
