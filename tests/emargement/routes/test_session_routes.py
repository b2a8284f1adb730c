import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from emargement.auth.jwt_handler import get_token_service
from emargement.database import get_db
from emargement.main import app
from emargement.models.user import Role, User


@pytest.fixture
def client(session_factory, token_service):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def users(db) -> dict[str, User]:
    created = {
        'trainer': User(name='Claire', email='claire@x.com', hashed_password='unused', role=Role.TRAINER.value),
        'other_trainer': User(name='Marc', email='marc@x.com', hashed_password='unused', role=Role.TRAINER.value),
        'trainee': User(name='Ana', email='a@x.com', hashed_password='unused', role=Role.TRAINEE.value),
    }
    db.add_all(created.values())
    db.commit()
    for user in created.values():
        db.refresh(user)
    return created


@pytest.fixture
def trainer_headers(users, token_service) -> dict:
    return {'Authorization': f"Bearer {token_service.issue(users['trainer'].id, Role.TRAINER)}"}


@pytest.fixture
def trainee_headers(users, token_service) -> dict:
    return {'Authorization': f"Bearer {token_service.issue(users['trainee'].id, Role.TRAINEE)}"}


def _create_session(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {'email': 'claire@x.com', 'title': 'Intro to SQL', 'date_session': '2024-12-09'}
    payload.update(overrides)
    response = client.post('/sessions', json=payload, headers=headers)
    assert response.status_code == 200
    return response.json()


def test_create_session_returns_created_row(client, users, trainer_headers) -> None:
    body = _create_session(client, trainer_headers)

    assert body == {
        'id': body['id'],
        'title': 'Intro to SQL',
        'date': '2024-12-09',
        'id_formateur': users['trainer'].id,
    }


def test_create_session_rejects_unknown_trainer_email(client, trainer_headers) -> None:
    response = client.post(
        '/sessions',
        json={'email': 'ghost@x.com', 'title': 'Intro to SQL', 'date_session': '2024-12-09'},
        headers=trainer_headers,
    )

    assert response.status_code == 404
    assert response.json() == {'error': 'User not found'}


def test_create_session_rejects_invalid_date(client, trainer_headers) -> None:
    response = client.post(
        '/sessions',
        json={'email': 'claire@x.com', 'title': 'Intro to SQL', 'date_session': 'tomorrow'},
        headers=trainer_headers,
    )

    assert response.status_code == 422


def test_create_session_requires_authentication(client, users) -> None:
    response = client.post('/sessions', json={'email': 'claire@x.com'})

    assert response.status_code == 401


def test_trainee_token_is_forbidden_on_trainer_routes(client, trainer_headers, trainee_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']
    update_payload = {'newTitle': 'Advanced SQL', 'newDate_session': '2025-01-06', 'newFormateurName': 'Marc'}

    responses = [
        client.post('/sessions', json={}, headers=trainee_headers),
        client.put(f'/sessions/{session_id}', json=update_payload, headers=trainee_headers),
        client.delete(f'/sessions/{session_id}', headers=trainee_headers),
        client.get(f'/sessions/{session_id}/emargement', headers=trainee_headers),
    ]

    assert [response.status_code for response in responses] == [403, 403, 403, 403]


def test_trainer_token_is_forbidden_on_attendance_recording(client, trainer_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']

    response = client.post(f'/sessions/{session_id}/emargement', json={'email': 'a@x.com'}, headers=trainer_headers)

    assert response.status_code == 403


def test_list_sessions_is_public_and_formats_dates(client, trainer_headers) -> None:
    first = _create_session(client, trainer_headers)
    second = _create_session(client, trainer_headers, title='Data modelling', date_session='2025-02-03')

    response = client.get('/sessions')

    assert response.status_code == 200
    assert response.json() == [
        {'id': first['id'], 'title': 'Intro to SQL', 'date': '2024-12-09', 'formateur_id': first['id_formateur']},
        {'id': second['id'], 'title': 'Data modelling', 'date': '2025-02-03', 'formateur_id': second['id_formateur']},
    ]


def test_get_session_returns_single_row_list(client, trainer_headers) -> None:
    created = _create_session(client, trainer_headers)

    response = client.get(f"/sessions/{created['id']}")

    assert response.status_code == 200
    assert response.json() == [
        {'id': created['id'], 'title': 'Intro to SQL', 'date': '2024-12-09', 'formateur_id': created['id_formateur']}
    ]


def test_get_session_returns_404_for_unknown_id(client) -> None:
    response = client.get('/sessions/999')

    assert response.status_code == 404
    assert response.json() == {'error': 'Session not found'}


def test_update_session_overwrites_fields(client, users, trainer_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']

    response = client.put(
        f'/sessions/{session_id}',
        json={'newTitle': 'Advanced SQL', 'newDate_session': '2025-01-06', 'newFormateurName': 'Marc'},
        headers=trainer_headers,
    )

    assert response.status_code == 200
    assert response.json() == {
        'id': session_id,
        'new_title': 'Advanced SQL',
        'new_date': '2025-01-06',
        'new_id_formateur': users['other_trainer'].id,
    }
    assert client.get(f'/sessions/{session_id}').json()[0]['title'] == 'Advanced SQL'


def test_update_session_returns_404_for_unknown_trainer(client, trainer_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']

    response = client.put(
        f'/sessions/{session_id}',
        json={'newTitle': 'Advanced SQL', 'newDate_session': '2025-01-06', 'newFormateurName': 'Nobody'},
        headers=trainer_headers,
    )

    assert response.status_code == 404
    assert response.json() == {'error': 'User not found'}


def test_update_session_returns_404_for_unknown_session(client, trainer_headers) -> None:
    response = client.put(
        '/sessions/999',
        json={'newTitle': 'Advanced SQL', 'newDate_session': '2025-01-06', 'newFormateurName': 'Marc'},
        headers=trainer_headers,
    )

    assert response.status_code == 404
    assert response.json() == {'error': 'Session not found'}


def test_update_session_checks_role_before_body(client, trainee_headers) -> None:
    response = client.put('/sessions/1', json={'newTitle': 'x'}, headers=trainee_headers)

    assert response.status_code == 403


def test_delete_session_reports_rows_affected(client, trainer_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']

    first = client.delete(f'/sessions/{session_id}', headers=trainer_headers)
    second = client.delete(f'/sessions/{session_id}', headers=trainer_headers)

    assert first.json() == {'id': session_id, 'deleted': 1}
    assert second.status_code == 200
    assert second.json() == {'id': session_id, 'deleted': 0}
    assert client.get(f'/sessions/{session_id}').status_code == 404


def test_record_attendance_returns_record(client, users, trainer_headers, trainee_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']

    response = client.post(f'/sessions/{session_id}/emargement', json={'email': 'a@x.com'}, headers=trainee_headers)

    assert response.status_code == 200
    body = response.json()
    assert body == {'id': body['id'], 'id_session': session_id, 'id_etudiant': users['trainee'].id, 'status': '1'}


def test_record_attendance_returns_404_for_unknown_user(client, trainer_headers, trainee_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']

    response = client.post(
        f'/sessions/{session_id}/emargement',
        json={'email': 'ghost@x.com'},
        headers=trainee_headers,
    )

    assert response.status_code == 404
    assert response.json() == {'error': 'User not found'}


def test_record_attendance_twice_returns_conflict(client, trainer_headers, trainee_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']
    client.post(f'/sessions/{session_id}/emargement', json={'email': 'a@x.com'}, headers=trainee_headers)

    response = client.post(f'/sessions/{session_id}/emargement', json={'email': 'a@x.com'}, headers=trainee_headers)

    assert response.status_code == 409
    assert client.get(f'/sessions/{session_id}/emargement', headers=trainer_headers).json() == [{'name': 'Ana'}]


def test_list_attendance_returns_trainee_names(client, trainer_headers, trainee_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']
    client.post(f'/sessions/{session_id}/emargement', json={'email': 'a@x.com'}, headers=trainee_headers)

    response = client.get(f'/sessions/{session_id}/emargement', headers=trainer_headers)

    assert response.status_code == 200
    assert response.json() == [{'name': 'Ana'}]


def test_database_errors_are_redacted(client, trainer_headers, monkeypatch) -> None:
    def broken_list_sessions(db):
        raise OperationalError('SELECT * FROM sessions', {}, Exception('password=hunter2 leaked'))

    monkeypatch.setattr('emargement.services.sessions.list_sessions', broken_list_sessions)

    response = client.get('/sessions')

    assert response.status_code == 500
    assert response.json() == {'error': 'Internal server error'}
    assert 'hunter2' not in response.text


def test_create_session_keeps_title_exactly_as_sent(client, trainer_headers) -> None:
    created = _create_session(client, trainer_headers, title='  Intro SQL  ')

    assert created['title'] == '  Intro SQL  '
    assert client.get(f"/sessions/{created['id']}").json()[0]['title'] == '  Intro SQL  '


def test_create_session_rejects_blank_padded_title(client, trainer_headers) -> None:
    response = client.post(
        '/sessions',
        json={'email': 'claire@x.com', 'title': '  ab  ', 'date_session': '2024-12-09'},
        headers=trainer_headers,
    )

    assert response.status_code == 422


@pytest.mark.parametrize('date_session', [1733702400, '2024-12-09T00:00:00', '09/12/2024'])
def test_create_session_requires_iso_date_string(client, trainer_headers, date_session) -> None:
    response = client.post(
        '/sessions',
        json={'email': 'claire@x.com', 'title': 'Intro to SQL', 'date_session': date_session},
        headers=trainer_headers,
    )

    assert response.status_code == 422


def test_update_session_requires_iso_date_string(client, trainer_headers) -> None:
    session_id = _create_session(client, trainer_headers)['id']

    response = client.put(
        f'/sessions/{session_id}',
        json={'newTitle': 'Advanced SQL', 'newDate_session': 1736121600, 'newFormateurName': 'Marc'},
        headers=trainer_headers,
    )

    assert response.status_code == 422
