from hangman import create_app

from conftest import TestConfig as BaseConfig


def test_liveness(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'running' in res.get_data(as_text=True)


def test_debug_create_join_and_list(client):
    res = client.get('/debug/create')
    assert res.status_code == 201
    code = res.get_json()['code']

    res = client.get(f'/debug/join?code={code}&name=Alice')
    assert res.status_code == 201
    assert res.get_json()['player']['isManager'] is True
    client.get(f'/debug/join?code={code.lower()}&name=Bob')

    sessions = client.get('/debug/sessions').get_json()['sessions']
    assert len(sessions) == 1
    assert sessions[0]['code'] == code
    assert [p['name'] for p in sessions[0]['players']] == ['Alice', 'Bob']
    assert sessions[0]['game']['state'] == 'idle'


def test_debug_join_errors(client):
    assert client.get('/debug/join').status_code == 400
    res = client.get('/debug/join?code=NOPE22&name=Alice')
    assert res.status_code == 404
    assert res.get_json()['message'] == 'Invalid or expired code.'


def test_debug_reset(client, registry):
    client.get('/debug/create')
    client.get('/debug/create')
    res = client.get('/debug/reset')
    assert res.get_json()['cleared'] == 2
    assert len(registry) == 0


def test_debug_routes_can_be_disabled():
    class ProdConfig(BaseConfig):
        ENABLE_DEBUG_ROUTES = False

    app = create_app(ProdConfig)
    test_client = app.test_client()
    assert test_client.get('/').status_code == 200
    assert test_client.get('/debug/sessions').status_code == 404


def test_sessions_cli_commands(flask_app, registry):
    session = registry.create('host')
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['sessions-list'])
    assert session.code in result.output
    result = runner.invoke(args=['sessions-purge'])
    assert 'Purged 0 expired session(s).' in result.output
