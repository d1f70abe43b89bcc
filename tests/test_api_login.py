"""Flask test-client tests for /Login endpoints."""
from tests.conftest import login_as

LOGIN_COLUMNS = ["IdUsuario", "Nombre", "Apellido", "CorreoElectronico", "SesionActual", "IdSucursal"]


def test_invalid_credentials_answer_200(client, fake_db):
    fake_db.script([(["Resultado", "Mensaje"], [(0, "Credenciales inválidas")])])

    response = client.post("/Login/ValidarCredenciales", json={"Usuario": "alice", "Password": "bad"})

    assert response.status_code == 200
    assert response.get_json() == {
        "Exito": False,
        "Mensaje": "Credenciales inválidas",
        "Datos": None,
        "Debug": None,
    }


def test_successful_login_stores_session(client, fake_db):
    fake_db.script([(LOGIN_COLUMNS, [("alice", "Alice", "Smith", "a@example.com", "tok", 1)])])

    response = client.post("/Login/ValidarCredenciales", json={"usuario": "alice", "password": "secret"})

    body = response.get_json()
    assert body["Exito"] is True
    assert body["Mensaje"] == "Login exitoso"
    assert body["Datos"]["IdUsuario"] == "alice"
    assert body["Datos"]["Sesion"] == "tok"
    with client.session_transaction() as session:
        assert session["usuario"] == "alice"


def test_form_post_is_accepted(client, fake_db):
    fake_db.script([(["Resultado", "Mensaje"], [(0, "x")])])

    client.post("/Login/ValidarCredenciales", data={"Usuario": "bob", "Password": "pw"})

    assert fake_db.last_params[0] == "bob"
    assert fake_db.last_params[1] == "pw"


def test_client_context_from_request(client, fake_db):
    fake_db.script([(["Resultado", "Mensaje"], [(0, "x")])])

    response = client.post(
        "/Login/ValidarCredenciales",
        json={"Usuario": "alice", "Password": "pw", "Debug": True},
        headers={
            "X-Forwarded-For": "10.0.0.5, 10.0.0.1",
            "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
                          "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
        },
    )

    debug = response.get_json()["Debug"]
    assert debug["Ip"] == "10.0.0.5"
    assert debug["Dispositivo"] == "Mobile"
    assert fake_db.last_params[2] == "10.0.0.5"


def test_database_failure_answers_200(client, fake_db):
    fake_db.script(error=RuntimeError("server unavailable"))

    response = client.post("/Login/ValidarCredenciales", json={"Usuario": "alice", "Password": "pw"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["Exito"] is False
    assert body["Mensaje"].startswith("Excepción: ")


def test_failed_login_drops_previous_user(client, fake_db):
    login_as(client, "admin")
    fake_db.script([(["Resultado", "Mensaje"], [(0, "Credenciales inválidas")])])

    client.post("/Login/ValidarCredenciales", json={"Usuario": "mallory", "Password": "bad"})

    with client.session_transaction() as session:
        assert "usuario" not in session

    fake_db.script([(["Resultado", "Mensaje"], [(1, "Usuario eliminado")])])
    client.post("/Usuario/Eliminar", json={"idUsuario": "alice"})
    assert fake_db.last_params[-1] == "system"


def test_logout_clears_session(client):
    login_as(client, "alice")

    response = client.post("/Login/CerrarSesion")

    assert response.status_code == 200
    assert response.get_json()["Mensaje"] == "Sesión cerrada"
    with client.session_transaction() as session:
        assert "usuario" not in session


def test_login_rejects_get(client):
    response = client.get("/Login/ValidarCredenciales")
    assert response.status_code == 405
