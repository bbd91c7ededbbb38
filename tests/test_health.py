def test_healthcheck(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_root_reports_environment(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "environment" in response.json()
