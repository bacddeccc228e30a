"""Tests for liveness and health check endpoints."""
import pytest
from flask import Flask

from user_provisioning.api.health import bp as health_bp


@pytest.fixture()
def client():
    app = Flask(__name__)
    app.register_blueprint(health_bp)
    with app.test_client() as client:
        yield client


def test_root_liveness(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.data == b"Root end point is working fine!"
    assert response.content_type.startswith("text/plain")


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.data == b"ok"
    assert response.content_type.startswith("text/plain")


def test_readiness_check(client):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.data == b"ready"
