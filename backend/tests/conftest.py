"""
Configuration partagée pour tous les tests.
Override la dépendance get_db pour éviter toute connexion réelle à PostgreSQL.
"""

import uuid
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.auth import get_current_player
from app.database import get_db
from app.main import app


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """Client HTTP de test avec la BDD mockée."""
    app.dependency_overrides[get_db] = lambda: mock_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def current_player():
    player = MagicMock()
    player.id = uuid.uuid4()
    player.session_id = uuid.uuid4()
    player.team_id = uuid.uuid4()
    player.first_name = "Jean"
    player.last_name = "Dupont"
    player.email = "jean@test.be"
    player.created_at = datetime.now()
    return player


@pytest.fixture
def player_client(client, current_player):
    """Client de test avec un joueur déjà connecté."""
    app.dependency_overrides[get_current_player] = lambda: current_player
    yield client
