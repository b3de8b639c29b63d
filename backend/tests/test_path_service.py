"""
Tests unitaires du service de parcours (génération, statut, suppression).
"""

import random
import uuid
from unittest.mock import MagicMock, patch

import pytest

from app.services.path_service import (
    delete_paths,
    generate_paths,
    get_paths_status,
    get_team_path,
)


# --- Helpers ---

def make_location(code, is_start=False, is_end=False):
    loc = MagicMock()
    loc.id = uuid.uuid4()
    loc.code = code
    loc.name_fr = f"Lieu {code}"
    loc.is_start = is_start
    loc.is_end = is_end
    return loc


def make_locations(k):
    return [
        make_location("START", is_start=True),
        *[make_location(f"I{i}") for i in range(k)],
        make_location("END", is_end=True),
    ]


def make_team(name="Équipe 1", started=False):
    team = MagicMock()
    team.id = uuid.uuid4()
    team.name = name
    team.started_at = MagicMock() if started else None
    return team


def make_db_mock(teams=None, existing_paths=0):
    db = MagicMock()
    db.get.return_value = MagicMock()  # session trouvée
    result = MagicMock()
    result.scalars.return_value.all.return_value = teams or []
    result.scalar.return_value = existing_paths
    db.execute.return_value = result
    return db


# --- generate_paths ---

def test_generation_une_ligne_par_etape():
    teams = [make_team(f"Équipe {i}") for i in range(1, 4)]
    db = make_db_mock(teams=teams)

    with patch("app.services.path_service.get_session_locations", return_value=make_locations(3)):
        report = generate_paths(db, uuid.uuid4(), rng=random.Random(5))

    assert report.paths_generated == 3
    assert report.unique_paths == 3
    assert report.duplicate_paths == 0
    assert report.stages_per_path == 5

    mappings = db.bulk_insert_mappings.call_args[0][1]
    assert len(mappings) == 15
    for team in teams:
        orders = [m["stage_order"] for m in mappings if m["team_id"] == team.id]
        assert orders == [0, 1, 2, 3, 4]
    db.commit.assert_called_once()


def test_generation_doublons_comptes():
    """1 intermédiaire (1! = 1) pour 3 équipes : un seul parcours distinct."""
    teams = [make_team(f"Équipe {i}") for i in range(1, 4)]
    db = make_db_mock(teams=teams)

    with patch("app.services.path_service.get_session_locations", return_value=make_locations(1)):
        report = generate_paths(db, uuid.uuid4())

    assert report.unique_paths == 1
    assert report.duplicate_paths == 2


def test_generation_sans_equipe_refusee():
    db = make_db_mock(teams=[])

    with pytest.raises(ValueError, match="Aucune équipe"):
        generate_paths(db, uuid.uuid4())

    db.bulk_insert_mappings.assert_not_called()


def test_generation_etapes_invalides_refusee():
    db = make_db_mock(teams=[make_team()])
    locations = [make_location("I0"), make_location("END", is_end=True)]

    with patch("app.services.path_service.get_session_locations", return_value=locations):
        with pytest.raises(ValueError, match="départ"):
            generate_paths(db, uuid.uuid4())

    db.bulk_insert_mappings.assert_not_called()


def test_generation_parcours_existants_refusee():
    db = make_db_mock(teams=[make_team()], existing_paths=5)

    with patch("app.services.path_service.get_session_locations", return_value=make_locations(2)):
        with pytest.raises(ValueError, match="existent déjà"):
            generate_paths(db, uuid.uuid4())

    db.bulk_insert_mappings.assert_not_called()
    db.commit.assert_not_called()


def test_regeneration_remplace_les_parcours():
    db = make_db_mock(teams=[make_team(started=True)], existing_paths=5)

    with patch("app.services.path_service.get_session_locations", return_value=make_locations(2)):
        report = generate_paths(db, uuid.uuid4(), regenerate=True)

    assert report.paths_generated == 1
    db.bulk_insert_mappings.assert_called_once()
    db.commit.assert_called_once()


def test_generation_session_introuvable():
    db = make_db_mock()
    db.get.return_value = None

    with pytest.raises(ValueError, match="introuvable"):
        generate_paths(db, uuid.uuid4())


# --- get_paths_status ---

def test_statut_des_parcours():
    team_a, team_b = make_team("A"), make_team("B")
    db = make_db_mock()
    db.execute.return_value.all.return_value = [(team_a, 5), (team_b, 0)]

    with patch("app.services.path_service.get_session_locations", return_value=make_locations(3)):
        status = get_paths_status(db, uuid.uuid4())

    assert status.can_generate_paths
    assert status.validation_error is None
    assert status.stats.total_teams == 2
    assert status.stats.teams_with_paths == 1
    assert status.stats.teams_without_paths == 1
    assert status.stats.total_locations == 5
    assert status.stats.intermediate_locations == 3
    assert status.stats.max_unique_paths == 6
    assert status.stats.can_be_unique
    assert [t.has_path for t in status.teams] == [True, False]


def test_statut_etapes_invalides():
    db = make_db_mock()
    db.execute.return_value.all.return_value = []

    with patch("app.services.path_service.get_session_locations", return_value=[]):
        status = get_paths_status(db, uuid.uuid4())

    assert not status.can_generate_paths
    assert "départ" in status.validation_error


# --- delete_paths / get_team_path ---

def test_suppression_retourne_le_nombre_de_lignes():
    db = make_db_mock()
    db.execute.return_value.rowcount = 12

    assert delete_paths(db, uuid.uuid4()) == 12
    db.commit.assert_called_once()


def test_parcours_equipe_introuvable():
    db = MagicMock()
    db.get.return_value = None

    with pytest.raises(ValueError, match="introuvable"):
        get_team_path(db, uuid.uuid4())


def test_parcours_equipe_dans_l_ordre():
    db = MagicMock()
    locations = make_locations(1)
    db.execute.return_value.scalars.return_value.all.return_value = locations

    stages = get_team_path(db, uuid.uuid4())

    assert [s.stage_order for s in stages] == [0, 1, 2]
    assert [s.location_code for s in stages] == ["START", "I0", "END"]
    assert stages[0].is_start and stages[-1].is_end
