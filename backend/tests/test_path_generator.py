"""
Tests unitaires du générateur de parcours (module pur, sans BDD).
"""

import math
import random
import uuid
from unittest.mock import MagicMock, patch

from app.services.path_generator import (
    can_generate_unique_paths,
    factorial,
    generate_unique_paths,
    lehmer_permutation,
    path_signature,
    validate_locations_for_path_generation,
)


# --- Helpers ---

def make_location(name, is_start=False, is_end=False):
    loc = MagicMock()
    loc.id = uuid.uuid4()
    loc.name = name
    loc.is_start = is_start
    loc.is_end = is_end
    return loc


def make_set(k):
    """Départ, arrivée et k étapes intermédiaires."""
    start = make_location("S", is_start=True)
    end = make_location("E", is_end=True)
    intermediates = [make_location(f"I{i}") for i in range(k)]
    return start, end, intermediates


class AlwaysZero(random.Random):
    """Source aléatoire qui tire toujours l'index 0 (force les collisions)."""

    def randrange(self, *args, **kwargs):
        return 0


# --- factorial ---

def test_factorial_valeurs_connues():
    assert [factorial(n) for n in range(6)] == [1, 1, 2, 6, 24, 120]
    assert factorial(20) == 2432902008176640000


def test_factorial_negatif_retourne_1():
    assert factorial(-1) == 1
    assert factorial(-10) == 1


def test_factorial_au_dela_de_20_sans_debordement():
    assert factorial(25) == math.factorial(25)


# --- lehmer_permutation ---

def test_lehmer_trois_elements_ordre_attendu():
    """Les index 0..5 donnent les permutations dans l'ordre lexicographique."""
    items = ["A", "B", "C"]
    result = [lehmer_permutation(items, i) for i in range(6)]
    assert result == [
        ["A", "B", "C"],
        ["A", "C", "B"],
        ["B", "A", "C"],
        ["B", "C", "A"],
        ["C", "A", "B"],
        ["C", "B", "A"],
    ]


def test_lehmer_bijection_sur_quatre_elements():
    items = ["A", "B", "C", "D"]
    perms = {tuple(lehmer_permutation(items, i)) for i in range(24)}
    assert len(perms) == 24


def test_lehmer_ne_modifie_pas_l_entree():
    items = ["A", "B", "C"]
    lehmer_permutation(items, 5)
    assert items == ["A", "B", "C"]


def test_lehmer_liste_vide():
    assert lehmer_permutation([], 0) == []


# --- generate_unique_paths ---

def test_parcours_commencent_et_finissent_aux_etapes_communes():
    start, end, intermediates = make_set(3)
    team_ids = [uuid.uuid4() for _ in range(4)]

    paths = generate_unique_paths(start, end, intermediates, team_ids, rng=random.Random(1))

    assert [p.team_id for p in paths] == team_ids
    for p in paths:
        assert p.locations[0] is start
        assert p.locations[-1] is end
        assert len(p.locations) == 5
        assert set(id(loc) for loc in p.locations[1:-1]) == set(id(loc) for loc in intermediates)


def test_parcours_tous_uniques_quand_equipes_egal_k_factoriel():
    """6 équipes, 3 intermédiaires (3! = 6) : tous les ordres sont utilisés."""
    start, end, intermediates = make_set(3)
    team_ids = [uuid.uuid4() for _ in range(6)]

    paths = generate_unique_paths(start, end, intermediates, team_ids, rng=random.Random(42))

    assert len({p.path_signature for p in paths}) == 6


def test_parcours_uniques_avec_beaucoup_de_permutations():
    start, end, intermediates = make_set(5)
    team_ids = [uuid.uuid4() for _ in range(50)]

    paths = generate_unique_paths(start, end, intermediates, team_ids, rng=random.Random(7))

    assert len({p.path_signature for p in paths}) == 50


def test_sans_intermediaire_tous_les_parcours_identiques():
    start, end, _ = make_set(0)
    team_ids = [uuid.uuid4() for _ in range(3)]

    paths = generate_unique_paths(start, end, [], team_ids)

    for p in paths:
        assert p.locations == [start, end]
        assert p.path_signature == f"{start.id}-{end.id}"


def test_plus_d_equipes_que_de_permutations_doublons_acceptes():
    """2 intermédiaires (2! = 2) pour 5 équipes : mélange simple, doublons inévitables."""
    start, end, intermediates = make_set(2)
    team_ids = [uuid.uuid4() for _ in range(5)]

    paths = generate_unique_paths(start, end, intermediates, team_ids, rng=random.Random(3))

    assert len(paths) == 5
    assert len({p.path_signature for p in paths}) <= 2
    for p in paths:
        assert p.locations[0] is start and p.locations[-1] is end
        assert set(id(l) for l in p.locations[1:-1]) == set(id(l) for l in intermediates)
        assert len(p.locations) == 4


def test_une_seule_equipe_un_intermediaire():
    start, end, intermediates = make_set(1)
    team_id = uuid.uuid4()

    paths = generate_unique_paths(start, end, intermediates, [team_id])

    assert paths[0].locations == [start, intermediates[0], end]


def test_aucune_equipe_aucun_parcours():
    start, end, intermediates = make_set(3)
    assert generate_unique_paths(start, end, intermediates, []) == []


def test_meme_graine_memes_parcours():
    start, end, intermediates = make_set(4)
    team_ids = [uuid.uuid4() for _ in range(10)]

    first = generate_unique_paths(start, end, intermediates, team_ids, rng=random.Random(123))
    second = generate_unique_paths(start, end, intermediates, team_ids, rng=random.Random(123))

    assert [p.path_signature for p in first] == [p.path_signature for p in second]


def test_collision_resolue_par_sondage_lineaire():
    """Le tirage retombe toujours sur 0 : les équipes suivantes prennent 1, 2, ..."""
    start, end, intermediates = make_set(3)
    team_ids = [uuid.uuid4() for _ in range(3)]

    paths = generate_unique_paths(start, end, intermediates, team_ids, rng=AlwaysZero())

    expected = [lehmer_permutation(intermediates, i) for i in range(3)]
    assert [p.locations[1:-1] for p in paths] == expected


def test_budget_epuise_dernier_candidat_accepte():
    """Budget d'une seule tentative : la seconde équipe reçoit l'ordre déjà utilisé."""
    start, end, intermediates = make_set(3)
    team_ids = [uuid.uuid4(), uuid.uuid4()]

    with patch("app.services.path_generator.MAX_PROBE_ATTEMPTS", 1):
        paths = generate_unique_paths(start, end, intermediates, team_ids, rng=AlwaysZero())

    assert paths[0].path_signature == paths[1].path_signature
    assert paths[1].locations[1:-1] == lehmer_permutation(intermediates, 0)


def test_path_signature_format():
    a, b = make_location("A"), make_location("B")
    assert path_signature([a, b]) == f"{a.id}-{b.id}"


# --- validate_locations_for_path_generation ---

def test_validation_ensemble_valide():
    start, end, intermediates = make_set(2)
    result = validate_locations_for_path_generation([intermediates[0], end, start, intermediates[1]])

    assert result.is_valid
    assert result.error is None
    assert result.start_location is start
    assert result.end_location is end
    assert result.intermediate_locations == [intermediates[0], intermediates[1]]


def test_validation_sans_depart():
    _, end, intermediates = make_set(1)
    result = validate_locations_for_path_generation([end, *intermediates])

    assert not result.is_valid
    assert "départ" in result.error


def test_validation_sans_arrivee():
    start, _, intermediates = make_set(1)
    result = validate_locations_for_path_generation([start, *intermediates])

    assert not result.is_valid
    assert "finale" in result.error


def test_validation_liste_vide():
    result = validate_locations_for_path_generation([])
    assert not result.is_valid
    assert "départ" in result.error


def test_validation_depart_egal_arrivee():
    both = make_location("X", is_start=True, is_end=True)
    result = validate_locations_for_path_generation([both])

    assert not result.is_valid
    assert "différentes" in result.error


def test_validation_est_idempotente():
    start, end, intermediates = make_set(2)
    locations = [start, *intermediates, end]

    first = validate_locations_for_path_generation(locations)
    second = validate_locations_for_path_generation(locations)

    assert first.is_valid == second.is_valid
    assert first.intermediate_locations == second.intermediate_locations


# --- can_generate_unique_paths ---

def test_unicite_possible():
    info = can_generate_unique_paths(3, 6)
    assert info.can_be_unique
    assert info.max_unique_paths == 6


def test_unicite_impossible():
    info = can_generate_unique_paths(3, 7)
    assert not info.can_be_unique


def test_unicite_sans_intermediaire():
    assert can_generate_unique_paths(0, 1).can_be_unique
    assert not can_generate_unique_paths(0, 2).can_be_unique
