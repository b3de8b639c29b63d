"""
Générateur de parcours uniques par équipe.

Chaque parcours commence par l'étape de départ commune, se termine par l'étape
finale commune, et contient toutes les étapes intermédiaires dans un ordre propre
à l'équipe. L'objectif est de donner à un maximum d'équipes un ordre différent :

- k étapes intermédiaires → k! ordres possibles
- équipes <= k! : un index aléatoire dans [0, k!) est décodé via le code de Lehmer,
  avec sondage linéaire en cas de collision (unicité best-effort, budget borné)
- équipes > k!  : simple mélange Fisher-Yates, doublons inévitables et acceptés

Module pur : aucune I/O, aucun accès BDD. Les entrées sont des objets exposant
`id`, `is_start` et `is_end` (modèles SQLAlchemy Location en production).
"""

import math
import random
from typing import Any, List, Optional, Sequence

from app.schemas.path import GeneratedPath, LocationSetValidation, UniquenessInfo

MAX_PROBE_ATTEMPTS = 10000

# Factorielles précalculées jusqu'à 20!, au-delà calculées à la demande
_FACTORIALS = tuple(math.factorial(i) for i in range(21))


def factorial(n: int) -> int:
    """Retourne n! (1 pour n < 0). Les entiers Python ne débordent pas."""
    if n < 0:
        return 1
    if n < len(_FACTORIALS):
        return _FACTORIALS[n]
    return math.factorial(n)


def lehmer_permutation(items: Sequence[Any], index: int) -> List[Any]:
    """
    Décode un index de [0, n!) en une permutation de `items` (code de Lehmer).

    À chaque position, on choisit dans le pool restant l'élément de rang
    (reste // i!) mod taille_pool, puis on le retire du pool.
    """
    available = list(items)
    result = []
    remaining = index

    for i in range(len(available) - 1, -1, -1):
        fact = factorial(i)
        element_index = (remaining // fact) % len(available)
        remaining = remaining % fact
        result.append(available.pop(element_index))

    return result


def path_signature(locations: Sequence[Any]) -> str:
    """Signature d'un parcours : identifiants des étapes joints par '-'."""
    return "-".join(str(loc.id) for loc in locations)


def shuffled(items: Sequence[Any], rng: random.Random) -> List[Any]:
    """Copie mélangée de `items` (Fisher-Yates via random.shuffle)."""
    result = list(items)
    rng.shuffle(result)
    return result


def generate_unique_paths(
    start_location: Any,
    end_location: Any,
    intermediate_locations: Sequence[Any],
    team_ids: Sequence[Any],
    rng: Optional[random.Random] = None,
) -> List[GeneratedPath]:
    """
    Génère un parcours par équipe : [départ, ...intermédiaires ordonnés, arrivée].

    Précondition : start/end validés via validate_locations_for_path_generation.
    Ne lève jamais d'erreur ; l'unicité est garantie au mieux, pas absolument.
    `rng` permet d'injecter un générateur déterministe (tests).
    """
    if rng is None:
        rng = random.Random()

    num_intermediates = len(intermediate_locations)
    max_permutations = factorial(num_intermediates)
    paths: List[GeneratedPath] = []

    # Aucune étape intermédiaire : tous les parcours sont identiques
    if num_intermediates == 0:
        for team_id in team_ids:
            locations = [start_location, end_location]
            paths.append(GeneratedPath(
                team_id=team_id,
                locations=locations,
                path_signature=path_signature(locations),
            ))
        return paths

    if len(team_ids) <= max_permutations:
        used_indices: set = set()
        used_signatures: set = set()
        max_attempts = min(max_permutations * 2, MAX_PROBE_ATTEMPTS)

        for team_id in team_ids:
            perm_index = rng.randrange(max_permutations)
            attempts = 0

            while attempts < max_attempts:
                if attempts > 0:
                    perm_index = (perm_index + 1) % max_permutations

                if perm_index not in used_indices:
                    intermediate_order = lehmer_permutation(intermediate_locations, perm_index)
                    signature = path_signature(intermediate_order)
                    if signature not in used_signatures:
                        used_indices.add(perm_index)
                        used_signatures.add(signature)
                        break

                attempts += 1
            else:
                # Budget épuisé : on accepte le dernier candidat sondé, même en doublon
                intermediate_order = lehmer_permutation(intermediate_locations, perm_index)

            locations = [start_location, *intermediate_order, end_location]
            paths.append(GeneratedPath(
                team_id=team_id,
                locations=locations,
                path_signature=path_signature(locations),
            ))
    else:
        # Plus d'équipes que de permutations : mélange simple, doublons acceptés
        for team_id in team_ids:
            locations = [start_location, *shuffled(intermediate_locations, rng), end_location]
            paths.append(GeneratedPath(
                team_id=team_id,
                locations=locations,
                path_signature=path_signature(locations),
            ))

    return paths


def validate_locations_for_path_generation(locations: Sequence[Any]) -> LocationSetValidation:
    """
    Vérifie qu'une session a exactement une étape de départ et une étape finale
    distinctes, et partitionne les étapes en départ / arrivée / intermédiaires.

    Fonction pure : deux appels sur la même entrée donnent le même résultat.
    """
    start_location = next((loc for loc in locations if loc.is_start), None)
    end_location = next((loc for loc in locations if loc.is_end), None)
    intermediate_locations = [loc for loc in locations if not loc.is_start and not loc.is_end]

    if start_location is None:
        return LocationSetValidation(is_valid=False, error="Aucune étape de départ configurée.")

    if end_location is None:
        return LocationSetValidation(is_valid=False, error="Aucune étape finale configurée.")

    if start_location.id == end_location.id:
        return LocationSetValidation(
            is_valid=False,
            error="L'étape de départ et l'étape finale doivent être différentes.",
        )

    return LocationSetValidation(
        is_valid=True,
        start_location=start_location,
        end_location=end_location,
        intermediate_locations=intermediate_locations,
    )


def can_generate_unique_paths(intermediate_count: int, team_count: int) -> UniquenessInfo:
    """Indique si chaque équipe peut recevoir un parcours distinct (équipes <= k!)."""
    max_unique_paths = factorial(intermediate_count)
    return UniquenessInfo(
        can_be_unique=team_count <= max_unique_paths,
        max_unique_paths=max_unique_paths,
    )
