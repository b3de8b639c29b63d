"""
Service d'import CSV pour les joueurs d'une session.
Gère le parsing, la validation, la détection de doublons et l'insertion bulk.

L'email identifie un joueur au sein d'une session (c'est lui qui sert au login
avec le mot-clé) : les doublons sont détectés sur l'email, insensible à la casse.
"""

import csv
import io
import re
import uuid
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.player import Player
from app.schemas.player import ImportError, PlayerImportReport, PlayerImportRow

logger = logging.getLogger(__name__)

# Colonnes acceptées dans le CSV (noms en français, insensibles à la casse)
REQUIRED_COLUMNS = {"nom", "prenom", "email"}
EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def _normalize_header(raw: str) -> str:
    """Normalise un nom de colonne : minuscules, sans espaces."""
    return raw.strip().lower()


def _detect_separator(sample: str) -> str:
    """Détecte le séparateur CSV (virgule ou point-virgule)."""
    if sample.count(";") >= sample.count(","):
        return ";"
    return ","


def _empty_report(errors: list[ImportError]) -> PlayerImportReport:
    return PlayerImportReport(
        total_rows=0, inserted=0, rejected=0,
        duplicates_in_file=0, duplicates_in_db=0,
        errors=errors,
    )


def parse_and_import_csv(
    content: bytes, db: Session, session_id: uuid.UUID
) -> PlayerImportReport:
    """
    Parse le CSV, valide chaque ligne, détecte les doublons et insère en bulk.

    Règles :
    - Colonnes requises : nom, prenom, email
    - Doublon intra-fichier : même email (insensible à la casse)
    - Doublon BDD : email déjà présent dans la session
    - Les joueurs importés ne sont assignés à aucune équipe
    """
    text = content.decode("utf-8-sig")  # utf-8-sig gère le BOM Excel
    separator = _detect_separator(text.splitlines()[0] if text.splitlines() else "")

    reader = csv.DictReader(io.StringIO(text), delimiter=separator)

    if reader.fieldnames is None:
        return _empty_report([ImportError(row=0, content="", reason="Fichier CSV vide ou illisible")])

    normalized_fields = {_normalize_header(f) for f in reader.fieldnames}
    missing = REQUIRED_COLUMNS - normalized_fields
    if missing:
        return _empty_report([ImportError(
            row=0, content=str(reader.fieldnames),
            reason=f"Colonnes manquantes : {', '.join(sorted(missing))}"
        )])

    field_map = {_normalize_header(f): f for f in reader.fieldnames}

    valid_rows: list[PlayerImportRow] = []
    errors: list[ImportError] = []
    seen_in_file: set[str] = set()
    duplicates_in_file = 0
    row_num = 1

    for row_num, row in enumerate(reader, start=2):  # ligne 1 = header
        raw_last = (row.get(field_map["nom"]) or "").strip()
        raw_first = (row.get(field_map["prenom"]) or "").strip()
        raw_email = (row.get(field_map["email"]) or "").strip().lower()

        # Ligne vide
        if not raw_last and not raw_first and not raw_email:
            continue

        if not raw_last or not raw_first:
            errors.append(ImportError(
                row=row_num,
                content=f"{raw_last}, {raw_first}",
                reason="Nom ou prénom manquant"
            ))
            continue

        if not raw_email or not EMAIL_REGEX.match(raw_email):
            errors.append(ImportError(
                row=row_num,
                content=f"{raw_last}, {raw_first}, {raw_email}",
                reason=f"Format email invalide : {raw_email}"
            ))
            continue

        if raw_email in seen_in_file:
            duplicates_in_file += 1
            errors.append(ImportError(
                row=row_num,
                content=f"{raw_last}, {raw_first}, {raw_email}",
                reason="Doublon dans le fichier CSV"
            ))
            continue
        seen_in_file.add(raw_email)

        valid_rows.append(PlayerImportRow(
            last_name=raw_last,
            first_name=raw_first,
            email=raw_email,
        ))

    total_rows = row_num - 1 if valid_rows or errors else 0

    if not valid_rows:
        return PlayerImportReport(
            total_rows=total_rows,
            inserted=0,
            rejected=len(errors),
            duplicates_in_file=duplicates_in_file,
            duplicates_in_db=0,
            errors=errors
        )

    # Détection doublons contre la BDD (batch query)
    existing = db.execute(
        select(func.lower(Player.email)).where(
            Player.session_id == session_id,
            func.lower(Player.email).in_([r.email for r in valid_rows]),
        )
    ).fetchall()
    existing_emails = {row[0] for row in existing}

    to_insert: list[PlayerImportRow] = []
    duplicates_in_db = 0

    for player in valid_rows:
        if player.email in existing_emails:
            duplicates_in_db += 1
            errors.append(ImportError(
                row=0,
                content=f"{player.last_name}, {player.first_name}, {player.email}",
                reason="Joueur déjà présent dans cette session"
            ))
        else:
            to_insert.append(player)

    if to_insert:
        db.bulk_insert_mappings(Player, [
            {
                "session_id": session_id,
                "first_name": p.first_name,
                "last_name": p.last_name,
                "email": p.email,
            }
            for p in to_insert
        ])
        db.commit()

    logger.info(
        "Import CSV session %s : %d inséré(s), %d rejeté(s)",
        session_id, len(to_insert), len(errors),
    )

    return PlayerImportReport(
        total_rows=total_rows,
        inserted=len(to_insert),
        rejected=len(errors),
        duplicates_in_file=duplicates_in_file,
        duplicates_in_db=duplicates_in_db,
        errors=errors
    )
