"""
Planificateur APScheduler : purge périodique des sessions joueurs expirées.

Le job s'exécute toutes les SESSION_PURGE_INTERVAL_MINUTES minutes.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import settings
from app.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _purge_expired_logins_scheduled() -> None:
    """
    Tâche planifiée : supprime les jetons joueurs expirés.
    Import local pour éviter les imports circulaires.
    """
    from app.services.player_auth import purge_expired_logins

    db = SessionLocal()
    try:
        deleted = purge_expired_logins(db)
        if deleted:
            logger.info("Purge des sessions joueurs : %d jeton(s) expiré(s) supprimé(s)", deleted)
    except Exception as exc:
        logger.error("Erreur lors de la purge des sessions joueurs : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _purge_expired_logins_scheduled,
        trigger="interval",
        minutes=settings.SESSION_PURGE_INTERVAL_MINUTES,
        id="player_sessions_purge",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler démarré, purge des sessions joueurs toutes les %d minutes.",
        settings.SESSION_PURGE_INTERVAL_MINUTES,
    )


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
