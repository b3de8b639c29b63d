# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# game_session doit précéder les autres : toutes les tables y font référence.

from app.models.game_session import GameSession  # noqa: F401
from app.models.location import Location  # noqa: F401
from app.models.team import Team, TeamPath  # noqa: F401
from app.models.player import Player, PlayerLogin  # noqa: F401
