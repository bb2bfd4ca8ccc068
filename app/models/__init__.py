# Parking allocation — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.floor import Floor                          # noqa
from app.models.zone import Zone                            # noqa
from app.models.spot import Spot                            # noqa
from app.models.gate import Gate                            # noqa
from app.models.spot_gate_distance import SpotGateDistance  # noqa
from app.models.ticket import Ticket                        # noqa
from app.models.alert import Alert                          # noqa
