# Parking Reservation: Database Models
# Import all models here for SQLAlchemy discovery

from app.models.parking_space import ParkingSpace     # noqa
from app.models.booking import Booking                # noqa
from app.models.payment import Payment                # noqa
from app.models.notification import Notification      # noqa
