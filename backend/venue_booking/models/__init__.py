from venue_booking.models.venue import Venue
from venue_booking.models.booking import Booking
from venue_booking.models.admin_user import AdminUser

__all__ = ["Venue", "Booking", "AdminUser"]
