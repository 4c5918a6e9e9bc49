from venue_booking.schemas.venue import VenueResponse
from venue_booking.schemas.booking import BookingSubmission, AdminBookingRow, BookingConfirmationEmail
from venue_booking.schemas.calendar import CalendarCellResponse, VenueCalendarResponse

__all__ = [
    "VenueResponse",
    "BookingSubmission", "AdminBookingRow", "BookingConfirmationEmail",
    "CalendarCellResponse", "VenueCalendarResponse",
]
