"""Imports every model module so Base.metadata knows all tables."""
from app.modules.auth.models import User  # noqa: F401
from app.modules.creators.models import ProfileView  # noqa: F401
from app.modules.kyc.models import KYCSubmission  # noqa: F401
from app.modules.messages.models import Message  # noqa: F401
from app.modules.notifications.models import Notification  # noqa: F401
from app.modules.payments.models import Earning  # noqa: F401
from app.modules.subscriptions.models import Subscription  # noqa: F401
from app.modules.auth.models import VerificationToken  # noqa: F401
from app.modules.bookings.models import Booking, BookingChat, Review  # noqa: F401
from app.modules.posts.models import Post  # noqa: F401
