"""
Centralized reply templates for every dialogue state.

Brand and policy values are injected from configuration, not hardcoded.
Templates use str.format placeholders filled in by the dialogue policy.
"""

from support_intake.config import settings

_biz = settings.business

CAPABILITIES = "bookings, payments, property questions and account issues"

# --- Greeting -------------------------------------------------------------

CUSTOMER_WELCOME = (
    f"Hello! Welcome to {_biz.name} support. I'm an AI assistant and I can help "
    f"you with {CAPABILITIES}."
)

OWNER_WELCOME = (
    f"Hello! Welcome to the {_biz.name} host support desk. I can help you manage "
    "your properties, your bookings and your earnings."
)

ASK_NAME = "May I have your name, please?"
ASK_NAME_AGAIN = "Before we go further, could you tell me your name?"

CUSTOMER_MENU = ["Booking help", "Payment issue", "Property question", "Account access"]
OWNER_MENU = ["Manage properties", "Manage bookings", "View earnings"]

# --- Acknowledgements -----------------------------------------------------

ACK_NAME = "Nice to meet you, {name}!"
ACK_EMAIL = "Thanks, I've noted your email as {email}."
ACK_PHONE = "I've saved your number {phone}."

# --- Collection -----------------------------------------------------------

ASK_EMAIL = "Could you share the email address linked to your account or booking, {name}?"

CLASSIFY_ISSUE = (
    "How can I help you today, {name}? Is this about a booking, a payment, "
    "a property, or your account?"
)
CLASSIFY_OPTIONS = ["Booking", "Payment", "Property", "Account"]

# --- Customer issue handlers ---------------------------------------------

BOOKING_ASK_REFERENCE = (
    "I can help with your booking. Could you share your booking reference? "
    "You'll find it in your confirmation email."
)
BOOKING_ACTIONS = (
    "Thanks, I have booking {reference}. I can help you change your dates, "
    f"cancel the booking (free cancellation up to {_biz.free_cancellation_hours} "
    "hours before check-in), or resend your confirmation. What would you like to do?"
)
BOOKING_CANCEL = (
    f"Bookings can be cancelled free of charge up to {_biz.free_cancellation_hours} "
    "hours before check-in. I've noted that you want to cancel booking {reference}; "
    f"the refund goes back to your original payment method within {_biz.refund_days}."
)
BOOKING_MODIFY = (
    "Happy to help you change booking {reference}. Which new dates or guest count "
    "would you like? I'll check availability with the host."
)
BOOKING_RESEND = (
    "I'll arrange for the confirmation of booking {reference} to be resent to {email}."
)
BOOKING_REFERENCE_OPTIONS = ["I don't have my reference", "Talk to an agent"]
BOOKING_OPTIONS = ["Change dates", "Cancel booking", "Resend confirmation", "Talk to an agent"]

PAYMENT_ASK_TYPE = (
    "I can help with payments. Was this a failed payment, a refund request, "
    "or an unexpected charge?"
)
PAYMENT_REFUND = (
    f"Refunds are returned to your original payment method within {_biz.refund_days} "
    "once approved."
)
PAYMENT_FAILED = (
    "If a payment failed but money was deducted, your bank usually reverses it "
    f"automatically within {_biz.refund_days}."
)
PAYMENT_CHARGE = "I'm sorry about the unexpected charge. Let's get the transaction checked."
PAYMENT_ASK_REFERENCE = "Could you share the booking reference for this payment?"
PAYMENT_NEXT = (
    "I've linked this to booking {reference}. I can raise a refund request, "
    "check the transaction status, or share a payment receipt."
)
PAYMENT_TYPE_OPTIONS = ["Failed payment", "Refund request", "Unexpected charge"]
PAYMENT_OPTIONS = ["Raise refund request", "Check transaction status", "Get receipt"]

PROPERTY_ASK_LOCATION = (
    "Which property or location are you asking about? We list villas, resorts, "
    "cottages and farmhouses across India."
)
PROPERTY_ACTIONS = (
    "For properties in {location} I can check availability for your dates, "
    "share amenities and house rules, or put you in touch with the host."
)
PROPERTY_OPTIONS = ["Check availability", "View amenities", "Contact host"]

ACCOUNT_HELP = (
    "For account issues I can help you reset your password, update your profile "
    "details, or sort out login problems. Which one do you need?"
)
ACCOUNT_OPTIONS = ["Reset password", "Update profile", "Login help"]

GENERAL_HELP = (
    f"I can help with {CAPABILITIES}. You can also reach our team on "
    f"{_biz.support_phone} ({_biz.support_hours}) or at {_biz.support_email}."
)

# --- Property owner templates --------------------------------------------

OWNER_PROPERTY_MANAGEMENT = (
    "I can help you manage your properties. You can add a new property, update "
    "photos and amenities, change pricing, or update your availability calendar. "
    "What would you like to do?"
)
OWNER_PROPERTY_OPTIONS = ["Add property", "Update photos", "Change pricing", "Update calendar"]

OWNER_BOOKING_MANAGEMENT = (
    "I can help with your bookings. You can view upcoming bookings, accept or "
    "decline requests, message guests, or handle a cancellation. What do you need?"
)
OWNER_BOOKING_OPTIONS = ["Upcoming bookings", "Pending requests", "Message guest", "Handle cancellation"]

OWNER_EARNINGS = (
    "I can help with your earnings. You can view your earnings summary, check "
    "payout status, update bank details, or download statements."
)
OWNER_EARNINGS_OPTIONS = ["Earnings summary", "Payout status", "Bank details", "Download statement"]

OWNER_GENERAL = (
    "Welcome back, {name}. As a host I can help you with property management, "
    "booking management and earnings. Which would you like?"
)

# --- Fallback -------------------------------------------------------------

FALLBACK_URGENT = (
    "I understand this is urgent{name_suffix}. I'm flagging your conversation for "
    "our support team right away. Meanwhile, could you tell me what's happening?"
)
FALLBACK_FRUSTRATED = (
    "I'm sorry for the trouble{name_suffix}. I want to get this sorted for you. "
    "Could you describe what went wrong? I can also connect you with a human agent."
)
FALLBACK_GENERIC = (
    f"Could you tell me a bit more about what you need{{name_suffix}}? I can help "
    f"with {CAPABILITIES}."
)
TALK_TO_AGENT = "Talk to an agent"

# --- Engine-level messages ------------------------------------------------

HANDOFF_NOTICE = (
    "I'm connecting you with one of our human support agents who can provide more "
    "specialized assistance. They'll be with you shortly!"
)

INTERNAL_ERROR = (
    "I'm having trouble processing your request right now, but I'm still here to "
    "help. Could you try sending that again?"
)
