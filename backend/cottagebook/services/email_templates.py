"""Subject and HTML body templates for every email the service sends."""

from datetime import date
from html import escape

from cottagebook.config import settings
from cottagebook.models.booking import Booking
from cottagebook.models.recommendation import Recommendation
from cottagebook.models.subscriber import Subscriber
from cottagebook.services.weather import WeekDay

_LAYOUT = (
    '<div style="font-family:Arial,sans-serif;max-width:600px;margin:auto;'
    'border:1px solid #ddd;border-radius:8px;overflow:hidden">'
    '<div style="background:#0f2b4c;color:#e7b333;padding:16px 24px;">'
    '<h2 style="margin:0;">{heading}</h2></div>'
    '<div style="padding:24px;color:#333;line-height:1.6;">{content}</div>'
    '<div style="background:#f4f4f4;text-align:center;padding:10px;font-size:12px;color:#666;">'
    "&copy; {year} {property_name}</div></div>"
)

TEMPLATES = {
    "approval_request": {
        "subject": "New Booking Pending Approval – {guest_name}",
        "heading": "New Booking Request",
        "body": (
            "<p><strong>Guest:</strong> {guest_name} ({guest_email})</p>"
            "<p><strong>Check-in:</strong> {check_in}</p>"
            "<p><strong>Check-out:</strong> {check_out}</p>"
            "{party}"
            '<p><a href="{dashboard_url}?booking={booking_id}">View this booking</a></p>'
        ),
    },
    "booking_approved": {
        "subject": "Your {property_name} Booking Confirmation",
        "heading": "{property_name} Booking Confirmation",
        "body": (
            "<p>Dear {guest_name},</p>"
            "<p>We're delighted to confirm your stay at <strong>{property_name}</strong>.</p>"
            "<p><strong>Booking number:</strong> {reference}<br>"
            "<strong>Arrive:</strong> {check_in}<br>"
            "<strong>Depart:</strong> {check_out}</p>"
            "<h3>Your stay</h3>{pricing}"
            "{comment}"
            "<p>Please arrive after 4 pm and depart by 10 am to allow for cleaning.</p>"
            "<p>If you need to cancel your booking, please click below:<br>"
            '<a href="{cancel_url}">Cancel this booking</a></p>'
            '<p style="font-size:13px;color:#666;">This link is unique to your booking; please do not share it.</p>'
        ),
    },
    "booking_rejected": {
        "subject": "Your {property_name} Booking Update",
        "heading": "{property_name} Booking Update",
        "body": (
            "<p>Dear {guest_name},</p>"
            "<p>Thank you for your interest in staying at <strong>{property_name}</strong>. "
            "Unfortunately, your booking request for <strong>{check_in} – {check_out}</strong> "
            "was not approved.</p>"
            "{comment}"
            "<p>You're very welcome to check availability again at any time.</p>"
        ),
    },
    "guest_cancellation": {
        "subject": "Your Booking at {property_name} Has Been Cancelled",
        "heading": "Your Booking Has Been Cancelled",
        "body": (
            "<p>Hi {guest_name}, your booking at <strong>{property_name}</strong> has been cancelled.</p>"
            "<ul><li><strong>Booking #:</strong> {reference}</li>"
            "<li><strong>Check-in:</strong> {check_in}</li>"
            "<li><strong>Check-out:</strong> {check_out}</li></ul>"
            "<p><strong>Reason for cancellation:</strong><br><em>{reason}</em></p>"
            "<p>We're sorry to miss you, but hope to welcome you another time.</p>"
        ),
    },
    "approver_cancellation": {
        "subject": "Booking Cancelled – {guest_name} ({reference})",
        "heading": "{property_name} Booking Cancelled",
        "body": (
            "<p>A booking has been <strong>cancelled</strong>.</p>"
            "<p><strong>Booking #:</strong> {reference}<br>"
            "<strong>Guest:</strong> {guest_name} ({guest_email})<br>"
            "<strong>Check-in:</strong> {check_in}<br>"
            "<strong>Check-out:</strong> {check_out}</p>"
            "{party}"
            "<p><strong>Cancellation reason:</strong></p>"
            '<p style="background:#f8f8f8;padding:12px;border-radius:4px;">{reason}</p>'
            '<p><a href="{dashboard_url}">View dashboard</a></p>'
        ),
    },
    "arrival_reminder": {
        "subject": "Your Upcoming Stay at {property_name}",
        "heading": "Your Upcoming Stay at {property_name}",
        "body": (
            "<p>Dear {guest_name},</p>"
            "<p>We are looking forward to welcoming you to <strong>{property_name}</strong> next week!</p>"
            "<p><strong>Booking number:</strong> {reference}<br>"
            "<strong>Arrive:</strong> {check_in} (after 4 pm)<br>"
            "<strong>Depart:</strong> {check_out} (by 10 am)</p>"
            "{pricing}"
            "<p>If you haven't done so already, please transfer your balance before arrival.</p>"
        ),
    },
    "cleaner_reminder": {
        "subject": "Upcoming Checkout: {check_out}",
        "heading": "Cleaning Reminder",
        "body": (
            "<p>Hi {cleaner_name},</p>"
            "<p>The following guests are checking out soon:</p>"
            "<ul>{departures}</ul>"
        ),
    },
    "recommendation_submitted": {
        "subject": "New Local Recommendation: {name}",
        "heading": "New Recommendation Submitted",
        "body": (
            "<p><strong>Name:</strong> {name}</p>"
            "<p><strong>Category:</strong> {category}</p>"
            "<p><strong>Submitted by:</strong> {submitted_by}</p>"
            "<p>Please log in to the dashboard to review and approve this recommendation.</p>"
            '<p><a href="{dashboard_url}">Open dashboard</a></p>'
        ),
    },
    "sunny_week": {
        "subject": "Seize the Ray: sunny days ahead at {property_name}",
        "heading": "The Sun is Out!",
        "body": (
            "<p>Hi {subscriber_name}, we've spotted a sunny gap in the calendar next week.</p>"
            "<p><strong>{date_range}</strong></p>"
            "<ul>{days}</ul>"
            '<p><a href="{site_url}">Check availability and book</a></p>'
            '<p style="font-size:12px;color:#666;">Don\'t want these alerts? '
            '<a href="{unsubscribe_url}">Unsubscribe</a></p>'
        ),
    },
}

_FAMILY_RATES = (
    "Adults (21+) – £32 per person per night",
    "Grandchildren over 21 and in paid employment – £25 per person per night",
    "Young people 16+ / students – £12 per person per night",
    "Children under 16 – No charge",
    "Cleaning charge – £40 per booking",
)
_STANDARD_RATES = (
    "Adults (21+) – £40 per person per night",
    "Young people 16+ / students – £12 per person per night",
    "Children under 16 – No charge",
    "Cleaning charge – £40 per booking",
)


def format_date(value: date) -> str:
    """en-GB short date, e.g. 01/06/2024."""
    return value.strftime("%d/%m/%Y")


def _pricing_html(family_member: bool) -> str:
    rates = _FAMILY_RATES if family_member else _STANDARD_RATES
    return "<ul>" + "".join(f"<li>{escape(rate)}</li>" for rate in rates) + "</ul>"


def _party_html(booking: Booking) -> str:
    return (
        "<p>"
        f"<strong>Adults:</strong> {booking.adults}<br>"
        f"<strong>Grandchildren over 21:</strong> {booking.grandchildren_over21}<br>"
        f"<strong>Children 16+:</strong> {booking.children_16plus}<br>"
        f"<strong>Students:</strong> {booking.students}<br>"
        f"<strong>Family member:</strong> {'Yes' if booking.family_member else 'No'}"
        "</p>"
    )


def _booking_context(booking: Booking) -> dict[str, str]:
    return {
        "booking_id": str(booking.id),
        "reference": booking.reference,
        "guest_name": booking.guest_name,
        "guest_email": booking.guest_email,
        "check_in": format_date(booking.check_in),
        "check_out": format_date(booking.check_out),
        "cancel_url": settings.cancel_url(booking.cancel_token),
    }


def _booking_markup(booking: Booking) -> dict[str, str]:
    return {
        "party": _party_html(booking),
        "pricing": _pricing_html(booking.family_member),
    }


def render(template: str, markup: dict[str, str] | None = None, **text: str) -> tuple[str, str]:
    """Render a template to ``(subject, html)``.

    Args:
        template: Key into ``TEMPLATES``.
        markup: Prebuilt HTML fragments, inserted into the body unchanged.
        **text: Plain values. The subject gets them as-is; the heading and
            body get them HTML-escaped.

    Returns:
        The subject line and the full HTML document.
    """
    entry = TEMPLATES[template]
    plain = {
        "property_name": settings.property_name,
        "dashboard_url": settings.dashboard_url,
        "year": str(date.today().year),
        **text,
    }
    escaped = {key: escape(value) for key, value in plain.items()}
    subject = entry["subject"].format(**plain)
    html = _LAYOUT.format(
        heading=entry["heading"].format(**escaped),
        content=entry["body"].format(**{**escaped, **(markup or {})}),
        year=escaped["year"],
        property_name=escaped["property_name"],
    )
    return subject, html


def render_booking(
    template: str, booking: Booking, markup: dict[str, str] | None = None, **extra: str
) -> tuple[str, str]:
    return render(
        template,
        {**_booking_markup(booking), **(markup or {})},
        **_booking_context(booking),
        **extra,
    )


def comment_block(label: str, comment: str | None) -> str:
    if not comment:
        return ""
    return f"<p><strong>{label}</strong><br>{escape(comment)}</p>"


def departures_list(bookings: list[Booking]) -> str:
    return "".join(
        f"<li><strong>{escape(b.guest_name)}</strong> – checking out on {format_date(b.check_out)}</li>"
        for b in bookings
    )


def render_recommendation(recommendation: Recommendation) -> tuple[str, str]:
    return render(
        "recommendation_submitted",
        name=recommendation.name,
        category=recommendation.category,
        submitted_by=recommendation.submitted_by or "anonymous",
    )


def _long_date(value: date) -> str:
    return f"{value:%A} {value.day} {value:%B}"


def _week_day_html(entry: WeekDay) -> str:
    day = f"{entry.day:%a} {format_date(entry.day)}"
    if entry.booked:
        return f'<li style="color:#999;">{day}: booked</li>'
    temp = "" if entry.forecast.temp_max is None else f", {round(entry.forecast.temp_max)}°C"
    text = f"{day}: {escape(entry.forecast.label)}{temp}"
    if entry.forecast.sunny:
        return f"<li><strong>{text}</strong></li>"
    return f"<li>{text}</li>"


def render_sunny_week(subscriber: Subscriber, week: list[WeekDay]) -> tuple[str, str]:
    return render(
        "sunny_week",
        {"days": "".join(_week_day_html(entry) for entry in week)},
        subscriber_name=subscriber.name or "Friend",
        date_range=f"{_long_date(week[0].day)} – {_long_date(week[-1].day)}",
        site_url=settings.site_url,
        unsubscribe_url=settings.unsubscribe_url(subscriber.id),
    )
