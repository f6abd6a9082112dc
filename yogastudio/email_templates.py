"""
MJML Email Templates
All studio emails share one base layout for cross-client compatibility
"""

from html import escape
from typing import Optional

from .config import FRONTEND_URL, STUDIO_NAME

# Studio palette - sage and sand
THEME = {
    "primary": "#7c9a7e",
    "primary_dark": "#5f7d61",
    "background": "#faf7f2",
    "card_bg": "#ffffff",
    "text_primary": "#2f3a30",
    "text_secondary": "#4a5a4b",
    "text_muted": "#8a968b",
    "border": "#e7e1d6",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    footer_note: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails; title and preview text are plain text"""
    title = escape(title)
    preview_text = escape(preview_text)

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="24px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if footer_note:
        footer_notice = f"""
        <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="12px 0 0 0">
          {footer_note}
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="Georgia, 'Times New Roman', serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['card_bg']}" padding="32px 20px 0 20px">
          <mj-column>
            <mj-text align="center" font-size="22px" color="{THEME['primary_dark']}" padding="0">
              {escape(STUDIO_NAME)}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="24px 0 0 0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['card_bg']}" padding="24px 40px 40px 40px">
          <mj-column>
            <mj-text font-size="24px" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="{THEME['text_muted']}" padding="0">
              {escape(STUDIO_NAME)} &middot; Namaste
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _details_table(rows: list[tuple[str, str]]) -> str:
    cells = "".join(
        f'<tr><td style="padding:4px 12px 4px 0;color:{THEME["text_muted"]}">{escape(label)}</td>'
        f'<td style="padding:4px 0">{escape(str(value))}</td></tr>'
        for label, value in rows
    )
    return f'<mj-table padding="8px 0 16px 0">{cells}</mj-table>'


def class_booking_confirmation_template(
    first_name: str, class_name: str, instructor: str, when: str
) -> str:
    content = f"""
    <mj-text>Hi {escape(first_name)},</mj-text>
    <mj-text>Your spot is reserved. We look forward to practising with you.</mj-text>
    {_details_table([("Class", class_name), ("Instructor", instructor), ("When", when)])}
    <mj-text color="{THEME['text_muted']}">
      Please arrive 10 minutes early. If you can no longer attend, cancel from your profile so
      someone on the waitlist can take your place.
    </mj-text>
    """
    return get_base_template(
        title="Booking confirmed",
        preview_text=f"You're booked for {class_name}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/profile",
        cta_label="View my bookings",
    )


def waitlist_confirmation_template(first_name: str, class_name: str, when: str, position: int) -> str:
    content = f"""
    <mj-text>Hi {escape(first_name)},</mj-text>
    <mj-text>
      {escape(class_name)} on {escape(when)} is currently full, so we've added you to the waitlist
      at position <strong>{position}</strong>. We'll email you as soon as a spot opens.
    </mj-text>
    """
    return get_base_template(
        title="You're on the waitlist",
        preview_text=f"Waitlist position {position} for {class_name}",
        content_sections=content,
    )


def waitlist_promotion_template(first_name: str, class_name: str, when: str) -> str:
    content = f"""
    <mj-text>Hi {escape(first_name)},</mj-text>
    <mj-text>
      Good news: a spot opened up in {escape(class_name)} on {escape(when)} and your booking is now
      confirmed.
    </mj-text>
    """
    return get_base_template(
        title="A spot opened up",
        preview_text=f"Your waitlist spot for {class_name} is confirmed",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/profile",
        cta_label="View my bookings",
    )


def class_cancelled_template(first_name: str, class_name: str, when: str) -> str:
    content = f"""
    <mj-text>Hi {escape(first_name)},</mj-text>
    <mj-text>
      Unfortunately {escape(class_name)} on {escape(when)} has been cancelled. We're sorry for the
      inconvenience and hope to see you at another class soon.
    </mj-text>
    """
    return get_base_template(
        title="Class cancelled",
        preview_text=f"{class_name} has been cancelled",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/schedule",
        cta_label="Browse the schedule",
    )


def query_received_template(name: str, subject: str) -> str:
    content = f"""
    <mj-text>Hi {escape(name)},</mj-text>
    <mj-text>
      Thank you for reaching out about "{escape(subject)}". One of our instructors will reply within
      two working days.
    </mj-text>
    """
    return get_base_template(
        title="We received your question",
        preview_text="Thanks for your question",
        content_sections=content,
    )


def query_response_template(name: str, subject: str, response: str) -> str:
    content = f"""
    <mj-text>Hi {escape(name)},</mj-text>
    <mj-text>Here is our answer to your question "{escape(subject)}":</mj-text>
    <mj-text padding="8px 16px" container-background-color="{THEME['background']}">
      {escape(response)}
    </mj-text>
    """
    return get_base_template(
        title="An answer from our instructors",
        preview_text=f"Re: {subject}",
        content_sections=content,
    )


def newsletter_template(title: str, content_html: str, unsubscribe_url: str) -> str:
    content = f"""
    <mj-text>{content_html}</mj-text>
    """
    return get_base_template(
        title=title,
        preview_text=title,
        content_sections=content,
        footer_note=f'<a href="{unsubscribe_url}" style="color:{THEME["text_muted"]}">Unsubscribe</a>',
    )
